"""
Strategy Configuration — Validated settings for a StrategyManager.

Reads defaults from environment variables:
    NODELINK_NAMESPACE = <namespace>            (default: "default")
    NODELINK_STORAGE_PREFIX = <item key prefix> (default: "lnc-web")
    NODELINK_STORAGE_PATH = <json file path>    (default: in-memory)
"""
import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..conf import DEFAULT_NAMESPACE, STORAGE_PATH, STORAGE_PREFIX


class StrategyConfig(BaseModel):
    """Validated strategy manager configuration."""

    namespace: str = Field(default=DEFAULT_NAMESPACE)
    storage_prefix: str = Field(default=STORAGE_PREFIX)
    storage_path: Optional[str] = Field(default=STORAGE_PATH)

    model_config = {"frozen": True}

    @field_validator("namespace", mode="before")
    @classmethod
    def default_namespace(cls, v: Optional[str]) -> str:
        """Fall back to the default namespace on None or empty values."""
        return v or DEFAULT_NAMESPACE

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        if ":" in v:
            raise ValueError("namespace cannot contain ':'")
        if len(v) > 255:
            raise ValueError("namespace cannot exceed 255 characters")
        return v

    @field_validator("storage_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if not v:
            raise ValueError("storage_prefix cannot be empty")
        return v

    @classmethod
    def from_env(cls, **overrides) -> "StrategyConfig":
        """Create StrategyConfig from the current environment.

        Returns:
            Populated StrategyConfig instance.
        """
        values = {
            "namespace": os.environ.get("NODELINK_NAMESPACE", DEFAULT_NAMESPACE),
            "storage_prefix": os.environ.get(
                "NODELINK_STORAGE_PREFIX", STORAGE_PREFIX
            ),
            "storage_path": os.environ.get("NODELINK_STORAGE_PATH") or None,
        }
        values.update(overrides)
        return cls(**values)
