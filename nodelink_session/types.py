"""Unlock methods and the options each of them accepts."""
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from collections.abc import Mapping

from pydantic import BaseModel, Field, TypeAdapter


class UnlockMethod(str, Enum):
    """Mechanism used to prove the right to decrypt stored credentials."""

    PASSWORD = "password"
    PASSKEY = "passkey"
    SESSION = "session"

    def __str__(self) -> str:
        return self.value


class PasswordUnlockOptions(BaseModel):
    """Options for password unlock.

    ``salt`` and ``cipher`` are filled in by the repository from storage;
    callers normally only pass the password.
    """

    method: Literal["password"] = "password"
    password: Optional[str] = None
    salt: Optional[str] = None
    cipher: Optional[str] = None

    model_config = {"frozen": True}

    def __repr__(self) -> str:
        # key material never shows up in logs or tracebacks
        return (
            f"PasswordUnlockOptions(password={'***' if self.password else None}, "
            f"salt={'***' if self.salt else None}, "
            f"cipher={'***' if self.cipher else None})"
        )

    __str__ = __repr__


class PasskeyUnlockOptions(BaseModel):
    """Options for passkey unlock (no strategy implements it yet)."""

    method: Literal["passkey"] = "passkey"
    credential_id: Optional[str] = None
    create_if_missing: bool = False
    display_name: Optional[str] = None

    model_config = {"frozen": True}


class SessionUnlockOptions(BaseModel):
    """Options for restoring a previously established session."""

    method: Literal["session"] = "session"
    session_id: Optional[str] = None

    model_config = {"frozen": True}


UnlockOptions = Annotated[
    Union[PasswordUnlockOptions, PasskeyUnlockOptions, SessionUnlockOptions],
    Field(discriminator="method"),
]

_unlock_options_adapter: TypeAdapter = TypeAdapter(UnlockOptions)
_OPTION_MODELS = (
    PasswordUnlockOptions, PasskeyUnlockOptions, SessionUnlockOptions,
)


def parse_unlock_options(data: Any) -> Union[
    PasswordUnlockOptions, PasskeyUnlockOptions, SessionUnlockOptions
]:
    """Validate a plain mapping into the matching UnlockOptions variant.

    Args:
        data: A mapping with a ``method`` key, or an options model.

    Returns:
        The options model for ``data["method"]``.

    Raises:
        pydantic.ValidationError: If ``method`` is unknown or a field
            has the wrong type.
    """
    if isinstance(data, _OPTION_MODELS):
        return data
    if isinstance(data, Mapping):
        data = dict(data)
    return _unlock_options_adapter.validate_python(data)
