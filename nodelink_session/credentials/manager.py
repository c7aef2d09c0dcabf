"""
Strategy Manager — Registry of the auth strategies of one namespace.

The registry is built once in the constructor and is read-only afterwards.
All strategies of a namespace share one CredentialStorage record, each
owning a disjoint set of keys.
"""
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Optional, Union

from pydantic import ValidationError

from ..conf import LOGGER_NAME
from ..exceptions import ConfigurationError
from ..storage import CredentialStorage, create_storage
from ..types import UnlockMethod
from .config import StrategyConfig
from .strategy import AuthStrategy, PasswordStrategy

logger = logging.getLogger(LOGGER_NAME)

# Highest priority first. A live session outranks a stored passkey.
METHOD_PRIORITY = (
    UnlockMethod.SESSION,
    UnlockMethod.PASSKEY,
    UnlockMethod.PASSWORD,
)


def _as_method(method: Any) -> Optional[UnlockMethod]:
    try:
        return UnlockMethod(method)
    except ValueError:
        return None


class StrategyManager:
    """Registers one strategy per implemented unlock method.

    Args:
        config: StrategyConfig, a mapping of its fields, or None for the
            environment defaults.
        storage: Storage shared by all strategies. Built from the config
            when omitted.

    Raises:
        ConfigurationError: If ``config`` does not validate.
    """

    def __init__(
        self,
        config: Union[StrategyConfig, Mapping, None] = None,
        storage: Optional[CredentialStorage] = None,
    ) -> None:
        self._config = self._load_config(config)
        if storage is None:
            storage = create_storage(
                self._config.storage_path, prefix=self._config.storage_prefix,
            )
        self._storage = storage
        self._strategies = MappingProxyType(self._register_strategies())
        logger.info(
            "[StrategyManager] Registered strategies: %s",
            ", ".join(str(m) for m in self._strategies),
        )

    @staticmethod
    def _load_config(
        config: Union[StrategyConfig, Mapping, None]
    ) -> StrategyConfig:
        if isinstance(config, StrategyConfig):
            return config
        try:
            if config is None:
                return StrategyConfig()
            return StrategyConfig(**dict(config))
        except ValidationError as err:
            raise ConfigurationError(
                f"Invalid strategy configuration: {err}"
            ) from err

    def _register_strategies(self) -> dict[UnlockMethod, AuthStrategy]:
        namespace = self._config.namespace
        return {
            UnlockMethod.PASSWORD: PasswordStrategy(namespace, self._storage),
        }

    @property
    def namespace(self) -> str:
        return self._config.namespace

    @property
    def config(self) -> StrategyConfig:
        return self._config

    @property
    def storage(self) -> CredentialStorage:
        return self._storage

    @property
    def strategies(self) -> Mapping[UnlockMethod, AuthStrategy]:
        """Read-only view of every registered strategy."""
        return self._strategies

    def get_strategy(self, method: Any) -> Optional[AuthStrategy]:
        """Look up a strategy; None for unknown or unregistered methods."""
        resolved = _as_method(method)
        if resolved is None:
            return None
        return self._strategies.get(resolved)

    def is_strategy_supported(self, method: Any) -> bool:
        strategy = self.get_strategy(method)
        return strategy.is_supported if strategy is not None else False

    @property
    def supported_methods(self) -> list[UnlockMethod]:
        """Registered methods whose strategy is supported, in order."""
        return [
            method for method, strategy in self._strategies.items()
            if strategy.is_supported
        ]

    @property
    def preferred_method(self) -> UnlockMethod:
        """First ready method by priority, falling back to password.

        A session is ready when unlocked, a passkey when it has stored auth
        data.
        """
        for method in METHOD_PRIORITY:
            strategy = self._strategies.get(method)
            if strategy is None or not strategy.is_supported:
                continue
            if method is UnlockMethod.SESSION and not strategy.is_unlocked:
                continue
            if method is UnlockMethod.PASSKEY and not strategy.has_stored_auth_data():
                continue
            return method
        return UnlockMethod.PASSWORD

    def has_any_credentials(self) -> bool:
        return any(s.has_any_credentials() for s in self._strategies.values())

    def clear_all(self) -> None:
        """Clear every registered strategy, stored data included."""
        for strategy in self._strategies.values():
            strategy.clear()
        logger.info("[StrategyManager] Cleared all strategies")
