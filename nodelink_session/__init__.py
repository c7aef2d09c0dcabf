"""NodeLink Session.

Credential and session management for remote-node clients.
"""
from .version import __version__
from .types import (
    UnlockMethod,
    PasswordUnlockOptions,
    PasskeyUnlockOptions,
    SessionUnlockOptions,
    parse_unlock_options,
)
from .storage import CredentialStorage, MemoryStorage, FileStorage, create_storage
from .credentials import StrategyConfig, StrategyManager

__all__ = (
    "__version__",
    "UnlockMethod",
    "PasswordUnlockOptions",
    "PasskeyUnlockOptions",
    "SessionUnlockOptions",
    "parse_unlock_options",
    "CredentialStorage",
    "MemoryStorage",
    "FileStorage",
    "create_storage",
    "StrategyConfig",
    "StrategyManager",
)
