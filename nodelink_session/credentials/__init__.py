"""Credentials — Pluggable unlock methods guarding encrypted credentials.

Security Note (Threat Model):
    Once unlocked, the password and salt are held in process memory until
    ``lock()``. A memory dump of the process exposes them. Stored records
    only contain the salt, a test cipher and credential ciphertexts; the
    password itself is never persisted.
"""

from .config import StrategyConfig
from .encryption import EncryptionService, PasswordEncryptionService
from .repository import CredentialRepository, PasswordCredentialRepository
from .strategy import AuthStrategy, PasswordStrategy
from .manager import StrategyManager

__all__ = [
    "StrategyConfig",
    "EncryptionService",
    "PasswordEncryptionService",
    "CredentialRepository",
    "PasswordCredentialRepository",
    "AuthStrategy",
    "PasswordStrategy",
    "StrategyManager",
]
