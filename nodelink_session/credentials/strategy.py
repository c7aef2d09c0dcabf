"""
Auth Strategies — One façade per unlock method.

A strategy combines an encryption service and a repository for one
namespace behind a uniform contract. It is the error boundary of the
package: expected failures (wrong method, wrong password, locked) become
``False``/``None`` plus a log line. Only ``set_credential`` on an unlocked
strategy re-raises, so a failed write is never silently dropped.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import ValidationError

from ..conf import LOGGER_NAME
from ..exceptions import CredentialError, InvalidPasswordError
from ..storage import CredentialStorage
from ..types import UnlockMethod, parse_unlock_options
from .encryption import PasswordEncryptionService
from .repository import PasswordCredentialRepository

logger = logging.getLogger(LOGGER_NAME)


class AuthStrategy(ABC):
    """Contract shared by every unlock method."""

    method: UnlockMethod

    @property
    @abstractmethod
    def is_supported(self) -> bool:
        """Whether the method works in the current environment."""

    @property
    @abstractmethod
    def is_unlocked(self) -> bool:
        ...

    @abstractmethod
    def has_any_credentials(self) -> bool:
        """Whether this method completed an unlock-and-store cycle before."""

    def has_stored_auth_data(self) -> bool:
        return False

    @abstractmethod
    async def unlock(self, options: Any) -> bool:
        """Try to unlock. Never raises."""

    @abstractmethod
    async def get_credential(self, key: str) -> Optional[str]:
        """Return a credential or None. Never raises."""

    @abstractmethod
    async def set_credential(self, key: str, value: str) -> None:
        """Store a credential; no-op while locked."""

    @abstractmethod
    def clear(self) -> None:
        ...

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} method={self.method} "
            f"unlocked={self.is_unlocked}>"
        )


class PasswordStrategy(AuthStrategy):
    """Password unlock. Always supported."""

    method = UnlockMethod.PASSWORD

    def __init__(
        self,
        namespace: str,
        storage: Optional[CredentialStorage] = None,
    ) -> None:
        self._namespace = namespace
        self._encryption = PasswordEncryptionService()
        self._repository = PasswordCredentialRepository(
            namespace, self._encryption, storage,
        )

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def repository(self) -> PasswordCredentialRepository:
        return self._repository

    @property
    def is_supported(self) -> bool:
        return True

    @property
    def is_unlocked(self) -> bool:
        return self._repository.is_unlocked

    def has_any_credentials(self) -> bool:
        return self._repository.has_stored_auth_data()

    def has_stored_auth_data(self) -> bool:
        return self._repository.has_stored_auth_data()

    async def unlock(self, options: Any) -> bool:
        """Unlock with a password.

        Args:
            options: PasswordUnlockOptions or a mapping such as
                ``{"method": "password", "password": "..."}``.

        Returns:
            True only when the repository unlocked.
        """
        try:
            options = parse_unlock_options(options)
        except ValidationError as err:
            logger.error("[PasswordStrategy] Invalid unlock options: %s", err)
            return False

        method = getattr(options, "method", None)
        if method != self.method:
            logger.debug(
                "[PasswordStrategy] Ignoring unlock for method %s", method,
            )
            return False

        if not getattr(options, "password", None):
            logger.error("[PasswordStrategy] Password required for unlock")
            return False

        try:
            await self._repository.unlock(options)
        except InvalidPasswordError:
            logger.error("[PasswordStrategy] Unlock failed: invalid password")
            return False
        except CredentialError as err:
            logger.error("[PasswordStrategy] Unlock failed: %s", err)
            return False
        except Exception as err:
            logger.exception("[PasswordStrategy] Unexpected unlock error: %s", err)
            return False
        logger.debug("[PasswordStrategy] Unlocked namespace=%s", self._namespace)
        return True

    async def get_credential(self, key: str) -> Optional[str]:
        if not self.is_unlocked:
            logger.warning("[PasswordStrategy] Cannot get credential - not unlocked")
            return None
        try:
            return await self._repository.get_credential(key)
        except Exception as err:
            logger.error(
                "[PasswordStrategy] Failed to get credential %s: %s", key, err,
            )
            return None

    async def set_credential(self, key: str, value: str) -> None:
        if not self.is_unlocked:
            logger.warning("[PasswordStrategy] Cannot set credential - not unlocked")
            return
        try:
            await self._repository.set_credential(key, value)
        except Exception as err:
            logger.error(
                "[PasswordStrategy] Failed to set credential %s: %s", key, err,
            )
            raise

    async def remove_credential(self, key: str) -> None:
        await self._repository.remove_credential(key)

    def lock(self) -> None:
        self._repository.lock()

    def clear(self) -> None:
        self._repository.clear()
