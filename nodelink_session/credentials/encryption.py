"""
Encryption Services — In-memory key material per unlock method.

An encryption service has no storage of its own. It is Locked until
``unlock()`` succeeds, then holds the key material needed to encrypt and
decrypt credential values until ``lock()`` drops it.

Security Note:
    Key material lives only in process memory and is never serialized.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..conf import LOGGER_NAME
from ..exceptions import (
    InvalidPasswordError,
    LockedError,
    MethodMismatchError,
    MissingPasswordError,
    NoKeyMaterialError,
)
from ..types import UnlockMethod
from . import crypto

logger = logging.getLogger(LOGGER_NAME)


class EncryptionService(ABC):
    """Encryption bound to one unlock method."""

    method: UnlockMethod

    @property
    @abstractmethod
    def is_unlocked(self) -> bool:
        """True once unlock() has succeeded and until lock() is called."""

    @abstractmethod
    async def unlock(self, options: Any) -> None:
        """Unlock with method-specific options.

        Raises:
            MethodMismatchError: If ``options.method`` is not ``self.method``.
        """

    @abstractmethod
    def lock(self) -> None:
        """Drop key material. Idempotent."""

    @abstractmethod
    async def encrypt(self, data: str) -> str:
        """Encrypt with the unlocked key material.

        Raises:
            LockedError: If not unlocked.
        """

    @abstractmethod
    async def decrypt(self, data: str) -> str:
        """Decrypt with the unlocked key material.

        Raises:
            LockedError: If not unlocked.
            DecryptionError: If the data cannot be decrypted.
        """

    def can_handle(self, method: Any) -> bool:
        return method == self.method

    async def has_stored_data(self) -> bool:
        """Services that keep nothing outside memory return False."""
        return False

    def _check_method(self, options: Any) -> None:
        received = getattr(options, "method", None)
        if not self.can_handle(received):
            raise MethodMismatchError(str(self.method), str(received))


class PasswordEncryptionService(EncryptionService):
    """Password based encryption.

    First unlock of a namespace generates a salt; later unlocks adopt the
    stored salt and verify the password against the stored test cipher.
    """

    method = UnlockMethod.PASSWORD

    def __init__(self) -> None:
        self._password: Optional[str] = None
        self._salt: Optional[str] = None
        self._unlocked: bool = False

    def __repr__(self) -> str:
        return f"<PasswordEncryptionService unlocked={self.is_unlocked}>"

    @property
    def is_unlocked(self) -> bool:
        return self._unlocked and bool(self._password) and bool(self._salt)

    async def unlock(self, options: Any) -> None:
        """Unlock with a password.

        Args:
            options: PasswordUnlockOptions. ``salt`` and ``cipher`` come
                from storage for returning users.

        Raises:
            MethodMismatchError: Options are not for password unlock.
            MissingPasswordError: No password given.
            InvalidPasswordError: Password does not match ``cipher``.
        """
        self._check_method(options)
        password = getattr(options, "password", None)
        if not password:
            raise MissingPasswordError()

        salt = getattr(options, "salt", None)
        cipher = getattr(options, "cipher", None)
        if salt:
            if cipher and not crypto.verify_test_cipher(cipher, password, salt):
                # a failed attempt must not leave older key material usable
                self.lock()
                raise InvalidPasswordError()
        else:
            salt = crypto.generate_salt()
            logger.debug("[PasswordEncryptionService] Generated new salt")

        self._password = password
        self._salt = salt
        self._unlocked = True
        logger.debug("[PasswordEncryptionService] Unlocked")

    def lock(self) -> None:
        self._password = None
        self._salt = None
        self._unlocked = False

    def _key_material(self) -> tuple[str, str]:
        if not self.is_unlocked:
            raise LockedError("Encryption service is locked. Call unlock() first.")
        return self._password, self._salt  # type: ignore[return-value]

    async def encrypt(self, data: str) -> str:
        password, salt = self._key_material()
        return crypto.encrypt(data, password, salt)

    async def decrypt(self, data: str) -> str:
        password, salt = self._key_material()
        return crypto.decrypt(data, password, salt)

    def get_salt(self) -> str:
        """Return the current salt for the repository to persist.

        Raises:
            NoKeyMaterialError: If no salt is held.
        """
        if not self._salt:
            raise NoKeyMaterialError("No salt available - unlock first")
        return self._salt

    def create_test_cipher(self) -> str:
        """Build the test cipher for the current password and salt.

        Raises:
            NoKeyMaterialError: If password or salt is missing.
        """
        if not self._password or not self._salt:
            raise NoKeyMaterialError("No password/salt available - unlock first")
        return crypto.create_test_cipher(self._password, self._salt)
