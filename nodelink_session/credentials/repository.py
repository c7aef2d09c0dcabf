"""
Credential Repositories — Encrypted credential records for one namespace.

A repository owns the namespaced record in a CredentialStorage and uses an
EncryptionService for the values it holds. Reserved record keys belong to
the repository (``salt`` and ``cipher`` for passwords); all other keys are
credential ciphertexts.

Security Note:
    Never log credential values, only key names and namespaces.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..conf import LOGGER_NAME
from ..exceptions import (
    CredentialError,
    LockedError,
    MethodMismatchError,
    ReservedKeyError,
)
from ..storage import CredentialStorage, MemoryStorage
from ..types import PasswordUnlockOptions, UnlockMethod
from .encryption import PasswordEncryptionService

logger = logging.getLogger(LOGGER_NAME)

SALT_KEY = "salt"
CIPHER_KEY = "cipher"


class CredentialRepository(ABC):
    """Base repository with the namespaced record helpers."""

    # record keys owned by the repository, never usable as credential keys
    reserved_keys: frozenset = frozenset()

    def __init__(
        self,
        namespace: str,
        storage: Optional[CredentialStorage] = None,
    ) -> None:
        self._namespace = namespace
        self._storage = storage if storage is not None else MemoryStorage()

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def storage(self) -> CredentialStorage:
        return self._storage

    # ------------------------------------------------------------------
    # Record helpers
    # ------------------------------------------------------------------

    def _get(self, key: str) -> Optional[str]:
        return self._storage.get(self._namespace, key)

    def _set(self, key: str, value: str) -> None:
        self._storage.set(self._namespace, key, value)

    def _remove(self, key: str) -> None:
        self._storage.remove(self._namespace, key)

    def _check_key(self, key: str) -> None:
        if key in self.reserved_keys:
            raise ReservedKeyError(key)

    # ------------------------------------------------------------------
    # Shared operations
    # ------------------------------------------------------------------

    def has_credential(self, key: str) -> bool:
        """Existence check on raw storage, nothing is decrypted."""
        return self._storage.has(self._namespace, key)

    def has_any_credentials(self) -> bool:
        """True when the namespace record holds any key at all."""
        return bool(self._storage.load(self._namespace))

    def clear(self) -> None:
        """Erase the whole namespace record. Irreversible."""
        self._storage.clear(self._namespace)
        logger.info(
            "[CredentialRepository] Cleared credentials for namespace=%s",
            self._namespace,
        )

    # ------------------------------------------------------------------
    # Method specific operations
    # ------------------------------------------------------------------

    @abstractmethod
    async def unlock(self, options: Any) -> None:
        ...

    @property
    @abstractmethod
    def is_unlocked(self) -> bool:
        ...

    @abstractmethod
    def lock(self) -> None:
        ...

    @abstractmethod
    async def get_credential(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set_credential(self, key: str, value: str) -> None:
        ...

    async def remove_credential(self, key: str) -> None:
        self._check_key(key)
        self._remove(key)
        logger.debug(
            "[CredentialRepository] Removed credential key=%s namespace=%s",
            key, self._namespace,
        )


class PasswordCredentialRepository(CredentialRepository):
    """Password repository.

    Stores the salt and test cipher next to the credentials so a returning
    user can be verified without the password ever being persisted.
    """

    reserved_keys = frozenset({SALT_KEY, CIPHER_KEY})

    def __init__(
        self,
        namespace: str,
        encryption: PasswordEncryptionService,
        storage: Optional[CredentialStorage] = None,
    ) -> None:
        super().__init__(namespace, storage)
        self._encryption = encryption
        self._unlock_lock = asyncio.Lock()

    @property
    def encryption(self) -> PasswordEncryptionService:
        return self._encryption

    async def unlock(self, options: Any) -> None:
        """Unlock the namespace with a password.

        On the very first unlock of a namespace the new salt and test cipher
        are written before returning, so the password can be verified after
        a restart.

        Raises:
            MethodMismatchError: Options are not for password unlock.
            MissingPasswordError: No password given.
            InvalidPasswordError: Wrong password for existing data.
            StorageError: Salt or cipher could not be written.
        """
        method = getattr(options, "method", None)
        if method != UnlockMethod.PASSWORD:
            raise MethodMismatchError(str(UnlockMethod.PASSWORD), str(method))

        async with self._unlock_lock:
            salt = self._get(SALT_KEY)
            cipher = self._get(CIPHER_KEY)
            await self._encryption.unlock(
                PasswordUnlockOptions(
                    password=getattr(options, "password", None),
                    salt=salt,
                    cipher=cipher,
                )
            )
            if salt and cipher:
                return
            # first unlock, or an incomplete record: a stored salt is kept so
            # existing ciphertexts stay readable, the test cipher is rebuilt
            try:
                if not salt:
                    self._set(SALT_KEY, self._encryption.get_salt())
                self._set(CIPHER_KEY, self._encryption.create_test_cipher())
            except CredentialError:
                self._encryption.lock()
                raise
            logger.info(
                "[PasswordCredentialRepository] Stored %s for namespace=%s",
                "test cipher" if salt else "new salt and test cipher",
                self._namespace,
            )

    @property
    def is_unlocked(self) -> bool:
        return self._encryption.is_unlocked

    def lock(self) -> None:
        """Lock the encryption service. Storage is left untouched."""
        self._encryption.lock()

    async def get_credential(self, key: str) -> Optional[str]:
        """Decrypt a stored credential.

        Returns:
            The value, or None when the key is absent or its ciphertext
            cannot be decrypted.

        Raises:
            ReservedKeyError: If ``key`` is ``salt`` or ``cipher``.
            LockedError: If the repository is locked.
        """
        self._check_key(key)
        encrypted = self._get(key)
        if not encrypted:
            return None
        if not self.is_unlocked:
            raise LockedError("Repository is locked. Call unlock() first.")
        try:
            return await self._encryption.decrypt(encrypted)
        except CredentialError as err:
            logger.error(
                "[PasswordCredentialRepository] Failed to decrypt credential %s: %s",
                key, err,
            )
            return None

    async def set_credential(self, key: str, value: str) -> None:
        """Encrypt and store a credential.

        Raises:
            ReservedKeyError: If ``key`` is ``salt`` or ``cipher``.
            LockedError: If the repository is locked.
            StorageError: If the write fails.
        """
        self._check_key(key)
        if not self.is_unlocked:
            raise LockedError("Repository is locked. Call unlock() first.")
        encrypted = await self._encryption.encrypt(value)
        self._set(key, encrypted)

    def clear(self) -> None:
        """Erase the namespace record and drop the key material.

        The salt goes with the record, so the held key could no longer be
        verified after a restart.
        """
        self._encryption.lock()
        super().clear()

    def has_stored_auth_data(self) -> bool:
        """True iff both salt and cipher are stored.

        A record with only one of them is incomplete and counts as no data.
        """
        record = self._storage.load(self._namespace)
        return bool(record.get(SALT_KEY)) and bool(record.get(CIPHER_KEY))
