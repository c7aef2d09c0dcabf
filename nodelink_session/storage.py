"""
Credential Storage — Namespaced key-value persistence for credential records.

Every namespace is persisted as one JSON object under the item key
``<prefix>:<namespace>``, the same layout browsers keep in
``localStorage``. The object is a flat mapping of credential key to
(already encrypted) value; ``salt`` and ``cipher`` are reserved by the
password repository.

Security Note:
    Values handed to storage are ciphertext or salts. Never log them,
    only namespaces and key names.
"""
import os
import logging
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import orjson

from .conf import LOGGER_NAME, STORAGE_PREFIX
from .exceptions import StorageError

logger = logging.getLogger(LOGGER_NAME)


class CredentialStorage(ABC):
    """Namespaced key-value store built on three raw item primitives.

    Subclasses only implement ``get_item``/``set_item``/``remove_item``;
    the namespaced surface reads and writes whole records on top of them,
    so each ``set``/``remove`` is a single atomic item write.
    """

    def __init__(self, prefix: str = STORAGE_PREFIX) -> None:
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def storage_key(self, namespace: str) -> str:
        """Build the item key for a namespace."""
        return f"{self._prefix}:{namespace}"

    # ------------------------------------------------------------------
    # Raw item primitives
    # ------------------------------------------------------------------

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the raw text stored under ``key`` or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store raw text under ``key``."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key``. No-op if missing."""

    # ------------------------------------------------------------------
    # Whole-record access
    # ------------------------------------------------------------------

    def load(self, namespace: str) -> dict[str, str]:
        """Read the full record of a namespace.

        A record that cannot be parsed is logged and treated as empty,
        the namespace then behaves as if it was never unlocked.

        Returns:
            A fresh dict; mutating it does not touch storage.
        """
        raw = self.get_item(self.storage_key(namespace))
        if not raw:
            return {}
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as err:
            logger.error(
                "[CredentialStorage] Failed to parse record for namespace=%s: %s",
                namespace, err,
            )
            return {}
        if not isinstance(data, dict):
            logger.error(
                "[CredentialStorage] Record for namespace=%s is not an object",
                namespace,
            )
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def save(self, namespace: str, record: dict[str, str]) -> None:
        """Replace the full record of a namespace.

        An empty record removes the item instead of storing ``{}``.
        """
        key = self.storage_key(namespace)
        if not record:
            self.remove_item(key)
            return
        self.set_item(key, orjson.dumps(record).decode("utf-8"))
        logger.debug(
            "[CredentialStorage] Saved namespace=%s keys=%s",
            namespace, sorted(record.keys()),
        )

    # ------------------------------------------------------------------
    # Namespaced surface
    # ------------------------------------------------------------------

    def get(self, namespace: str, key: str) -> Optional[str]:
        return self.load(namespace).get(key)

    def set(self, namespace: str, key: str, value: str) -> None:
        record = self.load(namespace)
        record[key] = value
        self.save(namespace, record)

    def remove(self, namespace: str, key: str) -> None:
        record = self.load(namespace)
        if record.pop(key, None) is not None:
            self.save(namespace, record)

    def has(self, namespace: str, key: str) -> bool:
        return key in self.load(namespace)

    def clear(self, namespace: str) -> None:
        """Erase the whole record of a namespace."""
        self.remove_item(self.storage_key(namespace))
        logger.debug("[CredentialStorage] Cleared namespace=%s", namespace)


class MemoryStorage(CredentialStorage):
    """Process-local storage. Contents vanish with the process.

    Several repositories can share one instance to simulate a reload:
    build fresh services on the same ``MemoryStorage``.
    """

    def __init__(self, prefix: str = STORAGE_PREFIX) -> None:
        super().__init__(prefix)
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items.keys())


class FileStorage(CredentialStorage):
    """Storage persisted to a single JSON file.

    The file maps item keys (``<prefix>:<namespace>``) to record text.
    Writes go to a temporary file in the same directory which then
    replaces the original, so an interrupted write leaves either the old
    or the new content on disk, never a partial file.
    """

    def __init__(
        self,
        path: Union[str, Path],
        prefix: str = STORAGE_PREFIX,
    ) -> None:
        super().__init__(prefix)
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as err:
            raise StorageError(
                f"Unable to read credential storage {self._path}: {err}"
            ) from err
        if not raw:
            return {}
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as err:
            logger.error(
                "[FileStorage] Storage file %s is corrupt, ignoring it: %s",
                self._path, err,
            )
            return {}
        if not isinstance(data, dict):
            logger.error("[FileStorage] Storage file %s is not an object", self._path)
            return {}
        return data

    def _write_all(self, items: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "wb") as fp:
                    fp.write(orjson.dumps(items))
                    fp.flush()
                    os.fsync(fp.fileno())
                os.chmod(tmp, 0o600)
                os.replace(tmp, self._path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as err:
            raise StorageError(
                f"Unable to write credential storage {self._path}: {err}"
            ) from err

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._read_all()
            items[key] = value
            self._write_all(items)

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = self._read_all()
            if key not in items:
                return
            del items[key]
            self._write_all(items)


def create_storage(
    path: Optional[Union[str, Path]] = None,
    prefix: str = STORAGE_PREFIX,
) -> CredentialStorage:
    """Return FileStorage when a path is given, MemoryStorage otherwise."""
    if path:
        logger.debug("[CredentialStorage] Using file storage at %s", path)
        return FileStorage(path, prefix=prefix)
    return MemoryStorage(prefix=prefix)
