"""Shared fixtures for NodeLink Session tests."""
import pytest

from nodelink_session.storage import MemoryStorage
from nodelink_session.credentials.encryption import PasswordEncryptionService
from nodelink_session.credentials.repository import PasswordCredentialRepository
from nodelink_session.credentials.strategy import PasswordStrategy


NAMESPACE = "test"


@pytest.fixture
def storage():
    """Fresh in-memory storage, shared by everything built in one test."""
    return MemoryStorage()


@pytest.fixture
def encryption():
    """Locked password encryption service."""
    return PasswordEncryptionService()


@pytest.fixture
def repository(storage, encryption):
    """Password repository on the shared storage."""
    return PasswordCredentialRepository(NAMESPACE, encryption, storage)


@pytest.fixture
def strategy(storage):
    """Password strategy on the shared storage."""
    return PasswordStrategy(NAMESPACE, storage)
