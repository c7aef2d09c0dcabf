"""Exception hierarchy for NodeLink Session.

Exception Hierarchy:
    NodelinkSessionError (base)
    ├── ConfigurationError
    └── CredentialError
        ├── MethodMismatchError
        ├── MissingFieldError
        │   └── MissingPasswordError
        ├── InvalidPasswordError
        ├── LockedError
        │   └── NoKeyMaterialError
        ├── ReservedKeyError
        ├── DecryptionError
        └── StorageError

Encryption services and repositories raise these. Auth strategies catch
them and turn the expected ones into ``False``/``None`` results.
"""


class NodelinkSessionError(Exception):
    """Base exception for all NodeLink Session errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(NodelinkSessionError):
    """Invalid strategy or storage configuration."""


class CredentialError(NodelinkSessionError):
    """Base class for unlock, encryption and storage failures."""


class MethodMismatchError(CredentialError):
    """Unlock options carry a method the component does not handle."""

    def __init__(self, expected: str, received: str) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Expected unlock method '{expected}', got '{received}'"
        )


class MissingFieldError(CredentialError):
    """A field required by the unlock method is absent."""

    def __init__(self, field: str, method: str) -> None:
        self.field = field
        self.method = method
        super().__init__(f"'{field}' is required for {method} unlock")


class MissingPasswordError(MissingFieldError):
    """Password unlock attempted without a password."""

    def __init__(self) -> None:
        super().__init__("password", "password")


class InvalidPasswordError(CredentialError):
    """The supplied password does not match the stored test cipher."""

    def __init__(self, message: str = "Invalid password") -> None:
        super().__init__(message)


class LockedError(CredentialError):
    """Operation requires the unlocked state."""

    def __init__(self, message: str = "Locked. Call unlock() first.") -> None:
        super().__init__(message)


class NoKeyMaterialError(LockedError):
    """No salt or password is held in memory."""


class DecryptionError(CredentialError):
    """Ciphertext could not be decrypted.

    Wrong key material, corrupt ciphertext and malformed payloads all raise
    this with the same message.
    """

    def __init__(self, message: str = "Unable to decrypt data") -> None:
        super().__init__(message)


class StorageError(CredentialError):
    """The persistence backend failed to read or write."""


class ReservedKeyError(CredentialError):
    """Credential key collides with a key the repository keeps for itself."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"'{key}' is a reserved key and cannot be used")
