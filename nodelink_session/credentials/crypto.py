"""
Credential Crypto Core — Salt generation, passphrase encryption and the
password test cipher.

Ciphertexts use the OpenSSL passphrase format understood by CryptoJS, so
records written by browser clients decrypt here and vice versa:

    base64( "Salted__" | salt 8B | AES-256-CBC(PKCS7(json(data))) )

Key and IV come from EVP_BytesToKey(MD5, 1 round) over ``password + salt``
and the 8-byte cipher salt.

Security Note:
    The passphrase is the bare concatenation of password and salt and the
    derivation is a single MD5 round, so low-entropy passwords are cheap to
    brute force. Changing it would make every stored record unreadable.
    Never log plaintext, ciphertext, passwords or salts.
"""
import os
import json
import base64
import secrets
import binascii
import logging
from typing import Any

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..conf import LOGGER_NAME
from ..exceptions import DecryptionError

logger = logging.getLogger(LOGGER_NAME)

SALT_LENGTH = 32
SALT_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
)

# Fixed plaintext of the test cipher.
TEST_DATA = "Irrelevant data for password verification"

OPENSSL_MAGIC = b"Salted__"
CIPHER_SALT_SIZE = 8
KEY_LENGTH = 32  # AES-256
IV_LENGTH = 16
BLOCK_SIZE = 128  # bits


# ---------------------------------------------------------------------------
# Salt
# ---------------------------------------------------------------------------

def generate_salt() -> str:
    """Generate a 32-character alphanumeric salt from a CSPRNG.

    Returns:
        Salt string; each character is a random byte modulo 62.
    """
    return "".join(
        SALT_ALPHABET[b % len(SALT_ALPHABET)]
        for b in secrets.token_bytes(SALT_LENGTH)
    )


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key_iv(passphrase: bytes, cipher_salt: bytes) -> tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5 and a single round.

    Args:
        passphrase: ``(password + salt)`` encoded as UTF-8.
        cipher_salt: 8 random bytes stored in the ciphertext header.

    Returns:
        Tuple of (32-byte key, 16-byte IV).
    """
    derived = b""
    block = b""
    while len(derived) < KEY_LENGTH + IV_LENGTH:
        digest = hashes.Hash(hashes.MD5())
        digest.update(block + passphrase + cipher_salt)
        block = digest.finalize()
        derived += block
    return derived[:KEY_LENGTH], derived[KEY_LENGTH:KEY_LENGTH + IV_LENGTH]


def _passphrase(password: str, salt: str) -> bytes:
    return (password + salt).encode("utf-8")


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------

def encrypt(data: Any, password: str, salt: str) -> str:
    """Encrypt a JSON-serializable value under ``password + salt``.

    The value is JSON encoded first, so strings containing quotes,
    backslashes or the cipher's own characters round-trip exactly. Non-ASCII
    text is escaped, which also carries unpaired surrogates that orjson
    rejects.

    Args:
        data: Value to encrypt, usually a string.
        password: User password.
        salt: Namespace salt from ``generate_salt``.

    Returns:
        Base64 ciphertext in OpenSSL "Salted__" format.
    """
    plaintext = json.dumps(
        data, ensure_ascii=True, separators=(",", ":"),
    ).encode("ascii")
    cipher_salt = os.urandom(CIPHER_SALT_SIZE)
    key, iv = derive_key_iv(_passphrase(password, salt), cipher_salt)

    padder = padding.PKCS7(BLOCK_SIZE).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ct = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(OPENSSL_MAGIC + cipher_salt + ct).decode("ascii")


def decrypt(ciphertext: str, password: str, salt: str) -> Any:
    """Decrypt a ciphertext produced by ``encrypt``.

    Args:
        ciphertext: Base64 ciphertext.
        password: User password.
        salt: Namespace salt.

    Returns:
        The original value.

    Raises:
        DecryptionError: On wrong key material, corrupt ciphertext or a
            malformed payload. The cause is chained but the message is the
            same for all of them.
    """
    try:
        raw = base64.b64decode(ciphertext, validate=True)
        header = len(OPENSSL_MAGIC) + CIPHER_SALT_SIZE
        if not raw.startswith(OPENSSL_MAGIC):
            raise ValueError("missing salt header")
        body = raw[header:]
        if not body or len(body) % (BLOCK_SIZE // 8):
            raise ValueError("invalid ciphertext length")
        cipher_salt = raw[len(OPENSSL_MAGIC):header]
        key, iv = derive_key_iv(_passphrase(password, salt), cipher_salt)

        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()
        unpadder = padding.PKCS7(BLOCK_SIZE).unpadder()
        plaintext = unpadder.update(padded) + unpadder.finalize()
        return json.loads(plaintext.decode("utf-8"))
    except (
        binascii.Error,
        TypeError,
        ValueError,  # padding, utf-8 and json errors are ValueErrors
    ) as err:
        raise DecryptionError() from err


# ---------------------------------------------------------------------------
# Password verification
# ---------------------------------------------------------------------------

def create_test_cipher(password: str, salt: str) -> str:
    """Encrypt the fixed TEST_DATA constant under ``password + salt``."""
    return encrypt(TEST_DATA, password, salt)


def verify_test_cipher(test_cipher: str, password: str, salt: str) -> bool:
    """Check a password against a stored test cipher.

    Never raises: every failure, including a malformed cipher, is False.
    """
    try:
        return decrypt(test_cipher, password, salt) == TEST_DATA
    except Exception:
        return False
