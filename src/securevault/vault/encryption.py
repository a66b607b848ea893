# Vault - Envelope Encryption
#
# Master secret -> one-time key (PBKDF2-HMAC-SHA256, fresh salt per call)
# Entry secret encryption (AES-256-GCM by default, AES-256-CBC for legacy data)
#
# Envelope format: iv(16) + salt(16) + ciphertext
#   gcm: ciphertext carries the 16-byte authentication tag at its end
#   cbc: ciphertext is PKCS7 padded, a multiple of 16 bytes

import base64
import binascii
import os
import re
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import DecryptionFailure, MalformedEnvelope

IV_LENGTH = 16
SALT_LENGTH = 16
KEY_LENGTH = 32  # 256 bits for AES-256
HEADER_LENGTH = IV_LENGTH + SALT_LENGTH
DEFAULT_ITERATIONS = 65_536

MODE_GCM = "gcm"
MODE_CBC = "cbc"
SUPPORTED_MODES = (MODE_GCM, MODE_CBC)


class EnvelopeCipher:
    """
    Encrypts and decrypts vault secrets into self-contained envelopes.

    Flow:
    1. Caller supplies the plaintext and the (already verified) master secret
    2. A fresh salt and IV are drawn for every call
    3. PBKDF2 derives a 256-bit key from secret + salt
    4. AES-256 encrypts the payload; salt and IV travel in the envelope

    No key, salt or IV is kept on the instance or written anywhere
    except inside the returned envelope.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS, mode: str = MODE_GCM):
        if iterations < 1:
            raise ValueError("iterations must be positive")
        if mode not in SUPPORTED_MODES:
            raise ValueError(f"Unsupported cipher mode: {mode}")
        self.iterations = iterations
        self.mode = mode

    def derive_key(self, secret: str, salt: bytes) -> bytes:
        """
        Derive a 256-bit key from a secret using PBKDF2-HMAC-SHA256.

        Args:
            secret: Master secret (UTF-8 encoded before derivation)
            salt: Random salt taken from the envelope

        Returns:
            32-byte key
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=self.iterations,
            backend=default_backend()
        )
        return kdf.derive(secret.encode("utf-8"))

    def encrypt(self, plaintext: bytes, secret: str) -> bytes:
        """
        Encrypt plaintext under a key derived from secret.

        Non-deterministic: two calls with identical inputs return
        different envelopes.

        Returns:
            iv(16) + salt(16) + ciphertext
        """
        salt = os.urandom(SALT_LENGTH)
        iv = os.urandom(IV_LENGTH)
        key = self.derive_key(secret, salt)

        if self.mode == MODE_GCM:
            ciphertext = AESGCM(key).encrypt(iv, plaintext, None)
        else:
            padder = padding.PKCS7(algorithms.AES.block_size).padder()
            padded = padder.update(plaintext) + padder.finalize()
            encryptor = Cipher(
                algorithms.AES(key), modes.CBC(iv), backend=default_backend()
            ).encryptor()
            ciphertext = encryptor.update(padded) + encryptor.finalize()

        return iv + salt + ciphertext

    def decrypt(self, envelope: bytes, secret: str) -> bytes:
        """
        Decrypt an envelope produced by encrypt().

        Raises:
            MalformedEnvelope: Envelope shorter than the 32-byte header.
            DecryptionFailure: Wrong secret or corrupt ciphertext. The two
                cases raise the same error.
        """
        if envelope is None or len(envelope) < HEADER_LENGTH:
            raise MalformedEnvelope()

        iv, salt, ciphertext = split_envelope(envelope)
        key = self.derive_key(secret, salt)

        if self.mode == MODE_GCM:
            try:
                return AESGCM(key).decrypt(iv, ciphertext, None)
            except InvalidTag:
                raise DecryptionFailure() from None

        if not ciphertext or len(ciphertext) % IV_LENGTH:
            raise DecryptionFailure()
        decryptor = Cipher(
            algorithms.AES(key), modes.CBC(iv), backend=default_backend()
        ).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            raise DecryptionFailure() from None


def split_envelope(envelope: bytes) -> Tuple[bytes, bytes, bytes]:
    """Split an envelope into (iv, salt, ciphertext)."""
    if len(envelope) < HEADER_LENGTH:
        raise MalformedEnvelope()
    return (
        envelope[:IV_LENGTH],
        envelope[IV_LENGTH:HEADER_LENGTH],
        envelope[HEADER_LENGTH:],
    )


def encode_for_storage(data: bytes) -> str:
    """
    Encode an envelope for storage or transport (base64).

    SQLite stores TEXT, so the binary envelope is base64-encoded
    only at the persistence boundary.
    """
    return base64.b64encode(data).decode("ascii")


def decode_from_storage(data: str) -> bytes:
    """Decode a base64-encoded envelope. Invalid base64 is a malformed envelope."""
    try:
        return base64.b64decode(data.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, AttributeError):
        raise MalformedEnvelope() from None


# Secret policy

SECRET_MIN_LENGTH = 8
SECRET_MAX_LENGTH = 128
HANDLE_MIN_LENGTH = 3
HANDLE_MAX_LENGTH = 50

_SPECIAL_CHARS = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")


def validate_secret_strength(secret: str, name: str = "Secret") -> Tuple[bool, str]:
    """
    Check a login or master secret against the registration policy.

    Requirements:
    - 8 to 128 characters
    - At least one lowercase, one uppercase, one digit
    - At least one special character

    Returns:
        (is_valid, error_message)
    """
    if len(secret) < SECRET_MIN_LENGTH:
        return False, f"{name} must be at least {SECRET_MIN_LENGTH} characters long"

    if len(secret) > SECRET_MAX_LENGTH:
        return False, f"{name} must be at most {SECRET_MAX_LENGTH} characters long"

    if not any(c.islower() for c in secret):
        return False, f"{name} must contain at least one lowercase letter"

    if not any(c.isupper() for c in secret):
        return False, f"{name} must contain at least one uppercase letter"

    if not any(c.isdigit() for c in secret):
        return False, f"{name} must contain at least one number"

    if not _SPECIAL_CHARS.search(secret):
        return False, f"{name} must contain at least one special character"

    return True, ""


def validate_handle(handle: str) -> Tuple[bool, str]:
    """Handles are 3-50 characters after trimming surrounding whitespace."""
    length = len(handle.strip())
    if length < HANDLE_MIN_LENGTH or length > HANDLE_MAX_LENGTH:
        return False, (
            f"Handle must be between {HANDLE_MIN_LENGTH} and "
            f"{HANDLE_MAX_LENGTH} characters"
        )
    return True, ""
