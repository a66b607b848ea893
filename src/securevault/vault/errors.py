"""
Vault error kinds.

Every business failure in the vault core is one of a closed set of kinds.
Callers branch on ``err.kind``; the message attached to each kind is fixed
and never carries cipher parameters, secrets or storage details.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed enumeration of vault failure kinds."""
    DUPLICATE_HANDLE = "DuplicateHandle"
    INVALID_CREDENTIALS = "InvalidCredentials"
    INVALID_MASTER_SECRET = "InvalidMasterSecret"
    NOT_FOUND = "NotFound"
    MALFORMED_ENVELOPE = "MalformedEnvelope"
    DECRYPTION_FAILURE = "DecryptionFailure"


class VaultError(Exception):
    """Base exception for vault operations"""

    kind: ErrorKind
    message = "Vault operation failed"

    def __init__(self):
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.kind.value}


class DuplicateHandle(VaultError):
    """Raised when registering a handle that already exists"""
    kind = ErrorKind.DUPLICATE_HANDLE
    message = "Handle is already taken"


class InvalidCredentials(VaultError):
    """Raised when the login secret does not match"""
    kind = ErrorKind.INVALID_CREDENTIALS
    message = "Invalid handle or login secret"


class InvalidMasterSecret(VaultError):
    """Raised when the master secret attempt does not match"""
    kind = ErrorKind.INVALID_MASTER_SECRET
    message = "Invalid master secret"


class NotFound(VaultError):
    """Raised when an entry is absent or owned by another account"""
    kind = ErrorKind.NOT_FOUND
    message = "Entry not found"


class MalformedEnvelope(VaultError):
    """Raised when stored ciphertext is shorter than the envelope header"""
    kind = ErrorKind.MALFORMED_ENVELOPE
    message = "Stored ciphertext is malformed"


class DecryptionFailure(VaultError):
    """Raised when the cipher rejects the envelope (wrong secret or corrupt data)"""
    kind = ErrorKind.DECRYPTION_FAILURE
    message = "Decryption failed"


class ConfigurationError(Exception):
    """Raised at startup when required configuration is missing or invalid"""
    pass
