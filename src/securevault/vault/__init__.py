# Vault Module - Dual-Secret Password Vault
#
# Login secret authenticates API access; master secret authorizes
# every encryption and decryption of stored entries.
# PBKDF2 key derivation + AES-256 envelopes, bcrypt secret verification.

from .accounts import AccountService
from .encryption import EnvelopeCipher
from .errors import (
    ConfigurationError,
    DecryptionFailure,
    DuplicateHandle,
    ErrorKind,
    InvalidCredentials,
    InvalidMasterSecret,
    MalformedEnvelope,
    NotFound,
    VaultError,
)
from .models import MASK_TOKEN, Account, EntryView, VaultEntry
from .storage import SQLiteVaultStore, VaultStore
from .vault_manager import VaultService
from .verification import SecretGate

__all__ = [
    "AccountService",
    "EnvelopeCipher",
    "SecretGate",
    "VaultService",
    "VaultStore",
    "SQLiteVaultStore",
    "Account",
    "VaultEntry",
    "EntryView",
    "MASK_TOKEN",
    "ErrorKind",
    "VaultError",
    "DuplicateHandle",
    "InvalidCredentials",
    "InvalidMasterSecret",
    "NotFound",
    "MalformedEnvelope",
    "DecryptionFailure",
    "ConfigurationError",
]
