"""
Vault data model.

Accounts own their entries; an entry keeps the owning account id only
for authorization filtering. Secrets never appear in clear here: accounts
hold bcrypt hashes and entries hold ciphertext envelopes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import uuid4

MASK_TOKEN = "********"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Account:
    """A registered vault user."""
    account_id: str
    handle: str
    login_secret_hash: str = field(repr=False)
    master_secret_hash: str = field(repr=False)
    created_at: str = ""

    @classmethod
    def new(cls, handle: str, login_secret_hash: str, master_secret_hash: str) -> "Account":
        return cls(
            account_id=str(uuid4()),
            handle=handle,
            login_secret_hash=login_secret_hash,
            master_secret_hash=master_secret_hash,
            created_at=_utcnow(),
        )


@dataclass(frozen=True)
class VaultEntry:
    """One stored third-party credential."""
    entry_id: str
    account_id: str
    label: str
    entry_username: str
    encrypted_secret: bytes = field(repr=False)
    created_at: str = ""

    @classmethod
    def new(
        cls,
        account_id: str,
        label: str,
        entry_username: str,
        encrypted_secret: bytes,
    ) -> "VaultEntry":
        return cls(
            entry_id=str(uuid4()),
            account_id=account_id,
            label=label,
            entry_username=entry_username,
            encrypted_secret=encrypted_secret,
            created_at=_utcnow(),
        )

    def to_view(self) -> "EntryView":
        return EntryView(
            entry_id=self.entry_id,
            label=self.label,
            entry_username=self.entry_username,
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class EntryView:
    """Public view of an entry: the secret is always the mask token."""
    entry_id: str
    label: str
    entry_username: str
    created_at: str = ""

    @property
    def masked_secret(self) -> str:
        return MASK_TOKEN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.entry_id,
            "label": self.label,
            "entry_username": self.entry_username,
            "masked_secret": self.masked_secret,
            "created_at": self.created_at,
        }
