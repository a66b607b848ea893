# Vault Service - Verified Encryption and Decryption of Entries
#
# The only component allowed to create ciphertext or decrypt it.
#
# Security:
# - Master secret verified against its bcrypt hash on every add and reveal
# - The verified attempt itself is the key material (no stored key)
# - Every entry lookup is scoped to the caller's account
# - List never touches the cipher; secrets are masked
# - No unlocked state is kept between calls

from typing import List

from ..core.log_config import get_logger
from .encryption import EnvelopeCipher
from .errors import (
    DecryptionFailure,
    InvalidMasterSecret,
    MalformedEnvelope,
    NotFound,
)
from .models import Account, EntryView, VaultEntry
from .storage import VaultStore
from .verification import SecretGate

log = get_logger(__name__)


class VaultService:
    """
    Orchestrates verification, encryption and storage of vault entries.

    Collaborators are passed in explicitly:

        service = VaultService(store, EnvelopeCipher(), SecretGate("master"))
        view = service.add_entry(account_id, "github", "alice@x", "p@ss", "M1...")
        secret = service.show_entry(account_id, view.entry_id, "M1...")
    """

    def __init__(self, store: VaultStore, cipher: EnvelopeCipher, master_gate: SecretGate):
        self.store = store
        self.cipher = cipher
        self.master_gate = master_gate

    def list_entries(self, account_id: str) -> List[EntryView]:
        """List the caller's entries with secrets masked."""
        return [entry.to_view() for entry in self.store.find_entries_by_account(account_id)]

    def add_entry(
        self,
        account_id: str,
        label: str,
        entry_username: str,
        plaintext_secret: str,
        master_attempt: str,
    ) -> EntryView:
        """
        Encrypt and store a new entry.

        Raises:
            NotFound: Account does not exist.
            InvalidMasterSecret: Attempt does not match; nothing is stored.
        """
        account = self._load_account(account_id)
        self._verify_master(account, master_attempt, "add")

        envelope = self.cipher.encrypt(plaintext_secret.encode("utf-8"), master_attempt)

        entry = self.store.save_entry(VaultEntry.new(
            account_id=account.account_id,
            label=label,
            entry_username=entry_username,
            encrypted_secret=envelope,
        ))

        log.info("vault.entry.added", account_id=account.account_id, entry_id=entry.entry_id)
        return entry.to_view()

    def show_entry(self, account_id: str, entry_id: str, master_attempt: str) -> str:
        """
        Reveal one entry's secret.

        Order is fixed: ownership lookup, master verification, decryption.

        Raises:
            NotFound: No such entry for this account.
            InvalidMasterSecret: Attempt does not match.
            MalformedEnvelope: Stored ciphertext shorter than its header.
            DecryptionFailure: Cipher rejected the envelope.
        """
        entry = self._load_entry(account_id, entry_id)
        account = self._load_account(account_id)
        self._verify_master(account, master_attempt, "show")

        try:
            plaintext = self.cipher.decrypt(entry.encrypted_secret, master_attempt).decode("utf-8")
        except (MalformedEnvelope, DecryptionFailure) as exc:
            log.error(
                "vault.entry.decrypt_failed",
                account_id=account_id,
                entry_id=entry_id,
                kind=exc.kind.value,
            )
            raise
        except UnicodeDecodeError:
            log.error(
                "vault.entry.decrypt_failed",
                account_id=account_id,
                entry_id=entry_id,
                kind=DecryptionFailure.kind.value,
            )
            raise DecryptionFailure() from None

        log.info("vault.entry.revealed", account_id=account_id, entry_id=entry_id)
        return plaintext

    def delete_entry(self, account_id: str, entry_id: str) -> None:
        """
        Delete one of the caller's entries. No master secret required.

        Raises:
            NotFound: No such entry for this account (or already deleted).
        """
        entry = self._load_entry(account_id, entry_id)
        if not self.store.delete_entry(entry):
            raise NotFound()
        log.info("vault.entry.deleted", account_id=account_id, entry_id=entry_id)

    # ── Internals ────────────────────────────────────────────────────

    def _load_account(self, account_id: str) -> Account:
        account = self.store.find_account_by_id(account_id)
        if account is None:
            raise NotFound()
        return account

    def _load_entry(self, account_id: str, entry_id: str) -> VaultEntry:
        entry = self.store.find_entry_by_id_and_account(entry_id, account_id)
        if entry is None:
            raise NotFound()
        return entry

    def _verify_master(self, account: Account, master_attempt: str, operation: str) -> None:
        if not self.master_gate.verify(master_attempt, account.master_secret_hash):
            log.warning(
                "vault.master_secret.rejected",
                account_id=account.account_id,
                operation=operation,
            )
            raise InvalidMasterSecret()
