# Vault - Account and Entry Persistence
#
# SQLite database holding accounts (bcrypt hashes only) and vault entries
# (base64 ciphertext envelopes only). No plaintext secret reaches this layer.
#
# Design:
#   - Per-call WAL connections with busy_timeout and foreign_keys
#   - Writes serialized with a threading.Lock; reads run concurrently
#   - Every entry lookup that can reveal or destroy data filters on
#     (entry_id, account_id) in a single query

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Protocol, Union

from .encryption import decode_from_storage, encode_for_storage
from .errors import DuplicateHandle, MalformedEnvelope
from .models import Account, VaultEntry

logger = logging.getLogger(__name__)

BUSY_TIMEOUT_MS = 5000


class VaultStore(Protocol):
    """Persistence operations the vault core depends on."""

    def save_account(self, account: Account) -> Account: ...

    def find_account_by_handle(self, handle: str) -> Optional[Account]: ...

    def find_account_by_id(self, account_id: str) -> Optional[Account]: ...

    def save_entry(self, entry: VaultEntry) -> VaultEntry: ...

    def find_entries_by_account(self, account_id: str) -> List[VaultEntry]: ...

    def find_entry_by_id_and_account(self, entry_id: str, account_id: str) -> Optional[VaultEntry]: ...

    def delete_entry(self, entry: VaultEntry) -> bool: ...


class SQLiteVaultStore:
    """SQLite-backed store for accounts and vault entries.

    Thread-safe. Each method opens its own connection, so a store
    instance can be shared across worker threads.

    Usage::

        store = SQLiteVaultStore("data/securevault.db")
        store.save_account(Account.new("alice", login_hash, master_hash))
        entries = store.find_entries_by_account(account_id)
    """

    def __init__(self, db_path: Union[str, Path, None] = None):
        self.db_path = Path(db_path) if db_path else Path("data/securevault.db")
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_database()

    def _init_database(self):
        """Create tables if they don't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS accounts (
                    account_id TEXT PRIMARY KEY,
                    handle TEXT NOT NULL UNIQUE,
                    login_secret_hash TEXT NOT NULL CHECK (length(login_secret_hash) > 0),
                    master_secret_hash TEXT NOT NULL CHECK (length(master_secret_hash) > 0),
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS vault_entries (
                    entry_id TEXT PRIMARY KEY,
                    account_id TEXT NOT NULL
                        REFERENCES accounts(account_id) ON DELETE CASCADE,
                    label TEXT NOT NULL,
                    entry_username TEXT NOT NULL,
                    encrypted_secret TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_vault_entries_account
                ON vault_entries(account_id)
            """)

    @contextmanager
    def _connect(self):
        """Open a WAL-mode connection with foreign keys on; commits or rolls back on exit."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
        conn.execute("PRAGMA foreign_keys=ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ── Accounts ─────────────────────────────────────────────────────

    def save_account(self, account: Account) -> Account:
        """Insert a new account.

        Raises:
            DuplicateHandle: The handle is already registered.
        """
        with self._lock:
            try:
                with self._connect() as conn:
                    conn.execute(
                        """
                        INSERT INTO accounts
                        (account_id, handle, login_secret_hash, master_secret_hash, created_at)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        (
                            account.account_id,
                            account.handle,
                            account.login_secret_hash,
                            account.master_secret_hash,
                            account.created_at,
                        ),
                    )
            except sqlite3.IntegrityError as exc:
                if "accounts.handle" in str(exc):
                    raise DuplicateHandle() from None
                raise
        logger.info("Account stored: %s", account.account_id)
        return account

    def find_account_by_handle(self, handle: str) -> Optional[Account]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM accounts WHERE handle = ?", (handle,)
            ).fetchone()
        return self._row_to_account(row) if row else None

    def find_account_by_id(self, account_id: str) -> Optional[Account]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM accounts WHERE account_id = ?", (account_id,)
            ).fetchone()
        return self._row_to_account(row) if row else None

    # ── Entries ──────────────────────────────────────────────────────

    def save_entry(self, entry: VaultEntry) -> VaultEntry:
        """Insert a fully encrypted entry in a single statement."""
        with self._lock:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO vault_entries
                    (entry_id, account_id, label, entry_username, encrypted_secret, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        entry.entry_id,
                        entry.account_id,
                        entry.label,
                        entry.entry_username,
                        encode_for_storage(entry.encrypted_secret),
                        entry.created_at,
                    ),
                )
        return entry

    def find_entries_by_account(self, account_id: str) -> List[VaultEntry]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM vault_entries
                WHERE account_id = ?
                ORDER BY created_at, entry_id
                """,
                (account_id,),
            ).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def find_entry_by_id_and_account(self, entry_id: str, account_id: str) -> Optional[VaultEntry]:
        """Existence and ownership check in one lookup."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM vault_entries WHERE entry_id = ? AND account_id = ?",
                (entry_id, account_id),
            ).fetchone()
        return self._row_to_entry(row) if row else None

    def delete_entry(self, entry: VaultEntry) -> bool:
        """Delete an entry owned by its account. Returns False if already gone."""
        with self._lock:
            with self._connect() as conn:
                cursor = conn.execute(
                    "DELETE FROM vault_entries WHERE entry_id = ? AND account_id = ?",
                    (entry.entry_id, entry.account_id),
                )
                return cursor.rowcount > 0

    # ── Row mapping ──────────────────────────────────────────────────

    @staticmethod
    def _row_to_account(row: sqlite3.Row) -> Account:
        return Account(
            account_id=row["account_id"],
            handle=row["handle"],
            login_secret_hash=row["login_secret_hash"],
            master_secret_hash=row["master_secret_hash"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> VaultEntry:
        try:
            envelope = decode_from_storage(row["encrypted_secret"])
        except MalformedEnvelope:
            # An empty envelope fails the header check when revealed
            logger.error("Stored envelope is not valid base64: entry %s", row["entry_id"])
            envelope = b""
        return VaultEntry(
            entry_id=row["entry_id"],
            account_id=row["account_id"],
            label=row["label"],
            entry_username=row["entry_username"],
            encrypted_secret=envelope,
            created_at=row["created_at"],
        )
