"""
Account registration and login-secret authentication.

Registration hashes the login and master secrets through two separate
gates. Login checks only the login hash; the master hash is consulted
exclusively by the vault service.
"""

import logging
import secrets
from typing import Optional

from .encryption import validate_handle, validate_secret_strength
from .errors import DuplicateHandle, InvalidCredentials
from .models import Account
from .storage import VaultStore
from .verification import SecretGate

logger = logging.getLogger(__name__)


class AccountService:
    """Creates accounts and authenticates login secrets."""

    def __init__(self, store: VaultStore, login_gate: SecretGate, master_gate: SecretGate):
        if login_gate is master_gate or login_gate.purpose == master_gate.purpose:
            raise ValueError("login and master secrets need separate gates")
        self.store = store
        self.login_gate = login_gate
        self.master_gate = master_gate
        self._dummy_hash: Optional[str] = None

    def register(self, handle: str, login_secret: str, master_secret: str) -> Account:
        """
        Register a new account.

        Raises:
            ValueError: Handle or secret fails the policy (message is safe to show).
            DuplicateHandle: Handle already registered.
        """
        handle = handle.strip()
        for valid, message in (
            validate_handle(handle),
            validate_secret_strength(login_secret, "Login secret"),
            validate_secret_strength(master_secret, "Master secret"),
        ):
            if not valid:
                raise ValueError(message)

        if self.store.find_account_by_handle(handle) is not None:
            raise DuplicateHandle()

        account = Account.new(
            handle=handle,
            login_secret_hash=self.login_gate.hash(login_secret),
            master_secret_hash=self.master_gate.hash(master_secret),
        )
        account = self.store.save_account(account)
        logger.info("Account registered: %s", account.account_id)
        return account

    def authenticate(self, handle: str, login_secret: str) -> Account:
        """
        Verify a login secret.

        Unknown handle and wrong secret raise the same error; an unknown
        handle still pays for one bcrypt comparison.

        Raises:
            InvalidCredentials
        """
        account = self.store.find_account_by_handle(handle.strip())
        if account is None:
            self.login_gate.verify(login_secret, self._timing_dummy())
            raise InvalidCredentials()

        if not self.login_gate.verify(login_secret, account.login_secret_hash):
            logger.info("Login rejected for account %s", account.account_id)
            raise InvalidCredentials()

        return account

    def _timing_dummy(self) -> str:
        # Made by the login gate so unknown handles pay the same keyed bcrypt check
        if self._dummy_hash is None:
            self._dummy_hash = self.login_gate.hash(secrets.token_urlsafe(16))
        return self._dummy_hash
