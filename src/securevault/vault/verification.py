"""
One-way secret verification.

Each account carries two bcrypt hashes: one for the login secret and one
for the master secret. A ``SecretGate`` hashes and verifies one kind of
secret; the vault wires two separate instances so the roles never mix.

The secret is keyed with the gate's purpose (HMAC-SHA256) before bcrypt
sees it, so a hash made by the login gate never verifies through the
master gate, even for the same secret string.
"""

import base64
import hashlib
import hmac
import logging
from typing import Optional

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12
MIN_ROUNDS = 4
MAX_ROUNDS = 31

GATE_DOMAIN = "securevault:gate:v1"


class SecretGate:
    """Salted adaptive hashing and verification for one secret role."""

    def __init__(self, purpose: str, rounds: int = DEFAULT_ROUNDS):
        if not purpose:
            raise ValueError("purpose is required")
        if not MIN_ROUNDS <= rounds <= MAX_ROUNDS:
            raise ValueError(f"bcrypt rounds must be between {MIN_ROUNDS} and {MAX_ROUNDS}")
        self.purpose = purpose
        self.rounds = rounds
        self._key = f"{GATE_DOMAIN}:{purpose}".encode("utf-8")

    def _prepare(self, secret: str) -> bytes:
        # 44 base64 chars: under bcrypt's 72-byte limit, no NUL bytes
        digest = hmac.new(self._key, secret.encode("utf-8"), hashlib.sha256).digest()
        return base64.b64encode(digest)

    def hash(self, secret: str) -> str:
        """Hash a secret with a fresh random salt; output differs on every call."""
        hashed = bcrypt.hashpw(self._prepare(secret), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("ascii")

    def verify(self, secret: str, stored_hash: Optional[str]) -> bool:
        """
        Check a secret against a stored hash.

        Never raises: empty, None or unparseable hashes verify as False.
        """
        if not isinstance(secret, str) or not stored_hash or not isinstance(stored_hash, str):
            return False
        try:
            return bcrypt.checkpw(self._prepare(secret), stored_hash.encode("ascii"))
        except (ValueError, TypeError, UnicodeEncodeError):
            logger.warning("Unparseable %s hash rejected", self.purpose)
            return False

    def __repr__(self) -> str:
        return f"SecretGate(purpose={self.purpose!r}, rounds={self.rounds})"
