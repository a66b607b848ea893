"""Signed bearer tokens for API access.

A token proves that the holder passed the login-secret check. It grants
listing and deleting entries; revealing or adding still requires the
master secret on every call.

Format: base64url(claims_json) "." base64url(HMAC-SHA256)
The MAC covers a domain separation string plus the encoded claims.
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
import time
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

TOKEN_DOMAIN = "securevault:bearer:v1"


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


class TokenSigner:
    """Issue and verify expiring HMAC-signed tokens."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 86_400,
        clock: Callable[[], float] = time.time,
    ):
        self._key = secret.encode("utf-8")
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _sign(self, encoded_claims: str) -> str:
        message = f"{TOKEN_DOMAIN}:{encoded_claims}".encode("ascii")
        return _b64encode(hmac.new(self._key, message, hashlib.sha256).digest())

    def issue(self, account_id: str, handle: str) -> str:
        now = int(self._clock())
        claims = {
            "sub": account_id,
            "handle": handle,
            "iat": now,
            "exp": now + self.ttl_seconds,
        }
        encoded = _b64encode(
            json.dumps(claims, sort_keys=True, separators=(",", ":")).encode("utf-8")
        )
        return f"{encoded}.{self._sign(encoded)}"

    def verify(self, token: str) -> Optional[Dict]:
        """Return the claims of a valid, unexpired token, else None."""
        if not token or token.count(".") != 1:
            return None
        encoded, signature = token.split(".")
        try:
            expected = self._sign(encoded)
        except UnicodeEncodeError:
            return None
        if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii")):
            return None
        try:
            claims = json.loads(_b64decode(encoded).decode("utf-8"))
        except (binascii.Error, ValueError):
            return None
        if not isinstance(claims, dict) or not isinstance(claims.get("sub"), str):
            return None
        exp = claims.get("exp")
        if not isinstance(exp, int) or exp <= int(self._clock()):
            logger.debug("Expired token rejected")
            return None
        return claims
