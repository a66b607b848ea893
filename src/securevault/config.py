"""
Configuration for SecureVault.

Settings come from SECUREVAULT_* environment variables, optionally
seeded from a .env file. The token signing secret is mandatory: there is
no built-in fallback, and a missing or short secret stops startup.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .vault.encryption import DEFAULT_ITERATIONS, SUPPORTED_MODES, MODE_GCM
from .vault.errors import ConfigurationError
from .vault.verification import DEFAULT_ROUNDS, MAX_ROUNDS, MIN_ROUNDS

ENV_PREFIX = "SECUREVAULT_"
MIN_TOKEN_SECRET_LENGTH = 32


@dataclass
class Settings:
    """Application configuration."""

    token_secret: str
    db_path: Path = Path("data/securevault.db")
    token_ttl_seconds: int = 86_400  # 24 hours
    kdf_iterations: int = DEFAULT_ITERATIONS
    cipher_mode: str = MODE_GCM
    bcrypt_rounds: int = DEFAULT_ROUNDS
    crypto_workers: int = 4
    log_level: str = "INFO"
    log_json: bool = True
    host: str = "127.0.0.1"
    port: int = 8000

    def validate(self) -> "Settings":
        """Raise ConfigurationError for any unusable value."""
        if not self.token_secret:
            raise ConfigurationError(f"{ENV_PREFIX}TOKEN_SECRET is not set")
        if len(self.token_secret) < MIN_TOKEN_SECRET_LENGTH:
            raise ConfigurationError(
                f"{ENV_PREFIX}TOKEN_SECRET must be at least "
                f"{MIN_TOKEN_SECRET_LENGTH} characters"
            )
        if self.kdf_iterations < DEFAULT_ITERATIONS:
            raise ConfigurationError(
                f"{ENV_PREFIX}KDF_ITERATIONS must be at least {DEFAULT_ITERATIONS}"
            )
        if self.cipher_mode not in SUPPORTED_MODES:
            raise ConfigurationError(
                f"{ENV_PREFIX}CIPHER_MODE must be one of {', '.join(SUPPORTED_MODES)}"
            )
        if not MIN_ROUNDS <= self.bcrypt_rounds <= MAX_ROUNDS:
            raise ConfigurationError(
                f"{ENV_PREFIX}BCRYPT_ROUNDS must be between {MIN_ROUNDS} and {MAX_ROUNDS}"
            )
        if self.token_ttl_seconds <= 0:
            raise ConfigurationError(f"{ENV_PREFIX}TOKEN_TTL_SECONDS must be positive")
        if self.crypto_workers < 1:
            raise ConfigurationError(f"{ENV_PREFIX}CRYPTO_WORKERS must be at least 1")
        return self


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer") from None


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[Path] = None,
) -> Settings:
    """
    Build validated Settings.

    Args:
        environ: Mapping to read instead of os.environ (tests)
        dotenv_path: Explicit .env file; default searches from the CWD

    Raises:
        ConfigurationError: Missing token secret or invalid values
    """
    if environ is None:
        load_dotenv(dotenv_path=dotenv_path)
        environ = os.environ

    env = environ
    settings = Settings(
        token_secret=env.get(ENV_PREFIX + "TOKEN_SECRET", ""),
        db_path=Path(env.get(ENV_PREFIX + "DB_PATH") or "data/securevault.db"),
        token_ttl_seconds=_get_int(env, "TOKEN_TTL_SECONDS", 86_400),
        kdf_iterations=_get_int(env, "KDF_ITERATIONS", DEFAULT_ITERATIONS),
        cipher_mode=(env.get(ENV_PREFIX + "CIPHER_MODE") or MODE_GCM).lower(),
        bcrypt_rounds=_get_int(env, "BCRYPT_ROUNDS", DEFAULT_ROUNDS),
        crypto_workers=_get_int(env, "CRYPTO_WORKERS", 4),
        log_level=env.get(ENV_PREFIX + "LOG_LEVEL") or "INFO",
        log_json=_get_bool(env, "LOG_JSON", True),
        host=env.get(ENV_PREFIX + "HOST") or "127.0.0.1",
        port=_get_int(env, "PORT", 8000),
    )
    return settings.validate()
