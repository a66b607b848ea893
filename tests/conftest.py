"""
Shared pytest fixtures for the SecureVault test suite.

Crypto work factors are lowered here so the suite stays fast:
bcrypt runs at its minimum cost and PBKDF2 at a small iteration count.
Production defaults are exercised explicitly where they matter.
"""

import pytest
from fastapi.testclient import TestClient

from securevault.config import Settings
from securevault.vault import (
    AccountService,
    EnvelopeCipher,
    SecretGate,
    SQLiteVaultStore,
    VaultService,
)

FAST_ITERATIONS = 1_000
FAST_ROUNDS = 4

LOGIN_SECRET = "L1-login-Secret!"
MASTER_SECRET = "M1-master-Secret!"
TOKEN_SECRET = "test-token-secret-0123456789abcdef"


@pytest.fixture
def cipher():
    return EnvelopeCipher(iterations=FAST_ITERATIONS)


@pytest.fixture
def login_gate():
    return SecretGate("login", rounds=FAST_ROUNDS)


@pytest.fixture
def master_gate():
    return SecretGate("master", rounds=FAST_ROUNDS)


@pytest.fixture
def store(tmp_path):
    """SQLiteVaultStore backed by a temp database."""
    return SQLiteVaultStore(tmp_path / "vault.db")


@pytest.fixture
def accounts(store, login_gate, master_gate):
    return AccountService(store, login_gate, master_gate)


@pytest.fixture
def vault(store, cipher, master_gate):
    return VaultService(store, cipher, master_gate)


@pytest.fixture
def alice(accounts):
    """Registered account 'alice' with LOGIN_SECRET / MASTER_SECRET."""
    return accounts.register("alice", LOGIN_SECRET, MASTER_SECRET)


@pytest.fixture
def bob(accounts):
    return accounts.register("bob", "Bob-login-1!", "Bob-master-1!")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        token_secret=TOKEN_SECRET,
        db_path=tmp_path / "api.db",
        kdf_iterations=FAST_ITERATIONS,
        bcrypt_rounds=FAST_ROUNDS,
        crypto_workers=2,
    )


@pytest.fixture
def client(settings):
    """TestClient over a freshly built app."""
    from securevault.api.main import create_app

    with TestClient(create_app(settings)) as test_client:
        yield test_client
