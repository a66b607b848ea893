# SecureVault - FastAPI Backend
#
# Builds the app from Settings with explicit construction of every
# collaborator: store, cipher, the two secret gates, services, token
# signer and the crypto worker pool.

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings
from ..vault import (
    AccountService,
    EnvelopeCipher,
    ErrorKind,
    SecretGate,
    SQLiteVaultStore,
    VaultError,
    VaultService,
)
from .auth_routes import router as auth_router
from .tokens import TokenSigner
from .vault_routes import router as vault_router

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.DUPLICATE_HANDLE: 409,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.INVALID_MASTER_SECRET: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.MALFORMED_ENVELOPE: 500,
    ErrorKind.DECRYPTION_FAILURE: 500,
}


def create_app(settings: Settings) -> FastAPI:
    """Create the FastAPI app with its collaborators wired from settings."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("SecureVault API starting (db=%s)", settings.db_path)
        yield
        app.state.crypto_executor.shutdown(wait=True)
        logger.info("SecureVault API stopped")

    app = FastAPI(
        title="SecureVault API",
        description="Dual-secret personal password vault",
        version=__version__,
        lifespan=lifespan,
    )

    store = SQLiteVaultStore(settings.db_path)
    login_gate = SecretGate("login", rounds=settings.bcrypt_rounds)
    master_gate = SecretGate("master", rounds=settings.bcrypt_rounds)
    cipher = EnvelopeCipher(iterations=settings.kdf_iterations, mode=settings.cipher_mode)

    app.state.settings = settings
    app.state.accounts = AccountService(store, login_gate, master_gate)
    app.state.vault = VaultService(store, cipher, master_gate)
    app.state.tokens = TokenSigner(settings.token_secret, settings.token_ttl_seconds)
    app.state.crypto_executor = ThreadPoolExecutor(
        max_workers=settings.crypto_workers,
        thread_name_prefix="securevault-crypto",
    )

    @app.exception_handler(VaultError)
    async def vault_error_handler(request: Request, exc: VaultError):
        # Only the kind crosses the boundary
        return JSONResponse(status_code=ERROR_STATUS[exc.kind], content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # Drop the rejected input values; they may be secrets
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(status_code=422, content={"detail": errors})

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(auth_router)
    app.include_router(vault_router)

    return app


def start_api_server(settings: Settings):
    """
    Start the API server.

    Args:
        settings: Validated settings (host and port are read from here)
    """
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
