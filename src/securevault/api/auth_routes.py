# Auth API - Registration and login
#
# Registration hashes both secrets (separate bcrypt salts) and returns a
# bearer token. Login checks only the login secret.

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from ..vault.encryption import (
    HANDLE_MAX_LENGTH,
    HANDLE_MIN_LENGTH,
    SECRET_MAX_LENGTH,
    SECRET_MIN_LENGTH,
)
from .security import run_in_crypto_pool

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    handle: str = Field(..., min_length=HANDLE_MIN_LENGTH, max_length=HANDLE_MAX_LENGTH)
    login_secret: str = Field(..., min_length=SECRET_MIN_LENGTH, max_length=SECRET_MAX_LENGTH)
    master_secret: str = Field(..., min_length=SECRET_MIN_LENGTH, max_length=SECRET_MAX_LENGTH)


class LoginRequest(BaseModel):
    handle: str = Field(..., min_length=1, max_length=HANDLE_MAX_LENGTH)
    login_secret: str = Field(..., min_length=1, max_length=SECRET_MAX_LENGTH)


class AuthResponse(BaseModel):
    token: str
    handle: str


@router.post("/register", response_model=AuthResponse)
async def register(body: RegisterRequest, request: Request):
    """
    Register a new account.

    Both secrets must be 8-128 characters with upper, lower, digit and
    special characters. Returns 409 if the handle is taken.
    """
    accounts = request.app.state.accounts
    try:
        account = await run_in_crypto_pool(
            request, accounts.register, body.handle, body.login_secret, body.master_secret
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=422,
            detail=str(exc),
        )

    token = request.app.state.tokens.issue(account.account_id, account.handle)
    return AuthResponse(token=token, handle=account.handle)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, request: Request):
    """Exchange handle + login secret for a bearer token."""
    accounts = request.app.state.accounts
    account = await run_in_crypto_pool(
        request, accounts.authenticate, body.handle, body.login_secret
    )
    token = request.app.state.tokens.issue(account.account_id, account.handle)
    return AuthResponse(token=token, handle=account.handle)
