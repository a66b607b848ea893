# Vault API - RESTful endpoints for entry management
#
# API endpoints for vault operations:
# - List entries (masked, bearer token only)
# - Add / reveal entries (bearer token + master secret on every call)
# - Delete entries (bearer token, ownership checked)

from typing import List

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from ..vault.encryption import SECRET_MAX_LENGTH
from .security import get_current_account_id, run_in_crypto_pool

router = APIRouter(prefix="/vault", tags=["vault"])


# Request/Response Models
class AddEntryRequest(BaseModel):
    label: str = Field(..., min_length=1, max_length=255)
    entry_username: str = Field(..., min_length=1, max_length=255)
    secret: str = Field(..., min_length=1, max_length=1024)
    master_secret: str = Field(..., min_length=1, max_length=SECRET_MAX_LENGTH)


class RevealEntryRequest(BaseModel):
    master_secret: str = Field(..., min_length=1, max_length=SECRET_MAX_LENGTH)


class EntryResponse(BaseModel):
    id: str
    label: str
    entry_username: str
    masked_secret: str
    created_at: str


class RevealedSecretResponse(BaseModel):
    secret: str


# Endpoints

@router.get("/entries", response_model=List[EntryResponse])
async def list_entries(
    request: Request,
    account_id: str = Depends(get_current_account_id),
):
    """
    List the caller's entries.

    Secrets are always masked. Use POST /vault/entries/{id}/reveal
    with the master secret to read one.
    """
    views = request.app.state.vault.list_entries(account_id)
    return [view.to_dict() for view in views]


@router.post("/entries", response_model=EntryResponse)
async def add_entry(
    body: AddEntryRequest,
    request: Request,
    account_id: str = Depends(get_current_account_id),
):
    """
    Encrypt and store a new entry.

    Returns 403 if the master secret is wrong; nothing is stored.
    """
    view = await run_in_crypto_pool(
        request,
        request.app.state.vault.add_entry,
        account_id,
        body.label,
        body.entry_username,
        body.secret,
        body.master_secret,
    )
    return view.to_dict()


@router.post("/entries/{entry_id}/reveal", response_model=RevealedSecretResponse)
async def reveal_entry(
    entry_id: str,
    body: RevealEntryRequest,
    request: Request,
    account_id: str = Depends(get_current_account_id),
):
    """
    Decrypt one entry.

    404 if the entry does not exist or belongs to another account,
    403 if the master secret is wrong.
    """
    secret = await run_in_crypto_pool(
        request,
        request.app.state.vault.show_entry,
        account_id,
        entry_id,
        body.master_secret,
    )
    return RevealedSecretResponse(secret=secret)


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: str,
    request: Request,
    account_id: str = Depends(get_current_account_id),
):
    """Delete one of the caller's entries."""
    request.app.state.vault.delete_entry(account_id, entry_id)
    return {"success": True}
