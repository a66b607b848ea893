# API Security - Bearer token identity resolution
#
# Resolves "Authorization: Bearer <token>" to a verified account id.
# The vault service trusts this id as already authenticated; it still
# demands the master secret for every add and reveal.

import asyncio
import functools
from typing import Any, Callable, Optional

from fastapi import Header, HTTPException, Request, status


async def get_current_account_id(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> str:
    """
    FastAPI dependency returning the caller's account id.

    Raises:
        HTTPException: 401 if the header is missing, malformed, forged or expired
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0] != "Bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization format (use 'Bearer <token>')",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = request.app.state.tokens.verify(parts[1])
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return claims["sub"]


async def run_in_crypto_pool(request: Request, func: Callable[..., Any], *args: Any) -> Any:
    """Run CPU-bound KDF/bcrypt work on the app's worker pool, off the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        request.app.state.crypto_executor, functools.partial(func, *args)
    )
