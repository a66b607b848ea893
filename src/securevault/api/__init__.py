# API Module - HTTP surface for SecureVault
#
# /auth/register, /auth/login  -> bearer tokens
# /vault/entries/...           -> list, add, reveal, delete

from .main import create_app, start_api_server

__all__ = ["create_app", "start_api_server"]
