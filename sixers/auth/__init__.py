"""
Authentication module for bearer JWT identities
"""
from sixers.auth.utils import Identity, get_identity, require_tournament, create_access_token, decode_token

__all__ = [
    "Identity",
    "get_identity",
    "require_tournament",
    "create_access_token",
    "decode_token",
]
