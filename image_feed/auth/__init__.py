"""Authentication for Image Feed."""

from .oauth2_service import OAuth2Service, code_from_redirect
from .token_storage import FileTokenStorage, MemoryTokenStorage, TokenStorage

__all__ = [
    "OAuth2Service",
    "code_from_redirect",
    "FileTokenStorage",
    "MemoryTokenStorage",
    "TokenStorage",
]
