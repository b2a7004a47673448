"""Configuration for Image Feed."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_AUTHORIZE_URL = "https://unsplash.com/oauth/authorize"
DEFAULT_TOKEN_URL = "https://unsplash.com/oauth/token"
DEFAULT_API_BASE_URL = "https://api.unsplash.com"
DEFAULT_REDIRECT_URI = "imagefeed://auth"
DEFAULT_ACCESS_SCOPE = "public read_user write_likes"
PHOTOS_PER_PAGE = 10


@dataclass(frozen=True)
class UnsplashConfig:
    """Client credentials and endpoints for the Unsplash API."""
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    redirect_uri: str = DEFAULT_REDIRECT_URI
    access_scope: str = DEFAULT_ACCESS_SCOPE
    authorize_url: str = DEFAULT_AUTHORIZE_URL
    token_url: str = DEFAULT_TOKEN_URL
    api_base_url: str = DEFAULT_API_BASE_URL
    per_page: int = PHOTOS_PER_PAGE
    timeout: float = 30.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "UnsplashConfig":
        """Build configuration from environment variables.

        Args:
            environ: Mapping to read from, defaults to os.environ

        Returns:
            UnsplashConfig with unset variables left at their defaults
        """
        env = os.environ if environ is None else environ
        return cls(
            access_key=env.get("UNSPLASH_ACCESS_KEY") or None,
            secret_key=env.get("UNSPLASH_SECRET_KEY") or None,
            redirect_uri=env.get("UNSPLASH_REDIRECT_URI", DEFAULT_REDIRECT_URI),
            access_scope=env.get("UNSPLASH_ACCESS_SCOPE", DEFAULT_ACCESS_SCOPE),
            api_base_url=env.get("UNSPLASH_API_BASE_URL", DEFAULT_API_BASE_URL),
        )

    def api_url(self, path: str) -> str:
        """Join an API path onto the base URL."""
        return f"{self.api_base_url.rstrip('/')}/{path.lstrip('/')}"
