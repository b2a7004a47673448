"""Models for Image Feed."""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Photo:
    """Represents a photo in the feed."""
    id: str
    size: Tuple[int, int]
    created_at: Optional[datetime]
    description: Optional[str]
    thumb_url: str
    large_url: str
    full_url: str
    is_liked: bool = False

    def with_like_toggled(self) -> "Photo":
        """Return a copy of this photo with is_liked flipped."""
        return replace(self, is_liked=not self.is_liked)


@dataclass(frozen=True)
class Profile:
    """Represents the authorized user's profile."""
    username: str
    name: str
    login_name: str
    bio: Optional[str] = None


class ImageFeedError(Exception):
    """Base exception for Image Feed operations."""


class ConfigurationError(ImageFeedError):
    """Raised when a request cannot be built from the current configuration."""


class MissingCredentialError(ImageFeedError):
    """Raised when an authorized request is attempted without a token."""


class ExchangeSupersededError(ImageFeedError):
    """Raised when a newer token exchange replaced the one being waited on."""


class NetworkError(ImageFeedError):
    """Base exception for failed network calls."""


class TransportError(NetworkError):
    """Raised when the request never produced an HTTP response."""


class InvalidResponseError(NetworkError):
    """Raised when the response body cannot be parsed."""


class DecodingError(NetworkError):
    """Raised when a parsed response does not match the expected schema."""


class HTTPStatusError(NetworkError):
    """Raised for a non-2xx response."""

    def __init__(self, status_code: int, body: bytes = b""):
        super().__init__(f"Unexpected HTTP status {status_code}")
        self.status_code = status_code
        self.body = body
