"""Response decoding for Image Feed."""

import json
import logging
from concurrent.futures import Future
from datetime import datetime
from typing import Any, Dict, List, Optional

from google.oauth2.credentials import Credentials

from image_feed.models import (
    DecodingError,
    HTTPStatusError,
    ImageFeedError,
    InvalidResponseError,
    Photo,
    Profile,
    TransportError,
)
from image_feed.network.transport import HttpResponse

logger = logging.getLogger(__name__)

TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
)


def authorization_headers(token: str) -> Dict[str, str]:
    """Build headers for a bearer-authorized JSON request."""
    headers = {"Accept": "application/json"}
    Credentials(token=token).apply(headers)
    return headers


def ensure_success(response: HttpResponse) -> HttpResponse:
    """Raise HTTPStatusError unless the response has a 2xx status."""
    if not response.ok:
        raise HTTPStatusError(response.status_code, response.body)
    return response


def response_from(call: Future) -> HttpResponse:
    """Return the 2xx response of a finished transport call.

    Raises:
        TransportError: If the call was cancelled or failed to connect
        HTTPStatusError: If the status code is not 2xx
    """
    if call.cancelled():
        raise TransportError("Request was cancelled")

    error = call.exception()
    if error is not None:
        if isinstance(error, ImageFeedError):
            raise error
        raise TransportError(str(error)) from error

    return ensure_success(call.result())


def decode_json(body: bytes) -> Any:
    """Parse a JSON response body.

    Raises:
        InvalidResponseError: If the body is empty or not valid JSON
    """
    if not body:
        raise InvalidResponseError("Empty response body")
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidResponseError(f"Malformed JSON response: {e}") from e


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an API timestamp, returning None for anything unparseable.

    Args:
        value: Timestamp such as 2024-01-01T12:00:00-05:00, with optional
            fractional seconds or a Z suffix

    Returns:
        Timezone-aware datetime, or None
    """
    if not isinstance(value, str) or not value:
        return None

    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    logger.debug("Unparseable timestamp %r, treating as missing", value)
    return None


def photo_from_json(record: Dict[str, Any]) -> Photo:
    """Convert one photo record from the API into a Photo.

    Raises:
        DecodingError: If a required field is missing or has the wrong type
    """
    try:
        urls = record["urls"]
        return Photo(
            id=str(record["id"]),
            size=(int(record["width"]), int(record["height"])),
            created_at=parse_timestamp(record.get("created_at")),
            description=record.get("description"),
            thumb_url=urls["thumb"],
            large_url=urls["regular"],
            full_url=urls["full"],
            is_liked=bool(record.get("liked_by_user", False)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DecodingError(f"Invalid photo record: {e!r}") from e


def photos_from_json(payload: Any) -> List[Photo]:
    """Convert a page of photo records into Photos."""
    if not isinstance(payload, list):
        raise DecodingError(f"Expected a list of photos, got {type(payload).__name__}")
    return [photo_from_json(record) for record in payload]


def access_token_from_json(payload: Any) -> str:
    """Extract access_token from a token exchange response."""
    if not isinstance(payload, dict) or not isinstance(payload.get("access_token"), str):
        raise DecodingError("Token response has no access_token")
    return payload["access_token"]


def profile_from_json(payload: Any) -> Profile:
    """Convert a /me response into a Profile."""
    if not isinstance(payload, dict) or not isinstance(payload.get("username"), str):
        raise DecodingError("Profile response has no username")

    username = payload["username"]
    names = [payload.get("first_name"), payload.get("last_name")]
    return Profile(
        username=username,
        name=" ".join(name for name in names if name),
        login_name=f"@{username}",
        bio=payload.get("bio"),
    )


def avatar_url_from_json(payload: Any) -> str:
    """Extract profile_image.small from a /users/{username} response."""
    try:
        url = payload["profile_image"]["small"]
    except (KeyError, TypeError) as e:
        raise DecodingError(f"User response has no profile image: {e!r}") from e
    if not isinstance(url, str):
        raise DecodingError("profile_image.small is not a string")
    return url
