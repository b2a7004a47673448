"""Profile and avatar lookups for the authorized user."""

import logging
import threading
from concurrent.futures import Future
from functools import partial
from typing import Callable, Optional, TypeVar

from image_feed.auth.token_storage import TokenStorage
from image_feed.config import UnsplashConfig
from image_feed.models import ImageFeedError, MissingCredentialError, Profile
from image_feed.network.decoding import (
    authorization_headers,
    avatar_url_from_json,
    decode_json,
    profile_from_json,
    response_from,
)
from image_feed.network.transport import HttpRequest, Transport, start_call
from image_feed.utils.dispatch import CallbackContext
from image_feed.utils.events import AvatarChanged, EventChannel

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _LatestRequest:
    """Runs one GET at a time; a new request cancels the previous one."""

    def __init__(self, name: str, storage: TokenStorage, transport: Transport,
                 context: CallbackContext):
        self.name = name
        self.storage = storage
        self.transport = transport
        self.context = context
        self._lock = threading.Lock()
        self._call: Optional[Future] = None

    def get(self, url: str, decode: Callable[[bytes], T],
            on_success: Callable[[T], None]) -> "Future[T]":
        result: Future = Future()
        token = self.storage.token
        if not token:
            logger.error("[%s] No OAuth token stored", self.name)
            error = MissingCredentialError("No OAuth token stored")
            self.context.dispatch(partial(result.set_exception, error))
            return result

        request = HttpRequest(method="GET", url=url, headers=authorization_headers(token))
        with self._lock:
            previous = self._call
            call = start_call(self.transport, request)
            self._call = call

        if previous is not None:
            previous.cancel()
        call.add_done_callback(
            lambda done: self.context.dispatch(
                partial(self._complete, done, result, decode, on_success)
            )
        )
        return result

    def _complete(self, call: Future, result: Future, decode, on_success) -> None:
        with self._lock:
            if self._call is not call:
                result.cancel()
                return
            self._call = None

        try:
            value = decode(response_from(call).body)
        except ImageFeedError as e:
            logger.warning("[%s] Request failed: %s", self.name, e)
            result.set_exception(e)
            return

        on_success(value)
        result.set_result(value)

    def cancel(self) -> None:
        with self._lock:
            call, self._call = self._call, None
        if call is not None:
            call.cancel()


class ProfileService:
    """Loads the authorized user's profile from /me."""

    def __init__(self, config: UnsplashConfig, storage: TokenStorage,
                 transport: Transport, context: CallbackContext):
        self.config = config
        self.profile: Optional[Profile] = None
        self._request = _LatestRequest("ProfileService", storage, transport, context)

    def fetch_profile(self) -> "Future[Profile]":
        """Fetch the profile, cancelling any fetch still in flight."""
        return self._request.get(
            self.config.api_url("me"),
            lambda body: profile_from_json(decode_json(body)),
            self._store,
        )

    def _store(self, profile: Profile) -> None:
        self.profile = profile

    def reset(self) -> None:
        self._request.cancel()
        self.profile = None


class ProfileImageService:
    """Loads the small avatar URL of a user and announces changes."""

    def __init__(self, config: UnsplashConfig, storage: TokenStorage,
                 transport: Transport, context: CallbackContext):
        self.config = config
        self.avatar_url: Optional[str] = None
        self.did_change: EventChannel[AvatarChanged] = EventChannel("ProfileImageService.did_change")
        self._request = _LatestRequest("ProfileImageService", storage, transport, context)

    def fetch_profile_image_url(self, username: str) -> "Future[str]":
        """Fetch the avatar URL of a user.

        Args:
            username: Unsplash username

        Returns:
            Future resolved with the small profile image URL
        """
        return self._request.get(
            self.config.api_url(f"users/{username}"),
            lambda body: avatar_url_from_json(decode_json(body)),
            self._store,
        )

    def _store(self, url: str) -> None:
        self.avatar_url = url
        self.did_change.publish(AvatarChanged(url=url))

    def reset(self) -> None:
        self._request.cancel()
        self.avatar_url = None
