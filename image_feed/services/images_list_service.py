"""Paginated photo feed with like toggling."""

import logging
import threading
from concurrent.futures import Future
from functools import partial
from typing import Dict, List, Optional, Tuple

from image_feed.auth.token_storage import TokenStorage
from image_feed.config import UnsplashConfig
from image_feed.models import ImageFeedError, MissingCredentialError, Photo
from image_feed.network.decoding import (
    authorization_headers,
    decode_json,
    photos_from_json,
    response_from,
)
from image_feed.network.transport import HttpRequest, Transport, start_call
from image_feed.utils.dispatch import CallbackContext
from image_feed.utils.events import EventChannel, FeedChanged

logger = logging.getLogger(__name__)


class _Operation:
    """A transport call and the future handed back to the caller for it."""

    def __init__(self, result: Future):
        self.result = result
        self.call: Optional[Future] = None

    def cancel_call(self) -> None:
        if self.call is not None:
            self.call.cancel()


class ImagesListService:
    """In-memory photo feed filled one page at a time.

    Only one page request is in flight at a time, and at most one like
    request per photo. Changes are announced on ``did_change``: a
    FeedChanged without an index after a page is appended or the feed is
    reset, and with the photo's index after a like toggle.
    """

    def __init__(self, config: UnsplashConfig, storage: TokenStorage,
                 transport: Transport, context: CallbackContext):
        self.config = config
        self.storage = storage
        self.transport = transport
        self.context = context
        self.did_change: EventChannel[FeedChanged] = EventChannel("ImagesListService.did_change")

        self._lock = threading.RLock()
        self._photos: List[Photo] = []
        self._last_loaded_page: Optional[int] = None
        self._paging: Optional[_Operation] = None
        self._likes: Dict[str, _Operation] = {}

    @property
    def photos(self) -> Tuple[Photo, ...]:
        with self._lock:
            return tuple(self._photos)

    @property
    def last_loaded_page(self) -> Optional[int]:
        with self._lock:
            return self._last_loaded_page

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._paging is not None

    def pending_likes(self) -> List[str]:
        """Ids of photos with a like request in flight."""
        with self._lock:
            return list(self._likes)

    def index_of(self, photo_id: str) -> Optional[int]:
        with self._lock:
            return self._index_of(photo_id)

    def fetch_next_page(self) -> Optional["Future[List[Photo]]"]:
        """Request the page after the last loaded one.

        While a page request is in flight the same future is returned and no
        new request is made.

        Returns:
            Future resolved with the photos of the new page, or None if no
            token is stored
        """
        with self._lock:
            if self._paging is not None:
                return self._paging.result

            token = self.storage.token
            if not token:
                logger.error("Cannot fetch photos: no OAuth token stored")
                return None

            next_page = (self._last_loaded_page or 0) + 1
            request = HttpRequest(
                method="GET",
                url=self.config.api_url("photos"),
                headers=authorization_headers(token),
                params={"page": str(next_page), "per_page": str(self.config.per_page)},
            )

            operation = _Operation(Future())
            self._paging = operation
            operation.call = start_call(self.transport, request)

        logger.debug("Fetching photos page %d", next_page)
        operation.call.add_done_callback(
            lambda call: self.context.dispatch(
                partial(self._complete_page, operation, next_page, call)
            )
        )
        return operation.result

    def _complete_page(self, operation: _Operation, page: int, call: Future) -> None:
        with self._lock:
            if self._paging is not operation:
                logger.debug("Discarding stale response for page %d", page)
                return
            self._paging = None

            try:
                new_photos = photos_from_json(decode_json(response_from(call).body))
            except ImageFeedError as e:
                logger.warning("Dropping photos page %d: %s", page, e)
                failure = e
            else:
                self._photos.extend(new_photos)
                self._last_loaded_page = page
                failure = None

        if failure is not None:
            _settle(operation.result, error=failure)
            return

        logger.info("Loaded page %d with %d photo(s)", page, len(new_photos))
        self.did_change.publish(FeedChanged())
        _settle(operation.result, value=new_photos)

    def change_like(self, photo_id: str, is_like: bool) -> "Future[None]":
        """Like or unlike a photo.

        A second call for a photo whose like request is still in flight
        succeeds at once without another request. On success the photo's
        is_liked flag is flipped.

        Args:
            photo_id: Id of the photo
            is_like: True to like (POST), False to unlike (DELETE)

        Returns:
            Future resolved with None, or failed with the request error
        """
        with self._lock:
            if photo_id in self._likes:
                logger.debug("Like request for %s already in flight", photo_id)
                return self._resolved(None)

            token = self.storage.token
            if not token:
                logger.error("Cannot change like for %s: no OAuth token stored", photo_id)
                return self._resolved(error=MissingCredentialError("No OAuth token stored"))

            request = HttpRequest(
                method="POST" if is_like else "DELETE",
                url=self.config.api_url(f"photos/{photo_id}/like"),
                headers=authorization_headers(token),
            )

            operation = _Operation(Future())
            self._likes[photo_id] = operation
            operation.call = start_call(self.transport, request)

        operation.call.add_done_callback(
            lambda call: self.context.dispatch(
                partial(self._complete_like, operation, photo_id, call)
            )
        )
        return operation.result

    def _complete_like(self, operation: _Operation, photo_id: str, call: Future) -> None:
        index = None
        with self._lock:
            if self._likes.get(photo_id) is not operation:
                logger.debug("Discarding stale like response for %s", photo_id)
                return
            del self._likes[photo_id]

            try:
                response_from(call)
            except ImageFeedError as e:
                logger.warning("Changing like for %s failed: %s", photo_id, e)
                failure = e
            else:
                failure = None
                index = self._index_of(photo_id)
                if index is not None:
                    self._photos[index] = self._photos[index].with_like_toggled()

        if failure is not None:
            _settle(operation.result, error=failure)
            return

        if index is not None:
            self.did_change.publish(FeedChanged(index=index))
        _settle(operation.result, value=None)

    def reset(self) -> None:
        """Cancel all requests and empty the feed."""
        with self._lock:
            operations = list(self._likes.values())
            if self._paging is not None:
                operations.append(self._paging)
            self._paging = None
            self._likes.clear()
            self._photos.clear()
            self._last_loaded_page = None

        for operation in operations:
            operation.cancel_call()

        logger.info("Photo feed reset")
        self.context.dispatch(partial(self._finish_reset, operations))

    def _finish_reset(self, operations: List[_Operation]) -> None:
        for operation in operations:
            operation.result.cancel()
        self.did_change.publish(FeedChanged())

    def _index_of(self, photo_id: str) -> Optional[int]:
        for index, photo in enumerate(self._photos):
            if photo.id == photo_id:
                return index
        return None

    def _resolved(self, value=None, error: Optional[Exception] = None) -> Future:
        result: Future = Future()
        self.context.dispatch(partial(_settle, result, value, error))
        return result


def _settle(result: Future, value=None, error: Optional[Exception] = None) -> None:
    if result.done():
        return
    if error is not None:
        result.set_exception(error)
    else:
        result.set_result(value)
