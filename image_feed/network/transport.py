"""HTTP transport used by the services."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Optional

import requests

from image_feed.models import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpRequest:
    """A single HTTP request."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)
    data: Optional[str] = None


@dataclass(frozen=True)
class HttpResponse:
    """Raw body and status code of a completed request."""
    body: bytes
    status_code: int

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport:
    """Executes requests asynchronously.

    The returned future reports exactly one outcome: an HttpResponse (for any
    status code), a TransportError, or cancellation. Cancelling the future
    cancels that call on a best-effort basis.
    """

    def execute(self, request: HttpRequest) -> "Future[HttpResponse]":
        raise NotImplementedError

    def close(self) -> None:
        """Release any resources held by the transport."""


def start_call(transport: Transport, request: HttpRequest) -> "Future[HttpResponse]":
    """Execute a request, reporting a failure to start it as a failed future.

    Services install their in-flight state before the call completes, so a
    transport that raises (for example after close()) must still produce a
    finished call for the normal completion path to clear that state.
    """
    try:
        return transport.execute(request)
    except Exception as e:
        logger.warning("Could not start %s %s: %s", request.method, request.url, e)
        error = e if isinstance(e, TransportError) else TransportError(str(e))
        call: Future = Future()
        call.set_exception(error)
        return call


class RequestsTransport(Transport):
    """Transport backed by a requests.Session and a worker pool."""

    def __init__(self, timeout: float = 30.0, max_workers: int = 4,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="image-feed-http")

    def execute(self, request: HttpRequest) -> "Future[HttpResponse]":
        return self._executor.submit(self._send, request)

    def _send(self, request: HttpRequest) -> HttpResponse:
        logger.debug("%s %s params=%s", request.method, request.url, request.params)
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=request.headers,
                params=request.params or None,
                data=request.data,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Request %s %s failed: %s", request.method, request.url, e)
            raise TransportError(str(e)) from e

        logger.debug("%s %s -> %d", request.method, request.url, response.status_code)
        return HttpResponse(body=response.content, status_code=response.status_code)

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.session.close()
