"""Test configuration for pytest."""

import json
from concurrent.futures import Future
from typing import Any, Dict, List, Optional

import pytest

from image_feed.auth.token_storage import MemoryTokenStorage
from image_feed.config import UnsplashConfig
from image_feed.network.transport import HttpRequest, HttpResponse, Transport
from image_feed.utils.dispatch import ImmediateContext


def _encode(body: Any) -> bytes:
    return body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")


class FakeTransport(Transport):
    """Records requests and lets the test decide when and how each completes."""

    def __init__(self):
        self.requests: List[HttpRequest] = []
        self.calls: List[Future] = []
        self.queued: List[HttpResponse] = []

    def execute(self, request: HttpRequest) -> Future:
        call: Future = Future()
        self.requests.append(request)
        self.calls.append(call)
        if self.queued:
            call.set_result(self.queued.pop(0))
        return call

    def enqueue(self, body: Any = b"", status_code: int = 200) -> None:
        """Complete the next executed request immediately with this response."""
        self.queued.append(HttpResponse(body=_encode(body), status_code=status_code))

    def respond(self, index: int = -1, body: Any = b"", status_code: int = 200) -> None:
        self.calls[index].set_result(HttpResponse(body=_encode(body), status_code=status_code))

    def fail(self, index: int = -1, error: Optional[Exception] = None) -> None:
        self.calls[index].set_exception(error or ConnectionError("network down"))


@pytest.fixture
def config() -> UnsplashConfig:
    """Configuration with client credentials set."""
    return UnsplashConfig(access_key="test_access_key", secret_key="test_secret_key")


@pytest.fixture
def storage() -> MemoryTokenStorage:
    """Token storage holding a token."""
    return MemoryTokenStorage("test_token")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def context() -> ImmediateContext:
    return ImmediateContext()


@pytest.fixture
def make_photo_record():
    """Factory for photo records as returned by GET /photos."""

    def _make(photo_id: str, liked: bool = False, created_at: str = "2024-01-01T12:00:00-05:00"
              ) -> Dict[str, Any]:
        return {
            "id": photo_id,
            "created_at": created_at,
            "width": 4000,
            "height": 3000,
            "description": f"Photo {photo_id}",
            "liked_by_user": liked,
            "urls": {
                "raw": f"https://images.example/{photo_id}/raw",
                "full": f"https://images.example/{photo_id}/full",
                "regular": f"https://images.example/{photo_id}/regular",
                "small": f"https://images.example/{photo_id}/small",
                "thumb": f"https://images.example/{photo_id}/thumb",
            },
        }

    return _make


@pytest.fixture
def page_of(make_photo_record):
    """Factory for a page of photo records with ids prefix1..prefixN."""

    def _page(count: int = 10, prefix: str = "p", start: int = 1) -> List[Dict[str, Any]]:
        return [make_photo_record(f"{prefix}{i}") for i in range(start, start + count)]

    return _page
