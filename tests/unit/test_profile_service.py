"""Unit tests for profile and avatar lookups."""

import pytest

from image_feed.auth.token_storage import MemoryTokenStorage
from image_feed.models import (
    DecodingError,
    HTTPStatusError,
    MissingCredentialError,
    Profile,
    TransportError,
)
from image_feed.services.profile_service import ProfileImageService, ProfileService
from image_feed.utils.events import AvatarChanged


@pytest.fixture
def profile_service(config, storage, transport, context):
    return ProfileService(config, storage, transport, context)


@pytest.fixture
def image_service(config, storage, transport, context):
    return ProfileImageService(config, storage, transport, context)


def test_fetch_profile(profile_service, transport):
    """Test loading and storing the profile."""
    result = profile_service.fetch_profile()

    request = transport.requests[0]
    assert request.method == "GET"
    assert request.url == "https://api.unsplash.com/me"
    assert request.headers["authorization"] == "Bearer test_token"

    transport.respond(0, {"username": "jdoe", "first_name": "Jane", "last_name": "Doe"})

    expected = Profile(username="jdoe", name="Jane Doe", login_name="@jdoe", bio=None)
    assert result.result(timeout=0) == expected
    assert profile_service.profile == expected


def test_new_profile_fetch_cancels_previous(profile_service, transport):
    """Test that only the latest profile request is applied."""
    first = profile_service.fetch_profile()
    second = profile_service.fetch_profile()

    assert transport.calls[0].cancelled()
    assert first.cancelled()

    transport.respond(1, {"username": "jdoe"})
    assert second.result(timeout=0).username == "jdoe"


def test_fetch_profile_failure(profile_service, transport):
    """Test that errors are surfaced and nothing is stored."""
    result = profile_service.fetch_profile()
    transport.respond(0, b"unauthorized", status_code=401)

    assert isinstance(result.exception(timeout=0), HTTPStatusError)
    assert profile_service.profile is None


def test_fetch_profile_without_token(config, transport, context):
    service = ProfileService(config, MemoryTokenStorage(), transport, context)

    result = service.fetch_profile()

    assert isinstance(result.exception(timeout=0), MissingCredentialError)
    assert transport.calls == []


def test_fetch_profile_image_url(image_service, transport):
    """Test loading the avatar URL and announcing it."""
    received = []
    image_service.did_change.subscribe(received.append)

    result = image_service.fetch_profile_image_url("jdoe")

    assert transport.requests[0].url == "https://api.unsplash.com/users/jdoe"

    transport.respond(0, {"profile_image": {"small": "https://img/s"}})

    assert result.result(timeout=0) == "https://img/s"
    assert image_service.avatar_url == "https://img/s"
    assert received == [AvatarChanged(url="https://img/s")]


def test_fetch_profile_image_url_bad_payload(image_service, transport):
    """Test that a payload without profile_image fails without an event."""
    received = []
    image_service.did_change.subscribe(received.append)

    result = image_service.fetch_profile_image_url("jdoe")
    transport.respond(0, {"username": "jdoe"})

    assert isinstance(result.exception(timeout=0), DecodingError)
    assert received == []


def test_reset(profile_service, image_service, transport):
    """Test that reset cancels requests and forgets cached values."""
    profile_service.profile = Profile(username="a", name="", login_name="@a")
    image_service.avatar_url = "https://img/s"
    profile_service.fetch_profile()

    profile_service.reset()
    image_service.reset()

    assert transport.calls[0].cancelled()
    assert profile_service.profile is None
    assert image_service.avatar_url is None


def test_fetch_profile_with_raising_transport(config, storage, context, mocker):
    """Test that a request that cannot start fails the future."""
    transport = mocker.Mock()
    transport.execute.side_effect = RuntimeError("transport closed")
    service = ProfileService(config, storage, transport, context)

    result = service.fetch_profile()

    assert isinstance(result.exception(timeout=0), TransportError)
    assert service.profile is None
