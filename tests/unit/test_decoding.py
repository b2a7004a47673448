"""Unit tests for response decoding."""

from concurrent.futures import Future
from datetime import datetime, timedelta, timezone

import pytest

from image_feed.models import (
    DecodingError,
    HTTPStatusError,
    InvalidResponseError,
    Profile,
    TransportError,
)
from image_feed.network.decoding import (
    access_token_from_json,
    authorization_headers,
    avatar_url_from_json,
    decode_json,
    parse_timestamp,
    photo_from_json,
    profile_from_json,
    response_from,
)
from image_feed.network.transport import HttpResponse


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-03-05T10:20:30-05:00", datetime(2024, 3, 5, 10, 20, 30, tzinfo=timezone(timedelta(hours=-5)))),
        ("2024-03-05T10:20:30.123+02:00", datetime(2024, 3, 5, 10, 20, 30, 123000, tzinfo=timezone(timedelta(hours=2)))),
        ("2024-03-05T10:20:30Z", datetime(2024, 3, 5, 10, 20, 30, tzinfo=timezone.utc)),
        ("2024-03-05", None),
        ("not a date", None),
        ("", None),
        (None, None),
        (12345, None),
    ],
)
def test_parse_timestamp(value, expected):
    """Test timestamp parsing with fallback to None."""
    assert parse_timestamp(value) == expected


def test_photo_from_json_optional_fields(make_photo_record):
    """Test that description, date and liked flag are optional."""
    record = make_photo_record("abc")
    del record["created_at"]
    del record["liked_by_user"]
    record["description"] = None

    photo = photo_from_json(record)

    assert photo.created_at is None
    assert photo.description is None
    assert photo.is_liked is False


@pytest.mark.parametrize("missing", ["id", "width", "urls"])
def test_photo_from_json_missing_required(make_photo_record, missing):
    """Test that missing required fields raise DecodingError."""
    record = make_photo_record("abc")
    del record[missing]

    with pytest.raises(DecodingError):
        photo_from_json(record)


def test_photo_from_json_missing_url_variant(make_photo_record):
    """Test that a missing URL variant raises DecodingError."""
    record = make_photo_record("abc")
    del record["urls"]["regular"]

    with pytest.raises(DecodingError):
        photo_from_json(record)


@pytest.mark.parametrize("body", [b"", b"{", b"\xff\xfe"])
def test_decode_json_invalid(body):
    """Test that unparseable bodies raise InvalidResponseError."""
    with pytest.raises(InvalidResponseError):
        decode_json(body)


def test_access_token_from_json():
    """Test extracting the access token."""
    assert access_token_from_json({"access_token": "tok", "scope": "public"}) == "tok"
    with pytest.raises(DecodingError):
        access_token_from_json({"access_token": 42})
    with pytest.raises(DecodingError):
        access_token_from_json(["tok"])


def test_profile_from_json():
    """Test building a profile from /me."""
    profile = profile_from_json(
        {"username": "jdoe", "first_name": "Jane", "last_name": None, "bio": "Hi"}
    )

    assert profile == Profile(username="jdoe", name="Jane", login_name="@jdoe", bio="Hi")


def test_profile_from_json_full_name():
    """Test joining first and last names."""
    profile = profile_from_json({"username": "jdoe", "first_name": "Jane", "last_name": "Doe"})

    assert profile.name == "Jane Doe"
    assert profile.bio is None


def test_profile_from_json_requires_username():
    with pytest.raises(DecodingError):
        profile_from_json({"first_name": "Jane"})


def test_avatar_url_from_json():
    """Test extracting profile_image.small."""
    payload = {"profile_image": {"small": "https://img/s", "large": "https://img/l"}}

    assert avatar_url_from_json(payload) == "https://img/s"
    with pytest.raises(DecodingError):
        avatar_url_from_json({"profile_image": {}})
    with pytest.raises(DecodingError):
        avatar_url_from_json({"profile_image": {"small": None}})


def test_authorization_headers():
    """Test bearer headers."""
    headers = authorization_headers("tok")

    assert headers["authorization"] == "Bearer tok"
    assert headers["Accept"] == "application/json"


def test_response_from_success():
    call = Future()
    call.set_result(HttpResponse(body=b"[]", status_code=200))

    assert response_from(call).body == b"[]"


def test_response_from_status_error():
    """Test that non-2xx responses keep status and body."""
    call = Future()
    call.set_result(HttpResponse(body=b"nope", status_code=404))

    with pytest.raises(HTTPStatusError) as exc_info:
        response_from(call)
    assert exc_info.value.status_code == 404
    assert exc_info.value.body == b"nope"


def test_response_from_wraps_foreign_errors():
    """Test that unexpected exceptions become TransportError."""
    call = Future()
    call.set_exception(OSError("reset by peer"))

    with pytest.raises(TransportError):
        response_from(call)


def test_response_from_keeps_transport_errors():
    error = TransportError("timeout")
    call = Future()
    call.set_exception(error)

    with pytest.raises(TransportError) as exc_info:
        response_from(call)
    assert exc_info.value is error


def test_response_from_cancelled():
    call = Future()
    call.cancel()

    with pytest.raises(TransportError):
        response_from(call)
