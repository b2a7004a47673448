"""Configuration for unit tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Capture debug logs from image_feed in every unit test."""
    caplog.set_level(logging.DEBUG, logger="image_feed")
    yield
