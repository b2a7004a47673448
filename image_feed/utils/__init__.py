"""Utility helpers for Image Feed."""

from .dispatch import CallbackContext, ImmediateContext, SerialContext
from .events import AvatarChanged, EventChannel, FeedChanged, Subscription

__all__ = [
    "CallbackContext",
    "ImmediateContext",
    "SerialContext",
    "AvatarChanged",
    "EventChannel",
    "FeedChanged",
    "Subscription",
]
