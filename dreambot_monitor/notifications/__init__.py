"""
Notification package: message formatting and webhook delivery.
"""

from .formatter import (
    MESSAGE_FORMATS,
    format_duration,
    format_event,
    format_message,
    sanitize_discord_message,
)
from .webhook import WebhookDispatcher

__all__ = [
    "MESSAGE_FORMATS",
    "format_duration",
    "format_event",
    "format_message",
    "sanitize_discord_message",
    "WebhookDispatcher",
]
