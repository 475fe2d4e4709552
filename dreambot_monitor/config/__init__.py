"""
Configuration module for the DreamBot log monitor.

Provides runtime settings from the environment and the bot/webhook
configuration file.
"""

from .settings import (
    ApplicationSettings,
    WatcherSettings,
    WebhookSettings,
    get_settings,
    reload_settings,
    settings
)
from .models import BotConfig, MonitorConfig, ValidationResult, is_valid_webhook_url
from .loader import ConfigLoader, load_monitor_config
from .skills import SKILL_ICONS, get_skill_icon

__all__ = [
    "ApplicationSettings",
    "WatcherSettings",
    "WebhookSettings",
    "get_settings",
    "reload_settings",
    "settings",
    "BotConfig",
    "MonitorConfig",
    "ValidationResult",
    "is_valid_webhook_url",
    "ConfigLoader",
    "load_monitor_config",
    "SKILL_ICONS",
    "get_skill_icon",
]
