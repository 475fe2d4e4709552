"""
Runtime settings for the DreamBot log monitor.

Handles environment variables for polling, webhook delivery and logging.
The bot/webhook mapping itself lives in the monitor configuration file, see
``loader.py``.
"""

import os
import logging
from typing import Optional, List
from dataclasses import dataclass, field


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


@dataclass
class WatcherSettings:
    """Directory watcher settings."""

    poll_interval: float = 1.0
    log_suffix: str = ".log"
    ignored_patterns: List[str] = field(default_factory=lambda: ["*.tmp", "*.bak", "*.old"])

    @classmethod
    def from_env(cls) -> "WatcherSettings":
        """Load watcher settings from environment variables."""
        return cls(
            poll_interval=float(os.getenv("MONITOR_POLL_INTERVAL", "1.0")),
            log_suffix=os.getenv("MONITOR_LOG_SUFFIX", ".log"),
        )


@dataclass
class WebhookSettings:
    """Webhook delivery settings."""

    # Display name override sent with every message; Discord uses the
    # webhook's own name when this is empty
    username: str = ""

    # None keeps the HTTP client's default timeout
    timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "WebhookSettings":
        """Load webhook settings from environment variables."""
        return cls(
            username=os.getenv("WEBHOOK_USERNAME", ""),
            timeout=_optional_float(os.getenv("WEBHOOK_TIMEOUT")),
        )


@dataclass
class ApplicationSettings:
    """Main application settings container."""

    watcher: WatcherSettings
    webhook: WebhookSettings

    # Explicit monitor config file; searched for when unset
    config_path: Optional[str] = None

    # Runtime settings
    log_level: str = "info"
    environment: str = "development"
    debug: bool = False

    @classmethod
    def from_env(cls) -> "ApplicationSettings":
        """Load all settings from environment variables."""
        return cls(
            watcher=WatcherSettings.from_env(),
            webhook=WebhookSettings.from_env(),
            config_path=os.getenv("MONITOR_CONFIG") or None,
            log_level=os.getenv("LOG_LEVEL", "info").lower(),
            environment=os.getenv("ENVIRONMENT", "development"),
            debug=os.getenv("DEBUG", "false").lower() == "true",
        )

    def setup_logging(self, verbose: bool = False):
        """
        Configure logging based on settings.

        Handlers installed earlier (the CLI's rich handler) are kept; only the
        root level is applied to them. ``verbose`` forces DEBUG like ``debug``.
        """
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        if self.debug or verbose:
            level = logging.DEBUG

        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        logging.getLogger().setLevel(level)

        # One line per webhook request at INFO is too chatty
        logging.getLogger("httpx").setLevel(logging.WARNING)

    def validate(self):
        """Validate configuration settings."""
        errors = []

        if self.watcher.poll_interval <= 0:
            errors.append(f"Invalid poll interval: {self.watcher.poll_interval}")

        if not self.watcher.log_suffix:
            errors.append("Log suffix cannot be empty")

        if self.webhook.timeout is not None and self.webhook.timeout <= 0:
            errors.append(f"Invalid webhook timeout: {self.webhook.timeout}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    def log_configuration(self):
        """Log current configuration."""
        logger = logging.getLogger(__name__)

        logger.info("=== Monitor Settings ===")
        logger.info(f"Environment: {self.environment}")
        logger.info(f"Debug: {self.debug}")
        logger.info(f"Poll Interval: {self.watcher.poll_interval}s")
        logger.info(f"Log Suffix: {self.watcher.log_suffix}")
        logger.info(f"Webhook Timeout: {self.webhook.timeout or 'client default'}")
        logger.info(f"Config File: {self.config_path or 'auto-detect'}")
        logger.info("=== End Settings ===")


# Global settings instance
settings = ApplicationSettings.from_env()


def get_settings() -> ApplicationSettings:
    """Get the global settings instance."""
    return settings


def reload_settings() -> ApplicationSettings:
    """Reload settings from environment variables."""
    global settings
    settings = ApplicationSettings.from_env()
    return settings
