"""
Pydantic models for the monitor configuration file.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


def is_valid_webhook_url(url: str) -> bool:
    """
    Check if a string is a Discord webhook URL.

    Args:
        url: URL to check

    Returns:
        True for ``https://discord.com/api/webhooks/<id>/<token>`` style URLs
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    return (
        parsed.hostname == "discord.com"
        and parsed.path.startswith("/api/webhooks/")
        and len(parsed.path.split("/")) >= 4
    )


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


@dataclass
class ValidationResult:
    """Outcome of validating a monitor configuration."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def raise_for_errors(self):
        """Raise if the configuration cannot be used."""
        if self.errors:
            raise ValueError(f"Configuration validation failed: {', '.join(self.errors)}")


class BotConfig(BaseModel):
    """Per-bot destination settings."""

    webhook_url: Optional[str] = Field(None, description="Discord webhook for this bot's notifications")
    launch_command: Optional[str] = Field(None, description="Command used to launch the bot client")

    @field_validator("webhook_url", "launch_command", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class MonitorConfig(BaseModel):
    """Monitor configuration: where the logs live and where notifications go."""

    base_log_dir: str = Field("", description="Root directory with one sub-directory per bot")
    bot_chat_webhook_url: Optional[str] = Field(None, description="Webhook for chat and response notifications")
    bots: Dict[str, BotConfig] = Field(default_factory=dict)

    @field_validator("bot_chat_webhook_url", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def get_destination_url(self, bot_name: str) -> Optional[str]:
        """
        Look up the webhook URL for a bot.

        Args:
            bot_name: Bot identity (log directory name)

        Returns:
            Webhook URL, or None when the bot is unknown or has no webhook
        """
        bot = self.bots.get(bot_name)
        if bot is None:
            return None
        return bot.webhook_url

    def validate_config(self) -> ValidationResult:
        """Validate the configuration, collecting every problem found."""
        result = ValidationResult()

        if not self.base_log_dir or not self.base_log_dir.strip():
            result.errors.append("BASE_LOG_DIR is required")

        if self.bot_chat_webhook_url and not is_valid_webhook_url(self.bot_chat_webhook_url):
            result.errors.append("BOT_CHAT_WEBHOOK_URL must be a valid Discord webhook URL")

        if not self.bots:
            result.warnings.append(
                "No bots configured - level up and quest notifications will not work"
            )

        for bot_name, bot in self.bots.items():
            if bot.webhook_url and not is_valid_webhook_url(bot.webhook_url):
                result.errors.append(f'Invalid webhook URL for bot "{bot_name}"')

        return result

    def summary(self) -> Dict[str, Any]:
        """Get a configuration summary that is safe to log."""
        return {
            "base_log_dir": self.base_log_dir,
            "bot_chat_webhook_configured": bool(self.bot_chat_webhook_url),
            "bot_count": len(self.bots),
            "bot_names": sorted(self.bots),
        }
