"""
Configuration loader for the monitor's bot/webhook configuration file.

Reads YAML (or the desktop app's JSON ``config.json``, JSON being a YAML
subset) and converts older layouts of the bot section to the current one.
"""

import yaml
import logging
from pathlib import Path
from typing import Dict, Optional, Any

from .models import MonitorConfig

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads monitor configuration from YAML/JSON files."""

    @staticmethod
    def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from a YAML or JSON file.

        Args:
            config_path: Path to custom config file. If None, looks for:
                        1. dreambot_monitor.yaml in current directory
                        2. config/dreambot_monitor.yaml
                        3. ~/.dreambot_monitor/config.yaml
                        4. config.json in current directory

        Returns:
            Configuration dictionary
        """
        # Default search paths
        search_paths = [
            Path("dreambot_monitor.yaml"),
            Path("config/dreambot_monitor.yaml"),
            Path.home() / ".dreambot_monitor" / "config.yaml",
            Path("config.json"),
        ]

        # Add custom path if provided
        if config_path:
            search_paths.insert(0, Path(config_path))

        # Try each path
        for path in search_paths:
            if path.exists():
                try:
                    with open(path, "r", encoding="utf-8") as f:
                        config = yaml.safe_load(f) or {}
                        logger.info(f"Loaded configuration from {path}")
                        return config
                except (OSError, yaml.YAMLError) as e:
                    logger.error(f"Failed to load config from {path}: {e}")

        # No config file found, return empty dict
        logger.debug("No configuration file found, using defaults")
        return {}

    @staticmethod
    def convert_bot_config(bot_config: Dict[str, Any]) -> Dict[str, Dict[str, str]]:
        """
        Convert any supported bot section layout to the current one.

        Supported entries:
            "BotName": "https://discord.com/api/webhooks/..."
            "BotName": {"webhook": "...", "launchCLI": "..."}
            "BotName": {"webhookUrl": "...", "launchCLI": "..."}
            "BotName": {"webhook_url": "...", "launch_command": "..."}

        Args:
            bot_config: Raw bot section from the config file

        Returns:
            Mapping of bot name to ``{"webhook_url", "launch_command"}``
        """
        converted = {}

        for bot_name, bot_data in (bot_config or {}).items():
            bot_name = str(bot_name)

            if bot_data is None or isinstance(bot_data, str):
                converted[bot_name] = {
                    "webhook_url": bot_data or "",
                    "launch_command": "",
                }
            elif isinstance(bot_data, dict):
                webhook_url = None
                for key in ("webhook_url", "webhookUrl", "webhook"):
                    if key in bot_data:
                        webhook_url = bot_data[key] or ""
                        break

                if webhook_url is None:
                    logger.warning(f"Skipping invalid bot configuration for {bot_name}: {bot_data}")
                    continue

                converted[bot_name] = {
                    "webhook_url": webhook_url,
                    "launch_command": bot_data.get("launch_command") or bot_data.get("launchCLI") or "",
                }
            else:
                logger.warning(f"Skipping invalid bot configuration for {bot_name}: {bot_data!r}")

        return converted

    @classmethod
    def build_config(cls, raw: Dict[str, Any]) -> MonitorConfig:
        """
        Build a MonitorConfig from a raw configuration dictionary.

        Accepts both the desktop app's upper-case keys and snake_case keys.

        Args:
            raw: Configuration dictionary as loaded from file

        Returns:
            Parsed monitor configuration
        """
        bots: Dict[str, Any] = {}
        # Oldest layout first so newer sections win on name clashes
        for key in ("BOT_NAMES_WITH_DISCORD_WEBHOOKS", "BOT_CONFIG", "bots"):
            if raw.get(key):
                bots.update(cls.convert_bot_config(raw[key]))

        base_log_dir = raw.get("base_log_dir") or raw.get("BASE_LOG_DIR") or ""
        chat_url = raw.get("bot_chat_webhook_url") or raw.get("BOT_CHAT_WEBHOOK_URL")

        return MonitorConfig(
            base_log_dir=str(base_log_dir),
            bot_chat_webhook_url=chat_url,
            bots=bots,
        )


def load_monitor_config(config_path: Optional[str] = None) -> MonitorConfig:
    """
    Load and parse the monitor configuration in one step.

    Args:
        config_path: Optional path to a config file

    Returns:
        Parsed monitor configuration (empty when no file was found)
    """
    loader = ConfigLoader()
    raw = loader.load_config(config_path)
    config = loader.build_config(raw)

    validation = config.validate_config()
    for warning in validation.warnings:
        logger.warning(warning)

    return config
