"""
Message formatting for Discord notifications.

Every function here is pure: a log event goes in, display text comes out.
"""

import re
from typing import Any, Dict, Optional

from ..config.skills import get_skill_icon
from ..parser.events import (
    BreakStarted,
    ChatDetected,
    ChatResponded,
    EventKind,
    LevelUp,
    LogEvent,
    NO_CHAT_FOUND,
    QuestCompleted,
    ValuableDropped,
)

# Template ids are the event kinds
MESSAGE_FORMATS: Dict[EventKind, str] = {
    EventKind.CHAT: "💬 **Chat Detected:** {chat}\n**Bot:** {bot}\n**Status:** No response given",
    EventKind.RESPONSE: "🤖 **Bot:** {bot}\n📩 **Chat:** {chat}\n💬 **Response:** {response}",
    EventKind.LEVEL_UP: "📈{skill_icon} **{skill}** has leveled up to **{level}**\n**Bot:** {bot}",
    EventKind.QUEST: "🏆 **Quest Complete!**\n**Bot:** {bot}\n**Quest:** {quest}",
    EventKind.BREAK_START: "💤 **Bot Break Started!**\n**Bot:** {bot}\n**Break Duration:** {duration}",
    EventKind.BREAK_OVER: "⏰ **Bot Break Finished!**\n**Bot:** {bot}",
    EventKind.DEATH: "💀 **Bot Died!**\n**Bot:** {bot}",
    EventKind.VALUABLE_DROP: "💰 **Valuable Drop!**\n**Bot:** {bot}\n**Item:** {item}\n**Value:** {coins} coins",
}

PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")

# Characters with meaning in Discord markdown, backslash first
_DISCORD_SPECIAL = ("\\", "`", "*", "_", "~", ">", "|")


def format_message(template_id: EventKind, variables: Dict[str, Any]) -> str:
    """
    Fill a message template's named placeholders.

    Placeholders without a value are left as they are.

    Args:
        template_id: Which template to use
        variables: Placeholder values

    Returns:
        Formatted message
    """
    template = MESSAGE_FORMATS[template_id]

    def substitute(match: re.Match) -> str:
        value = variables.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(substitute, template)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def format_duration(milliseconds: int) -> str:
    """
    Convert milliseconds to a human-readable duration.

    Uses the largest non-zero unit plus the next one down when that is
    non-zero as well, e.g. ``125000`` -> ``"2 minutes 5 seconds"``.

    Args:
        milliseconds: Duration in milliseconds

    Returns:
        Human-readable duration
    """
    total_seconds = max(int(milliseconds), 0) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)

    for major, major_unit, minor, minor_unit in (
        (days, "day", hours, "hour"),
        (hours, "hour", minutes, "minute"),
        (minutes, "minute", seconds, "second"),
    ):
        if major > 0:
            if minor > 0:
                return f"{_plural(major, major_unit)} {_plural(minor, minor_unit)}"
            return _plural(major, major_unit)

    return _plural(seconds, "second")


def format_coins(value: int) -> str:
    """Format a coin amount with thousands separators."""
    return f"{value:,}"


def sanitize_discord_message(content: str) -> str:
    """
    Escape Discord markdown in user-controlled text.

    Args:
        content: Raw text, e.g. a chat line typed by another player

    Returns:
        Text that renders literally in Discord
    """
    for char in _DISCORD_SPECIAL:
        content = content.replace(char, "\\" + char)
    return content


def format_event(event: LogEvent, bot_name: str, reply_to: Optional[str] = None) -> str:
    """
    Render a log event as notification text.

    Args:
        event: Event to render
        bot_name: Bot identity the event came from
        reply_to: Chat message a response answers; falls back to the
            event's own ``reply_to`` and then to a "no chat found" marker

    Returns:
        Notification text
    """
    variables: Dict[str, Any] = {"bot": bot_name}

    if isinstance(event, ChatDetected):
        variables["chat"] = sanitize_discord_message(event.message)
    elif isinstance(event, ChatResponded):
        chat = reply_to or event.reply_to or NO_CHAT_FOUND
        variables["chat"] = sanitize_discord_message(chat)
        variables["response"] = sanitize_discord_message(event.message)
    elif isinstance(event, LevelUp):
        variables["skill_icon"] = get_skill_icon(event.skill)
        variables["skill"] = event.skill
        variables["level"] = event.new_level
    elif isinstance(event, QuestCompleted):
        variables["quest"] = event.quest_name
    elif isinstance(event, BreakStarted):
        variables["duration"] = format_duration(event.duration_ms)
    elif isinstance(event, ValuableDropped):
        variables["item"] = event.item_name
        variables["coins"] = format_coins(event.coin_value)

    return format_message(event.kind, variables)
