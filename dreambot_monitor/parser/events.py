"""
Event classes for DreamBot log lines.

Every recognised log line becomes exactly one of the dataclasses below. They
are short-lived: built from a single matched line, handed to the formatter
and the dispatcher, then dropped.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

# Stands in for the chat message when a response has nothing to pair with
NO_CHAT_FOUND = "(No chat message found)"


class EventKind(Enum):
    """Enumeration of recognised log line categories, in matching priority order."""

    CHAT = "chat"
    RESPONSE = "response"
    LEVEL_UP = "level_up"
    QUEST = "quest"
    BREAK_START = "break_start"
    BREAK_OVER = "break_over"
    DEATH = "death"
    VALUABLE_DROP = "valuable_drop"

    @property
    def label(self) -> str:
        """Human-readable name used in log messages."""
        return self.value.replace("_", " ")


class LogEvent:
    """Base class for all log events."""

    kind: ClassVar[EventKind]

    @property
    def is_chat(self) -> bool:
        """Chat events go to the general chat destination, not the bot's own."""
        return self.kind in (EventKind.CHAT, EventKind.RESPONSE)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for display or serialisation."""
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


@dataclass(frozen=True)
class ChatDetected(LogEvent):
    """Another player spoke to the bot."""

    kind: ClassVar[EventKind] = EventKind.CHAT

    message: str


@dataclass(frozen=True)
class ChatResponded(LogEvent):
    """
    The bot typed a reply.

    ``reply_to`` is not part of the line itself; the line processor fills it
    in from the last chat message seen in the same file.
    """

    kind: ClassVar[EventKind] = EventKind.RESPONSE

    message: str
    reply_to: Optional[str] = None


@dataclass(frozen=True)
class LevelUp(LogEvent):
    """A skill gained a level."""

    kind: ClassVar[EventKind] = EventKind.LEVEL_UP

    skill: str
    new_level: int


@dataclass(frozen=True)
class QuestCompleted(LogEvent):
    kind: ClassVar[EventKind] = EventKind.QUEST

    quest_name: str


@dataclass(frozen=True)
class BreakStarted(LogEvent):
    """The script went on a break for ``duration_ms`` milliseconds."""

    kind: ClassVar[EventKind] = EventKind.BREAK_START

    duration_ms: int


@dataclass(frozen=True)
class BreakEnded(LogEvent):
    kind: ClassVar[EventKind] = EventKind.BREAK_OVER


@dataclass(frozen=True)
class Died(LogEvent):
    kind: ClassVar[EventKind] = EventKind.DEATH


@dataclass(frozen=True)
class ValuableDropped(LogEvent):
    """A drop worth announcing. ``coin_value`` is already a plain integer."""

    kind: ClassVar[EventKind] = EventKind.VALUABLE_DROP

    item_name: str
    coin_value: int
