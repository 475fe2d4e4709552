"""
Log line parser module for classifying DreamBot log output into events.
"""

from .events import (
    BreakEnded,
    BreakStarted,
    ChatDetected,
    ChatResponded,
    Died,
    EventKind,
    LevelUp,
    LogEvent,
    NO_CHAT_FOUND,
    QuestCompleted,
    ValuableDropped,
)
from .patterns import LOG_PATTERNS, PatternRule, PatternRuleSet

__all__ = [
    "EventKind",
    "LogEvent",
    "ChatDetected",
    "ChatResponded",
    "LevelUp",
    "QuestCompleted",
    "BreakStarted",
    "BreakEnded",
    "Died",
    "ValuableDropped",
    "NO_CHAT_FOUND",
    "LOG_PATTERNS",
    "PatternRule",
    "PatternRuleSet",
]
