"""
Pattern rule set for classifying DreamBot log lines.
"""

import logging
import re
from dataclasses import dataclass
from re import Match, Pattern
from typing import Callable, Dict, List, Optional

from .events import (
    BreakEnded,
    BreakStarted,
    ChatDetected,
    ChatResponded,
    Died,
    EventKind,
    LevelUp,
    LogEvent,
    QuestCompleted,
    ValuableDropped,
)

logger = logging.getLogger(__name__)


# Level-up and quest text comes straight from the game client, whose casing
# varies; everything else is written by the script and is matched exactly.
LOG_PATTERNS: Dict[EventKind, Pattern[str]] = {
    EventKind.CHAT: re.compile(r"\[INFO\] CHAT: (.+)"),
    EventKind.RESPONSE: re.compile(r"\[INFO\] SLOWLY TYPING RESPONSE: (.+)"),
    EventKind.LEVEL_UP: re.compile(
        r"you've just advanced your (.+?) level\. You are now level (\d+)", re.IGNORECASE
    ),
    EventKind.QUEST: re.compile(r"completed a quest: <col=.+?>(.+?)</col>", re.IGNORECASE),
    EventKind.BREAK_START: re.compile(r"\[(?:SCRIPT|INFO)\] Break length (\d+)"),
    EventKind.BREAK_OVER: re.compile(r"\[(?:SCRIPT|INFO)\] Break over"),
    EventKind.DEATH: re.compile(r"Oh dear, you are dead!"),
    EventKind.VALUABLE_DROP: re.compile(
        r"\[INFO\] \[GAME\] <col=.+?>Valuable drop: (.+?) \((\d+(?:,\d+)*) coins\)</col>"
    ),
}


def parse_int(value: str) -> int:
    """
    Parse an integer capture, allowing thousands separators.

    Raises:
        ValueError: If the capture is not a number
    """
    return int(value.strip().replace(",", ""))


def _chat(match: Match[str]) -> LogEvent:
    return ChatDetected(message=match.group(1).strip())


def _response(match: Match[str]) -> LogEvent:
    return ChatResponded(message=match.group(1).strip())


def _level_up(match: Match[str]) -> LogEvent:
    # Normalised so "FISHING" and "Fishing" resolve to the same skill icon
    return LevelUp(skill=match.group(1).strip().capitalize(), new_level=parse_int(match.group(2)))


def _quest(match: Match[str]) -> LogEvent:
    return QuestCompleted(quest_name=match.group(1).strip())


def _break_start(match: Match[str]) -> LogEvent:
    return BreakStarted(duration_ms=parse_int(match.group(1)))


def _break_over(match: Match[str]) -> LogEvent:
    return BreakEnded()


def _death(match: Match[str]) -> LogEvent:
    return Died()


def _valuable_drop(match: Match[str]) -> LogEvent:
    return ValuableDropped(
        item_name=match.group(1).strip(),
        coin_value=parse_int(match.group(2)),
    )


@dataclass(frozen=True)
class PatternRule:
    """A matcher paired with the function that turns its match into an event."""

    kind: EventKind
    pattern: Pattern[str]
    extract: Callable[[Match[str]], LogEvent]

    def apply(self, line: str) -> Optional[LogEvent]:
        match = self.pattern.search(line)
        if not match:
            return None
        return self.extract(match)


# Priority order matters: some lines satisfy more than one loose pattern and
# the first rule wins.
DEFAULT_RULES: List[PatternRule] = [
    PatternRule(EventKind.CHAT, LOG_PATTERNS[EventKind.CHAT], _chat),
    PatternRule(EventKind.RESPONSE, LOG_PATTERNS[EventKind.RESPONSE], _response),
    PatternRule(EventKind.LEVEL_UP, LOG_PATTERNS[EventKind.LEVEL_UP], _level_up),
    PatternRule(EventKind.QUEST, LOG_PATTERNS[EventKind.QUEST], _quest),
    PatternRule(EventKind.BREAK_START, LOG_PATTERNS[EventKind.BREAK_START], _break_start),
    PatternRule(EventKind.BREAK_OVER, LOG_PATTERNS[EventKind.BREAK_OVER], _break_over),
    PatternRule(EventKind.DEATH, LOG_PATTERNS[EventKind.DEATH], _death),
    PatternRule(EventKind.VALUABLE_DROP, LOG_PATTERNS[EventKind.VALUABLE_DROP], _valuable_drop),
]


class PatternRuleSet:
    """
    Classifies individual lines from DreamBot logs.

    Rules are tried in order and the first one that matches decides the
    event. Lines that match nothing are ignored, they are not errors.
    """

    def __init__(self, rules: Optional[List[PatternRule]] = None):
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)
        self.line_count = 0
        self.match_count = 0
        self.error_count = 0

    def classify(self, line: str) -> Optional[LogEvent]:
        """
        Classify a single log line.

        Args:
            line: Raw line from a bot log file

        Returns:
            The event for the first matching rule, or None if no rule matches
            or the matching rule captured malformed data
        """
        self.line_count += 1

        line = line.rstrip("\r\n")
        if not line.strip():
            return None

        for rule in self.rules:
            try:
                event = rule.apply(line)
            except ValueError as e:
                # First match still wins; a bad capture drops the event
                # instead of falling through to a lower-priority rule.
                self.error_count += 1
                logger.warning(
                    f"Dropping {rule.kind.label} event, malformed capture in line "
                    f"{line[:100]!r}: {e}"
                )
                return None

            if event is not None:
                self.match_count += 1
                logger.debug(f"Matched {rule.kind.label}: {line[:100]}")
                return event

        return None

    def get_stats(self) -> Dict[str, int]:
        """Get classification statistics."""
        return {
            "lines_checked": self.line_count,
            "events_matched": self.match_count,
            "malformed_captures": self.error_count,
        }
