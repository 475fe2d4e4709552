"""
Event hooks for log console subscribers.

The monitor publishes a ``MonitorEvent`` for every notification it handles
and for lifecycle changes. Subscribers are called fire-and-forget: a slow or
failing subscriber never holds up line processing.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Set

from ..parser.events import EventKind

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class MonitorEvent:
    """A single entry for the log console."""

    # "log-entry", "file-added", "file-removed", "status" or "monitoring-status"
    type: str
    content: str = ""
    level: str = "info"
    kind: Optional[EventKind] = None
    bot: Optional[str] = None
    file: Optional[str] = None
    timestamp: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "timestamp": self.timestamp,
            "content": self.content,
            "level": self.level,
            "kind": self.kind.value if self.kind else None,
            "bot": self.bot,
            "file": self.file,
        }


Subscriber = Callable[[MonitorEvent], Any]


class EventHooks:
    """Registry of log console subscribers."""

    def __init__(self):
        self._subscribers: List[Subscriber] = []
        # Keep references so pending async callbacks aren't garbage collected
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a subscriber.

        Args:
            callback: Plain function or coroutine function taking a MonitorEvent

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def emit(self, event: MonitorEvent):
        """Deliver an event to every subscriber without waiting on them."""
        for callback in list(self._subscribers):
            try:
                result = callback(event)
            except Exception:
                logger.exception(f"Log console subscriber failed on {event.type} event")
                continue

            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Log console subscriber failed: {task.exception()}")

    async def drain(self):
        """Wait for async subscribers that are still running."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
