"""
Line processor: classify one log line, format it and send it on.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..notifications.formatter import format_event
from ..notifications.webhook import WebhookDispatcher
from ..parser.events import ChatDetected, ChatResponded, LogEvent, NO_CHAT_FOUND
from ..parser.patterns import PatternRuleSet
from .hooks import EventHooks, MonitorEvent

logger = logging.getLogger(__name__)


class PendingChatStore:
    """
    Most recent chat message seen in each log file.

    Scoped per file so bots tailed side by side never pair a response with
    another bot's chat. Reading does not clear the entry.
    """

    def __init__(self):
        self._messages: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._messages)

    def record(self, file_path: str, message: str):
        self._messages[file_path] = message

    def get(self, file_path: str, default: str = NO_CHAT_FOUND) -> str:
        return self._messages.get(file_path, default)

    def forget(self, file_path: str):
        self._messages.pop(file_path, None)


@dataclass
class LineResult:
    """What happened to a line that produced an event."""

    event: LogEvent
    content: str
    destination: Optional[str]
    # None when there was no destination to send to
    delivered: Optional[bool]

    @property
    def skipped(self) -> bool:
        return self.delivered is None


class LogLineProcessor:
    """
    Turns log lines into notifications.

    Chat and response events go to the shared chat webhook; every other
    event goes to the bot's own webhook. A missing webhook is not an error,
    the notification is skipped with a warning.
    """

    def __init__(
        self,
        dispatcher: WebhookDispatcher,
        chat_webhook_url: Optional[str] = None,
        rule_set: Optional[PatternRuleSet] = None,
        pending_chats: Optional[PendingChatStore] = None,
        hooks: Optional[EventHooks] = None,
    ):
        """
        Initialize the processor.

        Args:
            dispatcher: Webhook dispatcher used for every delivery
            chat_webhook_url: General chat destination for chat/response events
            rule_set: Pattern rules (defaults to the standard set)
            pending_chats: Per-file chat context store
            hooks: Log console hooks to notify
        """
        self.dispatcher = dispatcher
        self.chat_webhook_url = chat_webhook_url
        self.rule_set = rule_set or PatternRuleSet()
        self.pending_chats = pending_chats if pending_chats is not None else PendingChatStore()
        self.hooks = hooks

    async def process(
        self,
        line: str,
        file_path: str,
        bot_name: str,
        bot_webhook_url: Optional[str],
    ) -> Optional[LineResult]:
        """
        Process a single log line.

        The dispatch is awaited before returning, so calling this for each
        line in file order keeps chat/response pairs in order.

        Args:
            line: Raw log line
            file_path: File the line came from (scopes the chat context)
            bot_name: Bot identity
            bot_webhook_url: The bot's own webhook, or None if not configured

        Returns:
            LineResult if the line produced an event, otherwise None
        """
        event = self.rule_set.classify(line)
        if event is None:
            return None

        if isinstance(event, ChatDetected):
            self.pending_chats.record(file_path, event.message)
            destination = self.chat_webhook_url
            content = format_event(event, bot_name)
            context = "chat + no response"
        elif isinstance(event, ChatResponded):
            reply_to = self.pending_chats.get(file_path)
            event = ChatResponded(message=event.message, reply_to=reply_to)
            destination = self.chat_webhook_url
            content = format_event(event, bot_name)
            context = "chat + response"
        else:
            destination = bot_webhook_url
            content = format_event(event, bot_name)
            context = f"{event.kind.label} ({bot_name})"

        if not destination:
            target = "chat webhook" if event.is_chat else "webhook"
            logger.warning(f"No {target} configured for bot: {bot_name}. Skipping {event.kind.label} notification.")
            result = LineResult(event=event, content=content, destination=None, delivered=None)
        else:
            delivered = await self.dispatcher.send(destination, content, context)
            result = LineResult(event=event, content=content, destination=destination, delivered=delivered)

        self._emit(result, bot_name, file_path)
        return result

    def _emit(self, result: LineResult, bot_name: str, file_path: str):
        if self.hooks is None:
            return

        if result.skipped:
            level = "warning"
        else:
            level = "success" if result.delivered else "error"

        self.hooks.emit(
            MonitorEvent(
                type="log-entry",
                content=result.content,
                level=level,
                kind=result.event.kind,
                bot=bot_name,
                file=file_path,
            )
        )
