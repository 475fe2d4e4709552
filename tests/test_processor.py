"""
Tests for per-line processing: routing, chat pairing and skipped dispatches.
"""

import pytest

from dreambot_monitor.monitoring.hooks import EventHooks
from dreambot_monitor.monitoring.processor import LogLineProcessor, PendingChatStore
from dreambot_monitor.notifications.webhook import WebhookDispatcher
from dreambot_monitor.parser import ChatResponded, EventKind, NO_CHAT_FOUND
from tests.conftest import BOT_URL, CHAT_URL

FILE_ONE = "/logs/BotOne/logfile-1.log"
FILE_TWO = "/logs/BotTwo/logfile-1.log"


@pytest.fixture
def processor(recording_dispatcher):
    return LogLineProcessor(recording_dispatcher, chat_webhook_url=CHAT_URL)


class TestRouting:
    @pytest.mark.asyncio
    async def test_chat_goes_to_chat_webhook(self, processor, recording_dispatcher):
        result = await processor.process("[INFO] CHAT: hello there", FILE_ONE, "BotOne", BOT_URL)

        assert result.delivered is True
        assert recording_dispatcher.urls == [CHAT_URL]
        assert "hello there" in recording_dispatcher.calls[0][1]

    @pytest.mark.asyncio
    async def test_other_events_go_to_bot_webhook(self, processor, recording_dispatcher, sample_log_lines):
        for key in ("level_up", "quest", "break_start", "break_over", "death", "valuable_drop"):
            await processor.process(sample_log_lines[key], FILE_ONE, "BotOne", BOT_URL)

        assert recording_dispatcher.urls == [BOT_URL] * 6

    @pytest.mark.asyncio
    async def test_context_names_event_and_bot(self, processor, recording_dispatcher, sample_log_lines):
        await processor.process(sample_log_lines["level_up"], FILE_ONE, "BotOne", BOT_URL)
        assert recording_dispatcher.calls[0][2] == "level up (BotOne)"

    @pytest.mark.asyncio
    async def test_non_matching_line(self, processor, recording_dispatcher):
        assert await processor.process("[INFO] Walking to bank", FILE_ONE, "BotOne", BOT_URL) is None
        assert recording_dispatcher.calls == []

    @pytest.mark.asyncio
    async def test_failed_delivery_reported(self, failing_dispatcher, sample_log_lines):
        processor = LogLineProcessor(failing_dispatcher, chat_webhook_url=CHAT_URL)
        result = await processor.process(sample_log_lines["death"], FILE_ONE, "BotOne", BOT_URL)

        assert result.delivered is False
        assert not result.skipped


class TestMissingDestination:
    @pytest.mark.asyncio
    async def test_missing_bot_url_skips_with_warning(self, processor, recording_dispatcher, sample_log_lines, caplog):
        with caplog.at_level("WARNING"):
            result = await processor.process(sample_log_lines["level_up"], FILE_TWO, "BotTwo", None)

        assert result.skipped
        assert result.event.kind is EventKind.LEVEL_UP
        assert recording_dispatcher.calls == []
        assert "No webhook configured for bot: BotTwo. Skipping level up notification." in caplog.text

    @pytest.mark.asyncio
    async def test_missing_chat_url_skips(self, recording_dispatcher, caplog):
        processor = LogLineProcessor(recording_dispatcher, chat_webhook_url=None)

        with caplog.at_level("WARNING"):
            result = await processor.process("[INFO] CHAT: hello", FILE_ONE, "BotOne", BOT_URL)

        assert result.skipped
        assert recording_dispatcher.calls == []
        assert "No chat webhook configured for bot: BotOne" in caplog.text
        # Context is still recorded for a later response
        assert processor.pending_chats.get(FILE_ONE) == "hello"

    @pytest.mark.asyncio
    async def test_missing_url_never_touches_http(self, sample_log_lines, webhook_requests, mock_http_client):
        dispatcher = WebhookDispatcher(client=mock_http_client)
        processor = LogLineProcessor(dispatcher, chat_webhook_url=None)

        for line in sample_log_lines.values():
            await processor.process(line, FILE_TWO, "BotTwo", None)

        assert webhook_requests == []
        await mock_http_client.aclose()


class TestChatPairing:
    @pytest.mark.asyncio
    async def test_response_pairs_with_previous_chat(self, processor, recording_dispatcher):
        await processor.process("[INFO] CHAT: hello there", FILE_ONE, "BotOne", BOT_URL)
        result = await processor.process("[INFO] SLOWLY TYPING RESPONSE: hi!", FILE_ONE, "BotOne", BOT_URL)

        assert result.event == ChatResponded(message="hi!", reply_to="hello there")
        assert "**Chat:** hello there" in recording_dispatcher.calls[1][1]
        assert "**Response:** hi!" in recording_dispatcher.calls[1][1]

    @pytest.mark.asyncio
    async def test_response_without_chat_uses_sentinel(self, processor):
        result = await processor.process("[INFO] SLOWLY TYPING RESPONSE: hi!", FILE_ONE, "BotOne", BOT_URL)
        assert result.event.reply_to == NO_CHAT_FOUND

    @pytest.mark.asyncio
    async def test_reading_does_not_clear(self, processor):
        await processor.process("[INFO] CHAT: hello", FILE_ONE, "BotOne", BOT_URL)
        await processor.process("[INFO] SLOWLY TYPING RESPONSE: one", FILE_ONE, "BotOne", BOT_URL)
        result = await processor.process("[INFO] SLOWLY TYPING RESPONSE: two", FILE_ONE, "BotOne", BOT_URL)

        assert result.event.reply_to == "hello"

    @pytest.mark.asyncio
    async def test_latest_chat_wins(self, processor):
        await processor.process("[INFO] CHAT: first", FILE_ONE, "BotOne", BOT_URL)
        await processor.process("[INFO] CHAT: second", FILE_ONE, "BotOne", BOT_URL)
        result = await processor.process("[INFO] SLOWLY TYPING RESPONSE: hi", FILE_ONE, "BotOne", BOT_URL)

        assert result.event.reply_to == "second"

    @pytest.mark.asyncio
    async def test_files_do_not_share_context(self, processor):
        await processor.process("[INFO] CHAT: for bot one", FILE_ONE, "BotOne", BOT_URL)
        await processor.process("[INFO] CHAT: for bot two", FILE_TWO, "BotTwo", None)

        one = await processor.process("[INFO] SLOWLY TYPING RESPONSE: a", FILE_ONE, "BotOne", BOT_URL)
        two = await processor.process("[INFO] SLOWLY TYPING RESPONSE: b", FILE_TWO, "BotTwo", None)

        assert one.event.reply_to == "for bot one"
        assert two.event.reply_to == "for bot two"

    def test_pending_chat_store(self):
        store = PendingChatStore()
        assert store.get(FILE_ONE) == NO_CHAT_FOUND

        store.record(FILE_ONE, "hello")
        assert store.get(FILE_ONE) == "hello"
        assert len(store) == 1

        store.forget(FILE_ONE)
        assert store.get(FILE_ONE) == NO_CHAT_FOUND


class TestHooks:
    @pytest.mark.asyncio
    async def test_log_entry_emitted_per_event(self, recording_dispatcher, sample_log_lines):
        hooks = EventHooks()
        received = []
        hooks.subscribe(received.append)
        processor = LogLineProcessor(recording_dispatcher, chat_webhook_url=CHAT_URL, hooks=hooks)

        await processor.process(sample_log_lines["death"], FILE_ONE, "BotOne", BOT_URL)
        await processor.process(sample_log_lines["quest"], FILE_TWO, "BotTwo", None)
        await processor.process(sample_log_lines["noise"], FILE_ONE, "BotOne", BOT_URL)

        assert [(e.type, e.level, e.kind) for e in received] == [
            ("log-entry", "success", EventKind.DEATH),
            ("log-entry", "warning", EventKind.QUEST),
        ]
        assert received[0].bot == "BotOne"
        assert "Bot Died!" in received[0].content
