"""
Pytest configuration and shared fixtures for the test suite.

Provides temporary bot log directories, sample DreamBot log lines and
webhook doubles that record deliveries instead of making HTTP calls.
"""

import pytest
import httpx
from pathlib import Path

from dreambot_monitor.config.models import MonitorConfig

CHAT_URL = "https://discord.com/api/webhooks/1000/chat-token"
BOT_URL = "https://discord.com/api/webhooks/2000/bot-token"


class RecordingDispatcher:
    """Stands in for WebhookDispatcher and remembers every send."""

    def __init__(self, result: bool = True):
        self.result = result
        self.calls = []

    async def send(self, url, content, context=""):
        self.calls.append((url, content, context))
        return self.result

    def get_stats(self):
        return {"sent": len(self.calls) if self.result else 0, "failed": 0 if self.result else len(self.calls)}

    async def close(self):
        pass

    @property
    def urls(self):
        return [url for url, _, _ in self.calls]


@pytest.fixture
def recording_dispatcher():
    """Dispatcher double that reports every delivery as successful."""
    return RecordingDispatcher()


@pytest.fixture
def failing_dispatcher():
    """Dispatcher double that reports every delivery as failed."""
    return RecordingDispatcher(result=False)


@pytest.fixture
def log_root(tmp_path) -> Path:
    """Log root with one directory per bot."""
    root = tmp_path / "Logs"
    (root / "BotOne").mkdir(parents=True)
    (root / "BotTwo").mkdir()
    return root


@pytest.fixture
def monitor_config(log_root) -> MonitorConfig:
    """Config where BotOne has a webhook and BotTwo does not."""
    return MonitorConfig(
        base_log_dir=str(log_root),
        bot_chat_webhook_url=CHAT_URL,
        bots={
            "BotOne": {"webhook_url": BOT_URL, "launch_command": "java -jar client.jar"},
            "BotTwo": {"webhook_url": ""},
        },
    )


@pytest.fixture
def sample_log_lines():
    """Sample DreamBot log lines, one per event kind plus noise."""
    return {
        "chat": "[INFO] CHAT: hello there",
        "response": "[INFO] SLOWLY TYPING RESPONSE: hi!",
        "level_up": "[INFO] [GAME] Congratulations, you've just advanced your Fishing level. You are now level 42.",
        "quest": "[INFO] [GAME] Congratulations, you've completed a quest: <col=ff0000>Cook's Assistant</col>",
        "break_start": "[SCRIPT] Break length 125000",
        "break_over": "[SCRIPT] Break over",
        "death": "[INFO] [GAME] Oh dear, you are dead!",
        "valuable_drop": "[INFO] [GAME] <col=ef1020>Valuable drop: Dragon bones (1,234,567 coins)</col>",
        "noise": "[INFO] Walking to bank",
    }


@pytest.fixture
def webhook_requests():
    """Requests captured by the mock_http_client fixture."""
    return []


@pytest.fixture
def mock_http_client(webhook_requests):
    """httpx client whose transport answers 204 and records requests."""

    def handler(request: httpx.Request) -> httpx.Response:
        webhook_requests.append(request)
        return httpx.Response(204)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def append_lines(path: Path, *lines: str):
    """Append lines to a log file the way a bot client does."""
    with open(path, "a", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# Pytest collection configuration
def pytest_collection_modifyitems(config, items):
    """Modify collected test items with markers."""
    for item in items:
        # Tests that drive a real polling observer
        if "test_file_watcher" in item.fspath.basename or "test_monitor" in item.fspath.basename:
            item.add_marker(pytest.mark.integration)
