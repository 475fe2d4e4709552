"""
Tests for the command-line interface.
"""

import logging

import pytest
import yaml
from click.testing import CliRunner

from dreambot_monitor import cli as cli_module
from dreambot_monitor.cli import cli
from dreambot_monitor.config.settings import ApplicationSettings
from tests.conftest import BOT_URL, CHAT_URL


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path, log_root):
    path = tmp_path / "dreambot_monitor.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "BASE_LOG_DIR": str(log_root),
                "BOT_CHAT_WEBHOOK_URL": CHAT_URL,
                "BOT_CONFIG": {
                    "BotOne": {"webhookUrl": BOT_URL, "launchCLI": "java -jar client.jar"},
                    "BotTwo": {"webhookUrl": ""},
                },
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def restore_root_level():
    """The group callback sets the root level; put it back after each command."""
    root = logging.getLogger()
    previous = root.level
    yield
    root.setLevel(previous)


@pytest.fixture
def env_settings(monkeypatch):
    """Build settings from the environment on every call instead of the cached instance."""
    monkeypatch.setattr(cli_module, "get_settings", ApplicationSettings.from_env)


class TestClassify:
    def test_level_up(self, runner):
        result = runner.invoke(cli, ["classify", "You've just advanced your Fishing level. You are now level 42"])

        assert result.exit_code == 0
        assert "level up" in result.output
        assert "'Fishing'" in result.output
        assert "42" in result.output

    def test_no_match(self, runner):
        result = runner.invoke(cli, ["classify", "[INFO] Walking to bank"])

        assert result.exit_code == 0
        assert "No match" in result.output


class TestCheckConfig:
    def test_valid(self, runner, config_file):
        result = runner.invoke(cli, ["check-config", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "BotOne" in result.output
        assert "Configuration is valid" in result.output

    def test_invalid(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"BOT_CONFIG": {"BotOne": "https://example.com/hook"}}), encoding="utf-8")

        result = runner.invoke(cli, ["check-config", "--config", str(path)])

        assert result.exit_code == 1
        assert "BASE_LOG_DIR is required" in result.output


class TestTestWebhook:
    def test_unconfigured_bot(self, runner, config_file):
        result = runner.invoke(cli, ["test-webhook", "BotTwo", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "No webhook configured for BotTwo" in result.output

    def test_delivery(self, runner, config_file, monkeypatch):
        sent = []

        async def fake_send(self, url, content, context=""):
            sent.append((url, content))
            return True

        monkeypatch.setattr(cli_module.WebhookDispatcher, "send", fake_send)
        result = runner.invoke(cli, ["test-webhook", "chat", "--config", str(config_file), "--message", "ping"])

        assert result.exit_code == 0
        assert sent == [(CHAT_URL, "ping")]

    def test_failed_delivery(self, runner, config_file, monkeypatch):
        async def fake_send(self, url, content, context=""):
            return False

        monkeypatch.setattr(cli_module.WebhookDispatcher, "send", fake_send)
        result = runner.invoke(cli, ["test-webhook", "BotOne", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "failed" in result.output

    def test_invalid_timeout_from_env(self, runner, config_file, monkeypatch, env_settings):
        monkeypatch.setenv("WEBHOOK_TIMEOUT", "-1")
        sent = []

        async def fake_send(self, url, content, context=""):
            sent.append(url)
            return True

        monkeypatch.setattr(cli_module.WebhookDispatcher, "send", fake_send)
        result = runner.invoke(cli, ["test-webhook", "chat", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Invalid webhook timeout: -1.0" in result.output
        assert sent == []


class TestWatch:
    def test_missing_root(self, runner, config_file, tmp_path):
        result = runner.invoke(cli, ["watch", "--config", str(config_file), "--root", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "Could not start monitoring" in result.output

    def test_invalid_poll_interval(self, runner, config_file):
        result = runner.invoke(cli, ["watch", "--config", str(config_file), "--poll-interval", "0"])

        assert result.exit_code == 2

    def test_invalid_poll_interval_from_env(self, runner, config_file, monkeypatch, env_settings):
        monkeypatch.setenv("MONITOR_POLL_INTERVAL", "0")

        result = runner.invoke(cli, ["watch", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Invalid poll interval: 0.0" in result.output

    def test_verbose_logs_settings(self, runner, config_file, tmp_path, caplog, env_settings, monkeypatch):
        monkeypatch.delenv("MONITOR_POLL_INTERVAL", raising=False)

        result = runner.invoke(
            cli, ["--verbose", "watch", "--config", str(config_file), "--root", str(tmp_path / "missing")]
        )

        assert result.exit_code == 1
        assert "=== Monitor Settings ===" in caplog.text
        assert "Poll Interval: 1.0s" in caplog.text
