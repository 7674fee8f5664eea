"""Unit tests for the CLI — Typer command registration and basic behavior.

Exercises app registration, help output and the send/config/verify
commands via typer.testing.CliRunner.  Nothing here talks to the network:
``send`` runs with ``--dry-run`` and ``verify`` is patched.
"""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from logcourier.cli.app import app
from logcourier.errors import DeliveryError
from logcourier.routing.sinks.telegram import TelegramSink

runner = CliRunner()

ENV = {
    "LOGCOURIER_BOT_TOKEN": "123456:secret",
    "LOGCOURIER_CHAT_IDS": "[1, 2]",
}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("BOT_TOKEN", "CHAT_IDS", "LEVEL", "EXACT_LEVEL", "DELIVERY", "NOTIFY_ON"):
        monkeypatch.delenv(f"LOGCOURIER_{name}", raising=False)


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    """The CLI must register all expected commands and show help."""

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "send" in result.output
        assert "config" in result.output
        assert "verify" in result.output

    @pytest.mark.parametrize("command", ["send", "config", "verify"])
    def test_command_exists(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0


# ---------------------------------------------------------------------------
# Test: send
# ---------------------------------------------------------------------------


class TestSendCommand:
    def test_dry_run_prints_one_payload_per_chat(self):
        result = runner.invoke(
            app,
            ["send", "disk almost full", "--logger", "storage", "--dry-run"],
            env=ENV,
        )
        assert result.exit_code == 0, result.output
        assert "chat 1" in result.output
        assert "chat 2" in result.output
        assert "Logger: storage" in result.output
        assert "disk almost full" in result.output
        assert "notify" in result.output

    def test_dry_run_with_fields(self):
        env = {**ENV, "LOGCOURIER_CHAT_IDS": "[1]"}
        result = runner.invoke(
            app, ["send", "boom", "-f", "order=42", "--dry-run"], env=env
        )
        assert result.exit_code == 0, result.output

    def test_silent_levels(self):
        env = {**ENV, "LOGCOURIER_NOTIFY_ON": '["fatal"]'}
        result = runner.invoke(app, ["send", "boom", "--dry-run"], env=env)
        assert result.exit_code == 0, result.output
        assert "silent" in result.output

    def test_ineligible_level_sends_nothing(self):
        result = runner.invoke(
            app, ["send", "fyi", "--level", "info", "--dry-run"], env=ENV
        )
        assert result.exit_code == 0
        assert "not eligible" in result.output
        assert "chat 1" not in result.output

    def test_missing_token_fails(self):
        result = runner.invoke(
            app, ["send", "boom", "--dry-run"], env={"LOGCOURIER_CHAT_IDS": "[1]"}
        )
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert "token" in result.output

    @pytest.mark.parametrize(
        ("variable", "value"),
        [
            ("LOGCOURIER_LEVEL", "bogus"),
            ("LOGCOURIER_EXACT_LEVEL", "bogus"),
            ("LOGCOURIER_NOTIFY_ON", '["error", "bogus"]'),
        ],
    )
    def test_unknown_level_in_environment(self, variable, value):
        result = runner.invoke(
            app, ["send", "boom", "--dry-run"], env={**ENV, variable: value}
        )
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Invalid configuration" in result.output
        assert "bogus" in result.output

    def test_rejected_settings_close_the_client(self, monkeypatch):
        closed: list[TelegramSink] = []
        original_close = TelegramSink.close

        def close(self):
            closed.append(self)
            original_close(self)

        monkeypatch.setattr(TelegramSink, "close", close)
        result = runner.invoke(app, ["send", "boom"], env={"LOGCOURIER_CHAT_IDS": "[1]"})

        assert result.exit_code == 1
        assert len(closed) == 1
        assert closed[0]._client.is_closed

    def test_unknown_level_rejected(self):
        result = runner.invoke(app, ["send", "boom", "--level", "loud"], env=ENV)
        assert result.exit_code == 2

    def test_malformed_field_rejected(self):
        result = runner.invoke(app, ["send", "boom", "-f", "novalue"], env=ENV)
        assert result.exit_code == 2

    def test_delivery_failure_exits_non_zero(self, monkeypatch):
        def refuse(self, chat_id, text, *, notify, parse_mode=None):
            raise DeliveryError(chat_id, "Forbidden: bot was blocked by the user")

        monkeypatch.setattr(TelegramSink, "send", refuse)
        result = runner.invoke(app, ["send", "boom"], env=ENV)

        assert result.exit_code == 1
        assert "Delivery failed" in result.output

    def test_successful_send(self, monkeypatch):
        sent = []
        monkeypatch.setattr(
            TelegramSink,
            "send",
            lambda self, chat_id, text, *, notify, parse_mode=None: sent.append(chat_id),
        )
        result = runner.invoke(app, ["send", "boom"], env=ENV)

        assert result.exit_code == 0, result.output
        assert sent == [1, 2]
        assert "Sent to 2 chat(s)" in result.output


# ---------------------------------------------------------------------------
# Test: config / verify
# ---------------------------------------------------------------------------


class TestConfigCommand:
    def test_masks_token(self):
        result = runner.invoke(app, ["config"], env=ENV)
        assert result.exit_code == 0, result.output
        assert "123456:******" in result.output
        assert "secret" not in result.output
        assert "warn, error, fatal, panic" in result.output

    def test_queued_mode_shows_queue(self):
        env = {**ENV, "LOGCOURIER_DELIVERY": "queued"}
        result = runner.invoke(app, ["config"], env=env)
        assert result.exit_code == 0, result.output
        assert "queued" in result.output
        assert "Flush interval" in result.output

    def test_invalid_level(self):
        result = runner.invoke(app, ["config"], env={**ENV, "LOGCOURIER_LEVEL": "loud"})
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestVerifyCommand:
    def test_missing_token(self):
        result = runner.invoke(app, ["verify"])
        assert result.exit_code == 1
        assert "LOGCOURIER_BOT_TOKEN is not set" in result.output

    def test_valid_token(self, monkeypatch):
        monkeypatch.setattr(TelegramSink, "verify", lambda self: "ops_bot")
        result = runner.invoke(app, ["verify"], env=ENV)
        assert result.exit_code == 0, result.output
        assert "@ops_bot" in result.output

    def test_rejected_token(self, monkeypatch):
        def reject(self):
            raise DeliveryError(0, "getMe returned 401: Unauthorized")

        monkeypatch.setattr(TelegramSink, "verify", reject)
        result = runner.invoke(app, ["verify"], env=ENV)
        assert result.exit_code == 1
        assert "Token rejected" in result.output
