"""Unit tests for MessageDispatcher — fan-out, notification flag, failures."""

from __future__ import annotations

import pytest
from fakes import RecordingSink

from logcourier.core.levels import LevelPolicy
from logcourier.errors import DeliveryError
from logcourier.models.entries import Field, Level
from logcourier.routing.dispatcher import MessageDispatcher
from logcourier.routing.formatting import default_formatter

POLICY = LevelPolicy.threshold(Level.WARN)


class _ExplodingSink(RecordingSink):
    def send(self, chat_id, text, *, notify, parse_mode=None):
        self.attempts.append(chat_id)
        raise ConnectionResetError("peer went away")


# ---------------------------------------------------------------------------
# Test: fan-out
# ---------------------------------------------------------------------------


class TestFanOut:
    def test_sends_same_text_to_every_chat(self, recording_sink, entry):
        dispatcher = MessageDispatcher(recording_sink, [1, 2, 3], POLICY)
        dispatcher.dispatch(entry)

        assert [m.chat_id for m in recording_sink.sent] == [1, 2, 3]
        assert {m.text for m in recording_sink.sent} == {default_formatter(entry, ())}

    def test_formatter_runs_once_per_entry(self, recording_sink, entry):
        calls = []

        def formatter(e, fields):
            calls.append((e, tuple(fields)))
            return "formatted"

        dispatcher = MessageDispatcher(
            recording_sink, [1, 2], POLICY, formatter=formatter
        )
        dispatcher.dispatch(entry, [Field(key="k", value=1)])

        assert len(calls) == 1
        assert calls[0][1] == (Field(key="k", value=1),)
        assert [m.text for m in recording_sink.sent] == ["formatted", "formatted"]

    def test_parse_mode_passed_through(self, recording_sink, entry):
        dispatcher = MessageDispatcher(recording_sink, [1], POLICY, parse_mode="HTML")
        dispatcher.dispatch(entry)
        assert recording_sink.sent[0].parse_mode == "HTML"

    def test_chat_ids_copied(self, recording_sink):
        chats = [1]
        dispatcher = MessageDispatcher(recording_sink, chats, POLICY)
        chats.append(2)
        assert dispatcher.chat_ids == (1,)
        assert dispatcher.sink is recording_sink


# ---------------------------------------------------------------------------
# Test: notification flag
# ---------------------------------------------------------------------------


class TestNotification:
    def test_urgent_by_default(self, recording_sink, entry):
        MessageDispatcher(recording_sink, [1], POLICY).dispatch(entry)
        assert recording_sink.sent[0].notify is True

    def test_silent_when_disabled(self, recording_sink, entry):
        policy = LevelPolicy.threshold(Level.WARN, notify_by_default=False)
        MessageDispatcher(recording_sink, [1], policy).dispatch(entry)
        assert recording_sink.sent[0].notify is False

    def test_urgent_only_for_listed_levels(self, recording_sink, make_entry):
        policy = LevelPolicy.threshold(Level.WARN, urgent_on={Level.FATAL})
        dispatcher = MessageDispatcher(recording_sink, [1], policy)

        dispatcher.dispatch(make_entry(level=Level.ERROR))
        dispatcher.dispatch(make_entry(level=Level.FATAL))

        assert [m.notify for m in recording_sink.sent] == [False, True]


# ---------------------------------------------------------------------------
# Test: failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_failure_does_not_stop_remaining_chats(self, entry, caplog):
        sink = RecordingSink(failing_chats={2})
        dispatcher = MessageDispatcher(sink, [1, 2, 3], POLICY)

        with pytest.raises(DeliveryError) as excinfo:
            dispatcher.dispatch(entry)

        assert excinfo.value.chat_id == 2
        assert sink.attempts == [1, 2, 3]
        assert [m.chat_id for m in sink.sent] == [1, 3]
        assert "2/3 chats succeeded" in caplog.text

    def test_last_error_wins(self, entry):
        sink = RecordingSink(failing_chats={1, 2})
        with pytest.raises(DeliveryError) as excinfo:
            MessageDispatcher(sink, [1, 2], POLICY).dispatch(entry)
        assert excinfo.value.chat_id == 2
        assert excinfo.value.reason == "chat not found"

    def test_foreign_exceptions_are_wrapped(self, entry):
        sink = _ExplodingSink()
        with pytest.raises(DeliveryError) as excinfo:
            MessageDispatcher(sink, [7, 8], POLICY).dispatch(entry)

        assert sink.attempts == [7, 8]
        assert excinfo.value.chat_id == 8
        assert isinstance(excinfo.value.__cause__, ConnectionResetError)
        assert "peer went away" in str(excinfo.value)
