"""Tests for the progress record and the SSE formatting helper."""

from __future__ import annotations

import json
import threading
import time

from api.progress import format_sse_event
from core.progress import ProgressMessage, ProgressRecord, ProgressStatus, Severity
from core.streaming import EventKind, StreamEvent


class TestProgressStatus:
    """Tests for the ProgressStatus enum."""

    def test_values(self) -> None:
        """Status strings should match the wire values."""
        assert ProgressStatus.STARTED == "started"
        assert ProgressStatus.RUNNING == "running"
        assert ProgressStatus.COMPLETED == "completed"
        assert ProgressStatus.FAILED == "failed"

    def test_terminal_statuses(self) -> None:
        """Only completed and failed are terminal."""
        assert ProgressStatus.COMPLETED.is_terminal
        assert ProgressStatus.FAILED.is_terminal
        assert not ProgressStatus.STARTED.is_terminal
        assert not ProgressStatus.RUNNING.is_terminal


class TestProgressRecord:
    """Tests for the ProgressRecord."""

    def test_initial_state(self) -> None:
        """A new record has no messages, zero percent and status started."""
        record = ProgressRecord("abc")
        snap = record.snapshot()

        assert record.id == "abc"
        assert snap.message_count == 0
        assert snap.percent == 0
        assert snap.status == ProgressStatus.STARTED

    def test_append_message_records_severity_and_time(self) -> None:
        """Appended messages keep text, severity and a second-resolution timestamp."""
        record = ProgressRecord("abc")
        before = int(time.time())
        record.append_message("hello")
        record.append_message("careful", Severity.WARNING)

        messages = record.messages
        assert [m.message for m in messages] == ["hello", "careful"]
        assert [m.type for m in messages] == ["info", "warning"]
        assert all(before <= m.time <= int(time.time()) for m in messages)

    def test_set_percent_overwrites(self) -> None:
        """set_percent should overwrite the previous value."""
        record = ProgressRecord("abc")
        record.set_percent(25)
        record.set_percent(80)
        assert record.percent == 80

    def test_status_after_terminal_is_ignored(self) -> None:
        """Writes after a terminal status should be a no-op."""
        record = ProgressRecord("abc")
        record.set_status(ProgressStatus.COMPLETED)
        record.set_status(ProgressStatus.FAILED)
        record.set_status("running")
        assert record.status == ProgressStatus.COMPLETED

    def test_messages_between_returns_copy(self) -> None:
        """Mutating the returned slice must not affect the record."""
        record = ProgressRecord("abc")
        for i in range(5):
            record.append_message(f"m{i}")

        chunk = record.messages_between(1, 3)
        assert [m.message for m in chunk] == ["m1", "m2"]
        chunk.clear()
        assert record.snapshot().message_count == 5

    def test_snapshot_is_consistent_under_concurrent_writers(self) -> None:
        """Snapshots taken while threads append never exceed what messages_between returns."""
        record = ProgressRecord("abc")

        def writer(prefix: str) -> None:
            for i in range(200):
                record.append_message(f"{prefix}-{i}")
                record.set_percent(i / 2)

        threads = [threading.Thread(target=writer, args=(p,)) for p in ("a", "b", "c")]
        for t in threads:
            t.start()

        observed: list[int] = []
        while any(t.is_alive() for t in threads):
            snap = record.snapshot()
            assert len(record.messages_between(0, snap.message_count)) == snap.message_count
            observed.append(snap.message_count)

        for t in threads:
            t.join()

        assert observed == sorted(observed)
        messages = record.messages
        assert len(messages) == 600
        for prefix in ("a", "b", "c"):
            own = [m.message for m in messages if m.message.startswith(f"{prefix}-")]
            assert own == [f"{prefix}-{i}" for i in range(200)]

    def test_message_to_dict(self) -> None:
        """ProgressMessage.to_dict should expose message, type and time."""
        msg = ProgressMessage(message="x", type="info", time=1)
        assert msg.to_dict() == {"message": "x", "type": "info", "time": 1}


class TestFormatSSE:
    """Tests for the format_sse_event function."""

    def test_named_event_structure(self) -> None:
        """Output should be 'event: kind\\ndata: {json}\\n\\n'."""
        event = StreamEvent(EventKind.PROGRESS, {"message": "hi", "type": "info", "percent": 5.0})
        result = format_sse_event(event)

        assert result.startswith("event: progress\ndata: ")
        assert result.endswith("\n\n")

    def test_data_is_valid_json(self) -> None:
        """The data line should carry the payload as JSON."""
        event = StreamEvent(EventKind.COMPLETE, {"message": "Download completed successfully"})
        result = format_sse_event(event)

        data_line = result.splitlines()[1]
        parsed = json.loads(data_line.removeprefix("data: "))
        assert parsed == {"message": "Download completed successfully"}

    def test_non_ascii_is_preserved(self) -> None:
        """Non-ASCII text should pass through unescaped."""
        event = StreamEvent(EventKind.ERROR, {"message": "échec ✗"})
        assert "échec ✗" in format_sse_event(event)
