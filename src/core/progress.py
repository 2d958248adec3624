"""Thread-safe progress state for a single download session.

A ``ProgressRecord`` is mutated by exactly one worker and read concurrently
by any number of stream publishers.  Every field lives behind the record's own
lock, so readers never observe a half-applied append or status change and
sessions never contend with each other.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class ProgressStatus(StrEnum):
    """Lifecycle states of a download session."""

    STARTED = "started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions are meaningful."""
        return self in (ProgressStatus.COMPLETED, ProgressStatus.FAILED)


class Severity(StrEnum):
    """Severity attached to every progress message."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class ProgressMessage:
    """One entry of a session's message log.

    Attributes
    ----------
    message : str
        Human-readable text.
    type : str
        Severity of the message (see ``Severity``).
    time : int
        Unix timestamp (seconds) of the append.

    """

    message: str
    type: str
    time: int

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serialisable form of the message."""
        return {"message": self.message, "type": self.type, "time": self.time}


@dataclass(frozen=True)
class ProgressSnapshot:
    """Consistent view of a record's counters, read under one critical section."""

    message_count: int
    percent: float
    status: ProgressStatus


class ProgressRecord:
    """Mutable progress state for one session.

    Parameters
    ----------
    record_id : str
        The session id this record is registered under.

    """

    def __init__(self, record_id: str) -> None:
        self.id = record_id
        self._lock = threading.Lock()
        self._percent: float = 0.0
        self._messages: list[ProgressMessage] = []
        self._status = ProgressStatus.STARTED
        self._updated_at = time.monotonic()

    def append_message(self, text: str, severity: Severity | str = Severity.INFO) -> None:
        """Append a timestamped message to the log."""
        entry = ProgressMessage(message=text, type=str(severity), time=int(time.time()))
        with self._lock:
            self._messages.append(entry)
            self._updated_at = time.monotonic()

    def set_percent(self, value: float) -> None:
        """Overwrite the completion percentage.

        Callers only ever increase the value; the record does not enforce it.
        """
        with self._lock:
            self._percent = float(value)
            self._updated_at = time.monotonic()

    def set_status(self, status: ProgressStatus | str) -> None:
        """Move the record to ``status``.

        Once a terminal status has been written, later writes are ignored.
        """
        new_status = ProgressStatus(status)
        with self._lock:
            if self._status.is_terminal:
                logger.debug(
                    "Ignoring status change on finished session",
                    extra={"session_id": self.id, "current": self._status.value, "requested": new_status.value},
                )
                return
            self._status = new_status
            self._updated_at = time.monotonic()

    def snapshot(self) -> ProgressSnapshot:
        """Return message count, percent and status read atomically."""
        with self._lock:
            return ProgressSnapshot(
                message_count=len(self._messages),
                percent=self._percent,
                status=self._status,
            )

    def messages_between(self, start: int, end: int) -> list[ProgressMessage]:
        """Return a copy of the messages in ``[start, end)``."""
        with self._lock:
            return self._messages[start:end]

    @property
    def percent(self) -> float:
        with self._lock:
            return self._percent

    @property
    def status(self) -> ProgressStatus:
        with self._lock:
            return self._status

    @property
    def messages(self) -> list[ProgressMessage]:
        """Copy of the full message log."""
        with self._lock:
            return list(self._messages)

    @property
    def updated_at(self) -> float:
        """Monotonic clock reading of the last mutation."""
        with self._lock:
            return self._updated_at

    def __repr__(self) -> str:
        snap = self.snapshot()
        return (
            f"ProgressRecord(id={self.id!r}, status={snap.status.value!r}, "
            f"percent={snap.percent}, messages={snap.message_count})"
        )
