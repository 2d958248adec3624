"""Process-wide registry of download sessions."""

from __future__ import annotations

import logging
import threading
import time

from core.errors import SessionExistsError
from core.progress import ProgressRecord

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Concurrent map from session id to its ``ProgressRecord``.

    The registry lock is held only while inserting or looking up an entry.
    Records guard their own fields, so polling a session never touches the
    registry lock after the initial lookup.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, ProgressRecord] = {}
        self._last_id = 0

    def new_id(self) -> str:
        """Return a fresh time-based session id.

        Ids are nanosecond timestamps.  When the clock has not moved past the
        previously issued value the id is bumped by one, so rapid successive
        calls never collide.

        Returns
        -------
        str
            A decimal session id, unique for the lifetime of the registry.

        """
        with self._lock:
            candidate = time.time_ns()
            if candidate <= self._last_id:
                candidate = self._last_id + 1
            self._last_id = candidate
            return str(candidate)

    def create(self, session_id: str) -> ProgressRecord:
        """Register a zero-state record under ``session_id``.

        Parameters
        ----------
        session_id : str
            Identifier for the new session.

        Returns
        -------
        ProgressRecord
            The registered record (shared, never copied).

        Raises
        ------
        SessionExistsError
            If ``session_id`` is already registered.

        """
        record = ProgressRecord(session_id)
        with self._lock:
            if session_id in self._records:
                msg = f"Session {session_id!r} already exists"
                raise SessionExistsError(msg)
            self._records[session_id] = record
        logger.debug("Session created", extra={"session_id": session_id})
        return record

    def get(self, session_id: str) -> ProgressRecord | None:
        """Return the record for ``session_id`` or ``None`` when unknown."""
        with self._lock:
            return self._records.get(session_id)

    def evict_finished(self, older_than: float) -> int:
        """Drop finished sessions idle for more than ``older_than`` seconds.

        Parameters
        ----------
        older_than : float
            Minimum idle time, in seconds, since the record's last mutation.

        Returns
        -------
        int
            Number of sessions removed.

        """
        cutoff = time.monotonic() - older_than
        with self._lock:
            items = list(self._records.items())
        expired = [
            session_id
            for session_id, record in items
            if record.status.is_terminal and record.updated_at < cutoff
        ]
        with self._lock:
            for session_id in expired:
                self._records.pop(session_id, None)
        if expired:
            logger.info("Evicted %d finished sessions", len(expired))
        return len(expired)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
