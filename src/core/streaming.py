"""Turn polling reads of a ``ProgressRecord`` into an append-only event stream.

Each subscriber gets its own publisher.  The publisher samples the record at a
fixed cadence and forwards only the messages appended since its previous tick,
tagged with the percent observed on that tick.  It stops after the record
reaches a terminal status, when the subscriber goes away, or immediately when
the session does not exist.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from core.progress import ProgressStatus

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from core.sessions import SessionRegistry

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5

NOT_FOUND_MESSAGE = "Download not found"
COMPLETED_MESSAGE = "Download completed successfully"
FAILED_MESSAGE = "Download failed"


class EventKind(StrEnum):
    """Kinds of events pushed to a progress subscriber."""

    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class StreamEvent:
    """A single event for the subscriber."""

    kind: EventKind
    data: dict[str, Any] = field(default_factory=dict)


async def publish_progress(
    registry: SessionRegistry,
    session_id: str,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    is_disconnected: Callable[[], Awaitable[bool]] | None = None,
) -> AsyncGenerator[StreamEvent, None]:
    """Yield progress events for ``session_id`` until the session finishes.

    Parameters
    ----------
    registry : SessionRegistry
        Registry holding the session.
    session_id : str
        Session to follow.
    poll_interval : float
        Seconds between two samples of the record.
    is_disconnected : Callable[[], Awaitable[bool]] | None
        Probe for subscriber disconnection, checked on every tick.

    Yields
    ------
    StreamEvent
        ``progress`` events for each new message, then exactly one closing
        ``complete`` (or ``error`` for a failed session) event.

    """
    record = registry.get(session_id)
    if record is None:
        logger.info("Progress requested for unknown session", extra={"session_id": session_id})
        yield StreamEvent(EventKind.ERROR, {"message": NOT_FOUND_MESSAGE})
        return

    last_sent = 0
    try:
        while True:
            await asyncio.sleep(poll_interval)

            if is_disconnected is not None and await is_disconnected():
                logger.debug("Progress subscriber disconnected", extra={"session_id": session_id})
                return

            snap = record.snapshot()
            if snap.message_count > last_sent:
                for msg in record.messages_between(last_sent, snap.message_count):
                    yield StreamEvent(
                        EventKind.PROGRESS,
                        {"message": msg.message, "type": msg.type, "percent": snap.percent},
                    )
                last_sent = snap.message_count

            if snap.status == ProgressStatus.COMPLETED:
                yield StreamEvent(EventKind.COMPLETE, {"message": COMPLETED_MESSAGE})
                return
            if snap.status == ProgressStatus.FAILED:
                yield StreamEvent(EventKind.ERROR, {"message": FAILED_MESSAGE})
                return
    except (asyncio.CancelledError, GeneratorExit):
        logger.debug("Progress stream closed by subscriber", extra={"session_id": session_id})
        raise
