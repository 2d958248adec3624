"""SSE event formatting for the progress stream endpoint."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.streaming import StreamEvent

SSE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse_event(event: StreamEvent) -> str:
    """Format a stream event as a named SSE message.

    Parameters
    ----------
    event : StreamEvent
        The event to serialize.

    Returns
    -------
    str
        An SSE-formatted string: ``event: {kind}\\ndata: {json}\\n\\n``

    """
    return f"event: {event.kind.value}\ndata: {json.dumps(event.data, ensure_ascii=False)}\n\n"
