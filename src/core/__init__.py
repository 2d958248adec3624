"""Core module for DL Console.

Provides the session registry, the progress record, the download worker and
the progress stream publisher.
"""

from core.progress import ProgressRecord, ProgressStatus, Severity
from core.sessions import SessionRegistry
from core.streaming import EventKind, StreamEvent, publish_progress
from core.worker import run_download

__all__ = [
    "EventKind",
    "ProgressRecord",
    "ProgressStatus",
    "SessionRegistry",
    "Severity",
    "StreamEvent",
    "publish_progress",
    "run_download",
]
