"""Module containing the schemas for the download core."""

from core.schemas.download import QUALITY_LABELS, DownloadJob, MediaKind, Quality

__all__ = ["QUALITY_LABELS", "DownloadJob", "MediaKind", "Quality"]
