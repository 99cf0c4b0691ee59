"""Models describing the outcome of a thumbnail cache lookup."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from ibmvideo.models.base import IbmVideoBaseModel


class ThumbnailOutcome(str, Enum):
    """Terminal states of a thumbnail resolution."""

    HIT = "hit"
    DOWNLOADED = "downloaded"
    LOOKUP_FAILED = "lookup_failed"
    NO_REMOTE_THUMBNAIL = "no_remote_thumbnail"
    DOWNLOAD_FAILED = "download_failed"
    WRITE_FAILED = "write_failed"


class ThumbnailResult(IbmVideoBaseModel):
    """Local thumbnail path, if any, along with how it was obtained."""

    outcome: ThumbnailOutcome
    path: Optional[Path] = None
    remote_uri: Optional[str] = None
    detail: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.path is not None


__all__ = ["ThumbnailOutcome", "ThumbnailResult"]
