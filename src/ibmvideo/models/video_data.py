"""Models describing the video data persisted as a media field value."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from pydantic import ConfigDict, Field, StrictBool, StrictStr

from ibmvideo.models.base import IbmVideoBaseModel
from ibmvideo.models.embed import EmbedReference

VIDEO_DATA_ID_KEY = "id"
VIDEO_DATA_RECORDED_FLAG_KEY = "is_recorded"
VIDEO_DATA_THUMBNAIL_REFERENCE_ID_KEY = "thumbnail_reference_id"
VIDEO_DATA_KEYS = frozenset(
    {VIDEO_DATA_ID_KEY, VIDEO_DATA_RECORDED_FLAG_KEY, VIDEO_DATA_THUMBNAIL_REFERENCE_ID_KEY}
)


class VideoDataParseError(str, Enum):
    """Structural failures when decoding a stored video data string."""

    BAD_JSON = "bad_json"
    INVALID_KEY_SET = "invalid_key_set"


@dataclass(slots=True)
class VideoDataParseResult:
    """Outcome of the structural parse of a stored video data string.

    ``data`` holds the decoded values exactly as stored; they have not been type checked.
    """

    data: Dict[str, object] = field(default_factory=dict)
    error: Optional[VideoDataParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class VideoMetadataRecord(IbmVideoBaseModel):
    """Validated video data for one media item.

    ``thumbnail_reference_id`` is an opaque random token minted whenever the editor points the
    item at a different video, so locally cached thumbnails are keyed per item and per source.
    """

    id: StrictStr = Field(min_length=1)
    is_recorded: StrictBool
    thumbnail_reference_id: StrictStr = Field(min_length=1)

    model_config = ConfigDict(frozen=True)

    @property
    def reference(self) -> EmbedReference:
        return EmbedReference(id=self.id, is_recorded=self.is_recorded)


__all__ = [
    "VIDEO_DATA_ID_KEY",
    "VIDEO_DATA_KEYS",
    "VIDEO_DATA_RECORDED_FLAG_KEY",
    "VIDEO_DATA_THUMBNAIL_REFERENCE_ID_KEY",
    "VideoDataParseError",
    "VideoDataParseResult",
    "VideoMetadataRecord",
]
