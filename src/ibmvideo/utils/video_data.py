"""Encoding and decoding of the video data stored as a media field value.

Decoding happens in two stages. :func:`try_parse_video_data` only checks the JSON structure
(an object with exactly the expected keys). :func:`validate_video_data` then checks each value
and reports one message per bad field, so editors see which part of a stored value is broken.
"""

from __future__ import annotations

import base64
import json
import secrets
from typing import List, Mapping, Optional

from ibmvideo.models.embed import EmbedReference
from ibmvideo.models.video_data import (
    VIDEO_DATA_ID_KEY,
    VIDEO_DATA_KEYS,
    VIDEO_DATA_RECORDED_FLAG_KEY,
    VIDEO_DATA_THUMBNAIL_REFERENCE_ID_KEY,
    VideoDataParseError,
    VideoDataParseResult,
    VideoMetadataRecord,
)

THUMBNAIL_REFERENCE_ID_BYTES = 8

INVALID_JSON_MESSAGE = "The string provided is not valid JSON."
INVALID_KEY_SET_MESSAGE = "The JSON provided has an incorrect set of root-level keys."
INVALID_ID_MESSAGE = "The video or channel ID is not a non-empty string."
INVALID_RECORDED_FLAG_MESSAGE = 'The "is recorded" flag is not a boolean.'
INVALID_THUMBNAIL_REFERENCE_ID_MESSAGE = "The thumbnail reference ID is not a non-empty string."


class InvalidVideoDataError(ValueError):
    """Raised when stored video data cannot be turned into a :class:`VideoMetadataRecord`."""

    def __init__(self, messages: List[str]) -> None:
        super().__init__(" ".join(messages))
        self.messages = messages


def generate_thumbnail_reference_id() -> str:
    """Return a fresh thumbnail reference ID (base64 of eight random bytes)."""

    return base64.b64encode(secrets.token_bytes(THUMBNAIL_REFERENCE_ID_BYTES)).decode("ascii")


def serialize_video_data(reference: EmbedReference, thumbnail_reference_id: Optional[str] = None) -> str:
    """Encode ``reference`` and its thumbnail reference ID as the stored JSON value.

    A new thumbnail reference ID is minted when none is given.

    Raises
    ------
    ValueError
        If the reference ID or the supplied thumbnail reference ID is empty.
    """

    if not reference.id:
        raise ValueError("Video or channel ID must not be empty.")
    if thumbnail_reference_id is None:
        thumbnail_reference_id = generate_thumbnail_reference_id()
    elif not thumbnail_reference_id:
        raise ValueError("Thumbnail reference ID must not be empty.")

    return json.dumps(
        {
            VIDEO_DATA_ID_KEY: reference.id,
            VIDEO_DATA_RECORDED_FLAG_KEY: reference.is_recorded,
            VIDEO_DATA_THUMBNAIL_REFERENCE_ID_KEY: thumbnail_reference_id,
        }
    )


def try_parse_video_data(raw: str) -> VideoDataParseResult:
    """Decode ``raw`` into a mapping with exactly the stored key set.

    Values are returned as decoded and are not validated.
    """

    try:
        decoded = json.loads(raw)
    except (ValueError, RecursionError):
        return VideoDataParseResult(error=VideoDataParseError.BAD_JSON)

    if not isinstance(decoded, dict):
        return VideoDataParseResult(error=VideoDataParseError.BAD_JSON)
    if set(decoded) != VIDEO_DATA_KEYS:
        return VideoDataParseResult(error=VideoDataParseError.INVALID_KEY_SET)
    return VideoDataParseResult(data=decoded)


def validate_video_data(data: Mapping[str, object]) -> List[str]:
    """Return one message per invalid field of structurally parsed video data."""

    messages: List[str] = []
    video_id = data.get(VIDEO_DATA_ID_KEY)
    if not isinstance(video_id, str) or not video_id:
        messages.append(INVALID_ID_MESSAGE)
    if not isinstance(data.get(VIDEO_DATA_RECORDED_FLAG_KEY), bool):
        messages.append(INVALID_RECORDED_FLAG_MESSAGE)
    reference_id = data.get(VIDEO_DATA_THUMBNAIL_REFERENCE_ID_KEY)
    if not isinstance(reference_id, str) or not reference_id:
        messages.append(INVALID_THUMBNAIL_REFERENCE_ID_MESSAGE)
    return messages


def parse_error_message(error: VideoDataParseError) -> str:
    if error is VideoDataParseError.BAD_JSON:
        return INVALID_JSON_MESSAGE
    return INVALID_KEY_SET_MESSAGE


def parse_video_data(raw: str) -> VideoMetadataRecord:
    """Run both decoding stages and return the typed record.

    Raises
    ------
    InvalidVideoDataError
        If either stage fails; ``messages`` lists every problem found.
    """

    result = try_parse_video_data(raw)
    if result.error is not None:
        raise InvalidVideoDataError([parse_error_message(result.error)])

    messages = validate_video_data(result.data)
    if messages:
        raise InvalidVideoDataError(messages)
    return VideoMetadataRecord.model_validate(result.data)


__all__ = [
    "INVALID_ID_MESSAGE",
    "INVALID_JSON_MESSAGE",
    "INVALID_KEY_SET_MESSAGE",
    "INVALID_RECORDED_FLAG_MESSAGE",
    "INVALID_THUMBNAIL_REFERENCE_ID_MESSAGE",
    "InvalidVideoDataError",
    "generate_thumbnail_reference_id",
    "parse_error_message",
    "parse_video_data",
    "serialize_video_data",
    "try_parse_video_data",
    "validate_video_data",
]
