"""Tests for the stored video data codec."""

from __future__ import annotations

import base64
import json

import pytest

from ibmvideo.models.embed import EmbedReference
from ibmvideo.models.video_data import VideoDataParseError, VideoMetadataRecord
from ibmvideo.utils.video_data import (
    INVALID_ID_MESSAGE,
    INVALID_JSON_MESSAGE,
    INVALID_KEY_SET_MESSAGE,
    INVALID_RECORDED_FLAG_MESSAGE,
    INVALID_THUMBNAIL_REFERENCE_ID_MESSAGE,
    InvalidVideoDataError,
    generate_thumbnail_reference_id,
    parse_video_data,
    serialize_video_data,
    try_parse_video_data,
    validate_video_data,
)

REFERENCE = EmbedReference(id="XyZ123", is_recorded=True)
DEEPLY_NESTED = "[" * 100000 + "]" * 100000


def test_serialize_writes_exactly_three_keys() -> None:
    payload = json.loads(serialize_video_data(REFERENCE, "token"))

    assert payload == {"id": "XyZ123", "is_recorded": True, "thumbnail_reference_id": "token"}


def test_serialize_mints_reference_id_when_missing() -> None:
    first = json.loads(serialize_video_data(REFERENCE))
    second = json.loads(serialize_video_data(REFERENCE))

    assert first["thumbnail_reference_id"]
    assert first["thumbnail_reference_id"] != second["thumbnail_reference_id"]


def test_serialize_rejects_empty_reference_id() -> None:
    with pytest.raises(ValueError):
        serialize_video_data(REFERENCE, "")


def test_serialize_rejects_empty_video_id() -> None:
    with pytest.raises(ValueError):
        serialize_video_data(EmbedReference.model_construct(id="", is_recorded=False), "token")


def test_generated_reference_id_is_base64_of_eight_bytes() -> None:
    token = generate_thumbnail_reference_id()

    assert len(base64.b64decode(token)) == 8


def test_try_parse_rejects_missing_key() -> None:
    result = try_parse_video_data('{"id":"x","is_recorded":true}')

    assert result.error is VideoDataParseError.INVALID_KEY_SET
    assert not result.ok


def test_try_parse_rejects_extra_key() -> None:
    result = try_parse_video_data('{"id":"x","is_recorded":true,"thumbnail_reference_id":"t","more":1}')

    assert result.error is VideoDataParseError.INVALID_KEY_SET


@pytest.mark.parametrize("raw", ["not json", "", "[1, 2]", '"text"', "null", DEEPLY_NESTED])
def test_try_parse_rejects_non_objects(raw: str) -> None:
    assert try_parse_video_data(raw).error is VideoDataParseError.BAD_JSON


def test_try_parse_returns_values_unvalidated() -> None:
    result = try_parse_video_data('{"id":5,"is_recorded":"yes","thumbnail_reference_id":""}')

    assert result.ok
    assert result.data == {"id": 5, "is_recorded": "yes", "thumbnail_reference_id": ""}


def test_validate_reports_each_bad_field() -> None:
    messages = validate_video_data({"id": 5, "is_recorded": "yes", "thumbnail_reference_id": ""})

    assert messages == [
        INVALID_ID_MESSAGE,
        INVALID_RECORDED_FLAG_MESSAGE,
        INVALID_THUMBNAIL_REFERENCE_ID_MESSAGE,
    ]


def test_validate_accepts_good_data() -> None:
    assert validate_video_data({"id": "x", "is_recorded": False, "thumbnail_reference_id": "t"}) == []


def test_parse_returns_record() -> None:
    record = parse_video_data(serialize_video_data(REFERENCE, "token"))

    assert record == VideoMetadataRecord(id="XyZ123", is_recorded=True, thumbnail_reference_id="token")
    assert record.reference == REFERENCE


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ("{broken", INVALID_JSON_MESSAGE),
        ('{"id":"x"}', INVALID_KEY_SET_MESSAGE),
        ('{"id":"x","is_recorded":1,"thumbnail_reference_id":"t"}', INVALID_RECORDED_FLAG_MESSAGE),
    ],
)
def test_parse_raises_with_messages(raw: str, message: str) -> None:
    with pytest.raises(InvalidVideoDataError) as excinfo:
        parse_video_data(raw)

    assert excinfo.value.messages == [message]
