"""Pydantic models describing IBM Video embed references and player parameters."""

from __future__ import annotations

from enum import Enum
from typing import Dict
from urllib.parse import urlencode

from pydantic import ConfigDict, Field

from ibmvideo.models.base import IbmVideoBaseModel


class DefaultQuality(str, Enum):
    """Initial playback quality requested from the embed player."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNSPECIFIED = "unspecified"


class WMode(str, Enum):
    """Legacy Flash window mode accepted by the embed player."""

    DIRECT = "direct"
    OPAQUE = "opaque"
    TRANSPARENT = "transparent"
    WINDOW = "window"
    UNSPECIFIED = "unspecified"


class EmbedReference(IbmVideoBaseModel):
    """Identity of an embeddable video.

    ``id`` is a video ID when ``is_recorded`` is ``True`` and a channel ID (a live stream)
    otherwise. Instances are immutable; they are produced by
    :func:`ibmvideo.utils.validation.parse_embed_url` or rebuilt from stored video data.
    """

    id: str = Field(min_length=1)
    is_recorded: bool

    model_config = ConfigDict(frozen=True)


def _text_flag(value: bool) -> str:
    return "true" if value else "false"


class EmbedUrlParameters(IbmVideoBaseModel):
    """Player configuration serialized into the query string of an embed URL."""

    default_quality: DefaultQuality = DefaultQuality.UNSPECIFIED
    display_controls: bool = True
    initial_volume: int = Field(default=50, ge=0, le=100)
    show_title: bool = True
    use_autoplay: bool = False
    use_html5_ui: bool = True
    wmode: WMode = WMode.UNSPECIFIED

    model_config = ConfigDict(frozen=True)

    def to_query_dict(self) -> Dict[str, str]:
        """Return the query parameters in the order the player documents them.

        Unspecified quality and window mode are left out entirely. ``useHtml5Ui`` is written as
        ``1``/``0`` while the other flags use ``true``/``false``, matching the player's URL
        parameter reference.
        """

        query: Dict[str, str] = {
            "initialVolume": str(self.initial_volume),
            "showTitle": _text_flag(self.show_title),
            "useAutoplay": _text_flag(self.use_autoplay),
            "useHtml5Ui": "1" if self.use_html5_ui else "0",
        }
        if self.default_quality is not DefaultQuality.UNSPECIFIED:
            query["defaultQuality"] = self.default_quality.value
        if self.wmode is not WMode.UNSPECIFIED:
            query["wMode"] = self.wmode.value
        query["displayControls"] = _text_flag(self.display_controls)
        return query

    def to_query_string(self) -> str:
        """Serialize the parameters as an ``application/x-www-form-urlencoded`` query string."""

        return urlencode(self.to_query_dict())


__all__ = ["DefaultQuality", "EmbedReference", "EmbedUrlParameters", "WMode"]
