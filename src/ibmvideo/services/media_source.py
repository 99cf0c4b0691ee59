"""Entry points a host application calls to store, render and describe IBM videos."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from rich.console import Console

from ibmvideo.config.settings import Settings, get_settings
from ibmvideo.models.embed import EmbedUrlParameters
from ibmvideo.models.video_data import VideoMetadataRecord
from ibmvideo.services.thumbnails import ThumbnailCache, ThumbnailCacheConfigurationError
from ibmvideo.utils.validation import assemble_embed_url, parse_embed_url
from ibmvideo.utils.video_data import (
    InvalidVideoDataError,
    parse_error_message,
    parse_video_data,
    serialize_video_data,
    try_parse_video_data,
    validate_video_data,
)

EDITING_SCHEME = "https://"


class MediaSource:
    """Glue between embed URLs typed by editors, the stored video data, and rendering.

    ``prepare_video_data`` is what a form submit calls, ``embed_url_for_value`` what a
    renderer calls, and ``get_thumbnail_path`` what a metadata read calls. Thumbnail problems
    are logged and reported as ``None`` so the video itself can always be rendered.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        thumbnail_cache: Optional[ThumbnailCache] = None,
        console: Optional[Console] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._owns_cache = thumbnail_cache is None
        self._thumbnail_cache = thumbnail_cache or ThumbnailCache(settings=self._settings, console=self._console)

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    def prepare_video_data(self, embed_url: str, current_value: Optional[str] = None) -> Optional[str]:
        """Turn a submitted embed URL into the value to store.

        Parameters
        ----------
        embed_url:
            URL entered by the editor. An empty string clears the field.
        current_value:
            Value stored before this submit, if any. Its thumbnail reference ID is reused when
            the URL still points at the same video or channel; otherwise a new one is minted so
            the cached thumbnail is refreshed.

        Returns
        -------
        Optional[str]
            JSON value to store, or ``None`` when the field should be emptied.

        Raises
        ------
        InvalidEmbedUrlError
            If ``embed_url`` is not a valid embed URL.
        """

        embed_url = embed_url.strip()
        if not embed_url:
            return None

        reference = parse_embed_url(embed_url)
        previous = self._read_record(current_value, quiet=True)
        if previous is not None and previous.reference == reference:
            return serialize_video_data(reference, previous.thumbnail_reference_id)
        return serialize_video_data(reference)

    def embed_url_for_value(
        self,
        value: Optional[str],
        parameters: Optional[EmbedUrlParameters] = None,
    ) -> Optional[str]:
        """Return the player URL for a stored value, or ``None`` if nothing should render.

        The configured scheme (``//`` by default) and player defaults are used unless
        ``parameters`` overrides the latter.
        """

        record = self._read_record(value)
        if record is None:
            return None
        if parameters is None:
            parameters = self._settings.player
        return assemble_embed_url(record.reference, self._settings.embed_scheme, parameters)

    def embed_url_for_editing(self, value: Optional[str]) -> Optional[str]:
        """Return the canonical embed URL to prefill an edit form with."""

        record = self._read_record(value, quiet=True)
        if record is None:
            return None
        return assemble_embed_url(record.reference, EDITING_SCHEME)

    def validate_value(self, value: Optional[str]) -> List[str]:
        """Return validation messages for a stored value; empty values are always valid."""

        if not value:
            return []
        result = try_parse_video_data(value)
        if result.error is not None:
            return [parse_error_message(result.error)]
        return validate_video_data(result.data)

    def get_thumbnail_path(self, value: Optional[str]) -> Optional[Path]:
        """Return the cached local thumbnail for a stored value, downloading it if needed."""

        record = self._read_record(value)
        if record is None:
            return None
        try:
            return self._thumbnail_cache.get_thumbnail_path(
                record.id, record.is_recorded, record.thumbnail_reference_id
            )
        except ThumbnailCacheConfigurationError as exc:
            self._console.log(f"[red]Thumbnail cache misconfigured:[/red] {exc}")
            return None

    def close(self) -> None:
        """Release the thumbnail cache if this instance created it."""

        if self._owns_cache:
            self._thumbnail_cache.close()

    def __enter__(self) -> "MediaSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #
    def _read_record(self, value: Optional[str], *, quiet: bool = False) -> Optional[VideoMetadataRecord]:
        if not value:
            return None
        try:
            return parse_video_data(value)
        except InvalidVideoDataError as exc:
            if not quiet:
                self._console.log(f"[yellow]Ignoring invalid stored video data:[/yellow] {exc}")
            return None


__all__ = ["EDITING_SCHEME", "MediaSource"]
