"""Local on-disk cache of IBM Video thumbnails."""

from __future__ import annotations

import hashlib
import mimetypes
import os
import re
import stat
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, Optional, Union
from urllib.parse import urlsplit
from uuid import uuid4

import httpx
from rich.console import Console

from ibmvideo.config.settings import Settings, get_settings
from ibmvideo.models.thumbnail import ThumbnailOutcome, ThumbnailResult
from ibmvideo.services import create_http_client
from ibmvideo.services.api import IbmVideoApiClient, IbmVideoApiError

THUMBNAIL_FILENAME_PREFIX = "thumbnail"
THUMBNAIL_FILENAME_SEPARATOR = "_"
THUMBNAIL_RECORDED_IDENTIFIER = "recorded"
THUMBNAIL_STREAM_IDENTIFIER = "stream"
DEFAULT_THUMBNAIL_EXTENSION = "unknown"

_EXTENSION_PATTERN = re.compile(r"[a-z0-9]{1,10}")

_MIME_EXTENSIONS: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/pjpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/avif": "avif",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
    "image/svg+xml": "svg",
    "image/x-icon": "ico",
    "image/vnd.microsoft.icon": "ico",
}


class ThumbnailCacheConfigurationError(RuntimeError):
    """Raised when the thumbnails directory is missing, invalid or cannot be made writable."""


@dataclass(slots=True)
class _KeyLock:
    """Lock for one cache key and the number of callers holding or waiting on it."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


def _sha1(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def thumbnail_base_filename(video_or_channel_id: str, is_recorded: bool, thumbnail_reference_id: str) -> str:
    """Return the cache filename (without extension) for one media item and source.

    The thumbnail reference ID changes whenever the editor points the item at another video,
    so a new name (and a fresh download) follows every such edit.
    """

    return THUMBNAIL_FILENAME_SEPARATOR.join(
        (
            THUMBNAIL_FILENAME_PREFIX,
            _sha1(thumbnail_reference_id),
            THUMBNAIL_RECORDED_IDENTIFIER if is_recorded else THUMBNAIL_STREAM_IDENTIFIER,
            _sha1(video_or_channel_id),
        )
    )


def extension_from_uri(uri: str) -> Optional[str]:
    """Return the lowercase file extension of the URI path, if it has a usable one."""

    suffix = PurePosixPath(urlsplit(uri).path).suffix.lower().lstrip(".")
    return suffix if _EXTENSION_PATTERN.fullmatch(suffix) else None


def extension_from_content_type(content_type: str) -> Optional[str]:
    """Map a ``Content-Type`` header value to a file extension."""

    mime_type = content_type.split(";", 1)[0].strip().lower()
    if not mime_type:
        return None
    extension = _MIME_EXTENSIONS.get(mime_type)
    if extension is None:
        guessed = mimetypes.guess_extension(mime_type)
        extension = guessed.lstrip(".") if guessed else None
    return extension if extension and _EXTENSION_PATTERN.fullmatch(extension) else None


class ThumbnailCache:
    """Resolve a local thumbnail file for a video or channel, downloading it on a cache miss.

    Lookups for the same cache key are serialized with a per-key lock, and files are written to
    a temporary name and renamed into place, so concurrent readers never see partial files.
    Resolved paths are remembered in memory to avoid rescanning the directory.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        api_client: Optional[IbmVideoApiClient] = None,
        http_client: Optional[httpx.Client] = None,
        console: Optional[Console] = None,
        directory: Optional[Union[str, Path]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._owns_client = http_client is None
        self._http_client = http_client or create_http_client(self._settings)
        self._owns_api_client = api_client is None
        self._api_client = api_client or IbmVideoApiClient(
            settings=self._settings, http_client=self._http_client, console=self._console
        )
        self._directory_setting = directory if directory is not None else self._settings.thumbnails_directory
        self._index: Dict[str, Path] = {}
        self._locks: Dict[str, _KeyLock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    @property
    def directory(self) -> Path:
        """Return the configured thumbnails directory.

        Raises
        ------
        ThumbnailCacheConfigurationError
            If the directory is not configured, empty, or not a local filesystem path.
        """

        configured = self._directory_setting
        if configured is None:
            raise ThumbnailCacheConfigurationError("The thumbnails directory does not exist in the configuration.")
        raw = os.fspath(configured)
        if not raw.strip():
            raise ThumbnailCacheConfigurationError("The thumbnails directory is empty.")
        if "\x00" in raw or "://" in raw:
            raise ThumbnailCacheConfigurationError(f"{raw!r} is not a valid thumbnails directory.")
        return Path(raw).expanduser()

    def get_thumbnail_path(
        self,
        video_or_channel_id: str,
        is_recorded: bool,
        thumbnail_reference_id: str,
    ) -> Optional[Path]:
        """Return the local thumbnail path, or ``None`` when no thumbnail could be obtained."""

        return self.resolve(video_or_channel_id, is_recorded, thumbnail_reference_id).path

    def resolve(
        self,
        video_or_channel_id: str,
        is_recorded: bool,
        thumbnail_reference_id: str,
    ) -> ThumbnailResult:
        """Find or fetch the thumbnail for one media item.

        Parameters
        ----------
        video_or_channel_id:
            Video ID for recorded videos, channel ID for streams.
        is_recorded:
            Selects the video or the channel thumbnail lookup.
        thumbnail_reference_id:
            Token of the media item; part of the cache key.

        Returns
        -------
        ThumbnailResult
            The local path on ``HIT``/``DOWNLOADED``; otherwise ``path`` is ``None`` and
            ``outcome`` names the stage that failed. Upstream and network failures never raise.

        Raises
        ------
        ValueError
            If the ID or the thumbnail reference ID is empty.
        ThumbnailCacheConfigurationError
            If the thumbnails directory is invalid or cannot be prepared.
        """

        if not video_or_channel_id:
            raise ValueError("Video or channel ID must not be empty.")
        if not thumbnail_reference_id:
            raise ValueError("Thumbnail reference ID must not be empty.")

        directory = self.directory
        base_filename = thumbnail_base_filename(video_or_channel_id, is_recorded, thumbnail_reference_id)
        with self._lock_for(base_filename):
            self._prepare_directory(directory)
            cached = self._find_cached(directory, base_filename)
            if cached is not None:
                return ThumbnailResult(outcome=ThumbnailOutcome.HIT, path=cached)
            return self._fetch(directory, base_filename, video_or_channel_id, is_recorded)

    def close(self) -> None:
        """Close the HTTP clients created by this cache."""

        if self._owns_api_client:
            self._api_client.close()
        if self._owns_client:
            self._http_client.close()

    def __enter__(self) -> "ThumbnailCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #
    @contextmanager
    def _lock_for(self, base_filename: str) -> Iterator[None]:
        """Serialize work on one cache key; the entry is dropped once nobody uses it."""

        with self._locks_guard:
            entry = self._locks.setdefault(base_filename, _KeyLock())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[base_filename]

    def _prepare_directory(self, directory: Path) -> None:
        """Create the directory if needed and make sure the owner can write to it."""

        try:
            directory.mkdir(parents=True, exist_ok=True)
            if not os.access(directory, os.W_OK):
                directory.chmod(directory.stat().st_mode | stat.S_IRWXU)
        except OSError as exc:
            raise ThumbnailCacheConfigurationError(
                f"Could not prepare a writable thumbnails directory: {directory}"
            ) from exc
        if not os.access(directory, os.W_OK):
            raise ThumbnailCacheConfigurationError(f"Thumbnails directory is not writable: {directory}")

    def _find_cached(self, directory: Path, base_filename: str) -> Optional[Path]:
        indexed = self._index.get(base_filename)
        if indexed is not None:
            if indexed.is_file():
                return indexed
            del self._index[base_filename]

        matches = sorted(path for path in directory.glob(f"{base_filename}.*") if path.is_file())
        if not matches:
            return None
        self._index[base_filename] = matches[0]
        return matches[0]

    def _fetch(
        self,
        directory: Path,
        base_filename: str,
        video_or_channel_id: str,
        is_recorded: bool,
    ) -> ThumbnailResult:
        kind = "video" if is_recorded else "channel"
        try:
            if is_recorded:
                remote_uri = self._api_client.get_video_thumbnail_uri(video_or_channel_id)
            else:
                remote_uri = self._api_client.get_channel_thumbnail_uri(video_or_channel_id)
        except IbmVideoApiError as exc:
            self._console.log(
                f"[yellow]Thumbnail lookup failed:[/yellow] {exc} ({kind}_id={video_or_channel_id})"
            )
            return ThumbnailResult(outcome=ThumbnailOutcome.LOOKUP_FAILED, detail=str(exc))

        if remote_uri is None:
            self._console.log(f"[yellow]No remote thumbnail available[/yellow] ({kind}_id={video_or_channel_id})")
            return ThumbnailResult(outcome=ThumbnailOutcome.NO_REMOTE_THUMBNAIL)

        try:
            response = self._http_client.get(remote_uri)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._console.log(f"[yellow]Thumbnail download failed:[/yellow] {exc} (uri={remote_uri})")
            return ThumbnailResult(
                outcome=ThumbnailOutcome.DOWNLOAD_FAILED, remote_uri=remote_uri, detail=str(exc)
            )
        if response.status_code != 200:
            detail = f"unexpected status {response.status_code}"
            self._console.log(f"[yellow]Thumbnail download failed:[/yellow] {detail} (uri={remote_uri})")
            return ThumbnailResult(outcome=ThumbnailOutcome.DOWNLOAD_FAILED, remote_uri=remote_uri, detail=detail)

        extension = self._determine_extension(remote_uri)
        target = directory / f"{base_filename}.{extension}"
        try:
            self._write_atomically(target, response.content)
        except OSError as exc:
            self._console.log(f"[red]Failed to write thumbnail:[/red] {exc} (path={target})")
            return ThumbnailResult(outcome=ThumbnailOutcome.WRITE_FAILED, remote_uri=remote_uri, detail=str(exc))

        self._index[base_filename] = target
        self._console.log(f"[green]Thumbnail cached:[/green] {target} ({len(response.content)} bytes)")
        return ThumbnailResult(outcome=ThumbnailOutcome.DOWNLOADED, path=target, remote_uri=remote_uri)

    def _determine_extension(self, remote_uri: str) -> str:
        """Pick an extension from the URI path, else from a HEAD request's Content-Type."""

        extension = extension_from_uri(remote_uri)
        if extension is not None:
            return extension

        try:
            response = self._http_client.head(remote_uri)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._console.log(f"[yellow]Could not sniff thumbnail type:[/yellow] {exc} (uri={remote_uri})")
            return DEFAULT_THUMBNAIL_EXTENSION

        return extension_from_content_type(response.headers.get("content-type", "")) or DEFAULT_THUMBNAIL_EXTENSION

    @staticmethod
    def _write_atomically(target: Path, content: bytes) -> None:
        temporary = target.with_name(f".{target.stem}.{uuid4().hex}.tmp")
        try:
            temporary.write_bytes(content)
            os.replace(temporary, target)
        except OSError:
            if temporary.exists():
                temporary.unlink()
            raise


__all__ = [
    "DEFAULT_THUMBNAIL_EXTENSION",
    "ThumbnailCache",
    "ThumbnailCacheConfigurationError",
    "extension_from_content_type",
    "extension_from_uri",
    "thumbnail_base_filename",
]
