"""Read-only client for the IBM Video REST API thumbnail lookups."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx
from rich.console import Console

from ibmvideo.config.settings import Settings, get_settings
from ibmvideo.services import create_http_client

_SIZE_LABEL_PATTERN = re.compile(r"(\d+)x(\d+)")


class IbmVideoApiError(RuntimeError):
    """Base exception raised when an IBM Video API lookup fails."""


class ApiTransportError(IbmVideoApiError):
    """Raised when the request could not be completed (DNS, TLS, timeout, reset)."""


class ApiBadResponseError(IbmVideoApiError):
    """Raised when the API answers with an unexpected status or payload shape."""

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None) -> None:
        super().__init__(message or "A bad response was received to an IBM Video API request.")
        self.status_code = status_code


class IbmVideoApiClient:
    """Look up channel and video thumbnail URIs through the IBM Video JSON API.

    A missing or empty thumbnail entry is a normal answer and yields ``None``. A response that
    lacks the ``channel``/``video`` envelope, or that is not JSON at all, is an
    :class:`ApiBadResponseError`.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
        console: Optional[Console] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._owns_client = http_client is None
        self._http_client = http_client or create_http_client(self._settings)
        self._base_url = str(self._settings.api_base_url).rstrip("/")

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    def get_channel_thumbnail_uri(self, channel_id: str) -> Optional[str]:
        """Return the URI of the largest channel picture, or ``None`` if there is none.

        Pictures are keyed by ``"<width>x<height>"``. Keys that do not follow that form are
        skipped, but the first URI seen is kept as a fallback so oddly labelled data still
        produces a thumbnail.

        Raises
        ------
        ValueError
            If ``channel_id`` is empty.
        ApiTransportError
            If the HTTP request fails in transit.
        ApiBadResponseError
            If the API returns a non-200 status or an unexpected payload.
        """

        if not channel_id:
            raise ValueError("Channel ID must not be empty.")

        payload = self._get_json(f"/channels/{quote(channel_id, safe='')}.json", "channel")
        pictures = self._thumbnail_map(self._envelope(payload, "channel"), "picture")
        if pictures is None:
            return None

        fallback_uri: Optional[str] = None
        best_uri: Optional[str] = None
        best_pixels = 0
        for size_label, uri in pictures.items():
            if fallback_uri is None:
                fallback_uri = uri
            pixels = _pixel_area(size_label)
            if pixels is not None and pixels > best_pixels:
                best_pixels = pixels
                best_uri = uri

        chosen = best_uri if best_uri is not None else fallback_uri
        return chosen or None

    def get_video_thumbnail_uri(self, video_id: str) -> Optional[str]:
        """Return the ``default`` thumbnail URI of a recorded video, or ``None``.

        Raises
        ------
        ValueError
            If ``video_id`` is empty.
        ApiTransportError
            If the HTTP request fails in transit.
        ApiBadResponseError
            If the API returns a non-200 status or an unexpected payload.
        """

        if not video_id:
            raise ValueError("Video ID must not be empty.")

        payload = self._get_json(f"/videos/{quote(video_id, safe='')}.json", "video")
        thumbnails = self._thumbnail_map(self._envelope(payload, "video"), "thumbnail")
        if thumbnails is None:
            return None
        return thumbnails.get("default") or None

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""

        if self._owns_client:
            self._http_client.close()

    def __enter__(self) -> "IbmVideoApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #
    def _get_json(self, path: str, resource: str) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"
        self._console.log(f"Requesting IBM Video {resource} metadata ({url})")
        try:
            response = self._http_client.get(url)
        except httpx.HTTPError as exc:
            raise ApiTransportError(
                f"An HTTP error occurred while requesting {resource} metadata: {exc}"
            ) from exc

        if response.status_code != 200:
            raise ApiBadResponseError(
                f"The response code returned was {response.status_code}, but response code 200 was expected.",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except (ValueError, RecursionError) as exc:
            raise ApiBadResponseError("The IBM Video API returned a response with an invalid body.") from exc
        if not isinstance(payload, dict):
            raise ApiBadResponseError("The IBM Video API returned a response with an invalid body.")
        return payload

    @staticmethod
    def _envelope(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
        if key not in payload:
            raise ApiBadResponseError(f'The IBM Video API returned a response without a root "{key}" key.')
        envelope = payload[key]
        if not isinstance(envelope, dict):
            raise ApiBadResponseError(f'The IBM Video API returned an invalid "{key}" element type.')
        return envelope

    @staticmethod
    def _thumbnail_map(envelope: Mapping[str, Any], key: str) -> Optional[Dict[str, str]]:
        thumbnails = envelope.get(key)
        if thumbnails is None or thumbnails in ({}, [], ""):
            return None
        if not isinstance(thumbnails, dict) or not all(isinstance(uri, str) for uri in thumbnails.values()):
            raise ApiBadResponseError(f'The "{key}" element of the IBM Video response is invalid.')
        return thumbnails


def _pixel_area(size_label: str) -> Optional[int]:
    match = _SIZE_LABEL_PATTERN.fullmatch(size_label.strip())
    if match is None:
        return None
    return int(match.group(1)) * int(match.group(2))


__all__ = ["ApiBadResponseError", "ApiTransportError", "IbmVideoApiClient", "IbmVideoApiError"]
