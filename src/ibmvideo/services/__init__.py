"""Service layer for the IBM Video embed toolkit."""

from __future__ import annotations

import httpx

from ibmvideo.config.settings import Settings

USER_AGENT = "ibm-video-embed"


def create_http_client(settings: Settings) -> httpx.Client:
    """Build the shared HTTP client with the configured timeouts.

    Error statuses are never raised by the client; callers inspect ``status_code`` themselves.
    """

    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds, connect=settings.http_connect_timeout_seconds),
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


__all__ = ["USER_AGENT", "create_http_client"]
