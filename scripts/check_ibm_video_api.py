"""Quick connectivity check against the configured IBM Video API."""

from __future__ import annotations

import sys

from ibmvideo.config.settings import get_settings
from ibmvideo.services.api import IbmVideoApiClient, IbmVideoApiError


def main(argv: list[str]) -> None:
    """Look up the thumbnail of a video (``video <id>``) or channel (``channel <id>``)."""

    if len(argv) != 2 or argv[0] not in ("video", "channel"):
        print("Usage: check_ibm_video_api.py video|channel <id>")
        return

    kind, identifier = argv
    settings = get_settings()
    print("API base URL:", settings.api_base_url)
    try:
        with IbmVideoApiClient(settings=settings) as client:
            if kind == "video":
                uri = client.get_video_thumbnail_uri(identifier)
            else:
                uri = client.get_channel_thumbnail_uri(identifier)
            print("Lookup successful, thumbnail URI:", uri)
    except IbmVideoApiError as exc:  # pragma: no cover - diagnostic script
        print("Lookup failed:", exc)


if __name__ == "__main__":
    main(sys.argv[1:])
