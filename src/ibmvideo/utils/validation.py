"""Parsing, validation and assembly of IBM Video embed URLs.

An embed URL has the shape::

    [scheme] video.ibm.com/embed/ [recorded/] <id> [?query] [#fragment]

where the scheme is ``https://``, ``http://``, ``//`` or nothing. The ``recorded/`` segment marks
an on-demand video; without it the ID names a channel (a live stream). The ID is a single
percent-encoded path segment. Query and fragment are accepted but not interpreted.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote, unquote

from ibmvideo.models.embed import EmbedReference, EmbedUrlParameters


class InvalidEmbedUrlError(ValueError):
    """Raised when a provided URL is not a valid IBM Video embed URL."""


EMBED_URL_SCHEMES = ("https://", "http://", "//", "")

EMBED_URL_BASE_RECORDED = "video.ibm.com/embed/recorded/"
EMBED_URL_BASE_STREAM = "video.ibm.com/embed/"

# RFC 3986 path segment characters (no "/"), plus percent escapes.
_SEGMENT_CHARACTER = r"(?:[a-z0-9\-._~!$&'()*+,;=:@]|%[0-9a-f]{2})"
# RFC 3986 sections 3.4 and 3.5: query and fragment also allow "/" and "?".
_QUERY_CHARACTER = r"(?:[a-z0-9\-._~!$&'()*+,;=:@/?]|%[0-9a-f]{2})"

EMBED_URL_REGEX = (
    r"(?P<scheme>https://|http://|//)?"
    r"video\.ibm\.com/embed/"
    r"(?P<recorded>recorded/)?"
    rf"(?P<id>{_SEGMENT_CHARACTER}+)"
    rf"(?:\?(?P<query>{_QUERY_CHARACTER}*))?"
    rf"(?:#(?P<fragment>{_QUERY_CHARACTER}*))?"
)

_EMBED_URL_PATTERN = re.compile(EMBED_URL_REGEX, re.IGNORECASE | re.ASCII)


def is_embed_url_valid(embed_url: str) -> bool:
    """Return ``True`` if the entire string matches the embed URL grammar."""

    return _EMBED_URL_PATTERN.fullmatch(embed_url) is not None


def parse_embed_url(embed_url: str) -> EmbedReference:
    """Extract the video or channel ID and the recorded flag from an embed URL.

    Callers that must reject malformed input should check :func:`is_embed_url_valid` first;
    the result for input outside the grammar is not guaranteed beyond the failures below.

    Raises
    ------
    InvalidEmbedUrlError
        If the URL is empty, does not contain ``video.ibm.com/embed/``, or has an empty ID.
    """

    if not embed_url:
        raise InvalidEmbedUrlError("Embed URL is empty.")

    match = _EMBED_URL_PATTERN.fullmatch(embed_url)
    if match is None:
        raise InvalidEmbedUrlError(f"Embed URL is not in the required format: {embed_url!r}")

    return EmbedReference(id=unquote(match.group("id")), is_recorded=match.group("recorded") is not None)


def assemble_embed_url(
    reference: EmbedReference,
    scheme: str = "",
    parameters: Optional[EmbedUrlParameters] = None,
) -> str:
    """Build the embed URL for ``reference``.

    The ID is percent-encoded as a single path segment (a space becomes ``%20``). When
    ``parameters`` is given its query string is appended after ``?``.

    Raises
    ------
    ValueError
        If the reference ID is empty.
    """

    if not reference.id:
        raise ValueError("Video or channel ID must not be empty.")

    base_url = EMBED_URL_BASE_RECORDED if reference.is_recorded else EMBED_URL_BASE_STREAM
    url = f"{scheme}{base_url}{quote(reference.id, safe='')}"
    if parameters is None:
        return url
    return f"{url}?{parameters.to_query_string()}"


__all__ = [
    "EMBED_URL_BASE_RECORDED",
    "EMBED_URL_BASE_STREAM",
    "EMBED_URL_REGEX",
    "EMBED_URL_SCHEMES",
    "InvalidEmbedUrlError",
    "assemble_embed_url",
    "is_embed_url_valid",
    "parse_embed_url",
]
