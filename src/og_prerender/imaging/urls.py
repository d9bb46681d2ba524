"""
URL normalisation for og:image references
=========================================

Image references come straight from user-edited rows: relative paths, plain
``http://`` links, spaces and non-ASCII file names all show up. Crawlers want
absolute, HTTPS, percent-encoded URLs, and they compare URLs byte for byte, so
normalising twice must not double-encode.

Every helper here is total: bad input yields a best-effort string, never an
exception.
"""

from __future__ import annotations

import logging
import re
from posixpath import splitext
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from ..pages.model import ImageMime

logger = logging.getLogger(__name__)

_ENCODED = re.compile(r"%[0-9A-Fa-f]{2}")
_MANUAL_SPLIT = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*://[^/?#]*)(.*)$", re.S)

# RFC 3986 pchar minus "/" (segments are quoted one at a time)
_SEGMENT_SAFE = "!$&'()*+,;=:@-._~"
# Query/fragment keep their delimiters, and "%" so re-quoting is a no-op
_QUERY_SAFE = "!$&'()*+,;=:@-._~/?%"
# encodeURI-style whole-string fallback
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#%"

_MIME_BY_EXT: dict[str, ImageMime] = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def _encode_segment(segment: str) -> str:
    if _ENCODED.search(segment):
        return segment
    try:
        return quote(segment, safe=_SEGMENT_SAFE)
    except UnicodeError:
        return segment


def _encode_path(path: str) -> str:
    return "/".join(_encode_segment(seg) for seg in path.split("/"))


def _upgrade_scheme(scheme: str) -> str:
    return "https" if scheme.lower() == "http" else scheme


def _normalize_parsed(absolute: str) -> str:
    parts = urlsplit(absolute)
    return urlunsplit(
        (
            _upgrade_scheme(parts.scheme),
            parts.netloc,
            _encode_path(parts.path),
            quote(parts.query, safe=_QUERY_SAFE),
            quote(parts.fragment, safe=_QUERY_SAFE),
        )
    )


def _base_scheme(base: str) -> str:
    try:
        return urlsplit(base).scheme or "https"
    except ValueError:
        return "https"


def _normalize_manual(raw: str, base: str) -> str:
    """Fallback for strings ``urlsplit`` rejects (bad ports, broken IPv6 hosts)."""
    raw = raw.strip()
    if raw.startswith("//"):
        # protocol-relative, take the base scheme
        raw = f"{_base_scheme(base)}:{raw}"
    match = _MANUAL_SPLIT.match(raw)
    if not match:
        raise ValueError("no scheme://host prefix")
    origin, path = match.groups()
    if origin[:7].lower() == "http://":
        origin = "https://" + origin[7:]
    return origin + _encode_path(path)


def normalize(raw: str, base: str) -> str:
    """
    Make ``raw`` absolute (against ``base``), HTTPS and safely percent-encoded.

    Idempotent: ``normalize(normalize(x, b), b) == normalize(x, b)``.
    """
    try:
        absolute = urljoin(base, raw)
        return _normalize_parsed(absolute)
    except (ValueError, UnicodeError) as exc:
        logger.debug("URL parse failed for %r: %s", raw, exc)

    try:
        return _normalize_manual(raw, base)
    except (ValueError, UnicodeError):
        pass

    try:
        return quote(raw, safe=_URI_SAFE)
    except UnicodeError:
        logger.warning("Could not encode URL %r; using it verbatim", raw)
        return raw


def transform_url(source_url: str, transform_base: str) -> str:
    """Return the canvas-fit endpoint URL wrapping ``source_url``."""
    return f"{transform_base.rstrip('/')}/transform?url={quote(source_url, safe='')}"


def mime_for_url(url: str) -> ImageMime:
    """Derive an image MIME type from the URL path's file extension."""
    try:
        path = urlsplit(url).path
    except ValueError:
        path = url
    return _MIME_BY_EXT.get(splitext(path)[1].lower(), "image/jpeg")
