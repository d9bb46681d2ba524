"""
Canvas-fit endpoint
===================
``GET /transform?url=<source>``

1. Download the source (size and time bounded).
2. Fit it onto the OG canvas in a worker thread.
3. Respond 200 with the JPEG, or with a 1x1 GIF when any step fails.

Stateless: crawlers hit this URL directly and repeatedly, so caching is left
to HTTP (``Cache-Control``), not to the process.
"""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import urljoin, urlsplit

import aiohttp
from aiohttp import web

from ..errors import TransformError
from ..imaging.canvas import FALLBACK_GIF, fit
from .context import CONFIG, SESSION

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=31536000"
DOWNLOAD_CHUNK = 64 * 1024


async def download_source(
    session: aiohttp.ClientSession,
    url: str,
    *,
    timeout: float = 10.0,
    max_bytes: int = 10 * 1024 * 1024,
) -> bytes:
    """Fetch ``url`` fully, refusing bodies larger than ``max_bytes``."""
    if urlsplit(url).scheme not in ("http", "https"):
        raise TransformError(f"unsupported source scheme: {url}")

    async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as resp:
        resp.raise_for_status()
        if resp.content_length is not None and resp.content_length > max_bytes:
            raise TransformError(f"source too large ({resp.content_length} bytes)")

        data = bytearray()
        async for chunk in resp.content.iter_chunked(DOWNLOAD_CHUNK):
            data.extend(chunk)
            if len(data) > max_bytes:
                raise TransformError(f"source exceeds {max_bytes} bytes")
    return bytes(data)


async def transform(request: web.Request) -> web.Response:
    source = request.query.get("url", "").strip()
    if not source:
        raise web.HTTPBadRequest(text="Missing required query parameter: url")

    cfg = request.app[CONFIG]
    images = cfg.images
    # Sources arrive already normalized by the cascade; only relative ones need a base
    url = urljoin(f"{cfg.server.BASE_URL}/", source)

    try:
        data = await download_source(
            request.app[SESSION], url,
            timeout=images.TRANSFORM_TIMEOUT,
            max_bytes=images.max_transform_bytes,
        )
        body = await asyncio.to_thread(
            fit, data,
            width=images.OG_WIDTH,
            height=images.OG_HEIGHT,
            background=images.BACKGROUND,
            quality=images.JPEG_QUALITY,
        )
        content_type = "image/jpeg"
        logger.info("Transformed %s (%d -> %d bytes)", url, len(data), len(body))
    except Exception as exc:
        logger.warning("Transform failed for %s: %s", url, str(exc) or type(exc).__name__)
        body, content_type = FALLBACK_GIF, "image/gif"

    return web.Response(body=body, content_type=content_type, headers={"Cache-Control": CACHE_CONTROL})
