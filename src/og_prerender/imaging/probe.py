"""
Dimension probe
===============
1. GET the image and stream the body in small chunks.
2. Feed each chunk to Pillow's incremental parser until the header yields a size.
3. Stop reading (the rest of the payload is never downloaded).
4. Return :class:`ProbeResult` or ``None`` on any failure.

One retry after a failed attempt; each attempt is capped by ``timeout``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

import aiohttp
from PIL import Image, ImageFile

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096
MAX_HEADER_BYTES = 1024 * 1024

Prober = Callable[[str], Awaitable["ProbeResult | None"]]


@dataclass(slots=True, frozen=True)
class ProbeResult:
    width: int
    height: int
    too_small: bool


def is_too_small(width: int, height: int, min_width: int = 200, min_height: int = 200) -> bool:
    return width < min_width or height < min_height


async def _read_size(session: aiohttp.ClientSession, url: str, timeout: float) -> tuple[int, int]:
    parser = ImageFile.Parser()
    read = 0
    async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as resp:
        resp.raise_for_status()
        async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
            parser.feed(chunk)
            if parser.image is not None:
                return parser.image.size
            read += len(chunk)
            if read >= MAX_HEADER_BYTES:
                raise ValueError(f"no image header within {MAX_HEADER_BYTES} bytes")
    raise ValueError("stream ended before image header was parsed")


async def probe(
    session: aiohttp.ClientSession,
    url: str,
    *,
    min_width: int = 200,
    min_height: int = 200,
    timeout: float = 5.0,
    retries: int = 1,
) -> ProbeResult | None:
    """
    Return the pixel size of the image at ``url`` without downloading all of it.

    :returns: ``ProbeResult`` or ``None`` when the image is unreachable or
        unparseable. Callers treat ``None`` like ``too_small``.
    """
    for attempt in range(1, retries + 2):
        started = time.monotonic()
        try:
            width, height = await _read_size(session, url, timeout)
        except (
            aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError, SyntaxError,
            Image.DecompressionBombError,
        ) as exc:
            logger.warning(
                "probe url=%s attempt=%d outcome=error latency_ms=%.1f error=%s",
                url, attempt, (time.monotonic() - started) * 1000, str(exc) or type(exc).__name__,
            )
            continue

        too_small = is_too_small(width, height, min_width, min_height)
        logger.info(
            "probe url=%s attempt=%d outcome=%s size=%dx%d latency_ms=%.1f",
            url, attempt, "too_small" if too_small else "ok", width, height,
            (time.monotonic() - started) * 1000,
        )
        return ProbeResult(width=width, height=height, too_small=too_small)

    return None


def make_prober(
    session: aiohttp.ClientSession,
    *,
    min_width: int = 200,
    min_height: int = 200,
    timeout: float = 5.0,
    retries: int = 1,
) -> Prober:
    """Bind ``probe`` to a session and policy so the pipeline only passes URLs."""

    async def _probe(url: str) -> ProbeResult | None:
        return await probe(
            session, url,
            min_width=min_width, min_height=min_height,
            timeout=timeout, retries=retries,
        )

    return _probe
