"""Request logging and last-resort error isolation."""

from __future__ import annotations

import logging
import time

from aiohttp import web

from .context import CONFIG

logger = logging.getLogger(__name__)


@web.middleware
async def request_logging(request: web.Request, handler) -> web.StreamResponse:
    """
    Log one line per request and keep unexpected errors away from the client.

    ``HTTPException`` responses (redirects, 400s) pass through unchanged. Any
    other exception is logged with its traceback and turned into a redirect to
    the main site, so no handler bug surfaces as a 5xx.
    """
    started = time.monotonic()
    ua = request.headers.get("User-Agent", "-")
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        logger.info(
            "%s %s -> %d (%.1fms) ua=%r",
            request.method, request.path_qs, exc.status, (time.monotonic() - started) * 1000, ua,
        )
        raise
    except Exception:
        logger.exception("Unhandled error while serving %s %s", request.method, request.path_qs)
        raise web.HTTPFound(request.app[CONFIG].server.BASE_URL)

    logger.info(
        "%s %s -> %d (%.1fms) ua=%r",
        request.method, request.path_qs, response.status, (time.monotonic() - started) * 1000, ua,
    )
    return response
