"""Application factory and process entry point."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import AsyncIterator, Optional

import aiohttp
from aiohttp import web

from .. import __version__
from ..clients.supabase import EntityStore, SupabaseStore
from ..config import Config, load_config
from ..imaging.pipeline import ImageResolver
from ..imaging.probe import make_prober
from .context import CONFIG, RESOLVER, SESSION, STARTED_AT, STORE
from .middleware import request_logging
from .routes import setup_routes

logger = logging.getLogger(__name__)


def _loop_exception_handler(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """Log stray task errors instead of letting them take the process down."""
    logger.error(
        "Unhandled error in event loop: %s",
        context.get("message", "unknown"),
        exc_info=context.get("exception"),
    )


async def _install_exception_handler(app: web.Application) -> None:
    asyncio.get_running_loop().set_exception_handler(_loop_exception_handler)


async def _announce_shutdown(app: web.Application) -> None:
    logger.info(
        "Shutdown requested: draining connections (grace %.0fs)",
        app[CONFIG].server.SHUTDOWN_GRACE_SECONDS,
    )


def _collaborators(
    store: Optional[EntityStore],
    resolver: Optional[ImageResolver],
    session: Optional[aiohttp.ClientSession],
):
    """
    Build the ``cleanup_ctx`` hook that owns the shared HTTP session.

    Injected collaborators are used as-is; missing ones are built on top of
    the session. A session passed in by the caller is not closed here.
    """

    async def _ctx(app: web.Application) -> AsyncIterator[None]:
        cfg = app[CONFIG]
        owned = session is None
        http = session or aiohttp.ClientSession(
            headers={"User-Agent": f"og-prerender/{__version__} (+{cfg.server.BASE_URL})"},
        )
        app[SESSION] = http
        app[STORE] = store or SupabaseStore(
            http,
            cfg.store.SUPABASE_URL,
            cfg.store.SUPABASE_ANON_KEY,
            timeout=cfg.store.TIMEOUT,
        )
        app[RESOLVER] = resolver or ImageResolver(
            make_prober(
                http,
                min_width=cfg.images.MIN_WIDTH,
                min_height=cfg.images.MIN_HEIGHT,
                timeout=cfg.images.PROBE_TIMEOUT,
                retries=cfg.images.PROBE_RETRIES,
            ),
            og_width=cfg.images.OG_WIDTH,
            og_height=cfg.images.OG_HEIGHT,
        )
        try:
            yield
        finally:
            if owned:
                await http.close()

    return _ctx


def create_app(
    config: Config,
    *,
    store: Optional[EntityStore] = None,
    resolver: Optional[ImageResolver] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> web.Application:
    """
    Assemble the prerender application.

    :param config: Read-only settings for every section.
    :param store: Entity lookups; defaults to :class:`SupabaseStore`.
    :param resolver: Image cascade; defaults to one backed by a network prober.
    :param session: Outbound HTTP session; created and closed with the app
        when omitted.
    """
    app = web.Application(middlewares=[request_logging])
    app[CONFIG] = config
    app[STARTED_AT] = time.monotonic()
    app.cleanup_ctx.append(_collaborators(store, resolver, session))
    app.on_startup.append(_install_exception_handler)
    app.on_shutdown.append(_announce_shutdown)
    setup_routes(app)
    return app


def run(config: Config | None = None) -> None:
    """
    Serve until SIGINT/SIGTERM.

    ``run_app`` stops accepting connections on the signal and gives in-flight
    requests ``SHUTDOWN_GRACE_SECONDS`` to finish before closing them.
    """
    config = config or load_config()
    app = create_app(config)
    logger.info("Prerender server running on port %d", config.server.PORT)
    logger.info("Health check available at http://%s:%d/health", config.server.HOST, config.server.PORT)
    web.run_app(
        app,
        host=config.server.HOST,
        port=config.server.PORT,
        shutdown_timeout=config.server.SHUTDOWN_GRACE_SECONDS,
        access_log=None,
        print=None,
    )
