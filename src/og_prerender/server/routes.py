"""
HTTP routes
===========
- ``GET /expert/{id}`` / ``GET /talk/{id}``: crawlers get an OG document,
  everyone else a 302 to the shared page on the main site.
- ``GET /transform``: canvas-fit endpoint (see :mod:`.transform`).
- ``GET /health`` and ``GET /``: liveness.
- anything else: 302 to the main site.

Lookup misses and store errors both end in the same 302 a human would get.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

from aiohttp import web

from ..errors import StoreError
from ..pages.builder import build_html, clean_description
from ..pages.crawler import is_crawler
from ..pages.model import EntityKind, PageMetadata
from .context import CONFIG, RESOLVER, STARTED_AT, STORE
from .transform import transform

logger = logging.getLogger(__name__)


def _target_url(request: web.Request, kind: EntityKind, entity_id: str) -> str:
    base = request.app[CONFIG].server.BASE_URL
    return f"{base}/shared/{kind}/{quote(entity_id, safe='')}"


def public_base(request: web.Request) -> str:
    """Public origin of this service, as crawlers see it."""
    configured = request.app[CONFIG].server.PUBLIC_URL
    return configured or f"https://{request.host}"


async def render_preview(
    request: web.Request,
    *,
    kind: EntityKind,
    title: str,
    description: str,
    image_ref: Optional[str],
    target: str,
) -> web.Response:
    """Resolve the og:image and render the preview document."""
    cfg = request.app[CONFIG]
    public = public_base(request)
    page_url = f"{public}{request.rel_url.raw_path}"

    image = await request.app[RESOLVER].resolve(
        image_ref,
        cfg.images.DEFAULT_IMAGE_URL,
        cfg.images.PLACEHOLDER_IMAGE_URL,
        public,
        base=cfg.server.BASE_URL,
    )
    meta = PageMetadata(
        title=title,
        description=description,
        canonical_url=page_url,
        og_url=page_url,
        image=image,
        og_type=PageMetadata.og_type_for(kind),
        redirect_url=target,
    )
    html = build_html(meta, site_name=cfg.site.NAME, locale=cfg.site.LOCALE, lang=cfg.site.LANG)
    return web.Response(text=html, content_type="text/html", charset="utf-8")


async def expert_preview(request: web.Request) -> web.Response:
    expert_id = request.match_info["id"]
    target = _target_url(request, "expert", expert_id)

    if not is_crawler(request.headers.get("User-Agent")):
        raise web.HTTPFound(target)

    try:
        expert = await request.app[STORE].get_expert(expert_id)
    except StoreError as exc:
        logger.error("Error fetching expert %s: %s", expert_id, exc)
        raise web.HTTPFound(target)

    if expert is None:
        logger.info("Expert %s not found or inactive", expert_id)
        raise web.HTTPFound(target)

    site = request.app[CONFIG].site
    role = expert.roles[0] if expert.roles else site.DEFAULT_ROLE
    return await render_preview(
        request,
        kind="expert",
        title=f"{expert.name} - {role} | {site.NAME}",
        description=clean_description(expert.intro) or f"{expert.name} på {site.NAME}",
        image_ref=expert.image_ref,
        target=target,
    )


async def talk_preview(request: web.Request) -> web.Response:
    talk_id = request.match_info["id"]
    target = _target_url(request, "talk", talk_id)

    if not is_crawler(request.headers.get("User-Agent")):
        raise web.HTTPFound(target)

    try:
        talk = await request.app[STORE].get_talk(talk_id)
    except StoreError as exc:
        logger.error("Error fetching talk %s: %s", talk_id, exc)
        raise web.HTTPFound(target)

    if talk is None:
        logger.info("Talk %s not found", talk_id)
        raise web.HTTPFound(target)

    site = request.app[CONFIG].site
    speaker = (talk.expert.name if talk.expert else "") or site.DEFAULT_ROLE
    return await render_preview(
        request,
        kind="talk",
        title=f"{talk.title} - {speaker} | {site.NAME}",
        description=clean_description(talk.description),
        image_ref=talk.image_candidate,
        target=target,
    )


def _status(request: web.Request) -> dict:
    return {
        "status": "ok",
        "uptime": round(time.monotonic() - request.app[STARTED_AT], 3),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def health(request: web.Request) -> web.Response:
    return web.json_response(_status(request))


async def root(request: web.Request) -> web.Response:
    return web.json_response({**_status(request), "service": "prerender-server"})


async def fallback(request: web.Request) -> web.Response:
    raise web.HTTPFound(request.app[CONFIG].server.BASE_URL)


def setup_routes(app: web.Application) -> None:
    # Order matters: the catch-all must be registered last
    app.router.add_get("/expert/{id}", expert_preview)
    app.router.add_get("/talk/{id}", talk_preview)
    app.router.add_get("/transform", transform)
    app.router.add_get("/health", health)
    app.router.add_get("/", root)
    app.router.add_get("/{tail:.*}", fallback)
