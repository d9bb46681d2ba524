import re

import pytest
from aiohttp.test_utils import TestClient, TestServer
from unittest.mock import AsyncMock, MagicMock

from og_prerender.errors import StoreError
from og_prerender.imaging.pipeline import ImageResolver
from og_prerender.imaging.probe import ProbeResult
from og_prerender.pages.model import Expert, ResolvedImage, Talk
from og_prerender.server.app import create_app

BOT = {"User-Agent": "facebookexternalhit/1.1"}
BROWSER = {"User-Agent": "Mozilla/5.0 (X11; Linux x86_64) Chrome/120.0 Safari/537.36"}
PLACEHOLDER = ResolvedImage(url="https://site.test/placeholder.jpg", width=1200, height=630)


def _store(expert=None, talk=None, error=None):
    store = MagicMock()
    store.get_expert = AsyncMock(return_value=expert, side_effect=error)
    store.get_talk = AsyncMock(return_value=talk, side_effect=error)
    return store


def _resolver(image=PLACEHOLDER):
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=image)
    return resolver


def _meta_content(html, prop):
    match = re.search(rf'<meta (?:property|name)="{re.escape(prop)}" content="([^"]*)"', html)
    assert match, prop
    return match.group(1)


@pytest.mark.asyncio
async def test_browser_is_redirected_without_lookup(config):
    store = _store()
    app = create_app(config, store=store, resolver=_resolver())
    async with TestClient(TestServer(app)) as client:
        resp = await client.get("/expert/42", headers=BROWSER, allow_redirects=False)

    assert resp.status == 302
    assert resp.headers["Location"] == "https://site.test/shared/expert/42"
    store.get_expert.assert_not_awaited()


@pytest.mark.asyncio
async def test_expert_preview_for_crawler(config):
    expert = Expert(id="42", name="Ann Berg", roles=["Coach"], intro="<p>Hi &amp; welcome</p>", image_ref="/a.png")
    store = _store(expert=expert)
    resolver = _resolver()
    app = create_app(config, store=store, resolver=resolver)
    async with TestClient(TestServer(app)) as client:
        resp = await client.get("/expert/42", headers=BOT)
        html = await resp.text()

    assert resp.status == 200
    assert resp.content_type == "text/html"
    assert _meta_content(html, "og:type") == "profile"
    assert _meta_content(html, "og:title") == "Ann Berg - Coach | 99expert"
    assert _meta_content(html, "og:description") == "Hi &amp; welcome"
    assert _meta_content(html, "og:url") == "https://og.site.test/expert/42"
    assert '<link rel="canonical" href="https://og.site.test/expert/42" />' in html
    assert 'window.location.href = "https://site.test/shared/expert/42";' in html

    args, kwargs = resolver.resolve.await_args
    assert args == ("/a.png", config.images.DEFAULT_IMAGE_URL, config.images.PLACEHOLDER_IMAGE_URL, "https://og.site.test")
    assert kwargs == {"base": "https://site.test"}


@pytest.mark.asyncio
async def test_expert_defaults_role_and_description(config):
    store = _store(expert=Expert(id="1", name="Ann"))
    app = create_app(config, store=store, resolver=_resolver())
    async with TestClient(TestServer(app)) as client:
        html = await (await client.get("/expert/1")).text()

    assert _meta_content(html, "og:title") == "Ann - Ekspert | 99expert"
    assert _meta_content(html, "og:description") == "Ann på 99expert"


@pytest.mark.asyncio
async def test_talk_preview_uses_expert_fallback(config):
    talk = Talk(
        id="9",
        title="Sleep better",
        description="<p>" + "z" * 400 + "</p>",
        image_ref=None,
        expert=Expert(id="", name="Ann", image_ref="https://cdn.test/ann.jpg"),
    )
    resolver = _resolver()
    app = create_app(config, store=_store(talk=talk), resolver=resolver)
    async with TestClient(TestServer(app)) as client:
        html = await (await client.get("/talk/9", headers=BOT)).text()

    assert _meta_content(html, "og:type") == "article"
    assert _meta_content(html, "og:title") == "Sleep better - Ann | 99expert"
    assert _meta_content(html, "og:description") == "z" * 160
    assert resolver.resolve.await_args.args[0] == "https://cdn.test/ann.jpg"


@pytest.mark.asyncio
@pytest.mark.parametrize("path, target", [("/expert/404", "/shared/expert/404"), ("/talk/404", "/shared/talk/404")])
async def test_missing_entity_redirects(config, path, target):
    app = create_app(config, store=_store(), resolver=_resolver())
    async with TestClient(TestServer(app)) as client:
        resp = await client.get(path, headers=BOT, allow_redirects=False)

    assert resp.status == 302
    assert resp.headers["Location"] == f"https://site.test{target}"


@pytest.mark.asyncio
async def test_store_error_redirects_instead_of_500(config):
    app = create_app(config, store=_store(error=StoreError("down")), resolver=_resolver())
    async with TestClient(TestServer(app)) as client:
        resp = await client.get("/talk/5", headers=BOT, allow_redirects=False)

    assert resp.status == 302
    assert resp.headers["Location"] == "https://site.test/shared/talk/5"


@pytest.mark.asyncio
async def test_unexpected_error_is_isolated(config):
    app = create_app(config, store=_store(error=RuntimeError("bug")), resolver=_resolver())
    async with TestClient(TestServer(app)) as client:
        resp = await client.get("/expert/5", headers=BOT, allow_redirects=False)
        health = await client.get("/health")

    assert resp.status == 302
    assert resp.headers["Location"] == "https://site.test"
    assert health.status == 200


@pytest.mark.asyncio
async def test_health_and_root(config):
    app = create_app(config, store=_store(), resolver=_resolver())
    async with TestClient(TestServer(app)) as client:
        health = await (await client.get("/health")).json()
        root = await (await client.get("/")).json()

    assert health["status"] == "ok"
    assert health["uptime"] >= 0
    assert "timestamp" in health
    assert root["service"] == "prerender-server"


@pytest.mark.asyncio
async def test_unknown_path_redirects_to_site(config):
    app = create_app(config, store=_store(), resolver=_resolver())
    async with TestClient(TestServer(app)) as client:
        resp = await client.get("/some/where/else", allow_redirects=False)

    assert resp.status == 302
    assert resp.headers["Location"] == "https://site.test"


@pytest.mark.asyncio
async def test_end_to_end_placeholder_dimensions(config):
    expert = Expert(id="42", name="Ann", image_ref="http://example.com/pic with space.jpg")
    probed = []

    async def _probe(url):
        probed.append(url)
        if "/transform?url=" in url:
            return ProbeResult(width=150, height=150, too_small=True)
        return None

    resolver = ImageResolver(_probe)
    app = create_app(config, store=_store(expert=expert), resolver=resolver)
    async with TestClient(TestServer(app)) as client:
        html = await (await client.get("/expert/42", headers=BOT)).text()

    assert "https%3A%2F%2Fexample.com%2Fpic%2520with%2520space.jpg" in probed[0]
    assert probed[1] == config.images.DEFAULT_IMAGE_URL
    assert _meta_content(html, "og:image") == config.images.PLACEHOLDER_IMAGE_URL
    assert _meta_content(html, "og:image:width") == "1200"
    assert _meta_content(html, "og:image:height") == "630"
