"""
Open Graph / Twitter Card document
==================================
``build_html`` is a pure function of :class:`PageMetadata`. Every interpolated
value passes through :func:`escape_html`; the redirect target inside the
``<script>`` block is emitted as a JSON string instead.
"""

from __future__ import annotations

import json
import re

from bs4 import BeautifulSoup

from .model import PageMetadata

DESCRIPTION_LIMIT = 160

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
}
_HTML_ESCAPE_RE = re.compile("[&<>\"']")


def escape_html(text: str | None) -> str:
    """Escape exactly ``& < > " '``; ``None`` becomes an empty string."""
    if not text:
        return ""
    return _HTML_ESCAPE_RE.sub(lambda m: _HTML_ESCAPES[m.group()], str(text))


def clean_description(text: str | None, limit: int = DESCRIPTION_LIMIT) -> str:
    """Strip markup, collapse whitespace and cut to ``limit`` characters."""
    if not text:
        return ""
    # Entities are decoded even when there is no markup
    text = BeautifulSoup(text, "html.parser").get_text(" ")
    return " ".join(text.split())[:limit].rstrip()


def _script_string(url: str) -> str:
    # "</" would close the script element early
    return json.dumps(url).replace("</", "<\\/")


def build_html(
    meta: PageMetadata,
    *,
    site_name: str = "99expert",
    locale: str = "da_DK",
    lang: str = "da",
) -> str:
    """Render the crawler-facing preview document for ``meta``."""
    title = escape_html(meta.title)
    description = escape_html(meta.description)
    image = escape_html(meta.image.url)
    og_url = escape_html(meta.og_url)
    canonical = escape_html(meta.canonical_url)
    target = escape_html(meta.redirect_url)

    return f"""<!DOCTYPE html>
<html lang="{escape_html(lang)}" prefix="og: http://ogp.me/ns#">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{title}</title>

  <meta property="og:type" content="{meta.og_type}" />
  <meta property="og:url" content="{og_url}" />
  <meta property="og:title" content="{title}" />
  <meta property="og:description" content="{description}" />
  <meta property="og:image" content="{image}" />
  <meta property="og:image:secure_url" content="{image}" />
  <meta property="og:image:type" content="{meta.image.content_type}" />
  <meta property="og:image:width" content="{int(meta.image.width)}" />
  <meta property="og:image:height" content="{int(meta.image.height)}" />
  <meta property="og:image:alt" content="{title}" />
  <meta property="og:site_name" content="{escape_html(site_name)}" />
  <meta property="og:locale" content="{escape_html(locale)}" />

  <meta name="twitter:card" content="summary_large_image" />
  <meta name="twitter:title" content="{title}" />
  <meta name="twitter:description" content="{description}" />
  <meta name="twitter:image" content="{image}" />

  <meta name="description" content="{description}" />
  <link rel="canonical" href="{canonical}" />
</head>
<body>
  <p>Redirecting to {title}...</p>
  <script>window.location.href = {_script_string(meta.redirect_url)};</script>
  <noscript><a href="{target}">Click here to continue</a></noscript>
</body>
</html>
"""
