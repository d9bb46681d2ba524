"""User-agent classification for unfurl bots."""

from __future__ import annotations

from typing import Optional

CRAWLER_SIGNATURES = (
    "facebookexternalhit", "Facebot", "Twitterbot", "LinkedInBot",
    "Pinterest", "Slackbot", "TelegramBot", "WhatsApp", "Discordbot",
    "Googlebot", "bingbot", "bot", "crawler", "spider", "preview",
)

_LOWERED = tuple(sig.lower() for sig in CRAWLER_SIGNATURES)


def is_crawler(user_agent: Optional[str]) -> bool:
    """
    Return ``True`` for bots and for requests with no User-Agent at all.

    Unknown agents fail open so a missing header never breaks a preview.
    """
    if not user_agent:
        return True
    ua = user_agent.lower()
    return any(sig in ua for sig in _LOWERED)
