"""Typed keys for objects stored on the aiohttp application."""

from __future__ import annotations

import aiohttp
from aiohttp import web

from ..clients.supabase import EntityStore
from ..config import Config
from ..imaging.pipeline import ImageResolver

CONFIG = web.AppKey("config", Config)
SESSION = web.AppKey("session", aiohttp.ClientSession)
STORE = web.AppKey("store", EntityStore)
RESOLVER = web.AppKey("resolver", ImageResolver)
STARTED_AT = web.AppKey("started_at", float)
