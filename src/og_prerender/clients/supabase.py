"""Read-only lookups against the Supabase REST (PostgREST) API"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import aiohttp

from ..errors import StoreError
from ..pages.model import Expert, Talk

logger = logging.getLogger(__name__)

EXPERT_COLUMNS = "name,roles,intro,profile_image_url"
TALK_COLUMNS = "title,description,image_url,experts(name,profile_image_url)"


class EntityStore(Protocol):
    """Anything that can look up entities by primary key."""

    async def get_expert(self, expert_id: str) -> Optional[Expert]:
        """Return the active expert or ``None``; raise :class:`StoreError` on failure."""

    async def get_talk(self, talk_id: str) -> Optional[Talk]:
        """Return the talk (with its expert) or ``None``; raise :class:`StoreError` on failure."""


class SupabaseStore:
    """
    Thin PostgREST client sharing the application's ``aiohttp`` session.

    Rows are fetched fresh on every call; nothing is cached.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        url: str,
        anon_key: str,
        *,
        timeout: float = 5.0,
    ) -> None:
        self._session = session
        self._rest_url = f"{url.rstrip('/')}/rest/v1"
        self._headers = {
            "apikey": anon_key,
            "Authorization": f"Bearer {anon_key}",
            "Accept": "application/json",
        }
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def _select_one(self, table: str, params: Dict[str, str]) -> Optional[Dict[str, Any]]:
        query = {**params, "limit": "1"}
        try:
            async with self._session.get(
                f"{self._rest_url}/{table}",
                params=query,
                headers=self._headers,
                timeout=self._timeout,
            ) as resp:
                if resp.status >= 400:
                    body = (await resp.text())[:200]
                    raise StoreError(f"{table} query failed with HTTP {resp.status}: {body}")
                rows = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise StoreError(f"{table} query failed: {str(exc) or type(exc).__name__}") from exc

        if not isinstance(rows, list):
            raise StoreError(f"{table} query returned {type(rows).__name__}, expected a list")
        return rows[0] if rows else None

    async def get_expert(self, expert_id: str) -> Optional[Expert]:
        row = await self._select_one(
            "experts",
            {"select": EXPERT_COLUMNS, "id": f"eq.{expert_id}", "is_active": "eq.true"},
        )
        return Expert.from_row(expert_id, row) if row else None

    async def get_talk(self, talk_id: str) -> Optional[Talk]:
        row = await self._select_one("talks", {"select": TALK_COLUMNS, "id": f"eq.{talk_id}"})
        return Talk.from_row(talk_id, row) if row else None
