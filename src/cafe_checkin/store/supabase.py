"""Supabase (PostgREST) store implementation."""

from __future__ import annotations

import asyncio
import json
import logging
from urllib import error, parse, request

from cafe_checkin.exceptions import ConfigurationError, RemoteError
from cafe_checkin.store.base import BaseStore, Collection, Record

logger = logging.getLogger(__name__)


class SupabaseStore(BaseStore):
    """Talks to the Supabase REST endpoint of a project."""

    def __init__(self, url: str | None, api_key: str | None, *, timeout_sec: float = 5.0):
        """Initialize the Supabase store.

        Args:
            url: Project URL, e.g. ``https://xyz.supabase.co``.
            api_key: Anon or service role key.
            timeout_sec: Timeout applied to every HTTP call.

        Raises:
            ConfigurationError: If the URL or key is missing.
        """
        if not url or not api_key:
            raise ConfigurationError(
                "Supabase settings are not set. Set SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.api_key = api_key
        self.timeout_sec = timeout_sec

    async def list(self, collection: Collection) -> list[Record]:
        query = {"select": "*"}
        if collection == "orders":
            query["order"] = "created_at.desc"
        body = await asyncio.to_thread(self._send, "GET", collection, query, None)
        return body or []

    async def insert(self, collection: Collection, fields: Record) -> Record:
        body = await asyncio.to_thread(self._send, "POST", collection, {}, fields)
        if not body:
            raise RemoteError(f"Insert into {collection} returned no record")
        return body[0]

    async def delete(self, collection: Collection, matching: Record) -> None:
        if not matching:
            raise RemoteError("delete requires at least one filter")
        query = {key: f"eq.{value}" for key, value in matching.items()}
        await asyncio.to_thread(self._send, "DELETE", collection, query, None)

    def _send(
        self,
        method: str,
        collection: str,
        query: dict[str, str],
        payload: Record | None,
    ) -> list[Record] | None:
        url = f"{self.base_url}/{collection}"
        if query:
            url = f"{url}?{parse.urlencode(query)}"
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        data = None
        if payload is not None:
            data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
            headers["Content-Type"] = "application/json"
            headers["Prefer"] = "return=representation"

        req = request.Request(url, data=data, headers=headers, method=method)
        logger.debug("supabase %s %s", method, url)
        try:
            with request.urlopen(req, timeout=self.timeout_sec) as response:
                raw = response.read()
        except error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")[:500]
            raise RemoteError(f"{method} {collection} failed ({exc.code}): {detail}") from exc
        except (error.URLError, TimeoutError, ValueError) as exc:
            raise RemoteError(f"{method} {collection} failed: {exc}") from exc

        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise RemoteError(f"{method} {collection} returned invalid JSON") from exc
