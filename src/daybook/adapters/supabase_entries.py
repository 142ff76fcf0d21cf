"""Supabase REST adapter - diary entries over PostgREST."""

import asyncio
import logging
from typing import Callable

import requests

from daybook.config import Config
from daybook.core.entry import DiaryEntry
from daybook.ports.entry_gateway import GatewayError

from .supabase_auth import AuthenticationError

logger = logging.getLogger(__name__)

SELECT_COLUMNS = "title,content,mood,entry_date"
CONFLICT_KEY = "user_id,entry_date"


class SupabaseEntryGateway:
    """
    Supabase diary_entries table adapter.

    Implements EntryGateway protocol. Blocking HTTP calls run in a worker
    thread so the event loop stays free while a request is outstanding.
    """

    def __init__(self, config: Config, access_token: Callable[[], str]):
        self.config = config
        self._access_token = access_token
        self._http = requests.Session()

    @property
    def table_url(self) -> str:
        return f"{self.config.supabase_url}/rest/v1/{self.config.entries_table}"

    def _headers(self) -> dict:
        try:
            token = self._access_token()
        except AuthenticationError as e:
            raise GatewayError(str(e), status=401) from e
        return {
            "apikey": self.config.supabase_anon_key,
            "Authorization": f"Bearer {token}",
        }

    def _request(self, method: str, **kwargs) -> requests.Response:
        """Make an authenticated request, mapping failures to GatewayError."""
        headers = self._headers()
        headers.update(kwargs.pop("headers", {}))
        logger.debug(f"{method} {self.config.entries_table} {kwargs.get('params')}")
        try:
            resp = self._http.request(method, self.table_url, headers=headers, **kwargs)
        except requests.RequestException as e:
            raise GatewayError(f"Request to {self.config.entries_table} failed: {e}") from e

        if not resp.ok:
            raise GatewayError(
                f"{method} {self.config.entries_table} returned {resp.status_code}: {resp.text}",
                status=resp.status_code,
            )
        return resp

    def fetch_entry_sync(self, user_id: str, entry_date: str) -> DiaryEntry | None:
        """Fetch at most one row for (user, date)."""
        resp = self._request(
            "GET",
            params={
                "select": SELECT_COLUMNS,
                "user_id": f"eq.{user_id}",
                "entry_date": f"eq.{entry_date}",
            },
        )
        try:
            rows = resp.json()
        except ValueError as e:
            raise GatewayError(f"Invalid response for {entry_date}: {e}", status=resp.status_code) from e
        if not rows:
            return None
        if len(rows) > 1:
            raise GatewayError(f"Expected one entry for {entry_date}, got {len(rows)}")
        try:
            return DiaryEntry.from_row(rows[0])
        except (ValueError, KeyError, TypeError) as e:
            raise GatewayError(f"Invalid entry for {entry_date}: {e}") from e

    def upsert_entry_sync(self, user_id: str, entry: DiaryEntry) -> None:
        """Insert or merge the row keyed on (user_id, entry_date)."""
        self._request(
            "POST",
            params={"on_conflict": CONFLICT_KEY},
            json=entry.to_row(user_id),
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    async def fetch_entry(self, user_id: str, entry_date: str) -> DiaryEntry | None:
        return await asyncio.to_thread(self.fetch_entry_sync, user_id, entry_date)

    async def upsert_entry(self, user_id: str, entry: DiaryEntry) -> None:
        await asyncio.to_thread(self.upsert_entry_sync, user_id, entry)
