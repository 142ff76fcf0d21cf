"""Date-keyed diary entry cache with debounced, single-flight fetching.

The cache sits between an editor and an EntryGateway. It answers "what is the
entry for the selected date" from memory when it can, otherwise it waits for
navigation to go quiet and fetches exactly one date. Everything runs on one
asyncio event loop, so state is only touched between awaits.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Coroutine

from .core.dates import shift_date, today_iso
from .core.entry import EDITABLE_FIELDS, DiaryEntry
from .ports.entry_gateway import EntryGateway, GatewayError
from .ports.identity import Identity

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE = 0.5


class LatestTaskSlot:
    """Holds at most one task; putting a new one in cancels the old one."""

    def __init__(self, name: str):
        self.name = name
        self._task: asyncio.Task | None = None

    @property
    def task(self) -> asyncio.Task | None:
        if self._task is not None and self._task.done():
            self._task = None
        return self._task

    @property
    def pending(self) -> bool:
        return self.task is not None

    def replace(self, coro: Coroutine) -> asyncio.Task:
        """Cancel the current occupant and schedule coro in its place."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(coro, name=self.name)
        return self._task

    def cancel(self) -> bool:
        """Cancel the occupant, if any. Returns True if something was cancelled."""
        task = self.task
        self._task = None
        if task is None:
            return False
        task.cancel()
        return True


class DateKeyedEntryCache:
    """
    Per-session cache of diary entries keyed by ISO date.

    Exposes selected_date, current_entry, is_loading_entry and is_saving to the
    editor. select() must be called from inside the running event loop since
    an uncached date schedules a debounced fetch.
    """

    def __init__(
        self,
        gateway: EntryGateway,
        identity: Identity | None = None,
        initial_date: str | None = None,
        debounce: float = DEFAULT_DEBOUNCE,
    ):
        self.gateway = gateway
        self.identity = identity or Identity(auth_loading=True)
        self.debounce = debounce

        self.selected_date = initial_date or today_iso()
        self.current_entry = DiaryEntry.empty(self.selected_date)

        self._entries: dict[str, DiaryEntry] = {}
        self._loading_date: str | None = None
        self._debounce_slot = LatestTaskSlot("entry-debounce")
        self._fetch_slot = LatestTaskSlot("entry-fetch")
        self._save_lock = asyncio.Lock()

    # ============== State ==============

    @property
    def is_loading_entry(self) -> bool:
        """True while a fetch for the selected date is outstanding."""
        return self._loading_date is not None and self._loading_date == self.selected_date

    @property
    def is_saving(self) -> bool:
        return self._save_lock.locked()

    def cached(self, entry_date: str) -> DiaryEntry | None:
        return self._entries.get(entry_date)

    def __contains__(self, entry_date: str) -> bool:
        return entry_date in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # ============== Identity ==============

    def set_identity(self, user_id: str | None, auth_loading: bool = False) -> None:
        """Switch who the cache acts for; a different user starts from empty."""
        previous = self.identity
        self.identity = Identity(user_id=user_id, auth_loading=auth_loading)

        if user_id != previous.user_id:
            logger.debug(f"Identity changed from {previous.user_id} to {user_id}, clearing cache")
            self._debounce_slot.cancel()
            self._fetch_slot.cancel()
            self._entries.clear()
            self._loading_date = None
            self.current_entry = DiaryEntry.empty(self.selected_date)

        # Identity just resolved: load the visible date without waiting
        self.load_selected()

    def load_selected(self) -> None:
        """Start fetching the selected date right away unless it is cached."""
        if not self.identity.is_ready or self.selected_date in self._entries:
            return
        self._debounce_slot.cancel()
        if not self._fetch_in_flight_for(self.selected_date):
            self._start_fetch(self.selected_date)

    # ============== Navigation ==============

    def select(self, entry_date: str) -> None:
        """Show entry_date, from cache if possible, else after a quiet period."""
        self.selected_date = entry_date
        # Relabel right away; field values catch up once the date resolves
        self.current_entry = replace(self.current_entry, entry_date=entry_date)
        self._debounce_slot.cancel()

        cached = self._entries.get(entry_date)
        if cached is not None:
            self.current_entry = cached
            return

        if not self.identity.is_ready:
            logger.debug(f"Identity unresolved, not fetching {entry_date}")
            return

        self._debounce_slot.replace(self._debounced_fetch(entry_date))

    def previous_day(self) -> None:
        self.select(shift_date(self.selected_date, -1))

    def next_day(self) -> None:
        self.select(shift_date(self.selected_date, 1))

    def today(self) -> None:
        self.select(today_iso())

    async def _debounced_fetch(self, entry_date: str) -> None:
        await asyncio.sleep(self.debounce)
        self._start_fetch(entry_date)

    def _fetch_in_flight_for(self, entry_date: str) -> bool:
        return self._fetch_slot.pending and self._loading_date == entry_date

    # ============== Fetch ==============

    async def fetch(self, entry_date: str) -> None:
        """Fetch entry_date now, superseding any fetch still in flight."""
        if not self.identity.is_ready:
            logger.debug(f"Identity unresolved, not fetching {entry_date}")
            return
        task = self._start_fetch(entry_date)
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    def _start_fetch(self, entry_date: str) -> asyncio.Task:
        self._loading_date = entry_date
        return self._fetch_slot.replace(self._load(entry_date, self.identity.user_id))

    async def _load(self, entry_date: str, user_id: str) -> None:
        try:
            entry = await self.gateway.fetch_entry(user_id, entry_date)
        except asyncio.CancelledError:
            logger.debug(f"Fetch for {entry_date} superseded")
            raise
        except GatewayError as e:
            logger.error(f"Fetch error for {entry_date}: {e}")
            return
        else:
            if user_id != self.identity.user_id:
                return
            entry = entry or DiaryEntry.empty(entry_date)
            self._entries[entry_date] = entry
            if entry_date == self.selected_date:
                self.current_entry = entry
        finally:
            if self._fetch_slot.task is asyncio.current_task():
                self._loading_date = None

    # ============== Editing ==============

    def update(self, **fields) -> DiaryEntry:
        """Merge edited fields into the current entry and cache it locally."""
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"Unknown entry fields: {', '.join(sorted(unknown))}")

        self.current_entry = replace(self.current_entry, entry_date=self.selected_date, **fields)
        self._entries[self.selected_date] = self.current_entry
        return self.current_entry

    async def save(self) -> bool:
        """Upsert the current entry. Returns False if nothing was stored."""
        user_id = self.identity.user_id
        if user_id is None:
            logger.warning("Not saving: no signed-in user")
            return False

        entry = replace(self.current_entry, entry_date=self.selected_date)
        async with self._save_lock:
            try:
                await self.gateway.upsert_entry(user_id, entry)
            except GatewayError as e:
                logger.error(f"Save error for {entry.entry_date}: {e}")
                return False

        if user_id != self.identity.user_id:
            return True
        # Keep any edit made while the save was in flight
        if self._entries.get(entry.entry_date, entry) == entry:
            self._entries[entry.entry_date] = entry
        logger.info(f"Saved entry for {entry.entry_date}")
        return True

    # ============== Lifecycle ==============

    async def settle(self) -> None:
        """Wait until no debounce timer or fetch is outstanding."""
        while True:
            tasks = [t for t in (self._debounce_slot.task, self._fetch_slot.task) if t is not None]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    def close(self) -> None:
        """Cancel any pending timer and in-flight fetch."""
        self._debounce_slot.cancel()
        self._fetch_slot.cancel()
        self._loading_date = None
