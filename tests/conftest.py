"""Shared test fixtures for Daybook tests."""

import asyncio

import pytest

from daybook.core.entry import DiaryEntry
from daybook.ports.entry_gateway import GatewayError


class FakeGateway:
    """In-memory EntryGateway that records calls and can hold requests open."""

    def __init__(self):
        self.rows: dict[tuple[str, str], DiaryEntry] = {}
        self.fetches: list[tuple[str, str]] = []
        self.upserts: list[tuple[str, DiaryEntry]] = []
        self.fetch_gates: dict[str, asyncio.Event] = {}
        self.upsert_gate: asyncio.Event | None = None
        self.fail_fetch = False
        self.fail_upsert = False

    def hold_fetch(self, entry_date: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.fetch_gates[entry_date] = gate
        return gate

    def hold_upsert(self) -> asyncio.Event:
        self.upsert_gate = asyncio.Event()
        return self.upsert_gate

    async def fetch_entry(self, user_id: str, entry_date: str) -> DiaryEntry | None:
        self.fetches.append((user_id, entry_date))
        gate = self.fetch_gates.get(entry_date)
        if gate is not None:
            await gate.wait()
        if self.fail_fetch:
            raise GatewayError("fetch failed", status=500)
        return self.rows.get((user_id, entry_date))

    async def upsert_entry(self, user_id: str, entry: DiaryEntry) -> None:
        self.upserts.append((user_id, entry))
        if self.upsert_gate is not None:
            await self.upsert_gate.wait()
        if self.fail_upsert:
            raise GatewayError("upsert failed", status=500)
        self.rows[(user_id, entry.entry_date)] = entry


async def wait_for(predicate, timeout: float = 1.0) -> None:
    """Poll until predicate() is true, yielding to the event loop."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def gateway():
    return FakeGateway()
