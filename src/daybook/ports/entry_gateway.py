"""Diary entry persistence interface."""

from typing import Protocol

from daybook.core.entry import DiaryEntry


class GatewayError(Exception):
    """Raised when the backend cannot fetch or store an entry."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class EntryGateway(Protocol):
    """Interface for reading and writing diary entries on any backend."""

    async def fetch_entry(self, user_id: str, entry_date: str) -> DiaryEntry | None:
        """Fetch the entry for (user, date). Returns None if not found."""
        ...

    async def upsert_entry(self, user_id: str, entry: DiaryEntry) -> None:
        """Insert or replace the entry keyed on (user, entry.entry_date)."""
        ...
