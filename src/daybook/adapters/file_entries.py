"""File-based diary entry adapter."""

import json
from pathlib import Path

from daybook.core.entry import DiaryEntry
from daybook.ports.entry_gateway import GatewayError


class FileEntryGateway:
    """
    File-based diary storage.

    Implements EntryGateway protocol. Each user gets a directory and each day
    a JSON file, so writing a day replaces it (upsert on user + date).
    """

    def __init__(self, entries_dir: Path | str):
        self.entries_dir = Path(entries_dir).expanduser()
        self.entries_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, user_id: str, entry_date: str) -> Path:
        """Get the file path for a user's entry on a date."""
        return self.entries_dir / user_id / f"{entry_date}.json"

    def read(self, user_id: str, entry_date: str) -> DiaryEntry | None:
        """Read an entry. Returns None if not found."""
        path = self._path_for(user_id, entry_date)
        if not path.exists():
            return None
        try:
            return DiaryEntry.from_row(json.loads(path.read_text()))
        except (OSError, ValueError, KeyError) as e:
            raise GatewayError(f"Could not read {path}: {e}") from e

    def write(self, user_id: str, entry: DiaryEntry) -> None:
        """Write/overwrite the entry for its date."""
        path = self._path_for(user_id, entry.entry_date)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(entry.to_row(), ensure_ascii=False, indent=2))
        except OSError as e:
            raise GatewayError(f"Could not write {path}: {e}") from e

    async def fetch_entry(self, user_id: str, entry_date: str) -> DiaryEntry | None:
        return self.read(user_id, entry_date)

    async def upsert_entry(self, user_id: str, entry: DiaryEntry) -> None:
        self.write(user_id, entry)

