"""Functional core - pure diary logic with no I/O."""

from .entry import DiaryEntry, Mood, MOOD_PROMPT, EDITABLE_FIELDS
from .dates import today_iso, shift_date, parse_entry_date

__all__ = [
    # Entries
    "DiaryEntry",
    "Mood",
    "MOOD_PROMPT",
    "EDITABLE_FIELDS",
    # Dates
    "today_iso",
    "shift_date",
    "parse_entry_date",
]
