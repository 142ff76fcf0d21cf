"""Calendar date helpers for date-keyed navigation.

Entry dates travel as ISO strings (YYYY-MM-DD) so they can be used verbatim
as cache keys and backend filter values.
"""

from datetime import date, timedelta


def today_iso(as_of: date | None = None) -> str:
    """Today's local calendar date as an ISO string."""
    return (as_of or date.today()).isoformat()


def shift_date(entry_date: str, days: int) -> str:
    """Move an ISO date by N days (negative goes back)."""
    return (date.fromisoformat(entry_date) + timedelta(days=days)).isoformat()


def parse_entry_date(value: str) -> str:
    """Normalize user input to an ISO date string, raising ValueError if malformed."""
    return date.fromisoformat(value.strip()).isoformat()
