"""Pure diary entry domain logic - no I/O dependencies."""

from dataclasses import dataclass, fields
from enum import IntEnum

MOOD_PROMPT = "How are you feeling today?"


class Mood(IntEnum):
    """One-of-five mood rating, 1 is the happiest."""

    GREAT = 1
    GOOD = 2
    OKAY = 3
    LOW = 4
    BAD = 5

    @property
    def face(self) -> str:
        return MOOD_FACES[self]

    @classmethod
    def label(cls, value: int | None) -> str:
        """Display string for a stored mood value."""
        if value is None:
            return MOOD_PROMPT
        return cls(value).face


MOOD_FACES = {
    Mood.GREAT: "😀",
    Mood.GOOD: "🙂",
    Mood.OKAY: "😐",
    Mood.LOW: "🙁",
    Mood.BAD: "😞",
}


@dataclass(frozen=True)
class DiaryEntry:
    """One diary record for a single calendar date."""

    entry_date: str
    title: str = ""
    content: str = ""
    mood: int | None = None

    def __post_init__(self):
        if self.mood is not None:
            try:
                Mood(self.mood)
            except ValueError:
                raise ValueError(f"Mood must be between 1 and 5, got {self.mood!r}") from None

    @property
    def is_empty(self) -> bool:
        return not self.title and not self.content and self.mood is None

    @classmethod
    def empty(cls, entry_date: str) -> "DiaryEntry":
        """Blank entry shown for a date with nothing stored yet."""
        return cls(entry_date=entry_date)

    @classmethod
    def from_row(cls, data: dict) -> "DiaryEntry":
        """Create DiaryEntry from a backend row."""
        mood = data.get("mood")
        return cls(
            entry_date=data["entry_date"],
            title=data.get("title") or "",
            content=data.get("content") or "",
            mood=int(mood) if mood is not None else None,
        )

    def to_row(self, user_id: str | None = None) -> dict:
        """Serialize for the backend, optionally scoped to a user."""
        row = {
            "title": self.title,
            "content": self.content,
            "mood": self.mood,
            "entry_date": self.entry_date,
        }
        if user_id is not None:
            row["user_id"] = user_id
        return row


EDITABLE_FIELDS = frozenset(f.name for f in fields(DiaryEntry)) - {"entry_date"}
