"""Tests for core diary entry logic."""

from datetime import date

import pytest

from daybook.core.dates import parse_entry_date, shift_date, today_iso
from daybook.core.entry import MOOD_PROMPT, DiaryEntry, Mood


class TestMood:
    def test_faces(self):
        assert Mood(1).face == "😀"
        assert Mood.OKAY.face == "😐"
        assert Mood(5).face == "😞"

    def test_label_for_unset_mood(self):
        assert Mood.label(None) == MOOD_PROMPT

    def test_label_for_stored_value(self):
        assert Mood.label(2) == "🙂"


class TestDiaryEntry:
    def test_empty(self):
        entry = DiaryEntry.empty("2024-01-10")
        assert entry.title == ""
        assert entry.content == ""
        assert entry.mood is None
        assert entry.is_empty

    @pytest.mark.parametrize("mood", [0, 6, -1])
    def test_rejects_out_of_range_mood(self, mood):
        with pytest.raises(ValueError, match="between 1 and 5"):
            DiaryEntry("2024-01-10", mood=mood)

    def test_from_row_fills_nulls(self):
        entry = DiaryEntry.from_row(
            {"entry_date": "2024-01-10", "title": None, "content": None, "mood": None}
        )
        assert entry == DiaryEntry.empty("2024-01-10")

    def test_from_row(self):
        entry = DiaryEntry.from_row(
            {"entry_date": "2024-01-10", "title": "Walk", "content": "Long one", "mood": 2}
        )
        assert entry.title == "Walk"
        assert entry.mood == 2
        assert not entry.is_empty

    def test_to_row_with_and_without_user(self):
        entry = DiaryEntry("2024-01-10", title="Walk", mood=2)
        assert "user_id" not in entry.to_row()
        assert entry.to_row("U1")["user_id"] == "U1"


class TestDates:
    def test_today_iso(self):
        assert today_iso(date(2024, 1, 10)) == "2024-01-10"

    def test_shift_crosses_month_and_leap_day(self):
        assert shift_date("2024-02-28", 1) == "2024-02-29"
        assert shift_date("2024-03-01", -1) == "2024-02-29"
        assert shift_date("2024-01-01", -1) == "2023-12-31"

    def test_parse_entry_date(self):
        assert parse_entry_date(" 2024-01-10 ") == "2024-01-10"

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_entry_date("tomorrow")
