"""Tests for configuration loading."""

import pytest

from daybook.config import Config, Session, load_config


@pytest.fixture
def conf_file(tmp_path):
    path = tmp_path / "daybook.conf"

    def _write(text: str):
        path.write_text(text)
        return path

    return _write


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.conf")
        assert config == Config()
        assert config.fetch_debounce == 0.5

    def test_parses_values(self, conf_file):
        path = conf_file(
            "# Daybook\n"
            'SUPABASE_URL="https://abc.supabase.co/" # project\n'
            "SUPABASE_ANON_KEY='anon-key'\n"
            "BACKEND=file\n"
            "ENTRIES_DIR=~/diary # where entries live\n"
            "FETCH_DEBOUNCE_MS=250\n"
            "LOG_LEVEL=info\n"
            "not a setting\n"
        )
        config = load_config(path)

        assert config.supabase_url == "https://abc.supabase.co"
        assert config.supabase_anon_key == "anon-key"
        assert config.backend == "file"
        assert config.entries_dir == "~/diary"
        assert config.fetch_debounce == 0.25
        assert config.log_level == "INFO"

    def test_invalid_values_keep_defaults(self, conf_file, caplog):
        path = conf_file("BACKEND=mongo\nFETCH_DEBOUNCE_MS=soon\nLOG_LEVEL=loud\n")
        config = load_config(path)

        assert config.backend == "supabase"
        assert config.fetch_debounce_ms == 500
        assert config.log_level == "WARNING"
        assert "Unknown BACKEND" in caplog.text
        assert "Invalid FETCH_DEBOUNCE_MS" in caplog.text


class TestSession:
    def test_save_load_clear(self, tmp_path, monkeypatch):
        session_file = tmp_path / "config" / ".session.json"
        monkeypatch.setattr("daybook.config.SESSION_FILE", session_file)

        Session(access_token="a", refresh_token="r", expires_at=10, user_id="U1", email="me@x.io").save()

        assert oct(session_file.stat().st_mode & 0o777) == "0o600"
        loaded = Session.load()
        assert loaded.user_id == "U1"
        assert loaded.email == "me@x.io"

        Session.clear()
        assert Session.load() == Session()

    def test_corrupt_file_gives_empty_session(self, tmp_path, monkeypatch):
        session_file = tmp_path / ".session.json"
        session_file.write_text("garbage")
        monkeypatch.setattr("daybook.config.SESSION_FILE", session_file)

        assert Session.load() == Session()
