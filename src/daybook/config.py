"""Configuration management for Daybook."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DAYBOOK_HOME = Path(os.environ.get("DAYBOOK_HOME", Path.home() / "daybook"))
CONFIG_FILE = DAYBOOK_HOME / "config" / "daybook.conf"
SESSION_FILE = DAYBOOK_HOME / "config" / ".session.json"
DATA_DIR = DAYBOOK_HOME / "data"

BACKENDS = ("supabase", "file")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Daybook configuration."""

    backend: str = "supabase"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    entries_table: str = "diary_entries"
    entries_dir: str = ""
    local_user_id: str = "local"
    fetch_debounce_ms: int = 500
    log_level: str = "WARNING"

    @property
    def fetch_debounce(self) -> float:
        """Debounce window in seconds."""
        return self.fetch_debounce_ms / 1000


@dataclass
class Session:
    """Auth session for the Supabase backend."""

    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0
    user_id: str = ""
    email: str = ""

    def save(self) -> None:
        """Save session to file."""
        SESSION_FILE.parent.mkdir(parents=True, exist_ok=True)
        SESSION_FILE.write_text(
            json.dumps(
                {
                    "access_token": self.access_token,
                    "refresh_token": self.refresh_token,
                    "expires_at": self.expires_at,
                    "user_id": self.user_id,
                    "email": self.email,
                }
            )
        )
        SESSION_FILE.chmod(0o600)

    @classmethod
    def load(cls) -> "Session":
        """Load session from file."""
        if not SESSION_FILE.exists():
            return cls()
        try:
            data = json.loads(SESSION_FILE.read_text())
            return cls(
                access_token=data.get("access_token", ""),
                refresh_token=data.get("refresh_token", ""),
                expires_at=data.get("expires_at", 0),
                user_id=data.get("user_id", ""),
                email=data.get("email", ""),
            )
        except (json.JSONDecodeError, KeyError):
            return cls()

    @staticmethod
    def clear() -> None:
        """Forget the stored session."""
        SESSION_FILE.unlink(missing_ok=True)


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            if end_quote != -1:
                return value[1:end_quote]
            return value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from daybook.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "backend":
                if value.lower() in BACKENDS:
                    config.backend = value.lower()
                else:
                    logger.warning(f"Unknown BACKEND {value!r}, using {config.backend}")
            case "supabase_url":
                config.supabase_url = value.rstrip("/")
            case "supabase_anon_key":
                config.supabase_anon_key = value
            case "entries_table":
                config.entries_table = value
            case "entries_dir":
                config.entries_dir = value
            case "local_user_id":
                config.local_user_id = value
            case "fetch_debounce_ms":
                try:
                    config.fetch_debounce_ms = max(0, int(value))
                except ValueError:
                    logger.warning(f"Invalid FETCH_DEBOUNCE_MS {value!r}, using default")
            case "log_level":
                if value.upper() in LOG_LEVELS:
                    config.log_level = value.upper()
                else:
                    logger.warning(f"Unknown LOG_LEVEL {value!r}, using {config.log_level}")

    return config
