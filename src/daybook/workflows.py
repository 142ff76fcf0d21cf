"""Shared wiring between the CLI and the entry cache.

Resolves which backend to talk to and who the user is, then hands both to a
DateKeyedEntryCache.
"""

from pathlib import Path

from .adapters.file_entries import FileEntryGateway
from .adapters.supabase_auth import SupabaseAuthService
from .adapters.supabase_entries import SupabaseEntryGateway
from .config import DATA_DIR, Config
from .entry_cache import DateKeyedEntryCache
from .ports.entry_gateway import EntryGateway
from .ports.identity import Identity


def get_file_gateway(config: Config) -> FileEntryGateway:
    """Resolve entries directory from config."""
    if config.entries_dir:
        return FileEntryGateway(Path(config.entries_dir).expanduser())
    return FileEntryGateway(DATA_DIR / "entries")


def get_auth(config: Config) -> SupabaseAuthService:
    return SupabaseAuthService(config)


def get_gateway(config: Config, auth: SupabaseAuthService | None = None) -> EntryGateway:
    """Build the configured backend; supabase needs the auth service for tokens."""
    if config.backend == "file":
        return get_file_gateway(config)
    auth = auth or get_auth(config)
    return SupabaseEntryGateway(config, access_token=auth.access_token)


def resolve_identity(config: Config, auth: SupabaseAuthService | None = None) -> Identity:
    """Who entries belong to. The file backend has a single local user."""
    if config.backend == "file":
        return Identity(user_id=config.local_user_id)
    auth = auth or get_auth(config)
    return auth.current_identity()


def open_cache(config: Config, initial_date: str | None = None) -> DateKeyedEntryCache:
    """
    Create a cache wired to the configured backend and signed-in user.

    Must run inside the event loop: the selected date starts loading at once.
    """
    auth = None if config.backend == "file" else get_auth(config)
    gateway = get_gateway(config, auth)
    identity = resolve_identity(config, auth)

    cache = DateKeyedEntryCache(
        gateway,
        initial_date=initial_date,
        debounce=config.fetch_debounce,
    )
    cache.set_identity(identity.user_id, identity.auth_loading)
    return cache
