"""Adapters - I/O implementations of ports."""

from .supabase_auth import SupabaseAuthService, AuthenticationError
from .supabase_entries import SupabaseEntryGateway
from .file_entries import FileEntryGateway

__all__ = [
    "SupabaseAuthService",
    "AuthenticationError",
    "SupabaseEntryGateway",
    "FileEntryGateway",
]
