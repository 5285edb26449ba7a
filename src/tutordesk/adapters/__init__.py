"""Adapters - I/O implementations of ports."""

from .file_store import FileWorkspaceStore
from .supabase_rest import SupabaseRestSync, SyncError

__all__ = [
    "FileWorkspaceStore",
    "SupabaseRestSync",
    "SyncError",
]
