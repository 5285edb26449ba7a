"""Ports - interfaces/protocols for external dependencies."""

from .workspace_store import WorkspaceStore
from .block_sync import BlockSync

__all__ = [
    "WorkspaceStore",
    "BlockSync",
]
