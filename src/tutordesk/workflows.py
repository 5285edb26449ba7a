"""Shared workflow layer between the CLI and the scheduler.

Each function loads what it needs from the store, runs pure core logic over
it, and persists whole collections back.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date

from .adapters.file_store import FileWorkspaceStore
from .adapters.supabase_rest import SupabaseRestSync
from .config import Config, data_dir_for
from .core.blocks import DEFAULT_CUSTOM_VIEWS, Block, CustomView, Tag, insert_block
from .core.quick_input import build_block_from_input
from .core.top3 import ArchiveResult, Top3History, archive_expired, check_top3_invariant, clear_deleted_urgent
from .ports.block_sync import BlockSync
from .ports.workspace_store import WorkspaceStore

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """Everything the store holds, loaded together."""

    blocks: list[Block]
    tags: list[Tag] = field(default_factory=list)
    custom_views: list[CustomView] = field(default_factory=lambda: list(DEFAULT_CUSTOM_VIEWS))
    history: list[Top3History] = field(default_factory=list)


@dataclass
class SyncReport:
    pushed: int
    deleted: int
    history: int


def get_store(config: Config) -> FileWorkspaceStore:
    """Resolve the data directory from config."""
    return FileWorkspaceStore(data_dir_for(config))


def _archive(store: WorkspaceStore, blocks: list[Block], history: list[Top3History], today: date | str) -> ArchiveResult:
    cleared = clear_deleted_urgent(blocks)
    result = archive_expired(cleared, history, today)
    check_top3_invariant(result.blocks)
    if result.archived or cleared is not blocks:
        store.save_blocks(result.blocks)
    if result.archived:
        store.save_history(result.history)
    return result


def load_workspace(config: Config, today: date | str, store: WorkspaceStore | None = None) -> Workspace:
    """Load every collection and run the daily TOP 3 archival for `today`."""
    store = store or get_store(config)
    result = _archive(store, store.load_blocks(today), store.load_history(), today)
    return Workspace(
        blocks=result.blocks,
        tags=store.load_tags(),
        custom_views=store.load_custom_views(),
        history=result.history,
    )


def save_workspace(config: Config, workspace: Workspace, store: WorkspaceStore | None = None) -> None:
    store = store or get_store(config)
    store.save_blocks(workspace.blocks)
    store.save_history(workspace.history)
    store.save_tags(workspace.tags)
    store.save_custom_views(workspace.custom_views)


def mutate_blocks(config: Config, today: date | str, fn, *args, store: WorkspaceStore | None = None, **kwargs) -> tuple[Workspace, bool]:
    """
    Apply `fn(blocks, *args, **kwargs)` and persist the resulting collection.

    Returns (workspace, changed). Nothing is written when `fn` hands back the
    same list object.
    """
    store = store or get_store(config)
    workspace = load_workspace(config, today, store)
    blocks = fn(workspace.blocks, *args, **kwargs)
    if blocks is workspace.blocks:
        return workspace, False
    check_top3_invariant(blocks)
    store.save_blocks(blocks)
    return replace(workspace, blocks=blocks), True


def add_from_input(config: Config, today: date | str, text: str, store: WorkspaceStore | None = None) -> Block:
    """Create a block from quick-input text at the top of the list."""
    store = store or get_store(config)
    workspace = load_workspace(config, today, store)
    block, tags = build_block_from_input(text, today, workspace.tags)
    store.save_blocks(insert_block(workspace.blocks, block))
    if tags is not workspace.tags:
        store.save_tags(tags)
    logger.info(f"Added block {block.id}")
    return block


def run_archival(config: Config, today: date | str, store: WorkspaceStore | None = None) -> ArchiveResult:
    """Archive yesterday's TOP 3 now. Safe to run repeatedly."""
    store = store or get_store(config)
    result = _archive(store, store.load_blocks(today), store.load_history(), today)
    if not result.archived:
        logger.info("Nothing to archive")
    return result


def push_to_remote(
    config: Config,
    today: date | str,
    store: WorkspaceStore | None = None,
    sync: BlockSync | None = None,
) -> SyncReport:
    """
    Mirror the local workspace to the remote store.

    Live blocks are upserted, soft-deleted blocks are removed remotely, and
    the TOP 3 history is upserted by date.
    """
    workspace = load_workspace(config, today, store)
    sync = sync or SupabaseRestSync(config)
    pushed = sync.push(workspace.blocks)
    deleted_ids = [b.id for b in workspace.blocks if b.is_deleted]
    sync.delete(deleted_ids)
    history = sync.push_history(workspace.history)
    return SyncReport(pushed=pushed, deleted=len(deleted_ids), history=history)
