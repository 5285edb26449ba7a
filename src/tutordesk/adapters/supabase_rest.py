"""Supabase REST adapter - mirrors blocks and TOP 3 history over PostgREST."""

import logging

import requests

from tutordesk.config import Config, load_config
from tutordesk.core.blocks import Block, BlockColumn
from tutordesk.core.serialization import (
    format_timestamp,
    history_to_dict,
    parse_timestamp,
    property_from_dict,
    property_to_dict,
)
from tutordesk.core.top3 import Top3History

logger = logging.getLogger(__name__)

BLOCKS_TABLE = "blocks"
HISTORY_TABLE = "top3_history"


class SyncError(Exception):
    """Raised when the remote store rejects a request or is not configured."""

    pass


def block_to_row(block: Block, sort_order: int) -> dict:
    """Table row for a block. Soft-delete state stays local."""
    return {
        "id": block.id,
        "name": block.name,
        "content": block.content,
        "indent": block.indent,
        "is_collapsed": block.is_collapsed,
        "is_pinned": block.is_pinned,
        "column": block.column.value,
        "properties": [property_to_dict(p) for p in block.properties],
        "sort_order": sort_order,
        "created_at": format_timestamp(block.created_at),
        "updated_at": format_timestamp(block.updated_at),
    }


def row_to_block(row: dict) -> Block:
    return Block(
        id=row["id"],
        name=row.get("name") or "",
        content=row.get("content") or "",
        properties=tuple(property_from_dict(p) for p in row.get("properties") or []),
        is_pinned=bool(row.get("is_pinned")),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
        indent=row.get("indent") or 0,
        is_collapsed=bool(row.get("is_collapsed")),
        column=BlockColumn(row.get("column") or BlockColumn.INBOX.value),
    )


class SupabaseRestSync:
    """
    Supabase (PostgREST) adapter.

    Implements BlockSync protocol. Upserts are last-writer-wins per row.
    No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        if not self.config.supabase_url or not self.config.supabase_key:
            raise SyncError("Missing Supabase credentials. Add SUPABASE_URL and SUPABASE_KEY to config/tutordesk.conf")
        self.base_url = f"{self.config.supabase_url.rstrip('/')}/rest/v1"
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": self.config.supabase_key,
                "Authorization": f"Bearer {self.config.supabase_key}",
                "Content-Type": "application/json",
            }
        )

    def _check(self, resp: requests.Response, action: str) -> None:
        if not 200 <= resp.status_code < 300:
            raise SyncError(f"{action} failed ({resp.status_code}): {resp.text}")

    def _upsert(self, table: str, rows: list[dict], on_conflict: str) -> int:
        if not rows:
            return 0
        resp = self._session.post(
            f"{self.base_url}/{table}",
            params={"on_conflict": on_conflict},
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            json=rows,
        )
        self._check(resp, f"Upsert into {table}")
        logger.info(f"Upserted {len(rows)} row(s) into {table}")
        return len(rows)

    def push(self, blocks: list[Block]) -> int:
        """Upsert live blocks; `sort_order` is the position in the full collection."""
        rows = [block_to_row(b, index) for index, b in enumerate(blocks) if not b.is_deleted]
        return self._upsert(BLOCKS_TABLE, rows, "id")

    def delete(self, block_ids: list[str]) -> None:
        if not block_ids:
            return
        resp = self._session.delete(
            f"{self.base_url}/{BLOCKS_TABLE}",
            params={"id": f"in.({','.join(block_ids)})"},
        )
        self._check(resp, f"Delete from {BLOCKS_TABLE}")
        logger.info(f"Deleted {len(block_ids)} remote block(s)")

    def fetch_all(self) -> list[Block]:
        resp = self._session.get(
            f"{self.base_url}/{BLOCKS_TABLE}",
            params={"select": "*", "order": "sort_order.asc"},
        )
        self._check(resp, f"Fetch from {BLOCKS_TABLE}")
        try:
            rows = resp.json()
            blocks = [row_to_block(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise SyncError(f"Malformed remote block: {e}") from e
        logger.info(f"Fetched {len(blocks)} remote block(s)")
        return blocks

    def push_history(self, history: list[Top3History]) -> int:
        rows = [history_to_dict(h) for h in history]
        return self._upsert(HISTORY_TABLE, rows, "date")
