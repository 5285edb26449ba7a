"""File-based workspace storage adapter."""

import json
import logging
import os
import tempfile
from datetime import date
from pathlib import Path

from tutordesk.core.blocks import DEFAULT_CUSTOM_VIEWS, Block, CustomView, Tag
from tutordesk.core.seed import seed_blocks, seed_tags
from tutordesk.core.serialization import (
    blocks_from_list,
    blocks_to_list,
    custom_view_from_dict,
    custom_view_to_dict,
    history_from_list,
    history_to_dict,
    tag_from_dict,
    tag_to_dict,
)
from tutordesk.core.top3 import Top3History

logger = logging.getLogger(__name__)

BLOCKS_FILE = "blocks.json"
HISTORY_FILE = "top3_history.json"
TAGS_FILE = "tags.json"
CUSTOM_VIEWS_FILE = "custom_views.json"


class FileWorkspaceStore:
    """
    JSON file storage.

    Implements WorkspaceStore protocol. Each collection is one JSON document
    in `data_dir`, rewritten whole on every save.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _read(self, filename: str):
        """Parsed JSON document, or None when the file does not exist."""
        path = self.data_dir / filename
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, filename: str, data) -> None:
        """Write to a temp file in the same directory, then rename over the target."""
        path = self.data_dir / filename
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{filename}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # ============== Blocks ==============

    def load_blocks(self, today: date | str) -> list[Block]:
        """Stored blocks, or the seed set when the file is missing, empty or malformed."""
        try:
            data = self._read(BLOCKS_FILE)
            if data is None:
                logger.info(f"No {BLOCKS_FILE} in {self.data_dir}, starting from seed data")
                return seed_blocks(today)
            blocks = blocks_from_list(data)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load {BLOCKS_FILE}, using seed data: {e}")
            return seed_blocks(today)
        if not blocks:
            logger.warning(f"{BLOCKS_FILE} is empty, using seed data")
            return seed_blocks(today)
        return blocks

    def save_blocks(self, blocks: list[Block]) -> None:
        self._write(BLOCKS_FILE, blocks_to_list(blocks))
        logger.debug(f"Saved {len(blocks)} blocks")

    # ============== TOP 3 history ==============

    def load_history(self) -> list[Top3History]:
        try:
            data = self._read(HISTORY_FILE)
            return history_from_list(data) if data is not None else []
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load {HISTORY_FILE}, starting empty: {e}")
            return []

    def save_history(self, history: list[Top3History]) -> None:
        self._write(HISTORY_FILE, [history_to_dict(h) for h in history])

    # ============== Tags ==============

    def load_tags(self) -> list[Tag]:
        try:
            data = self._read(TAGS_FILE)
            if not data:
                return seed_tags()
            if not isinstance(data, list):
                raise ValueError(f"Expected a list of tags, got {type(data).__name__}")
            return [tag_from_dict(item) for item in data]
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load {TAGS_FILE}, using seed tags: {e}")
            return seed_tags()

    def save_tags(self, tags: list[Tag]) -> None:
        self._write(TAGS_FILE, [tag_to_dict(t) for t in tags])

    # ============== Custom views ==============

    def load_custom_views(self) -> list[CustomView]:
        try:
            data = self._read(CUSTOM_VIEWS_FILE)
            if data is None:
                return list(DEFAULT_CUSTOM_VIEWS)
            if not isinstance(data, list):
                raise ValueError(f"Expected a list of views, got {type(data).__name__}")
            return [custom_view_from_dict(item) for item in data]
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load {CUSTOM_VIEWS_FILE}, using defaults: {e}")
            return list(DEFAULT_CUSTOM_VIEWS)

    def save_custom_views(self, views: list[CustomView]) -> None:
        self._write(CUSTOM_VIEWS_FILE, [custom_view_to_dict(v) for v in views])
