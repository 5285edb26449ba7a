"""Workspace storage interface."""

from datetime import date
from typing import Protocol

from tutordesk.core.blocks import Block, CustomView, Tag
from tutordesk.core.top3 import Top3History


class WorkspaceStore(Protocol):
    """Interface for loading and saving whole collections."""

    def load_blocks(self, today: date | str) -> list[Block]:
        """Load all blocks. Falls back to seed data when nothing usable is stored."""
        ...

    def save_blocks(self, blocks: list[Block]) -> None:
        """Replace the stored block collection."""
        ...

    def load_history(self) -> list[Top3History]:
        ...

    def save_history(self, history: list[Top3History]) -> None:
        ...

    def load_tags(self) -> list[Tag]:
        ...

    def save_tags(self, tags: list[Tag]) -> None:
        ...

    def load_custom_views(self) -> list[CustomView]:
        ...

    def save_custom_views(self, views: list[CustomView]) -> None:
        ...
