"""Remote block sync interface."""

from typing import Protocol

from tutordesk.core.blocks import Block
from tutordesk.core.top3 import Top3History


class BlockSync(Protocol):
    """Interface for mirroring the workspace to a remote backend."""

    def push(self, blocks: list[Block]) -> int:
        """Upsert blocks. Returns the number of rows sent."""
        ...

    def delete(self, block_ids: list[str]) -> None:
        """Hard-delete blocks by id."""
        ...

    def fetch_all(self) -> list[Block]:
        """Fetch every remote block, in stored order."""
        ...

    def push_history(self, history: list[Top3History]) -> int:
        """Upsert TOP 3 history entries keyed by date."""
        ...
