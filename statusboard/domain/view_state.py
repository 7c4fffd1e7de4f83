# SPDX-License-Identifier: Apache-2.0

"""
Client-side cache of the currently selected block.

Block fetches are asynchronous relative to block switching: a slow response
for block A may arrive after the user already moved to block B. Every fetch
is issued a ticket, and only the response for the newest ticket of the
selected block is applied.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from ..models.entities import RoomRecord
from ..models.enums import InfoSource, RoomStatus
from .address import is_valid_block, room_key
from .board import (
    BlockStats,
    FilterState,
    GridModel,
    ListRow,
    as_record,
    build_grid_model,
    build_list_model,
    compute_stats
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchTicket:
    """Identifies one block fetch."""
    block: str
    generation: int


class BlockViewState:
    """Selected block plus the last applied snapshot of its rooms."""

    def __init__(self, block: str = "A"):
        if not is_valid_block(block):
            raise ValueError(f"Unknown block: {block}")
        self.current_block = block
        self.records: Dict[str, RoomRecord] = {}
        self.loading = False
        self._generation = 0
        self._lock = threading.Lock()

    def select_block(self, block: str) -> FetchTicket:
        """Switch to a block and issue the ticket for its fetch."""
        if not is_valid_block(block):
            raise ValueError(f"Unknown block: {block}")

        with self._lock:
            self._generation += 1
            if block != self.current_block:
                self.records = {}
            self.current_block = block
            self.loading = True
            return FetchTicket(block=block, generation=self._generation)

    def revalidate(self) -> FetchTicket:
        """Issue a fresh ticket for the current block."""
        return self.select_block(self.current_block)

    def is_current(self, ticket: FetchTicket) -> bool:
        return ticket.block == self.current_block and ticket.generation == self._generation

    def apply_fetch(self, ticket: FetchTicket, records: Optional[Mapping[str, Any]]) -> bool:
        """
        Apply a fetched snapshot unless it is stale.

        Returns:
            True if the snapshot replaced the cache, False if it was discarded
        """
        with self._lock:
            if not self.is_current(ticket):
                logger.debug("Discarding stale block snapshot", extra={
                    "ticket_block": ticket.block,
                    "ticket_generation": ticket.generation,
                    "current_block": self.current_block
                })
                return False

            snapshot = {}
            for key, value in (records or {}).items():
                record = as_record(value)
                if record is not None:
                    snapshot[key] = record
            self.records = snapshot
            self.loading = False
            return True

    def fail_fetch(self, ticket: FetchTicket) -> bool:
        """Clear the loading flag after a failed fetch; the old snapshot stays."""
        with self._lock:
            if not self.is_current(ticket):
                return False
            self.loading = False
            return True

    def apply_local_patch(
        self,
        block: str,
        floor: int,
        unit: int,
        status: Optional[RoomStatus],
        remark: Optional[str] = None,
        source: Optional[InfoSource] = None,
        source_url: Optional[str] = None,
        actor_uid: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Optimistically reflect a successful write in the cache.

        Patches for a block other than the selected one are ignored; that
        block is fetched fresh when it is selected again.
        """
        with self._lock:
            if block != self.current_block:
                return False

            key = room_key(floor, unit)
            patched = RoomRecord(
                status=status,
                remark=remark,
                source=source,
                source_url=source_url,
                updated_at=now or datetime.utcnow(),
                updated_by=actor_uid
            )
            self.records = {**self.records, key: patched}
            return True

    def stats(self) -> BlockStats:
        return compute_stats(self.records)

    def grid(self, filter_state: FilterState, now: Any = None) -> GridModel:
        return build_grid_model(self.current_block, self.records, filter_state, now)

    def rows(self, filter_state: FilterState, now: Any = None) -> List[ListRow]:
        return build_list_model(self.records, filter_state, now)
