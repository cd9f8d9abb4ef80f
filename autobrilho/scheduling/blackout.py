"""Staff-managed blackout windows: full-day closures and partial-day blocks."""

from datetime import date, time
from typing import Optional

from autobrilho.logging_context import get_request_logger
from autobrilho.schemas.blocked_slot_schema import BlockedSlot
from autobrilho.store.base import Datastore

logger = get_request_logger(__name__)


class BlackoutRegistry:
    """Reads and writes BlockedSlot rows. Has no end-user mutation path."""

    def __init__(self, store: Datastore) -> None:
        self._store = store

    def blocks_for(self, day: date) -> list[BlockedSlot]:
        return self._store.blocks_for(day)

    def block_day(self, day: date, reason: Optional[str] = None) -> BlockedSlot:
        """Close ``day`` entirely."""
        block = self._store.add_block(
            BlockedSlot(blocked_date=day, is_full_day=True, reason=reason)
        )
        logger.info("Full day blocked: %s (%s)", day, reason or "no reason")
        return block

    def block_range(
        self, day: date, start: time, end: time, reason: Optional[str] = None
    ) -> BlockedSlot:
        """Block the half-open interval [start, end) on ``day``."""
        block = self._store.add_block(
            BlockedSlot(blocked_date=day, start_time=start, end_time=end, reason=reason)
        )
        logger.info(
            "Partial block on %s: %s-%s (%s)",
            day, f"{start:%H:%M}", f"{end:%H:%M}", reason or "no reason",
        )
        return block

    def remove_block(self, block_id: str) -> None:
        self._store.delete_block(block_id)
        logger.info("Block removed: %s", block_id)

    def upcoming(self, from_date: date) -> list[BlockedSlot]:
        """All blocks on or after ``from_date``, in date order."""
        return self._store.list_blocks(from_date=from_date)
