"""Administrative blackout windows."""

from datetime import date, datetime, time, timezone
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from autobrilho.utils import new_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BlockedSlot(BaseModel):
    """
    A staff-defined exclusion on a single date.

    Full-day blocks remove the whole date; start/end are ignored.
    Partial blocks remove the half-open interval [start_time, end_time).
    """

    id: str = Field(default_factory=new_id)
    blocked_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_full_day: bool = False
    reason: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _check_interval(self) -> "BlockedSlot":
        if self.is_full_day:
            return self
        if self.start_time is None or self.end_time is None:
            raise ValueError("A partial-day block needs both start_time and end_time")
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Block start {self.start_time:%H:%M} must be before end {self.end_time:%H:%M}"
            )
        return self

    def covers(self, slot: time) -> bool:
        """Return True if ``slot`` falls inside this block (end excluded)."""
        if self.is_full_day:
            return True
        if self.start_time is None or self.end_time is None:
            return False
        return self.start_time <= slot < self.end_time
