"""Service catalog data models."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from autobrilho.utils import new_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Service(BaseModel):
    """An offerable detailing service. Duration drives booking end times."""

    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    price: Decimal = Field(ge=0, decimal_places=2)
    duration_minutes: int = Field(gt=0)
    is_active: bool = True
    image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


_REQUIRED_FIELDS = ("name", "price", "duration_minutes", "is_active")


class ServiceUpdate(BaseModel):
    """Partial staff edit of a service. Unset fields are left unchanged."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None
    image_url: Optional[str] = None

    @model_validator(mode="after")
    def _reject_null_required(self) -> "ServiceUpdate":
        cleared = sorted(
            name for name in _REQUIRED_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"Cannot clear required service fields: {', '.join(cleared)}")
        return self
