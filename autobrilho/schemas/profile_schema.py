"""Client profile data models."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from autobrilho.utils import new_id, normalize_phone

MIN_PHONE_DIGITS = 10
MAX_PHONE_LENGTH = 20


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(BaseModel):
    """Client contact and vehicle details, linked to an auth user id."""

    id: str = Field(default_factory=new_id)
    user_id: str = Field(min_length=1)
    full_name: str = Field(min_length=2, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    phone: Optional[str] = None
    vehicle_model: Optional[str] = Field(default=None, max_length=100)
    vehicle_color: Optional[str] = Field(default=None, max_length=50)
    vehicle_plate: Optional[str] = Field(default=None, min_length=7, max_length=10)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("full_name", "email", mode="before")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError(f"Invalid email: {value!r}")
        return value.lower()

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        if len(value.strip()) > MAX_PHONE_LENGTH:
            raise ValueError(f"Phone must be at most {MAX_PHONE_LENGTH} characters")
        cleaned = normalize_phone(value)
        if len(cleaned.lstrip("+")) < MIN_PHONE_DIGITS:
            raise ValueError(f"Phone must have at least {MIN_PHONE_DIGITS} digits")
        return cleaned

    @field_validator("vehicle_plate", mode="before")
    @classmethod
    def _normalize_plate(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip().upper()
