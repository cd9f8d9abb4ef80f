"""Shared utilities used across the scheduling engine."""

import re
import uuid
from datetime import time


def new_id() -> str:
    """Return a new opaque record identifier."""
    return str(uuid.uuid4())


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(11) 98765-4321")
        '11987654321'
        >>> normalize_phone("+55 11 98765-4321")
        '+5511987654321'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def truncate_to_minute(value: time) -> time:
    """Drop seconds and microseconds, keeping hour:minute granularity."""
    return value.replace(second=0, microsecond=0, tzinfo=None)


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")
