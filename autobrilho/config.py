"""
Centralized configuration with environment variable overrides.

Business values, the booking window, the daily slot roster and the
datastore URL are configurable here. Nothing is hardcoded in the
scheduling or store logic.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, time

from dotenv import load_dotenv

from autobrilho.logging_context import RequestIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TIME_SLOTS = "08:00,09:00,10:00,11:00,13:00,14:00,15:00,16:00,17:00"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag; accepts 1/true/yes/on (case-insensitive)."""
    raw = os.getenv(env_var, default)
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def parse_time_slots(raw: str) -> tuple[time, ...]:
    """Parse a comma-separated ``HH:MM`` roster into ordered ``time`` values.

    Examples:
        >>> parse_time_slots("08:00, 09:30")
        (datetime.time(8, 0), datetime.time(9, 30))
    """
    slots = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            slots.append(datetime.strptime(chunk, "%H:%M").time())
        except ValueError:
            raise ValueError(f"Invalid time slot in TIME_SLOTS: {chunk!r}") from None
    return tuple(slots)


@dataclass(frozen=True)
class BusinessConfig:
    """Business-specific settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "AutoBrilho")
    currency: str = os.getenv("CURRENCY", "BRL")


@dataclass(frozen=True)
class BookingConfig:
    """Booking horizon and the fixed daily slot roster."""

    window_days: int = _safe_int("BOOKING_WINDOW_DAYS", "30")
    time_slots: tuple[time, ...] = parse_time_slots(os.getenv("TIME_SLOTS", DEFAULT_TIME_SLOTS))


@dataclass(frozen=True)
class DatabaseConfig:
    """Datastore connection settings."""

    url: str = os.getenv("DATABASE_URL", "sqlite:///autobrilho.db")
    echo: bool = _safe_bool("DB_ECHO", "false")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "autobrilho-scheduler")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.booking.window_days < 0:
        raise ValueError(
            f"BOOKING_WINDOW_DAYS must be >= 0, got {config.booking.window_days}"
        )
    if not config.booking.time_slots:
        raise ValueError("TIME_SLOTS must contain at least one HH:MM entry")

    slots = config.booking.time_slots
    for earlier, later in zip(slots, slots[1:]):
        if later <= earlier:
            raise ValueError(
                "TIME_SLOTS must be strictly increasing, "
                f"got {earlier:%H:%M} before {later:%H:%M}"
            )

    if not config.database.url:
        raise ValueError("DATABASE_URL must not be empty")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
