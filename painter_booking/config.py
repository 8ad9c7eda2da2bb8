"""
Centralized configuration with environment variable overrides.

Scoring weights, alternative-search windows and storage settings are
configurable here. Nothing is hardcoded in service or store logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from painter_booking.logging_context import configure_logging

load_dotenv()

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("sql", "memory")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class StorageConfig:
    """Persistence backend settings."""

    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./painter_booking.db")
    backend: str = os.getenv("STORE_BACKEND", "sql")
    echo: bool = _safe_bool("DATABASE_ECHO", "false")
    sqlite_busy_timeout: float = _safe_float("SQLITE_BUSY_TIMEOUT", "5")


@dataclass(frozen=True)
class ScoringConfig:
    """Weights for ranking candidate painters."""

    rating_weight: float = _safe_float("SCORE_RATING_WEIGHT", "20")
    experience_weight: float = _safe_float("SCORE_EXPERIENCE_WEIGHT", "2")
    experience_cap: float = _safe_float("SCORE_EXPERIENCE_CAP", "40")
    availability_bonus: float = _safe_float("SCORE_AVAILABILITY_BONUS", "40")


@dataclass(frozen=True)
class MatchingConfig:
    """Alternative-slot search window and reservation retry policy."""

    lookback_hours: int = _safe_int("ALTERNATIVE_LOOKBACK_HOURS", "24")
    lookahead_days: int = _safe_int("ALTERNATIVE_LOOKAHEAD_DAYS", "7")
    max_alternatives: int = _safe_int("MAX_ALTERNATIVES", "5")
    reservation_retries: int = _safe_int("RESERVATION_RETRIES", "1")
    skip_inactive_painters: bool = _safe_bool("SKIP_INACTIVE_PAINTERS", "true")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "painter-booking")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.storage.backend not in STORE_BACKENDS:
        raise ValueError(
            f"STORE_BACKEND must be one of {list(STORE_BACKENDS)}, got {config.storage.backend!r}"
        )
    if config.storage.sqlite_busy_timeout <= 0:
        raise ValueError(
            f"SQLITE_BUSY_TIMEOUT must be > 0, got {config.storage.sqlite_busy_timeout}"
        )

    for weight_name, weight_value in [
        ("SCORE_RATING_WEIGHT", config.scoring.rating_weight),
        ("SCORE_EXPERIENCE_WEIGHT", config.scoring.experience_weight),
        ("SCORE_EXPERIENCE_CAP", config.scoring.experience_cap),
        ("SCORE_AVAILABILITY_BONUS", config.scoring.availability_bonus),
    ]:
        if weight_value < 0:
            raise ValueError(f"{weight_name} must be >= 0, got {weight_value}")

    if config.matching.lookback_hours < 0:
        raise ValueError(
            f"ALTERNATIVE_LOOKBACK_HOURS must be >= 0, got {config.matching.lookback_hours}"
        )
    if config.matching.lookahead_days < 1:
        raise ValueError(
            f"ALTERNATIVE_LOOKAHEAD_DAYS must be >= 1, got {config.matching.lookahead_days}"
        )
    if config.matching.max_alternatives < 1:
        raise ValueError(
            f"MAX_ALTERNATIVES must be >= 1, got {config.matching.max_alternatives}"
        )
    if config.matching.reservation_retries < 0:
        raise ValueError(
            f"RESERVATION_RETRIES must be >= 0, got {config.matching.reservation_retries}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    configure_logging(config.log_level)
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
