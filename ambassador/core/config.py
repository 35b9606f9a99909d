from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

SECONDS_PER_DAY = 86_400

# Program bounds.  Writes outside these ranges are rejected by the registry.
MIN_DURATION_DAYS = 30
MAX_DURATION_DAYS = 3650
MIN_SUBMISSION_FEE = Decimal("0.0001")
MAX_SUBMISSION_FEE = Decimal("0.1")
MAX_BATCH_SIZE = 50
MAX_PAGE_SIZE = 100


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _get_decimal(name: str, default: str) -> Decimal:
    raw = _getenv(name, default)
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{name} must be a decimal amount (got {raw!r})") from None


def _get_int(name: str, default: str) -> int:
    raw = _getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None


def _get_identity(name: str, default: str) -> str:
    value = _getenv(name, default)
    if not value:
        raise ValueError(f"{name} must be non-empty")
    return value


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    owner_id: str = "owner"
    registry_id: str = "ambassador-registry"
    issuer_id: str = "badge-issuer"
    duration_days: int = 365
    elite_fee: Decimal = Decimal("0.01")
    submission_fee: Decimal = Decimal("0.001")
    max_batch_size: int = MAX_BATCH_SIZE

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def duration_seconds(self) -> int:
        return self.duration_days * SECONDS_PER_DAY


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if log_json_raw not in ("true", "false", "1", "0", "yes", "no"):
        raise ValueError(f"LOG_JSON must be true|false (got {log_json_raw!r})")

    port = _get_int("PORT", "8000")

    duration_days = _get_int("AMBASSADOR_DURATION_DAYS", "365")
    if not MIN_DURATION_DAYS <= duration_days <= MAX_DURATION_DAYS:
        raise ValueError(
            f"AMBASSADOR_DURATION_DAYS must be within "
            f"[{MIN_DURATION_DAYS}, {MAX_DURATION_DAYS}] (got {duration_days})"
        )

    elite_fee = _get_decimal("ELITE_FEE", "0.01")
    if elite_fee < 0:
        raise ValueError(f"ELITE_FEE must not be negative (got {elite_fee})")

    submission_fee = _get_decimal("SUBMISSION_FEE", "0.001")
    if not MIN_SUBMISSION_FEE <= submission_fee <= MAX_SUBMISSION_FEE:
        raise ValueError(
            f"SUBMISSION_FEE must be within "
            f"[{MIN_SUBMISSION_FEE}, {MAX_SUBMISSION_FEE}] (got {submission_fee})"
        )

    max_batch_size = _get_int("MAX_BATCH_SIZE", str(MAX_BATCH_SIZE))
    if not 1 <= max_batch_size <= MAX_BATCH_SIZE:
        raise ValueError(
            f"MAX_BATCH_SIZE must be within [1, {MAX_BATCH_SIZE}] "
            f"(got {max_batch_size})"
        )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("true", "1", "yes"),
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        redis_url=_getenv("REDIS_URL", "") or None,
        owner_id=_get_identity("OWNER_ID", "owner"),
        registry_id=_get_identity("REGISTRY_ID", "ambassador-registry"),
        issuer_id=_get_identity("ISSUER_ID", "badge-issuer"),
        duration_days=duration_days,
        elite_fee=elite_fee,
        submission_fee=submission_fee,
        max_batch_size=max_batch_size,
    )


SETTINGS = load_settings()
