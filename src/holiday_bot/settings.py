from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from holiday_bot.holiday_client import DEFAULT_BASE_URL
from holiday_bot.models import DEFAULT_REMINDER_OFFSETS


@dataclass(frozen=True)
class Settings:
    telegram_bot_token: str | None
    telegram_allowed_chat_id: int | None
    holiday_api_base_url: str
    holiday_api_timeout: float
    holiday_api_max_attempts: int
    reminder_offsets: tuple[int, ...]
    timezone: str
    frontend_url: str | None
    port: int
    log_level: str


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise ValueError(f"Missing required environment variable: {name}")
    return value.strip()


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_offsets(value: str) -> tuple[int, ...]:
    offsets: list[int] = []
    for token in value.split(","):
        cleaned = token.strip()
        if not cleaned:
            continue
        if not cleaned.isdigit():
            raise ValueError("HOLIDAY_REMINDER_OFFSETS must be comma-separated non-negative integers")
        offsets.append(int(cleaned))
    if not offsets:
        raise ValueError("HOLIDAY_REMINDER_OFFSETS must not be empty")
    return tuple(offsets)


def _validate_timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc
    return name


def load_settings() -> Settings:
    allowed_chat_id = _optional_env("TELEGRAM_ALLOWED_CHAT_ID")
    offsets_raw = _optional_env("HOLIDAY_REMINDER_OFFSETS")

    max_attempts = int(os.getenv("HOLIDAY_API_MAX_ATTEMPTS", "3"))
    if max_attempts < 1:
        raise ValueError("HOLIDAY_API_MAX_ATTEMPTS must be at least 1")

    return Settings(
        telegram_bot_token=_optional_env("TELEGRAM_BOT_TOKEN"),
        telegram_allowed_chat_id=int(allowed_chat_id) if allowed_chat_id is not None else None,
        holiday_api_base_url=os.getenv("HOLIDAY_API_BASE_URL", DEFAULT_BASE_URL),
        holiday_api_timeout=float(os.getenv("HOLIDAY_API_TIMEOUT", "10")),
        holiday_api_max_attempts=max_attempts,
        reminder_offsets=_parse_offsets(offsets_raw) if offsets_raw else DEFAULT_REMINDER_OFFSETS,
        timezone=_validate_timezone(os.getenv("HOLIDAY_TIMEZONE", "UTC").strip()),
        frontend_url=_optional_env("FRONTEND_URL"),
        port=int(os.getenv("PORT", "3001")),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    )


def require_bot_token(settings: Settings) -> str:
    if settings.telegram_bot_token is None:
        return _required_env("TELEGRAM_BOT_TOKEN")
    return settings.telegram_bot_token
