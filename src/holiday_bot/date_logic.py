from __future__ import annotations

import re
from datetime import date, datetime, timedelta


class InvalidHolidayDateError(ValueError):
    pass


_COUNTRY_CODE_RE = re.compile(r"[A-Za-z]{2}")


def truncate_to_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_holiday_date(raw: str) -> date:
    value = raw.strip() if isinstance(raw, str) else ""
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidHolidayDateError(f"Invalid holiday date: {raw!r}") from exc


def is_upcoming(holiday_date: date, today: date) -> bool:
    return holiday_date >= today


def days_until(holiday_date: date, today: date) -> int:
    return (holiday_date - today).days


def reminder_date(holiday_date: date, days_before: int) -> date:
    return holiday_date - timedelta(days=days_before)


def normalize_country_code(raw: str) -> str:
    value = (raw or "").strip()
    if not _COUNTRY_CODE_RE.fullmatch(value):
        raise ValueError(f"Country code must be 2 letters (e.g., US, GB, NG), got: {raw!r}")
    return value.upper()


def validate_offsets(offsets) -> tuple[int, ...]:
    validated: list[int] = []
    for offset in offsets:
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise ValueError("reminder offsets must be non-negative integers")
        validated.append(offset)
    return tuple(validated)
