"""Upcoming-holiday filtering and pre-holiday reminder schedules.

Everything here is pure: results depend only on the records, the reference
date and the offsets passed in, so concurrent callers share nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime

from holiday_bot.date_logic import (
    InvalidHolidayDateError,
    days_until,
    is_upcoming,
    parse_holiday_date,
    reminder_date,
    truncate_to_date,
)
from holiday_bot.models import (
    DEFAULT_REMINDER_OFFSETS,
    ComputationResult,
    HolidayRecord,
    ReminderEvent,
    ReminderSetup,
    UpcomingHoliday,
)

LOGGER = logging.getLogger(__name__)

REMINDER_MESSAGE_TEMPLATES = {
    30: "📅 30-day planning reminder for {holiday_name}",
    10: "🔔 10-day preparation reminder for {holiday_name}",
    3: "⏰ 3-day countdown for {holiday_name}",
    2: "🎊 2-day final reminder for {holiday_name}",
}
DEFAULT_MESSAGE_TEMPLATE = "📌 {days_before}-day reminder for {holiday_name}"


def reminder_message(days_before: int, holiday_name: str) -> str:
    template = REMINDER_MESSAGE_TEMPLATES.get(days_before, DEFAULT_MESSAGE_TEMPLATE)
    return template.format(days_before=days_before, holiday_name=holiday_name)


def build_reminders(
    holiday_name: str,
    holiday_date: date,
    remaining_days: int,
    reminder_offsets: Iterable[int],
) -> tuple[ReminderEvent, ...]:
    # Offsets equal to or beyond the remaining days would be due today or in the past.
    return tuple(
        ReminderEvent(
            days_before=offset,
            reminder_date=reminder_date(holiday_date, offset),
            message=reminder_message(offset, holiday_name),
        )
        for offset in reminder_offsets
        if remaining_days > offset
    )


def _upcoming_records(
    records: Iterable[HolidayRecord],
    today: date,
) -> list[tuple[HolidayRecord, date]]:
    upcoming: list[tuple[HolidayRecord, date]] = []
    for record in records:
        try:
            holiday_date = parse_holiday_date(record.date)
        except InvalidHolidayDateError:
            LOGGER.warning("Skipping holiday %r with invalid date %r", record.name, record.date)
            continue
        if is_upcoming(holiday_date, today):
            upcoming.append((record, holiday_date))
    return upcoming


def compute_upcoming_holidays(
    records: Iterable[HolidayRecord],
    reference_date: date | datetime,
    reminder_offsets: Sequence[int] = DEFAULT_REMINDER_OFFSETS,
) -> list[UpcomingHoliday]:
    """Return the holidays on or after ``reference_date`` with their reminders.

    Records with an unparseable date are logged and dropped. Input order is
    kept, and reminders follow the order of ``reminder_offsets``.
    """
    today = truncate_to_date(reference_date)
    offsets = tuple(reminder_offsets)

    holidays: list[UpcomingHoliday] = []
    for record, holiday_date in _upcoming_records(records, today):
        remaining = days_until(holiday_date, today)
        holidays.append(
            UpcomingHoliday(
                date=holiday_date,
                name=record.name,
                local_name=record.local_name,
                days_until=remaining,
                reminders=build_reminders(record.name, holiday_date, remaining, offsets),
            )
        )
    return holidays


def build_result(
    records: Iterable[HolidayRecord],
    reference_date: date | datetime,
    country: str,
    reminder_offsets: Sequence[int] = DEFAULT_REMINDER_OFFSETS,
) -> ComputationResult:
    today = truncate_to_date(reference_date)
    offsets = tuple(reminder_offsets)
    holidays = compute_upcoming_holidays(records, today, offsets)
    LOGGER.info("Found %s upcoming holidays for %s", len(holidays), country)
    return ComputationResult(
        holidays=tuple(holidays),
        country=country,
        year=today.year,
        reminder_schedule=offsets,
    )


def count_upcoming(records: Iterable[HolidayRecord], reference_date: date | datetime) -> int:
    return len(_upcoming_records(records, truncate_to_date(reference_date)))


def summarize_reminder_setup(
    records: Iterable[HolidayRecord],
    reference_date: date | datetime,
    country: str,
    reminder_offsets: Sequence[int] = DEFAULT_REMINDER_OFFSETS,
) -> ReminderSetup:
    offsets = tuple(reminder_offsets)
    upcoming_count = count_upcoming(records, reference_date)
    total_reminders = upcoming_count * len(offsets)

    message = (
        f"✅ Reminder system activated for {country}! "
        f"You'll receive {len(offsets)} reminders for each of the {upcoming_count} upcoming holidays."
    )
    LOGGER.info(
        "Reminder setup for %s: %s holidays, %s total reminders",
        country,
        upcoming_count,
        total_reminders,
    )
    return ReminderSetup(
        country=country,
        total_holidays=upcoming_count,
        total_reminders=total_reminders,
        reminder_schedule=offsets,
        message=message,
    )
