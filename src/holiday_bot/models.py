from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any


DEFAULT_REMINDER_OFFSETS = (30, 10, 3, 2)


@dataclass(frozen=True)
class HolidayRecord:
    date: str
    name: str
    local_name: str

    @classmethod
    def from_api(cls, row: dict[str, Any]) -> HolidayRecord:
        return cls(
            date=str(row.get("date", "")),
            name=str(row.get("name") or ""),
            local_name=str(row.get("localName") or ""),
        )


@dataclass(frozen=True)
class ReminderEvent:
    days_before: int
    reminder_date: date
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "daysBefore": self.days_before,
            "reminderDate": self.reminder_date.isoformat(),
            "message": self.message,
        }


@dataclass(frozen=True)
class UpcomingHoliday:
    date: date
    name: str
    local_name: str
    days_until: int
    reminders: tuple[ReminderEvent, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "name": self.name,
            "localName": self.local_name,
            "daysUntil": self.days_until,
            "reminders": [reminder.to_dict() for reminder in self.reminders],
        }


@dataclass(frozen=True)
class ComputationResult:
    holidays: tuple[UpcomingHoliday, ...]
    country: str
    year: int
    reminder_schedule: tuple[int, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "holidays": [holiday.to_dict() for holiday in self.holidays],
            "country": self.country,
            "year": self.year,
            "reminderSchedule": list(self.reminder_schedule),
        }


@dataclass(frozen=True)
class ReminderSetup:
    country: str
    total_holidays: int
    total_reminders: int
    reminder_schedule: tuple[int, ...]
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "country": self.country,
            "totalHolidays": self.total_holidays,
            "totalReminders": self.total_reminders,
            "reminderSchedule": list(self.reminder_schedule),
        }


@dataclass(frozen=True)
class Country:
    country_code: str
    name: str

    @classmethod
    def from_api(cls, row: dict[str, Any]) -> Country:
        return cls(country_code=str(row.get("countryCode", "")), name=str(row.get("name", "")))

    def to_dict(self) -> dict[str, str]:
        return {"countryCode": self.country_code, "name": self.name}
