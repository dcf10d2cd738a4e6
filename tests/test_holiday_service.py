from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from holiday_bot.holiday_client import RateLimitedError
from holiday_bot.holiday_service import HolidayService
from holiday_bot.models import Country, HolidayRecord


@dataclass
class FakeClient:
    records: list[HolidayRecord] = field(default_factory=list)
    failures: list[Exception] = field(default_factory=list)
    calls: list[tuple[int, str]] = field(default_factory=list)

    async def fetch_public_holidays(self, year: int, country_code: str) -> list[HolidayRecord]:
        self.calls.append((year, country_code))
        if self.failures:
            raise self.failures.pop(0)
        return list(self.records)

    async def fetch_available_countries(self) -> list[Country]:
        return [Country(country_code="CM", name="Cameroon")]


def _fixed_clock(moment: datetime):
    def clock(tz: ZoneInfo) -> datetime:
        return moment.astimezone(tz)

    return clock


def test_upcoming_holidays_uses_clock_year_and_normalized_code() -> None:
    client = FakeClient(
        records=[
            HolidayRecord(date="2025-01-01", name="New Year's Day", local_name="New Year's Day"),
            HolidayRecord(date="2025-02-01", name="Founders Day", local_name="Founders Day"),
        ]
    )
    service = HolidayService(
        client=client,
        clock=_fixed_clock(datetime(2025, 1, 1, 9, 0, tzinfo=ZoneInfo("UTC"))),
    )

    result = asyncio.run(service.upcoming_holidays("ng"))

    assert client.calls == [(2025, "NG")]
    assert result.country == "NG"
    assert result.year == 2025
    assert [h.days_until for h in result.holidays] == [0, 31]
    assert result.reminder_schedule == (30, 10, 3, 2)


def test_today_follows_configured_timezone() -> None:
    moment = datetime(2025, 12, 31, 23, 30, tzinfo=ZoneInfo("UTC"))
    service = HolidayService(client=FakeClient(), timezone_name="Africa/Lagos", clock=_fixed_clock(moment))

    assert service.today() == date(2026, 1, 1)


def test_upcoming_holidays_retries_on_rate_limit() -> None:
    client = FakeClient(
        records=[HolidayRecord(date="2025-06-12", name="Democracy Day", local_name="Democracy Day")],
        failures=[RateLimitedError("slow down", retry_after=0)],
    )
    service = HolidayService(client=client)

    result = asyncio.run(service.upcoming_holidays("NG", today=date(2025, 6, 1)))

    assert len(client.calls) == 2
    assert result.holidays[0].days_until == 11


def test_setup_reminder_system_defaults_to_configured_offsets() -> None:
    client = FakeClient(
        records=[
            HolidayRecord(date="2025-05-20", name="National Day", local_name="Fête nationale"),
            HolidayRecord(date="2025-12-25", name="Christmas Day", local_name="Noël"),
        ]
    )
    service = HolidayService(client=client, reminder_offsets=[7, 1])

    setup = asyncio.run(service.setup_reminder_system("cm", today=date(2025, 6, 1)))

    assert setup.country == "CM"
    assert setup.total_holidays == 1
    assert setup.total_reminders == 2
    assert setup.reminder_schedule == (7, 1)


def test_setup_reminder_system_custom_offsets() -> None:
    client = FakeClient(records=[HolidayRecord(date="2025-12-25", name="Christmas Day", local_name="Noël")])
    service = HolidayService(client=client)

    setup = asyncio.run(service.setup_reminder_system("CM", [14, 7, 1], today=date(2025, 6, 1)))

    assert setup.total_reminders == 3
    assert setup.reminder_schedule == (14, 7, 1)


def test_invalid_inputs_rejected_before_fetch() -> None:
    client = FakeClient()
    service = HolidayService(client=client)

    with pytest.raises(ValueError):
        asyncio.run(service.upcoming_holidays("USA"))
    with pytest.raises(ValueError):
        asyncio.run(service.setup_reminder_system("US", [-3]))

    assert client.calls == []


def test_available_countries() -> None:
    service = HolidayService(client=FakeClient())

    countries = asyncio.run(service.available_countries())

    assert countries == [Country(country_code="CM", name="Cameroon")]
