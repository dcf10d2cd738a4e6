from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime
from zoneinfo import ZoneInfo

from holiday_bot.date_logic import normalize_country_code, validate_offsets
from holiday_bot.holiday_client import NagerDateClient
from holiday_bot.models import DEFAULT_REMINDER_OFFSETS, ComputationResult, Country, ReminderSetup
from holiday_bot.reminder_calculator import build_result, summarize_reminder_setup
from holiday_bot.retry import with_retry
from holiday_bot.settings import Settings

LOGGER = logging.getLogger(__name__)


class HolidayService:
    def __init__(
        self,
        *,
        client: NagerDateClient,
        reminder_offsets: Sequence[int] = DEFAULT_REMINDER_OFFSETS,
        timezone_name: str = "UTC",
        max_attempts: int = 3,
        clock: Callable[[ZoneInfo], datetime] | None = None,
    ) -> None:
        self._client = client
        self._reminder_offsets = validate_offsets(reminder_offsets)
        self._tz = ZoneInfo(timezone_name)
        self._max_attempts = max_attempts
        self._clock = clock or datetime.now

    @classmethod
    def from_settings(cls, settings: Settings) -> HolidayService:
        client = NagerDateClient(
            base_url=settings.holiday_api_base_url,
            timeout=settings.holiday_api_timeout,
        )
        return cls(
            client=client,
            reminder_offsets=settings.reminder_offsets,
            timezone_name=settings.timezone,
            max_attempts=settings.holiday_api_max_attempts,
        )

    @property
    def reminder_offsets(self) -> tuple[int, ...]:
        return self._reminder_offsets

    def today(self) -> date:
        return self._clock(self._tz).date()

    async def _fetch_holidays(self, country_code: str, year: int):
        return await with_retry(
            lambda: self._client.fetch_public_holidays(year, country_code),
            max_attempts=self._max_attempts,
        )

    async def upcoming_holidays(self, country_code: str, *, today: date | None = None) -> ComputationResult:
        code = normalize_country_code(country_code)
        reference = today or self.today()
        records = await self._fetch_holidays(code, reference.year)
        return build_result(records, reference, code, self._reminder_offsets)

    async def available_countries(self) -> list[Country]:
        return await with_retry(
            self._client.fetch_available_countries,
            max_attempts=self._max_attempts,
        )

    async def setup_reminder_system(
        self,
        country_code: str,
        reminder_days: Sequence[int] | None = None,
        *,
        today: date | None = None,
    ) -> ReminderSetup:
        code = normalize_country_code(country_code)
        offsets = self._reminder_offsets if reminder_days is None else validate_offsets(reminder_days)
        reference = today or self.today()

        LOGGER.info("Setting up reminders for %s with offsets %s", code, list(offsets))
        records = await self._fetch_holidays(code, reference.year)
        return summarize_reminder_setup(records, reference, code, offsets)
