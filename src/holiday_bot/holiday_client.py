from __future__ import annotations

import logging
import math
from typing import Any

import httpx

from holiday_bot.models import Country, HolidayRecord

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://date.nager.at/api/v3"
USER_AGENT = "HolidayReminderAgent/1.0"


class HolidayApiError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CountryNotFoundError(HolidayApiError):
    pass


class RateLimitedError(HolidayApiError):
    def __init__(self, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class HolidayServiceUnavailableError(HolidayApiError):
    pass


class InvalidResponseError(HolidayApiError):
    pass


def parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds


class NagerDateClient:
    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        user_agent: str = USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport

    async def fetch_public_holidays(self, year: int, country_code: str) -> list[HolidayRecord]:
        code = country_code.upper()
        LOGGER.info("Fetching holidays for %s in %s", code, year)
        rows = await self._get_array(
            f"/PublicHolidays/{year}/{code}",
            not_found_message=(
                f"No holiday data found for country code '{country_code}'. "
                "Please check if the country code is correct."
            ),
        )

        records: list[HolidayRecord] = []
        for row in rows:
            if not isinstance(row, dict):
                LOGGER.warning("Skipping non-object holiday row: %r", row)
                continue
            records.append(HolidayRecord.from_api(row))
        return records

    async def fetch_available_countries(self) -> list[Country]:
        LOGGER.info("Fetching available countries")
        rows = await self._get_array(
            "/AvailableCountries",
            not_found_message="Available countries list not found",
        )
        countries = [Country.from_api(row) for row in rows if isinstance(row, dict)]
        LOGGER.info("Found %s available countries", len(countries))
        return countries

    async def _get_array(self, path: str, *, not_found_message: str) -> list[Any]:
        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Accept": "application/json", "User-Agent": self._user_agent},
                transport=self._transport,
            ) as client:
                response = await client.get(url)
        except httpx.TransportError as exc:
            LOGGER.error("Holiday API unreachable at %s: %s", url, exc)
            raise HolidayServiceUnavailableError(
                "Unable to connect to holiday service. Please check your internet connection."
            ) from exc

        LOGGER.debug("GET %s -> %s", url, response.status_code)
        if response.status_code == 404:
            raise CountryNotFoundError(not_found_message, status_code=404)
        if response.status_code == 429:
            raise RateLimitedError(
                "Holiday API rate limit exceeded. Please try again in a few minutes.",
                retry_after=parse_retry_after(response.headers.get("retry-after")),
            )
        if response.status_code >= 400:
            LOGGER.error("Holiday API error %s for %s", response.status_code, url)
            raise HolidayApiError(
                f"API Error: {response.status_code} - {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise InvalidResponseError(
                "Invalid response format from API. Expected array, got: non-JSON body"
            ) from exc

        if not isinstance(data, list):
            raise InvalidResponseError(
                f"Invalid response format from API. Expected array, got: {type(data).__name__}"
            )
        return data
