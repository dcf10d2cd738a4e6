import asyncio

import httpx
import pytest

from holiday_bot.holiday_client import (
    CountryNotFoundError,
    HolidayApiError,
    HolidayServiceUnavailableError,
    InvalidResponseError,
    NagerDateClient,
    RateLimitedError,
    parse_retry_after,
)
from holiday_bot.models import Country, HolidayRecord

BASE_URL = "https://holidays.test/api/v3"


def _client(handler) -> NagerDateClient:
    return NagerDateClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


def test_fetch_public_holidays_maps_rows_and_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {"date": "2025-12-25", "name": "Christmas Day", "localName": "Christmas Day", "global": True},
                "not-an-object",
                {"date": "2025-12-26", "name": "Boxing Day"},
            ],
        )

    records = asyncio.run(_client(handler).fetch_public_holidays(2025, "gb"))

    assert records == [
        HolidayRecord(date="2025-12-25", name="Christmas Day", local_name="Christmas Day"),
        HolidayRecord(date="2025-12-26", name="Boxing Day", local_name=""),
    ]
    assert str(seen[0].url) == f"{BASE_URL}/PublicHolidays/2025/GB"
    assert seen[0].headers["user-agent"] == "HolidayReminderAgent/1.0"
    assert seen[0].headers["accept"] == "application/json"


def test_fetch_available_countries() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v3/AvailableCountries"
        return httpx.Response(200, json=[{"countryCode": "NG", "name": "Nigeria"}])

    countries = asyncio.run(_client(handler).fetch_available_countries())

    assert countries == [Country(country_code="NG", name="Nigeria")]


def test_not_found_raises_country_not_found() -> None:
    client = _client(lambda request: httpx.Response(404))

    with pytest.raises(CountryNotFoundError, match="country code 'XX'"):
        asyncio.run(client.fetch_public_holidays(2025, "XX"))


def test_rate_limit_carries_retry_after() -> None:
    client = _client(lambda request: httpx.Response(429, headers={"Retry-After": "7"}))

    with pytest.raises(RateLimitedError) as exc_info:
        asyncio.run(client.fetch_public_holidays(2025, "US"))

    assert exc_info.value.retry_after == 7.0
    assert exc_info.value.status_code == 429


def test_server_error_raises_generic_api_error() -> None:
    client = _client(lambda request: httpx.Response(500))

    with pytest.raises(HolidayApiError, match="API Error: 500") as exc_info:
        asyncio.run(client.fetch_public_holidays(2025, "US"))

    assert type(exc_info.value) is HolidayApiError


def test_transport_failure_raises_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    with pytest.raises(HolidayServiceUnavailableError):
        asyncio.run(_client(handler).fetch_public_holidays(2025, "US"))


def test_non_array_body_raises_invalid_response() -> None:
    client = _client(lambda request: httpx.Response(200, json={"holidays": []}))

    with pytest.raises(InvalidResponseError, match="got: dict"):
        asyncio.run(client.fetch_public_holidays(2025, "US"))


def test_empty_array_is_not_an_error() -> None:
    client = _client(lambda request: httpx.Response(200, json=[]))

    assert asyncio.run(client.fetch_public_holidays(2025, "US")) == []


def test_parse_retry_after() -> None:
    assert parse_retry_after("5") == 5.0
    assert parse_retry_after(None) is None
    assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") is None
    assert parse_retry_after("-1") is None


@pytest.mark.parametrize("raw", ["inf", "Infinity", "nan", "-inf"])
def test_parse_retry_after_rejects_non_finite(raw: str) -> None:
    assert parse_retry_after(raw) is None


def test_parse_retry_after_keeps_huge_finite_value() -> None:
    # with_retry caps the actual wait.
    assert parse_retry_after("1e12") == 1e12


def test_rate_limit_with_infinite_hint_has_no_retry_after() -> None:
    client = _client(lambda request: httpx.Response(429, headers={"Retry-After": "inf"}))

    with pytest.raises(RateLimitedError) as exc_info:
        asyncio.run(client.fetch_public_holidays(2025, "US"))

    assert exc_info.value.retry_after is None


def test_custom_user_agent_is_sent() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    client = NagerDateClient(
        base_url=BASE_URL,
        user_agent="HolidayBot-Test/2.0",
        transport=httpx.MockTransport(handler),
    )
    asyncio.run(client.fetch_available_countries())

    assert seen[0].headers["user-agent"] == "HolidayBot-Test/2.0"
