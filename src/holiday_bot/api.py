"""
HTTP JSON API for the holiday reminder service.

Routes return the same camelCase shapes the agent tools produced, so existing
callers can consume them unchanged.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, NonNegativeInt

from holiday_bot.holiday_client import (
    CountryNotFoundError,
    HolidayApiError,
    HolidayServiceUnavailableError,
    RateLimitedError,
)
from holiday_bot.holiday_service import HolidayService
from holiday_bot.settings import Settings

LOGGER = logging.getLogger(__name__)

SERVICE_NAME = "Holiday Reminder Agent"
VERSION = "2.0.0"

STATIC_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:4173",
    "https://telex.im",
]
# Any telex.im subdomain, e.g. https://app.telex.im
TELEX_ORIGIN_REGEX = r"(?i)https?://([a-z0-9-]+\.)*telex\.im(:\d+)?"

ENDPOINTS = {
    "holidays": "/holidays/{country_code}",
    "countries": "/countries",
    "reminders": "/reminders/{country_code}",
    "health": "/health",
    "info": "/agent/info",
}


class ReminderSetupRequest(BaseModel):
    reminderDays: list[NonNegativeInt] | None = Field(
        default=None,
        description="Days before holiday to send reminders (default: [30, 10, 3, 2])",
    )


def allowed_origins(settings: Settings) -> list[str]:
    origins = list(STATIC_ALLOWED_ORIGINS)
    if settings.frontend_url:
        origins.append(settings.frontend_url)
    return origins


def _error_response(status_code: int, error: str, details: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "details": details})


def create_app(settings: Settings, service: HolidayService | None = None) -> FastAPI:
    service = service or HolidayService.from_settings(settings)
    app = FastAPI(title=SERVICE_NAME, version=VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(settings),
        allow_origin_regex=TELEX_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    @app.exception_handler(ValueError)
    async def _invalid_input(request: Request, exc: ValueError) -> JSONResponse:
        return _error_response(400, "Invalid request", str(exc))

    @app.exception_handler(HolidayApiError)
    async def _upstream_failure(request: Request, exc: HolidayApiError) -> JSONResponse:
        LOGGER.error("Holiday API failure on %s: %s", request.url.path, exc)
        if isinstance(exc, CountryNotFoundError):
            return _error_response(404, "Not found", str(exc))
        if isinstance(exc, RateLimitedError):
            return _error_response(429, "Rate limited", str(exc))
        if isinstance(exc, HolidayServiceUnavailableError):
            return _error_response(503, "Holiday service unavailable", str(exc))
        return _error_response(502, "Holiday API error", str(exc))

    @app.get("/")
    async def root():
        return {
            "message": f"{SERVICE_NAME} API",
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": ENDPOINTS,
        }

    @app.get("/health")
    async def health():
        return {"status": "OK", "service": SERVICE_NAME, "version": VERSION}

    @app.get("/agent/info")
    async def agent_info():
        return {
            "name": "holiday_reminder_agent",
            "description": "Provides public holiday information and reminder schedules using the Nager.Date API",
            "version": VERSION,
            "endpoints": ENDPOINTS,
            "features": [
                "Upcoming holidays",
                "Reminder schedule",
                "Available countries",
                "External holiday API",
                "CORS enabled",
            ],
            "reminderSchedule": list(service.reminder_offsets),
        }

    @app.get("/holidays/{country_code}")
    async def upcoming_holidays(country_code: str):
        result = await service.upcoming_holidays(country_code)
        return result.to_dict()

    @app.get("/countries")
    async def available_countries():
        countries = await service.available_countries()
        return {"countries": [country.to_dict() for country in countries]}

    @app.post("/reminders/{country_code}")
    async def setup_reminders(country_code: str, body: ReminderSetupRequest | None = None):
        reminder_days = body.reminderDays if body is not None else None
        setup = await service.setup_reminder_system(country_code, reminder_days)
        return setup.to_dict()

    return app
