from __future__ import annotations

import logging

import uvicorn
from telegram.ext import Application

from holiday_bot.api import create_app
from holiday_bot.bot_handlers import HandlerDependencies, build_handlers
from holiday_bot.holiday_service import HolidayService
from holiday_bot.settings import Settings, load_settings, require_bot_token

LOGGER = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_application(settings: Settings) -> Application:
    token = require_bot_token(settings)
    service = HolidayService.from_settings(settings)

    application = Application.builder().token(token).build()
    application.bot_data["settings"] = settings
    application.bot_data["handler_deps"] = HandlerDependencies(settings=settings, service=service)

    for handler in build_handlers():
        application.add_handler(handler)
    return application


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    application = build_application(settings)
    LOGGER.info("Holiday reminder bot starting (timezone %s)", settings.timezone)
    application.run_polling()


def serve() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    app = create_app(settings)
    LOGGER.info("Holiday reminder API listening on port %s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
