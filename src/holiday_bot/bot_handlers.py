from __future__ import annotations

import logging
from dataclasses import dataclass

from telegram import Update
from telegram.ext import CallbackContext, CommandHandler

from holiday_bot.date_logic import normalize_country_code
from holiday_bot.holiday_client import HolidayApiError
from holiday_bot.holiday_service import HolidayService
from holiday_bot.models import ComputationResult, Country, ReminderSetup
from holiday_bot.settings import Settings

LOGGER = logging.getLogger(__name__)

MAX_COUNTRIES_LISTED = 200
# Telegram rejects longer messages.
MAX_MESSAGE_LENGTH = 4096


@dataclass(frozen=True)
class HandlerDependencies:
    settings: Settings
    service: HolidayService


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split ``text`` on line boundaries into chunks of at most ``limit`` characters."""
    chunks: list[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]

        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate

    if current.strip():
        chunks.append(current)
    return [chunk.strip("\n") for chunk in chunks if chunk.strip()]


async def _reply_chunked(update: Update, text: str) -> None:
    for chunk in split_message(text):
        await update.effective_message.reply_text(chunk)


def is_authorized(update: Update, settings: Settings) -> bool:
    if settings.telegram_allowed_chat_id is None:
        return True
    effective_chat = update.effective_chat
    if effective_chat is None:
        return False
    return effective_chat.id == settings.telegram_allowed_chat_id


async def _deny_unauthorized(update: Update) -> None:
    if update.effective_message:
        await update.effective_message.reply_text("This bot is restricted to its configured chat.")


def parse_offsets_text(raw_text: str, default: tuple[int, ...]) -> tuple[list[int], bool]:
    """Parse ``"30,10,3"`` style offsets; blank or ``default`` means the configured ones.

    Unlike a stored schedule, order and duplicates are preserved as typed.
    """
    text = raw_text.strip()
    if not text or text.lower() in {"skip", "default"}:
        return list(default), True

    values: list[int] = []
    for token in text.split(","):
        cleaned = token.strip()
        if not cleaned:
            continue
        if not cleaned.isdigit():
            raise ValueError("Offsets must be comma-separated non-negative integers")
        values.append(int(cleaned))

    if not values:
        raise ValueError("Provide at least one offset or leave blank for default")

    return values, False


def _render_help(default_offsets: tuple[int, ...]) -> str:
    offsets = ",".join(str(offset) for offset in default_offsets)
    return (
        "Commands:\n"
        "/holidays CC - Upcoming public holidays with reminder dates\n"
        "/countries - List supported countries\n"
        "/remind CC [offsets] - Set up reminders for a country\n"
        "/help - Show this help message\n\n"
        "Country codes are 2 letters, e.g. US, GB, FR, NG, CM.\n"
        f"Reminder offsets example: /remind NG {offsets}"
    )


def _format_days_until(days_until: int) -> str:
    if days_until == 0:
        return "today"
    if days_until == 1:
        return "tomorrow"
    return f"in {days_until}d"


def _render_holidays_message(result: ComputationResult) -> str:
    if not result.holidays:
        return f"No upcoming public holidays left in {result.year} for {result.country}."

    lines = [f"Upcoming holidays for {result.country} ({len(result.holidays)})"]
    for index, holiday in enumerate(result.holidays, start=1):
        title = holiday.name
        if holiday.local_name and holiday.local_name != holiday.name:
            title = f"{holiday.name} ({holiday.local_name})"
        lines.append(f"{index}. {title}")
        lines.append(f"   {holiday.date.isoformat()} | {_format_days_until(holiday.days_until)}")
        for reminder in holiday.reminders:
            lines.append(f"   {reminder.reminder_date.isoformat()} {reminder.message}")
        lines.append("")

    return "\n".join(lines).rstrip()


def _render_countries_message(countries: list[Country]) -> str:
    if not countries:
        return "No countries are currently available."

    lines = [f"Available countries ({len(countries)})"]
    for country in countries[:MAX_COUNTRIES_LISTED]:
        lines.append(f"{country.country_code} - {country.name}")
    if len(countries) > MAX_COUNTRIES_LISTED:
        lines.append(f"... and {len(countries) - MAX_COUNTRIES_LISTED} more")
    return "\n".join(lines)


def _render_setup_message(setup: ReminderSetup, used_default: bool) -> str:
    default_note = " (default)" if used_default else ""
    return (
        f"{setup.message}\n"
        f"Schedule: {list(setup.reminder_schedule)} days before{default_note}\n"
        f"Total reminders: {setup.total_reminders}"
    )


async def help_command(update: Update, context: CallbackContext) -> None:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return
    await update.effective_message.reply_text(_render_help(deps.service.reminder_offsets))


async def holidays_command(update: Update, context: CallbackContext) -> None:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return

    args = context.args or []
    if len(args) != 1:
        await update.effective_message.reply_text("Usage: /holidays CC (e.g., /holidays US)")
        return

    try:
        country_code = normalize_country_code(args[0])
        result = await deps.service.upcoming_holidays(country_code)
    except ValueError as exc:
        await update.effective_message.reply_text(str(exc))
        return
    except HolidayApiError as exc:
        LOGGER.error("Holiday fetch failed for %s: %s", args[0], exc)
        await update.effective_message.reply_text(str(exc))
        return

    await _reply_chunked(update, _render_holidays_message(result))


async def countries_command(update: Update, context: CallbackContext) -> None:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return

    try:
        countries = await deps.service.available_countries()
    except HolidayApiError as exc:
        LOGGER.error("Countries fetch failed: %s", exc)
        await update.effective_message.reply_text(f"Failed to fetch available countries: {exc}")
        return

    await _reply_chunked(update, _render_countries_message(countries))


async def remind_command(update: Update, context: CallbackContext) -> None:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return

    args = context.args or []
    if not args:
        await update.effective_message.reply_text("Usage: /remind CC [offsets] (e.g., /remind NG 30,10,3,2)")
        return

    try:
        country_code = normalize_country_code(args[0])
        offsets, used_default = parse_offsets_text(" ".join(args[1:]), deps.service.reminder_offsets)
        setup = await deps.service.setup_reminder_system(country_code, offsets)
    except ValueError as exc:
        await update.effective_message.reply_text(str(exc))
        return
    except HolidayApiError as exc:
        LOGGER.error("Reminder setup failed for %s: %s", args[0], exc)
        await update.effective_message.reply_text(f"Failed to setup reminder system: {exc}")
        return

    await update.effective_message.reply_text(_render_setup_message(setup, used_default))
    LOGGER.info("Reminder setup summarised for %s", setup.country)


def build_handlers() -> list:
    return [
        CommandHandler(["start", "help"], help_command),
        CommandHandler("holidays", holidays_command),
        CommandHandler("countries", countries_command),
        CommandHandler("remind", remind_command),
    ]
