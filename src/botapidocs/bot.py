"""Telegram bot entry point — wires the documentation search to python-telegram-bot.

Runs as a webhook listener when ``WEBHOOK_URL`` is set, otherwise long
polls.  The refresh worker is started after the application initializes
and stopped on shutdown (SIGINT/SIGTERM are handled by the library).
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
import time
import traceback
from datetime import UTC, datetime
from pathlib import Path

import anyio
from telegram import Update
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes, InlineQueryHandler

from botapidocs.config import Settings, load_settings
from botapidocs.errors import BotApiDocsError
from botapidocs.inline import DocsSearch
from botapidocs.refresh import RefreshScheduler
from botapidocs.store import SnapshotStore

SECRET_TOKEN = "thisIsASecretToken"
ALLOWED_UPDATES = ["message", "inline_query"]
WEBHOOK_MAX_CONNECTIONS = 40

START_TIME = time.monotonic()

# ---------------------------------------------------------------------------
# Logging: stderr always, rotating file when LOG_DIR is set
# ---------------------------------------------------------------------------

logger = logging.getLogger("botapidocs")

_LOG_FORMAT = "%(asctime)s [%(process)d] %(levelname)s %(name)s: %(message)s"
_stderr_handler: logging.Handler | None = None
_file_handler: logging.Handler | None = None


def setup_logging(level: str = "INFO", log_dir: str | Path | None = None) -> None:
    """Attach stderr (and optionally file) handlers to the package logger (idempotent)."""
    global _stderr_handler, _file_handler
    logger.setLevel(logging.DEBUG)

    if _stderr_handler is None:
        _stderr_handler = logging.StreamHandler(sys.stderr)
        _stderr_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(_stderr_handler)
    _stderr_handler.setLevel(getattr(logging, level.upper(), logging.INFO))

    # httpx logs full request URLs at INFO, and those contain the bot token
    logging.getLogger("httpx").setLevel(logging.WARNING)

    if log_dir and _file_handler is None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            path / "botapidocs.log",
            maxBytes=2_000_000,
            backupCount=3,
            encoding="utf-8",
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(fh)
        _file_handler = fh
        logger.info("Log file attached at %s", path / "botapidocs.log")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Compact duration like ``1d 2h 3m 4s`` (zero units omitted)."""
    total = int(seconds)
    days, rem = divmod(total, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, secs = divmod(rem, 60)
    parts = [f"{v}{u}" for v, u in ((days, "d"), (hours, "h"), (minutes, "m")) if v]
    if secs or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def start_text(username: str) -> str:
    return (
        "👋 Hello! I'm your handy Telegram Bot API assistant.\n\n"
        f"💡 Usage: <code>@{username} your_query</code> - Quickly search for any method "
        "or type in the Telegram Bot API documentation."
    )


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.effective_message.reply_text(
        start_text(context.bot.username), parse_mode=ParseMode.HTML
    )


async def ping(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    t0 = time.monotonic()
    reply = await update.effective_message.reply_text(
        "<code>Pinging</code>", parse_mode=ParseMode.HTML
    )
    elapsed = time.monotonic() - t0
    now = datetime.now(UTC).strftime("%a, %d %b %Y %H:%M:%S UTC")
    await reply.edit_text(
        f"Pinged in {elapsed * 1000:.0f}ms (Latency: {elapsed:.2f}s) at {now}\n\n"
        f"Uptime: {format_duration(time.monotonic() - START_TIME)}"
    )


async def inline_query(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    docs: DocsSearch = context.bot_data["docs"]
    await docs.handle_inline_query(context.bot, update.inline_query)


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log handler errors and forward a diagnostic to the owner."""
    err = context.error
    if isinstance(err, BotApiDocsError):
        logger.warning("Handler failed: %s", err)
    else:
        logger.error(
            "Handler crashed:\n%s",
            "".join(traceback.format_exception(type(err), err, err.__traceback__)),
        )

    owner_id = context.bot_data.get("owner_id", 0)
    if not owner_id:
        return
    try:
        await context.bot.send_message(owner_id, f"An error occurred: {err}")
    except TelegramError as exc:
        logger.warning("Could not deliver error report to owner %s: %s", owner_id, exc)


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def build_docs(settings: Settings) -> DocsSearch:
    scheduler = RefreshScheduler(
        SnapshotStore(),
        interval=settings.refresh_interval,
        on_demand=settings.ephemeral,
    )
    return DocsSearch(scheduler)


async def _post_init(application: Application) -> None:
    application.bot_data["docs"].start()
    bot = application.bot
    logger.info(
        "Bot has been started as %s[%s] using %s",
        bot.first_name,
        bot.username,
        application.bot_data["mode"],
    )


async def _post_shutdown(application: Application) -> None:
    # stop() joins the worker thread, which may take up to its join timeout
    await anyio.to_thread.run_sync(application.bot_data["docs"].stop)


def build_application(settings: Settings, docs: DocsSearch | None = None) -> Application:
    """Create the python-telegram-bot application with all handlers registered."""
    application = (
        Application.builder()
        .token(settings.require_token())
        .post_init(_post_init)
        .post_shutdown(_post_shutdown)
        .build()
    )
    application.bot_data["docs"] = docs or build_docs(settings)
    application.bot_data["owner_id"] = settings.owner_id
    application.bot_data["mode"] = "Webhook" if settings.use_webhook else "Polling"

    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("ping", ping))
    application.add_handler(InlineQueryHandler(inline_query))
    application.add_error_handler(on_error)
    return application


def main() -> None:
    """Run the bot until interrupted."""
    setup_logging()
    try:
        settings = load_settings()
        setup_logging(settings.log_level, settings.log_dir or None)
        application = build_application(settings)
    except BotApiDocsError as exc:
        logger.critical("Initialization error: %s", exc)
        raise SystemExit(1) from exc

    if settings.use_webhook:
        application.run_webhook(
            listen="0.0.0.0",
            port=settings.port,
            url_path=settings.token,
            webhook_url=settings.webhook_url + settings.token,
            secret_token=SECRET_TOKEN,
            max_connections=WEBHOOK_MAX_CONNECTIONS,
            allowed_updates=ALLOWED_UPDATES,
            drop_pending_updates=True,
        )
    else:
        application.run_polling(allowed_updates=ALLOWED_UPDATES, drop_pending_updates=True)

    logger.info("Bot has been stopped")


if __name__ == "__main__":
    main()
