"""Inline-query answering: query -> snapshot search -> rendered articles.

:class:`DocsSearch` is the single entry point the transport layer calls.
Assembly is split into pure helpers returning :class:`InlineAnswer`
values so the reply shape can be checked without a transport.

Users never see a raw error: any failure while obtaining the snapshot or
building results degrades to the "No Results Found!" article, and the
cause is logged.
"""

from __future__ import annotations

import html
import logging
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import anyio
from telegram import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    InlineQueryResultArticle,
    InlineQueryResultsButton,
    InputTextMessageContent,
    LinkPreviewOptions,
)
from telegram.constants import ParseMode
from telegram.error import TelegramError

from botapidocs.errors import ReplyError
from botapidocs.models import Entity, Snapshot
from botapidocs.refresh import RefreshScheduler
from botapidocs.render import render
from botapidocs.search import normalize, search

logger = logging.getLogger(__name__)

EMPTY_QUERY_CACHE_TIME = 5  # seconds
NO_RESULTS_CACHE_TIME = 500  # seconds
EMPTY_QUERY_BUTTON_TEXT = "Type 'your_query' to search!"
START_PARAMETER = "start"
ARTICLE_DESCRIPTION = "View more details"
NO_RESULTS_TITLE = "No Results Found!"
NO_RESULTS_DESCRIPTION = "No results found for your query."


class InlineTransport(Protocol):
    """The part of ``telegram.Bot`` used to reply."""

    async def answer_inline_query(
        self,
        inline_query_id: str,
        results: Sequence[Any],
        cache_time: int | None = None,
        is_personal: bool | None = None,
        button: InlineQueryResultsButton | None = None,
    ) -> Any: ...


class InlineQueryRecord(Protocol):
    """The part of ``telegram.InlineQuery`` read here."""

    id: str
    query: str


@dataclass
class InlineAnswer:
    """Everything needed for one ``answerInlineQuery`` call."""

    results: list[InlineQueryResultArticle] = field(default_factory=list)
    cache_time: int | None = None  # None: platform default
    button: InlineQueryResultsButton | None = None
    is_personal: bool = True


def article_id() -> str:
    return uuid.uuid4().hex


def entity_article(entity: Entity) -> InlineQueryResultArticle:
    """Package one method or type as an inline article."""
    rows = [[InlineKeyboardButton("Search Again", switch_inline_query_current_chat=entity.name)]]
    if entity.href:
        # Telegram rejects the whole answer for a button with an empty url
        rows.insert(0, [InlineKeyboardButton("Open Docs", url=entity.href)])
    return InlineQueryResultArticle(
        id=article_id(),
        title=entity.name,
        url=entity.href or None,
        input_message_content=InputTextMessageContent(
            message_text=render(entity),
            parse_mode=ParseMode.HTML,
            link_preview_options=LinkPreviewOptions(prefer_small_media=True),
        ),
        description=ARTICLE_DESCRIPTION,
        reply_markup=InlineKeyboardMarkup(rows),
    )


def no_results_article(query: str) -> InlineQueryResultArticle:
    text = (
        f"<i>Sorry, I couldn't find any results for '{html.escape(query, quote=False)}'. "
        f"Try searching with a different keyword!</i>"
    )
    return InlineQueryResultArticle(
        id=article_id(),
        title=NO_RESULTS_TITLE,
        input_message_content=InputTextMessageContent(message_text=text, parse_mode=ParseMode.HTML),
        description=NO_RESULTS_DESCRIPTION,
        reply_markup=InlineKeyboardMarkup(
            [[InlineKeyboardButton("Search Again", switch_inline_query_current_chat=query)]]
        ),
    )


def empty_query_answer() -> InlineAnswer:
    return InlineAnswer(
        results=[],
        cache_time=EMPTY_QUERY_CACHE_TIME,
        button=InlineQueryResultsButton(
            text=EMPTY_QUERY_BUTTON_TEXT, start_parameter=START_PARAMETER
        ),
    )


def no_results_answer(query: str) -> InlineAnswer:
    return InlineAnswer(results=[no_results_article(query)], cache_time=NO_RESULTS_CACHE_TIME)


def results_answer(hits: Sequence[Entity]) -> InlineAnswer:
    return InlineAnswer(results=[entity_article(e) for e in hits])


def build_answer(query: str, snapshot: Snapshot) -> InlineAnswer:
    """Search ``snapshot`` for an already-normalized, non-empty ``query``."""
    hits = search(query, snapshot)
    if not hits:
        return no_results_answer(query)
    return results_answer(hits)


class DocsSearch:
    """Inline documentation search over a refreshed snapshot.

    Built once at startup around a :class:`RefreshScheduler`; tests build
    one per case around a fresh store.
    """

    def __init__(self, scheduler: RefreshScheduler) -> None:
        self.scheduler = scheduler

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    async def snapshot(self) -> Snapshot:
        """Current snapshot; on-demand mode fetches it in a worker thread."""
        if self.scheduler.on_demand:
            return await anyio.to_thread.run_sync(self.scheduler.read_or_refresh)
        return self.scheduler.read_or_refresh()

    async def answer(self, raw_query: str) -> InlineAnswer:
        """Build the reply for a raw inline-query string."""
        query = normalize(raw_query)
        if not query:
            return empty_query_answer()

        try:
            snapshot = await self.snapshot()
            return build_answer(query, snapshot)
        except Exception as exc:
            logger.warning(
                "Inline query %r degraded to no results (%s): %s", query, type(exc).__name__, exc
            )
            return no_results_answer(query)

    async def handle_inline_query(
        self, transport: InlineTransport, query_record: InlineQueryRecord
    ) -> None:
        """Answer one inline query.

        Raises:
            ReplyError: The platform rejected the answer.
        """
        t0 = time.monotonic()
        answer = await self.answer(query_record.query)
        logger.debug(
            "Inline query %r -> %d results in %.3fs",
            query_record.query,
            len(answer.results),
            time.monotonic() - t0,
        )
        try:
            await transport.answer_inline_query(
                query_record.id,
                answer.results,
                cache_time=answer.cache_time,
                is_personal=answer.is_personal,
                button=answer.button,
            )
        except TelegramError as exc:
            logger.error("Answering inline query %s failed: %s", query_record.id, exc)
            raise ReplyError(str(exc)) from exc
