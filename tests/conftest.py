"""Shared test fixtures for botapidocs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from botapidocs.models import Snapshot
from botapidocs.refresh import RefreshScheduler
from botapidocs.store import SnapshotStore

SAMPLE_DOCUMENT = {
    "version": "Bot API 7.10",
    "release_date": "September 6, 2024",
    "methods": {
        "sendMessage": {
            "name": "sendMessage",
            "href": "https://core.telegram.org/bots/api#sendmessage",
            "description": [
                "Use this method to send text messages. On success, the sent "
                "<a href=\"#message\">Message</a> is returned."
            ],
            "returns": ["Message"],
            "fields": [
                {
                    "name": "chat_id",
                    "types": ["Integer", "String"],
                    "required": True,
                    "description": "Unique identifier for the target chat",
                },
                {
                    "name": "text",
                    "types": ["String"],
                    "required": True,
                    "description": "Text of the message to be sent, <em>1-4096</em> characters",
                },
            ],
        },
        "getMe": {
            "name": "getMe",
            "href": "https://core.telegram.org/bots/api#getme",
            "description": ["A simple method for testing your bot's authentication token."],
            "returns": ["User"],
        },
    },
    "types": {
        "ChatMember": {
            "name": "ChatMember",
            "href": "https://core.telegram.org/bots/api#chatmember",
            "description": ["This object contains information about one member of a chat."],
            "subtypes": ["ChatMemberOwner", "ChatMemberMember"],
        },
        "Message": {
            "name": "Message",
            "href": "https://core.telegram.org/bots/api#message",
            "description": ["This object represents a message."],
            "fields": [
                {
                    "name": "message_id",
                    "types": ["Integer"],
                    "required": True,
                    "description": "Unique message identifier inside this chat",
                }
            ],
        },
    },
}


@pytest.fixture
def sample_snapshot() -> Snapshot:
    return Snapshot.from_document(SAMPLE_DOCUMENT)


@pytest.fixture
def store(sample_snapshot: Snapshot) -> SnapshotStore:
    """A fresh store already holding the sample snapshot."""
    s = SnapshotStore()
    s.replace(sample_snapshot)
    return s


@pytest.fixture
def scheduler(store: SnapshotStore, sample_snapshot: Snapshot) -> RefreshScheduler:
    """Long-running-mode scheduler that is never started."""
    return RefreshScheduler(store, fetch=lambda: sample_snapshot)


@dataclass
class FakeTransport:
    """Records ``answer_inline_query`` calls like ``telegram.Bot`` would receive them."""

    calls: list[dict[str, Any]] = field(default_factory=list)
    error: Exception | None = None

    async def answer_inline_query(
        self, inline_query_id, results, cache_time=None, is_personal=None, button=None
    ):
        self.calls.append(
            {
                "inline_query_id": inline_query_id,
                "results": list(results),
                "cache_time": cache_time,
                "is_personal": is_personal,
                "button": button,
            }
        )
        if self.error is not None:
            raise self.error
        return True


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
