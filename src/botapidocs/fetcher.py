"""Bot API specification fetcher.

Downloads the machine-readable Bot API description maintained at
github.com/PaulSonOfLars/telegram-bot-api-spec and decodes it into a
:class:`~botapidocs.models.Snapshot`.  Stateless: nothing is kept
between calls.
"""

from __future__ import annotations

import json
import logging

from botapidocs.errors import DecodeError
from botapidocs.http import DEFAULT_TIMEOUT, get_with_deadline
from botapidocs.models import Snapshot

logger = logging.getLogger(__name__)

SPEC_URL = "https://github.com/PaulSonOfLars/telegram-bot-api-spec/raw/main/api.json"
REQUEST_TIMEOUT = DEFAULT_TIMEOUT


def fetch_snapshot(url: str = SPEC_URL, timeout: float = REQUEST_TIMEOUT) -> Snapshot:
    """Fetch and decode the specification document.

    Raises:
        TransportError: Network failure, timeout, or non-2xx status.
        DecodeError: Body is not JSON or does not have the expected shape.
    """
    body = get_with_deadline(url, timeout=timeout)

    try:
        doc = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(url, f"invalid JSON ({e})") from e

    try:
        snapshot = Snapshot.from_document(doc)
    except ValueError as e:
        raise DecodeError(url, str(e)) from e

    logger.debug(
        "Decoded %d methods and %d types (%d bytes) from %s",
        len(snapshot.methods),
        len(snapshot.types),
        len(body),
        url,
    )
    return snapshot
