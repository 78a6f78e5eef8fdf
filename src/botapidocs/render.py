"""Render a method or type as a Telegram HTML message body.

Description text from the specification carries raw HTML; every tag is
stripped before embedding so only the tags emitted here (``<b>``,
``<code>``, ``<i>``) survive.  Bodies longer than Telegram's message
limit are replaced wholesale by a link to the full documentation.
"""

from __future__ import annotations

import re

from botapidocs.models import Entity, Field, Method

MAX_MESSAGE_LENGTH = 4096  # Telegram's maximum message length

_TAG_RE = re.compile(r"<[^>]*>")


def sanitize(text: str) -> str:
    """Strip every ``<...>`` substring (syntactic, not a parse)."""
    return _TAG_RE.sub("", text)


def _field_lines(field: Field) -> str:
    required = "true" if field.required else "false"
    return (
        f"<code>{field.name}</code> (<b>{', '.join(field.types)}</b>) - "
        f"Required: <code>{required}</code>\n"
        f"{sanitize(field.description)}\n\n"
    )


def render(entity: Entity) -> str:
    """Return the message body for ``entity``, never longer than 4096 characters."""
    parts = [
        f"<b>{entity.name}</b>\n",
        f"Description: {sanitize(', '.join(entity.description))}\n\n",
    ]
    if isinstance(entity, Method):
        parts.append(f"<b>Returns:</b> {', '.join(entity.returns)}\n")
    if entity.fields:
        parts.append("<b>Fields:</b>\n")
        parts.extend(_field_lines(f) for f in entity.fields)

    body = "".join(parts)
    if len(body) > MAX_MESSAGE_LENGTH:
        return f"See full documentation: {entity.href}"[:MAX_MESSAGE_LENGTH]
    return body
