"""Exception hierarchy for botapidocs.

Every error message includes: what happened, why, and what to do next.
The messages end up in logs and in the owner diagnostics chat, so they
are written for a human operator.
"""


class BotApiDocsError(Exception):
    """Base class for all botapidocs errors."""


class TransportError(BotApiDocsError):
    """The specification document could not be fetched.

    ``status_code`` is 0 when the request never produced a response
    (connect failure, TLS failure, timeout).
    """

    def __init__(self, url: str, status_code: int, detail: str = ""):
        if status_code == 0:
            msg = (
                f"Could not reach {url} ({detail or 'no response'}). "
                f"Check network connectivity; the previous documentation snapshot stays in use."
            )
        elif status_code == 429:
            msg = (
                f"{url} rate-limited the request (HTTP 429). "
                f"The next scheduled refresh will try again. {detail}"
            )
        elif status_code >= 500:
            msg = (
                f"{url} returned a server error (HTTP {status_code}). "
                f"The host may be temporarily down; the next refresh will try again. {detail}"
            )
        else:
            msg = f"{url} returned HTTP {status_code}. {detail}"
        super().__init__(msg.strip())
        self.url = url
        self.status_code = status_code
        self.detail = detail


class DecodeError(BotApiDocsError):
    """The specification response was not JSON of the expected shape."""

    def __init__(self, url: str, detail: str):
        super().__init__(
            f"Could not decode the API specification from {url}: {detail}. "
            f"The upstream format may have changed; the previous snapshot stays in use."
        )
        self.url = url
        self.detail = detail


class ReplyError(BotApiDocsError):
    """The chat platform rejected an outbound reply."""

    def __init__(self, detail: str):
        super().__init__(f"Failed to answer inline query: {detail}.")
        self.detail = detail


class ConfigError(BotApiDocsError):
    """Configuration is missing or invalid."""

    def __init__(self, detail: str, hint: str = ""):
        msg = f"Configuration error: {detail}."
        if hint:
            msg += f" {hint}"
        super().__init__(msg)
        self.detail = detail
        self.hint = hint
