"""Custom exception hierarchy for pylinestatus."""

from __future__ import annotations


class LineStatusError(Exception):
    """Base exception for all pylinestatus errors."""


class LineStatusConfigError(LineStatusError):
    """Invalid or missing configuration."""


class LineStatusTransportError(LineStatusError):
    """HTTP-level failure (network, timeout, non-2xx)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FeedDecodeError(LineStatusError):
    """A feed payload could not be decoded against a known schema.

    Raised by the individual schema decoders.  :func:`pylinestatus.ingestion.decode.decode_feed_message`
    catches it and degrades to an empty message once every schema has failed.
    """

    def __init__(self, message: str, *, schema: str = "") -> None:
        self.schema = schema
        super().__init__(message)


class PageScrapeError(LineStatusError):
    """The status page could not be rendered or its accessibility tree read."""
