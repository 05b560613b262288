"""HTTP transport for the GTFS-realtime feed API."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp

from pylinestatus._constants import API_KEY_HEADER, USER_AGENT
from pylinestatus._redact import preview_payload, redact_headers
from pylinestatus.config import LineStatusConfig
from pylinestatus.exceptions import LineStatusTransportError

_logger = logging.getLogger(__name__)


class FeedTransport(Protocol):
    """Structural transport interface used by the feed source.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpFeedTransport`) concrete.
    """

    async def get_feed(self, feed_id: str) -> bytes:
        ...


class HttpFeedTransport:
    """Authenticated GET of raw feed payloads."""

    def __init__(
        self,
        config: LineStatusConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.http_timeout)

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/x-protobuf, application/octet-stream, */*",
            "user-agent": USER_AGENT,
        }
        if self._config.api_key:
            headers[API_KEY_HEADER] = self._config.api_key
        return headers

    async def get_feed(self, feed_id: str) -> bytes:
        """Fetch one feed body.

        Raises
        ------
        LineStatusTransportError
            On connection errors, timeouts and any non-2xx status.
        """
        url = f"{self._config.base_url}{feed_id}"
        headers = self._build_headers()

        _logger.debug("GET %s headers=%s", url, redact_headers(headers))

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                body = await resp.read()
                if not 200 <= resp.status < 300:
                    raise LineStatusTransportError(
                        f"HTTP {resp.status} from {feed_id}: {preview_payload(body)}",
                        status_code=resp.status,
                        endpoint=feed_id,
                    )
        except LineStatusTransportError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise LineStatusTransportError(
                f"Request to {feed_id} failed: {exc!r}",
                endpoint=feed_id,
            ) from exc

        _logger.debug("GET %s -> %d bytes", url, len(body))
        return body
