"""Monitor configuration for pylinestatus."""

from __future__ import annotations

import dataclasses
import os
from enum import StrEnum
from typing import Any

from pylinestatus._constants import (
    BASE_URL,
    FEED_IDS,
    REFRESH_INTERVAL_MS,
    STATUS_PAGE_URL,
    SUBWAY_LINES,
)
from pylinestatus.exceptions import LineStatusConfigError


class SourceKind(StrEnum):
    FEED = "feed"
    SCRAPE = "scrape"


def _env_list(value: str | None) -> tuple[str, ...] | None:
    if value is None:
        return None
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or None


@dataclasses.dataclass(frozen=True)
class LineStatusConfig:
    """Monitor configuration.

    Parameters
    ----------
    api_key : str or None
        Key sent in the ``x-api-key`` header of every feed request.
        Required when ``source`` is ``"feed"``.
    base_url : str
        Feed API base URL.  Feed ids are appended verbatim.
    feed_ids : tuple of str
        Feed identifiers, fetched in parallel each cycle.
    lines : tuple of str
        Fixed line enumeration tracked from startup.
    refresh_interval_ms : int
        Milliseconds between refresh cycles.  Defaults to 59 seconds so
        every cycle lands inside the feed's 60-second staleness window.
    source : SourceKind
        Which observation source drives the monitor.
    status_page_url : str
        Page rendered by the scrape source.
    http_timeout : float
        Total timeout in seconds for a single feed request.
    port : int
        Listening port for the bundled HTTP server.
    """

    api_key: str | None = None
    base_url: str = BASE_URL
    feed_ids: tuple[str, ...] = FEED_IDS
    lines: tuple[str, ...] = SUBWAY_LINES
    refresh_interval_ms: int = REFRESH_INTERVAL_MS
    source: SourceKind = SourceKind.FEED
    status_page_url: str = STATUS_PAGE_URL
    http_timeout: float = 30.0
    port: int = 3000

    @property
    def refresh_interval(self) -> float:
        """Refresh period in seconds."""
        return self.refresh_interval_ms / 1000.0

    def validate(self) -> LineStatusConfig:
        """Raise :class:`LineStatusConfigError` if the configuration is unusable."""
        if self.source not in tuple(SourceKind):
            raise LineStatusConfigError(f"Unknown source {self.source!r}; expected one of {[s.value for s in SourceKind]}")
        if not self.lines:
            raise LineStatusConfigError("At least one line must be tracked")
        if self.refresh_interval_ms <= 0:
            raise LineStatusConfigError(f"refresh_interval_ms must be positive, got {self.refresh_interval_ms}")
        if self.source == SourceKind.FEED:
            if not self.api_key:
                raise LineStatusConfigError("An API key is required for the feed source (set MTA_KEY)")
            if not self.feed_ids:
                raise LineStatusConfigError("At least one feed id is required for the feed source")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> LineStatusConfig:
        """Create configuration from environment variables.

        Reads ``MTA_KEY`` plus the optional ``MTA_*`` variables and ``PORT``.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        LineStatusConfig
            Populated (not yet validated) configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "MTA_KEY": "api_key",
            "MTA_BASE_URL": "base_url",
            "MTA_STATUS_PAGE_URL": "status_page_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        feed_ids = _env_list(env.get("MTA_FEED_IDS"))
        if feed_ids is not None:
            config_kwargs["feed_ids"] = feed_ids

        lines = _env_list(env.get("MTA_LINES"))
        if lines is not None:
            config_kwargs["lines"] = lines

        source_env = env.get("MTA_SOURCE")
        if source_env is not None and "source" not in overrides:
            try:
                config_kwargs["source"] = SourceKind(source_env.strip().lower())
            except ValueError as exc:
                raise LineStatusConfigError(f"Unknown MTA_SOURCE {source_env!r}") from exc

        # Numeric values, handled separately
        interval_env = env.get("MTA_REFRESH_INTERVAL_MS")
        if interval_env is not None and "refresh_interval_ms" not in overrides:
            config_kwargs["refresh_interval_ms"] = int(interval_env)

        timeout_env = env.get("MTA_HTTP_TIMEOUT")
        if timeout_env is not None and "http_timeout" not in overrides:
            config_kwargs["http_timeout"] = float(timeout_env)

        port_env = env.get("PORT")
        if port_env is not None and "port" not in overrides:
            config_kwargs["port"] = int(port_env)

        source_override = overrides.get("source")
        if isinstance(source_override, str) and not isinstance(source_override, SourceKind):
            try:
                overrides["source"] = SourceKind(source_override.strip().lower())
            except ValueError as exc:
                raise LineStatusConfigError(f"Unknown source {source_override!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
