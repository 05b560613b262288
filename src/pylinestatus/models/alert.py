"""Service alert model decoded from the GTFS-realtime alerts feed."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field

from pylinestatus._constants import DELAY_HEADER_PATTERN
from pylinestatus.models._base import FeedBaseModel


class Translation(FeedBaseModel):
    text: str = ""
    language: str | None = None


class TranslatedString(FeedBaseModel):
    translation: list[Translation] = Field(default_factory=list)

    def text(self, language: str = "en") -> str:
        """Best text for *language*.

        Prefers a translation in *language* or with no language tag, then
        falls back to the first non-empty translation (e.g. ``en-html``).
        """
        fallback = ""
        for item in self.translation:
            if not item.text:
                continue
            if item.language in (None, language):
                return item.text
            fallback = fallback or item.text
        return fallback


class EntitySelector(FeedBaseModel):
    agency_id: str | None = None
    route_id: str | None = None
    stop_id: str | None = None


class ServiceAlert(FeedBaseModel):
    """One alert entity from the feed.

    Parameters
    ----------
    alert_id : str
        Feed entity id.
    header_text : TranslatedString or None
        Short alert headline.  Delay alerts start with ``"Delays"``.
    description_text : TranslatedString or None
        Longer alert body.
    informed_entity : list of EntitySelector
        Routes/stops affected by the alert.
    """

    alert_id: str = ""
    header_text: TranslatedString | None = None
    description_text: TranslatedString | None = None
    informed_entity: list[EntitySelector] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, entity: Mapping[str, Any]) -> ServiceAlert | None:
        """Build from a ``MessageToDict`` feed entity; ``None`` if it has no alert."""
        alert = entity.get("alert")
        if not isinstance(alert, Mapping):
            return None
        payload = dict(alert)
        payload["alertId"] = entity.get("id")
        return cls.model_validate(payload)

    @property
    def header(self) -> str:
        return self.header_text.text() if self.header_text is not None else ""

    @property
    def description(self) -> str:
        return self.description_text.text() if self.description_text is not None else ""

    @property
    def route_ids(self) -> list[str]:
        """Affected route ids, in feed order, without duplicates."""
        seen: dict[str, None] = {}
        for selector in self.informed_entity:
            if selector.route_id:
                seen.setdefault(selector.route_id, None)
        return list(seen)

    @property
    def is_delay_alert(self) -> bool:
        return DELAY_HEADER_PATTERN.match(self.header.lstrip()) is not None
