"""Base model for decoded upstream payloads.

Every feed model inherits from :class:`FeedBaseModel` which provides:

* ``alias_generator=to_camel`` so the camelCase keys produced by
  ``google.protobuf.json_format.MessageToDict`` map automatically to
  snake_case fields.
* A ``model_validator(mode="before")`` that drops empty strings and
  ``None`` so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class FeedBaseModel(BaseModel):
    """Base for models decoded from the GTFS-realtime feed."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original decoded dict."""

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_values(cls, values: Any) -> Any:
        """Drop empty values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        # Keep an explicit raw= from the caller.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
