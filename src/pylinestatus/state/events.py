"""Normalized snapshots and the values derived from them.

Both observation sources convert their inputs into a :class:`Snapshot`.
Only the state/store layer is allowed to fold snapshots into line records.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SnapshotSource(StrEnum):
    FEED = "feed"
    SCRAPE = "scrape"


class LineJudgment(StrEnum):
    """What a source observed for one line in one cycle."""

    DELAYED = "delayed"
    UNDELAYED = "undelayed"


class LineStatus(StrEnum):
    DELAYED = "DELAYED"
    NOT_DELAYED = "NOT_DELAYED"


class QueryIndicator(StrEnum):
    """Non-numeric query results, valued with their user-facing message."""

    NOT_FOUND = "We do not have data on that line."
    NO_BASELINE = "We do not have a baseline for this subway line."


class Snapshot(BaseModel):
    """One cycle's best-effort observation.

    A line missing from ``judgments`` was not mentioned this cycle.  For the
    feed source that is the only recovery signal; the scrape source reports
    explicit judgments for every line it saw.
    """

    model_config = ConfigDict(frozen=True)

    source: SnapshotSource
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    judgments: dict[str, LineJudgment] = Field(default_factory=dict)

    @field_validator("judgments")
    @classmethod
    def _strip_line_ids(cls, value: dict[str, LineJudgment]) -> dict[str, LineJudgment]:
        cleaned: dict[str, LineJudgment] = {}
        for line, judgment in value.items():
            line_id = line.strip()
            if line_id:
                cleaned[line_id] = judgment
        return cleaned


class StatusTransition(BaseModel):
    """A line changed status during a reconcile."""

    model_config = ConfigDict(frozen=True)

    line: str
    previous: LineStatus
    current: LineStatus
    at_ms: int
