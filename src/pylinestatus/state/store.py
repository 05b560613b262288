"""In-memory line state store.

This is the only component allowed to mutate line records.  Everything
else reads through the query methods.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from pydantic import BaseModel, ConfigDict, model_validator

from pylinestatus._constants import MIN_BASELINE_MS
from pylinestatus.state.events import (
    LineJudgment,
    LineStatus,
    QueryIndicator,
    Snapshot,
    StatusTransition,
)
from pylinestatus.state.policy import MergePolicy, elapsed_ms, policy_for_source

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class LineRecord(BaseModel):
    """Cumulative time accounting for one line.

    Records are frozen; the store swaps in a new record per update so a
    reader always sees a whole one.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    active_time_ms: int = 0
    undelayed_time_ms: int = 0
    last_updated_ms: int
    status: LineStatus = LineStatus.NOT_DELAYED

    @model_validator(mode="after")
    def _check_counters(self) -> LineRecord:
        if not 0 <= self.undelayed_time_ms <= self.active_time_ms:
            raise ValueError(
                f"undelayed_time_ms must be within [0, active_time_ms], "
                f"got {self.undelayed_time_ms} / {self.active_time_ms}"
            )
        return self

    def advanced(self, now_ms: int, judgment: LineJudgment | None, policy: MergePolicy) -> LineRecord:
        """Return the record after charging the interval up to *now_ms*."""
        delta = elapsed_ms(self.last_updated_ms, now_ms)
        undelayed = self.undelayed_time_ms
        if policy.counts_as_undelayed(self.status, judgment):
            undelayed += delta
        return LineRecord(
            active_time_ms=self.active_time_ms + delta,
            undelayed_time_ms=undelayed,
            last_updated_ms=max(self.last_updated_ms, now_ms),
            status=policy.next_status(self.status, judgment),
        )


class LineStateStore:
    """Per-line delay status and uptime accounting.

    Parameters
    ----------
    lines
        Fixed line enumeration.  A record is created for each at
        construction time with the clock's current value as baseline.
    clock
        Epoch-milliseconds clock.  Read once per :meth:`apply` and once per
        uptime query.
    policy
        Force one merge policy for every snapshot.  By default the policy
        is chosen from each snapshot's source.
    on_status_change
        Called once per status transition after a snapshot is applied.
    """

    def __init__(
        self,
        lines: Iterable[str],
        *,
        clock: Callable[[], int] = _now_ms,
        policy: MergePolicy | None = None,
        on_status_change: Callable[[StatusTransition], None] | None = None,
        min_baseline_ms: int = MIN_BASELINE_MS,
    ) -> None:
        self._clock = clock
        self._policy = policy
        self._on_status_change = on_status_change
        self._min_baseline_ms = min_baseline_ms
        self._lines: tuple[str, ...] = tuple(dict.fromkeys(lines))
        self.started_at_ms = clock()
        self._records: dict[str, LineRecord] = {
            line: LineRecord(last_updated_ms=self.started_at_ms) for line in self._lines
        }

    @property
    def lines(self) -> list[str]:
        """The fixed enumeration, in configuration order."""
        return list(self._lines)

    def get_record(self, line: str) -> LineRecord | None:
        return self._records.get(line)

    def apply(self, snapshot: Snapshot | None) -> list[StatusTransition]:
        """Fold one snapshot into every line record.

        ``None`` means the fetch failed outright; nothing is touched.
        Otherwise every tracked line is advanced to *now*, including lines
        the snapshot does not mention.  Unknown lines in the snapshot get a
        fresh record first.
        """
        if snapshot is None:
            return []

        policy = self._policy or policy_for_source(snapshot.source)
        now = self._clock()

        for line in snapshot.judgments:
            if line not in self._records:
                _logger.info("Tracking previously unknown line %s", line)
                self._records[line] = LineRecord(last_updated_ms=now)

        transitions: list[StatusTransition] = []
        for line in list(self._records):
            # Read the current record here, not before the fetch started.
            record = self._records[line]
            updated = record.advanced(now, snapshot.judgments.get(line), policy)
            self._records[line] = updated
            if updated.status != record.status:
                transitions.append(
                    StatusTransition(line=line, previous=record.status, current=updated.status, at_ms=now)
                )

        for transition in transitions:
            self._emit(transition)
        return transitions

    def _emit(self, transition: StatusTransition) -> None:
        if transition.current == LineStatus.DELAYED:
            _logger.info("Line %s is experiencing delays", transition.line)
        else:
            _logger.info("Line %s is now recovered", transition.line)
        if self._on_status_change is None:
            return
        try:
            self._on_status_change(transition)
        except Exception:
            _logger.warning("Status change callback failed for line %s", transition.line, exc_info=True)

    def get_status(self, line: str) -> LineStatus | QueryIndicator:
        record = self._records.get(line)
        if record is None:
            return QueryIndicator.NOT_FOUND
        return record.status

    def get_uptime(self, line: str) -> str | QueryIndicator:
        """Undelayed fraction of observed time, formatted to three decimals.

        The interval since the last update is charged as if the current
        status still holds.
        """
        record = self._records.get(line)
        if record is None:
            return QueryIndicator.NOT_FOUND

        live = elapsed_ms(record.last_updated_ms, self._clock())
        active = record.active_time_ms + live
        if active < self._min_baseline_ms:
            return QueryIndicator.NO_BASELINE

        undelayed = record.undelayed_time_ms
        if record.status == LineStatus.NOT_DELAYED:
            undelayed += live
        return f"{undelayed / active:.3f}"
