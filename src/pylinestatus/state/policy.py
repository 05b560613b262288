"""Time-attribution policies for folding a snapshot into line records.

This module intentionally contains *no* payload parsing.  The ingestion
layer is responsible for producing normalized per-line judgments.

The two policies are not interchangeable.  The feed policy charges an
interval according to the status held *before* the update (the status
that was in force for the whole interval), while the scrape policy charges
it according to the judgment *of* the update.  Each source keeps the
policy it was built around.
"""

from __future__ import annotations

from typing import Protocol

from pylinestatus.state.events import LineJudgment, LineStatus, SnapshotSource


class MergePolicy(Protocol):
    name: str

    def counts_as_undelayed(self, prior: LineStatus, judgment: LineJudgment | None) -> bool:
        """Whether the elapsed interval is charged to undelayed time."""
        ...

    def next_status(self, prior: LineStatus, judgment: LineJudgment | None) -> LineStatus:
        ...


class AbsenceImpliesRecoveryPolicy:
    """Feed policy: any line without a delay alert this cycle has recovered.

    ``judgment`` is ``None`` for a line not mentioned by any delay alert.
    """

    name = "absence_implies_recovery"

    def counts_as_undelayed(self, prior: LineStatus, judgment: LineJudgment | None) -> bool:
        return prior == LineStatus.NOT_DELAYED

    def next_status(self, prior: LineStatus, judgment: LineJudgment | None) -> LineStatus:
        if judgment == LineJudgment.DELAYED:
            return LineStatus.DELAYED
        return LineStatus.NOT_DELAYED


class ExplicitJudgmentPolicy:
    """Scrape policy: only explicit judgments move status.

    A line the page did not mention keeps its status and accrues active
    time only.
    """

    name = "explicit_judgment"

    def counts_as_undelayed(self, prior: LineStatus, judgment: LineJudgment | None) -> bool:
        return judgment == LineJudgment.UNDELAYED

    def next_status(self, prior: LineStatus, judgment: LineJudgment | None) -> LineStatus:
        if judgment == LineJudgment.DELAYED:
            return LineStatus.DELAYED
        if judgment == LineJudgment.UNDELAYED:
            return LineStatus.NOT_DELAYED
        return prior


ABSENCE_IMPLIES_RECOVERY = AbsenceImpliesRecoveryPolicy()
EXPLICIT_JUDGMENT = ExplicitJudgmentPolicy()


def policy_for_source(source: SnapshotSource) -> MergePolicy:
    policies: dict[SnapshotSource, MergePolicy] = {
        SnapshotSource.FEED: ABSENCE_IMPLIES_RECOVERY,
        SnapshotSource.SCRAPE: EXPLICIT_JUDGMENT,
    }
    return policies[source]


def elapsed_ms(last_updated_ms: int, now_ms: int) -> int:
    """Milliseconds since the last accounting update, never negative."""
    return max(0, now_ms - last_updated_ms)
