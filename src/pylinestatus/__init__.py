"""pylinestatus - Async transit line delay and uptime monitor."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pylinestatus")
except PackageNotFoundError:
    __version__ = "0+local"
from pylinestatus.config import LineStatusConfig, SourceKind
from pylinestatus.exceptions import (
    FeedDecodeError,
    LineStatusConfigError,
    LineStatusError,
    LineStatusTransportError,
    PageScrapeError,
)
from pylinestatus.ingestion import ObservationSource
from pylinestatus.ingestion.feed import FeedObservationSource
from pylinestatus.ingestion.scrape import PageObservationSource
from pylinestatus.models import AccessibilityNode, ServiceAlert
from pylinestatus.monitor import LineStatusMonitor
from pylinestatus.state.events import (
    LineJudgment,
    LineStatus,
    QueryIndicator,
    Snapshot,
    SnapshotSource,
    StatusTransition,
)
from pylinestatus.state.store import LineRecord, LineStateStore

__all__ = [
    "__version__",
    "AccessibilityNode",
    "FeedDecodeError",
    "FeedObservationSource",
    "LineJudgment",
    "LineRecord",
    "LineStateStore",
    "LineStatus",
    "LineStatusConfig",
    "LineStatusConfigError",
    "LineStatusError",
    "LineStatusMonitor",
    "LineStatusTransportError",
    "ObservationSource",
    "PageObservationSource",
    "PageScrapeError",
    "QueryIndicator",
    "ServiceAlert",
    "Snapshot",
    "SnapshotSource",
    "SourceKind",
    "StatusTransition",
]
