"""Ingestion layer.

This package contains the observation sources that fetch upstream data
(GTFS-realtime alert feed, rendered status page) and emit normalized
:class:`pylinestatus.state.events.Snapshot` objects.
"""

from pylinestatus.ingestion.base import ObservationSource

__all__ = ["ObservationSource"]
