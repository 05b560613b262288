"""GTFS-realtime payload decoding.

Feeds are decoded against the binary protobuf ``FeedMessage`` first and
against its JSON rendering second.  A payload that neither schema accepts
decodes to an empty message, which reads the same as "no alerts".
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from google.protobuf import json_format
from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from pylinestatus._redact import preview_payload
from pylinestatus.exceptions import FeedDecodeError
from pylinestatus.models.alert import ServiceAlert

_logger = logging.getLogger(__name__)


def _decode_binary(payload: bytes) -> gtfs_realtime_pb2.FeedMessage:
    message = gtfs_realtime_pb2.FeedMessage()
    try:
        message.ParseFromString(payload)
    except DecodeError as exc:
        raise FeedDecodeError(f"Not a binary FeedMessage: {exc}", schema="protobuf") from exc
    # A real feed always carries its required header.
    if not message.IsInitialized():
        raise FeedDecodeError("Binary FeedMessage is missing required fields", schema="protobuf")
    return message


def _decode_json(payload: bytes) -> gtfs_realtime_pb2.FeedMessage:
    message = gtfs_realtime_pb2.FeedMessage()
    try:
        json_format.Parse(payload.decode("utf-8"), message, ignore_unknown_fields=True)
    except (json_format.ParseError, ValueError) as exc:
        raise FeedDecodeError(f"Not a JSON FeedMessage: {exc}", schema="json") from exc
    return message


_SCHEMAS: tuple[tuple[str, Callable[[bytes], gtfs_realtime_pb2.FeedMessage]], ...] = (
    ("protobuf", _decode_binary),
    ("json", _decode_json),
)


def decode_feed_message(payload: bytes) -> gtfs_realtime_pb2.FeedMessage:
    """Decode *payload*, trying each known schema in order."""
    for schema, decoder in _SCHEMAS:
        try:
            return decoder(payload)
        except FeedDecodeError as exc:
            _logger.debug("Feed payload rejected by %s schema: %s", schema, exc)
    _logger.warning("Feed payload matched no known schema: %s", preview_payload(payload))
    return gtfs_realtime_pb2.FeedMessage()


def extract_alerts(message: gtfs_realtime_pb2.FeedMessage) -> list[ServiceAlert]:
    """Convert every alert entity of *message* to a :class:`ServiceAlert`."""
    alerts: list[ServiceAlert] = []
    for entity in message.entity:
        if not entity.HasField("alert"):
            continue
        alert = ServiceAlert.from_entity(json_format.MessageToDict(entity))
        if alert is not None:
            alerts.append(alert)
    return alerts
