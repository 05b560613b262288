"""Typed models for decoded upstream payloads."""

from pylinestatus.models.accessibility import AccessibilityNode
from pylinestatus.models.alert import EntitySelector, ServiceAlert, TranslatedString, Translation

__all__ = [
    "AccessibilityNode",
    "EntitySelector",
    "ServiceAlert",
    "TranslatedString",
    "Translation",
]
