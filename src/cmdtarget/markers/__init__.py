"""Marker declarations and the marker-presence query used by resolvers."""
from __future__ import annotations

from cmdtarget.markers.marker import (
    Marker,
    TargetAggregateIdentifier,
    TargetAggregateVersion,
    expand_meta_markers,
    has_marker,
    marked_field,
    marker,
    markers_of,
)

__all__ = [
    "Marker",
    "TargetAggregateIdentifier",
    "TargetAggregateVersion",
    "expand_meta_markers",
    "has_marker",
    "marked_field",
    "marker",
    "markers_of",
]
