"""Immutable marker configuration for annotation-based resolution."""
from __future__ import annotations

from dataclasses import dataclass

from cmdtarget.markers.marker import Marker, TargetAggregateIdentifier, TargetAggregateVersion


@dataclass(frozen=True)
class ResolverConfig:
    """The marker pair an ``AnnotationCommandTargetResolver`` looks for.

    Both markers default to the built-in ones.  Markers are not validated
    here; a marker that nothing carries simply never matches.
    """

    identifier_marker: Marker = TargetAggregateIdentifier
    version_marker: Marker = TargetAggregateVersion
