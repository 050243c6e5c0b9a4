"""Declarative markers for command payload members.

A ``Marker`` is a tag that signals the structural role of a payload
member.  Markers are attached in three ways:

* to methods and properties, by using the marker as a decorator::

    class ShipOrder:
        @TargetAggregateIdentifier
        def order_id(self) -> str: ...

* to annotated attributes, through ``typing.Annotated``::

    @dataclass
    class ShipOrder:
        order_id: Annotated[str, TargetAggregateIdentifier]

* to dataclass fields, through ``marked_field``::

    @dataclass
    class ShipOrder:
        order_id: str = marked_field(TargetAggregateIdentifier)

Markers may themselves be marked (meta-markers).  A member carrying a
custom marker that was declared with ``TargetAggregateIdentifier`` in its
``meta`` tuple is treated exactly as if it carried the built-in marker.

Markers compare by identity: two markers with the same name are still
different markers.
"""
from __future__ import annotations

import dataclasses
import functools
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Final, TypeVar

MARKERS_ATTRIBUTE: Final[str] = "__cmdtarget_markers__"
MARKERS_METADATA_KEY: Final[str] = "cmdtarget.markers"

_T = TypeVar("_T")


@dataclass(frozen=True, eq=False)
class Marker:
    """A marker identity.

    Parameters
    ----------
    name:
        Human-readable name, used in error messages and the CLI.
    meta:
        Markers attached to this marker's declaration.
    """

    name: str
    meta: tuple[Marker, ...] = ()

    def __call__(self, target: _T) -> _T:
        """Attach this marker to a function, property, or static/class method."""
        func = _underlying_function(target)
        existing: tuple[Marker, ...] = getattr(func, MARKERS_ATTRIBUTE, ())
        setattr(func, MARKERS_ATTRIBUTE, (*existing, self))
        return target

    def __repr__(self) -> str:
        if not self.meta:
            return f"Marker({self.name!r})"
        names = ", ".join(m.name for m in self.meta)
        return f"Marker({self.name!r}, meta=[{names}])"


def marker(name: str, *meta: Marker) -> Marker:
    """Declare a new marker, optionally meta-marked by ``meta``."""
    return Marker(name, tuple(meta))


TargetAggregateIdentifier: Final[Marker] = marker("TargetAggregateIdentifier")
TargetAggregateVersion: Final[Marker] = marker("TargetAggregateVersion")


def marked_field(*markers: Marker, **kwargs: Any) -> Any:
    """Return a ``dataclasses.field`` carrying ``markers``.

    All keyword arguments are forwarded to ``dataclasses.field``; existing
    ``metadata`` entries are preserved.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[MARKERS_METADATA_KEY] = (*metadata.get(MARKERS_METADATA_KEY, ()), *markers)
    return dataclasses.field(metadata=metadata, **kwargs)


def markers_of(obj: Any) -> tuple[Marker, ...]:
    """Return the markers attached directly to a decorated callable."""
    try:
        func = _underlying_function(obj)
    except TypeError:
        return ()
    return tuple(getattr(func, MARKERS_ATTRIBUTE, ()))


def markers_in_metadata(items: Iterable[Any]) -> tuple[Marker, ...]:
    """Filter ``Annotated`` extras or field metadata values down to markers."""
    return tuple(item for item in items if isinstance(item, Marker))


def expand_meta_markers(markers: Iterable[Marker]) -> frozenset[Marker]:
    """Return ``markers`` plus every marker reachable through their meta tuples."""
    seen: set[Marker] = set()
    pending = list(markers)
    while pending:
        current = pending.pop()
        if current in seen:
            continue
        seen.add(current)
        pending.extend(current.meta)
    return frozenset(seen)


def has_marker(markers: Iterable[Marker], wanted: Marker) -> bool:
    """Return True if ``wanted`` is among ``markers`` directly or via meta-markers."""
    return wanted in expand_meta_markers(markers)


def _underlying_function(target: Any) -> Callable[..., Any]:
    if isinstance(target, property):
        if target.fget is None:
            raise TypeError("Cannot mark a property without a getter")
        return target.fget
    if isinstance(target, (staticmethod, classmethod)):
        return target.__func__
    if isinstance(target, functools.cached_property):
        return target.func
    if callable(target):
        return target
    raise TypeError(f"Markers can only be applied to callables and properties, not {target!r}")
