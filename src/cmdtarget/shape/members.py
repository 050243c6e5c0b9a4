"""Structural view of a payload type: its accessor methods and fields.

The resolver never touches ``vars()`` or ``getattr`` directly; it works
with ``Member`` objects produced here.  Enumeration is deterministic:
the payload class comes first, followed by its bases in method
resolution order (``object`` excluded), and each class contributes its
own members in declaration order.

Private members are included.  Name-mangled attributes (``__secret``)
are addressed by their mangled name, exactly as Python stores them.
"""
from __future__ import annotations

import functools
import inspect
import logging
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, get_args, get_origin

from cmdtarget.errors import InvalidTargetMemberError, TargetExtractionError
from cmdtarget.markers.marker import (
    MARKERS_METADATA_KEY,
    Marker,
    has_marker,
    markers_in_metadata,
    markers_of,
)

logger = logging.getLogger(__name__)

_ACCESSOR_TYPES = (property, staticmethod, classmethod, functools.cached_property)
_REQUIRED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


class MemberKind(Enum):
    """Whether a member is read by invoking it or by reading its value."""

    METHOD = "method"
    FIELD = "field"


@dataclass(frozen=True)
class Member:
    """A single declared member of a payload type.

    Parameters
    ----------
    name:
        Attribute name used to access the member on an instance.
    kind:
        ``MemberKind.METHOD`` for accessors, ``MemberKind.FIELD`` for
        annotated attributes.
    owner:
        The class in whose body the member is declared.
    markers:
        Markers attached directly to the member.
    function:
        The underlying function for methods and properties.
    invoke:
        True when reading the member means calling the looked-up
        attribute (plain, static and class methods); False for
        properties and fields.
    """

    name: str
    kind: MemberKind
    owner: type
    markers: tuple[Marker, ...] = ()
    function: Callable[..., Any] | None = None
    invoke: bool = False

    @property
    def qualified_name(self) -> str:
        suffix = "()" if self.invoke else ""
        return f"{self.owner.__qualname__}.{self.name}{suffix}"

    def carries(self, wanted: Marker) -> bool:
        """Return True if this member carries ``wanted``, directly or via meta-markers."""
        return has_marker(self.markers, wanted)

    def returns_nothing(self) -> bool:
        """Return True if the member is a method annotated to return ``None``."""
        if self.function is None:
            return False
        try:
            annotation = inspect.signature(self.function, eval_str=True).return_annotation
        except (NameError, SyntaxError, AttributeError, TypeError):
            annotation = inspect.signature(self.function).return_annotation
        return annotation is None or annotation is type(None) or annotation == "None"

    def read(self, payload: Any) -> Any:
        """Return the member's value for ``payload``.

        Raises
        ------
        InvalidTargetMemberError
            If the member is a method that requires arguments.
        TargetExtractionError
            If reading or invoking the member raises.
        """
        if self.kind is MemberKind.FIELD:
            return self._read_field(payload)
        try:
            attribute = getattr(payload, self.name)
        except Exception as exc:
            raise TargetExtractionError(self.qualified_name, exc) from exc
        if not self.invoke:
            return attribute
        self._ensure_no_arguments(attribute)
        try:
            return attribute()
        except Exception as exc:
            raise TargetExtractionError(self.qualified_name, exc) from exc

    def _read_field(self, payload: Any) -> Any:
        try:
            return getattr(payload, self.name)
        except AttributeError:
            # Declared but never assigned.
            return None
        except Exception as exc:
            raise TargetExtractionError(self.qualified_name, exc) from exc

    def _ensure_no_arguments(self, bound: Callable[..., Any]) -> None:
        try:
            signature = inspect.signature(bound)
        except (TypeError, ValueError):
            return
        required = [
            p.name
            for p in signature.parameters.values()
            if p.kind in _REQUIRED_KINDS and p.default is inspect.Parameter.empty
        ]
        if required:
            raise InvalidTargetMemberError(
                self.qualified_name,
                f"accessor methods must not take parameters, found {', '.join(required)}",
            )


def hierarchy(cls: type) -> list[type]:
    """Return ``cls`` and its bases in MRO order, without ``object``."""
    return [klass for klass in cls.__mro__ if klass is not object]


def methods_of(cls: type) -> Iterator[Member]:
    """Yield every accessor method and property declared in the hierarchy of ``cls``."""
    for klass in hierarchy(cls):
        for name, attribute in vars(klass).items():
            if name.startswith("__") and name.endswith("__"):
                continue
            if isinstance(attribute, _ACCESSOR_TYPES):
                invoke = isinstance(attribute, (staticmethod, classmethod))
            elif inspect.isfunction(attribute):
                invoke = True
            else:
                continue
            yield Member(
                name=name,
                kind=MemberKind.METHOD,
                owner=klass,
                markers=markers_of(attribute),
                function=_function_of(attribute),
                invoke=invoke,
            )


def fields_of(cls: type) -> Iterator[Member]:
    """Yield every annotated attribute declared in the hierarchy of ``cls``.

    Markers come from ``Annotated`` extras and from dataclass field
    metadata written by ``marked_field``.
    """
    for klass in hierarchy(cls):
        dataclass_fields = vars(klass).get("__dataclass_fields__", {})
        for name, annotation in _own_annotations(klass).items():
            markers = list(_annotated_markers(annotation))
            declared = dataclass_fields.get(name)
            if declared is not None:
                markers.extend(markers_in_metadata(declared.metadata.get(MARKERS_METADATA_KEY, ())))
            yield Member(
                name=name,
                kind=MemberKind.FIELD,
                owner=klass,
                markers=tuple(markers),
            )


def describe(cls: type) -> list[Member]:
    """Return all marked members of ``cls``: methods first, then fields."""
    return [m for m in (*methods_of(cls), *fields_of(cls)) if m.markers]


def _own_annotations(klass: type) -> dict[str, Any]:
    """Return the annotations declared in ``klass`` itself, evaluated one by one.

    An annotation that cannot be evaluated, such as one naming a type
    imported only under ``TYPE_CHECKING``, stays a string without hiding
    the markers of its neighbours.
    """
    try:
        raw = inspect.get_annotations(klass)
    except NameError:
        # Lazily evaluated annotations (Python 3.14+).
        import annotationlib

        raw = annotationlib.get_annotations(klass, format=annotationlib.Format.FORWARDREF)
    module = sys.modules.get(klass.__module__)
    module_globals = vars(module) if module is not None else {}
    evaluated: dict[str, Any] = {}
    for name, annotation in raw.items():
        if isinstance(annotation, str):
            try:
                annotation = eval(annotation, module_globals, dict(vars(klass)))  # noqa: S307
            except Exception as exc:
                logger.debug(
                    "Could not evaluate annotation of %s.%s (%s); using it unevaluated.",
                    klass.__qualname__,
                    name,
                    exc,
                )
        evaluated[name] = annotation
    return evaluated


def _annotated_markers(annotation: Any) -> tuple[Marker, ...]:
    if get_origin(annotation) is not Annotated:
        return ()
    return markers_in_metadata(get_args(annotation)[1:])


def _function_of(attribute: Any) -> Callable[..., Any] | None:
    if isinstance(attribute, property):
        return attribute.fget
    if isinstance(attribute, (staticmethod, classmethod)):
        return attribute.__func__
    if isinstance(attribute, functools.cached_property):
        return attribute.func
    return attribute
