"""Annotation-driven command target resolution.

``AnnotationCommandTargetResolver`` looks for the payload member that
carries the identifier marker and, optionally, the one that carries the
version marker.  For each marker, accessor methods across the whole
class hierarchy are searched before any field is considered, and the
first match wins.  The two lookups are independent, so an identifier
may come from a method while the version comes from a field.

Example
-------
::

    from dataclasses import dataclass
    from typing import Annotated

    from cmdtarget import AnnotationCommandTargetResolver, TargetAggregateIdentifier

    @dataclass
    class CancelOrder:
        order_id: Annotated[str, TargetAggregateIdentifier]

    resolver = AnnotationCommandTargetResolver()
    resolver.resolve(CancelOrder("order-1")).identifier  # 'order-1'
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from cmdtarget.errors import (
    BuilderReusedError,
    InvalidTargetMemberError,
    InvalidVersionError,
    MissingTargetError,
    TargetExtractionError,
)
from cmdtarget.markers.marker import Marker, TargetAggregateIdentifier, TargetAggregateVersion
from cmdtarget.messages import CommandMessage, as_command_message
from cmdtarget.resolver.base import CommandTargetResolver, as_identifier, as_version
from cmdtarget.resolver.config import ResolverConfig
from cmdtarget.shape.members import Member, MemberKind, fields_of, methods_of
from cmdtarget.target import VersionedAggregateIdentifier

logger = logging.getLogger(__name__)


class AnnotationCommandTargetResolver(CommandTargetResolver):
    """Resolves command targets from marked payload members.

    Instances hold nothing but the two markers and are safe to share
    between threads.

    Parameters
    ----------
    identifier_marker:
        Marker identifying the aggregate identifier member.
    version_marker:
        Marker identifying the expected version member.
    """

    def __init__(
        self,
        identifier_marker: Marker = TargetAggregateIdentifier,
        version_marker: Marker = TargetAggregateVersion,
    ) -> None:
        self._identifier_marker = identifier_marker
        self._version_marker = version_marker

    @staticmethod
    def builder() -> Builder:
        """Return a new single-use ``Builder``."""
        return Builder()

    @property
    def identifier_marker(self) -> Marker:
        return self._identifier_marker

    @property
    def version_marker(self) -> Marker:
        return self._version_marker

    def resolve(self, payload: Any) -> VersionedAggregateIdentifier:
        """Resolve the target of a bare payload or an existing command message."""
        return self.resolve_target(as_command_message(payload))

    def resolve_target(self, command: CommandMessage) -> VersionedAggregateIdentifier:
        payload = command.payload
        payload_type = command.payload_type
        identifier = self._find_identifier(payload, payload_type)
        version = self._find_version(payload, payload_type)
        if identifier is None:
            raise MissingTargetError(
                payload_type,
                f"a field or method carrying the {self._identifier_marker.name} marker",
            )
        logger.debug(
            "Resolved %s to aggregate %r (version=%r)",
            payload_type.__qualname__,
            identifier,
            version,
        )
        return VersionedAggregateIdentifier(identifier, version)

    def _find_identifier(self, payload: Any, payload_type: type) -> str | None:
        member = find_marked_member(payload_type, self._identifier_marker)
        if member is None:
            return None
        if member.kind is MemberKind.METHOD and member.returns_nothing():
            raise InvalidTargetMemberError(
                member.qualified_name,
                "it is declared to return None",
            )
        raw = member.read(payload)
        try:
            return as_identifier(raw)
        except Exception as exc:
            raise TargetExtractionError(member.qualified_name, exc) from exc

    def _find_version(self, payload: Any, payload_type: type) -> int | None:
        member = find_marked_member(payload_type, self._version_marker)
        if member is None:
            return None
        raw = member.read(payload)
        try:
            return as_version(raw)
        except InvalidVersionError:
            raise
        except Exception as exc:
            raise TargetExtractionError(member.qualified_name, exc) from exc

    def __repr__(self) -> str:
        return (
            f"AnnotationCommandTargetResolver(identifier_marker={self._identifier_marker!r}, "
            f"version_marker={self._version_marker!r})"
        )


def find_marked_member(payload_type: type, wanted: Marker) -> Member | None:
    """Return the first method, or failing that the first field, carrying ``wanted``."""
    for member in methods_of(payload_type):
        if member.carries(wanted):
            return member
    for member in fields_of(payload_type):
        if member.carries(wanted):
            return member
    logger.debug("No member of %s carries %s", payload_type.__qualname__, wanted.name)
    return None


def create_resolver(config: ResolverConfig | None = None) -> AnnotationCommandTargetResolver:
    """Build a resolver from an immutable ``ResolverConfig``."""
    if config is None:
        config = ResolverConfig()
    return AnnotationCommandTargetResolver(
        identifier_marker=config.identifier_marker,
        version_marker=config.version_marker,
    )


class Builder:
    """Single-use builder for ``AnnotationCommandTargetResolver``.

    Once ``build`` has been called, every further call on the builder
    raises ``BuilderReusedError``.  The resolver it produced stays usable.
    """

    def __init__(self) -> None:
        self._config: ResolverConfig | None = ResolverConfig()

    def with_identifier_marker(self, marker: Marker) -> Builder:
        """Replace the marker identifying the aggregate identifier.

        A project that wants its message classes free of cmdtarget imports
        can declare its own marker here instead of the built-in one.
        """
        self._config = replace(self._active_config(), identifier_marker=marker)
        return self

    def with_version_marker(self, marker: Marker) -> Builder:
        """Replace the marker identifying the expected aggregate version."""
        self._config = replace(self._active_config(), version_marker=marker)
        return self

    def build(self) -> AnnotationCommandTargetResolver:
        config = self._active_config()
        self._config = None
        return create_resolver(config)

    def _active_config(self) -> ResolverConfig:
        if self._config is None:
            raise BuilderReusedError()
        return self._config

    def __repr__(self) -> str:
        return f"Builder(config={self._config!r})"
