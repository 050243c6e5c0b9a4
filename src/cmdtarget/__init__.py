"""cmdtarget: find the aggregate a command targets from markers on its payload.

Public API
----------
Everything exported from this module is the stable public surface.
Submodules not re-exported here are private and may change without
notice.

Example
-------
::

    from dataclasses import dataclass
    from typing import Annotated

    import cmdtarget
    from cmdtarget import TargetAggregateIdentifier, TargetAggregateVersion

    @dataclass
    class RenameAccount:
        account_id: Annotated[str, TargetAggregateIdentifier]
        expected_version: Annotated[int, TargetAggregateVersion]
        new_name: str

    target = cmdtarget.resolve_target(RenameAccount("acc-7", 3, "Savings"))
    target.identifier, target.version
    ('acc-7', 3)
"""
from __future__ import annotations

from typing import Any

from cmdtarget.errors import (
    BuilderReusedError,
    CommandTargetError,
    InvalidCommandTargetError,
    InvalidTargetMemberError,
    InvalidVersionError,
    MissingTargetError,
    TargetExtractionError,
)
from cmdtarget.markers import (
    Marker,
    TargetAggregateIdentifier,
    TargetAggregateVersion,
    marked_field,
    marker,
)
from cmdtarget.messages import CommandMessage, GenericCommandMessage, as_command_message
from cmdtarget.resolver import (
    AnnotationCommandTargetResolver,
    CommandTargetResolver,
    MetaDataCommandTargetResolver,
    ResolverConfig,
    create_resolver,
    resolvers,
)
from cmdtarget.target import VersionedAggregateIdentifier

__version__: str = "0.1.0"

_default_resolver = AnnotationCommandTargetResolver()


def resolve_target(command: Any) -> VersionedAggregateIdentifier:
    """Resolve ``command`` (a payload or a command message) with the built-in markers.

    Raises
    ------
    cmdtarget.InvalidCommandTargetError
        If the payload does not identify a valid target aggregate.
    """
    return _default_resolver.resolve(command)


__all__ = [
    "__version__",
    "AnnotationCommandTargetResolver",
    "BuilderReusedError",
    "CommandMessage",
    "CommandTargetError",
    "CommandTargetResolver",
    "GenericCommandMessage",
    "InvalidCommandTargetError",
    "InvalidTargetMemberError",
    "InvalidVersionError",
    "Marker",
    "MetaDataCommandTargetResolver",
    "MissingTargetError",
    "ResolverConfig",
    "TargetAggregateIdentifier",
    "TargetAggregateVersion",
    "TargetExtractionError",
    "VersionedAggregateIdentifier",
    "as_command_message",
    "create_resolver",
    "marked_field",
    "marker",
    "resolve_target",
    "resolvers",
]
