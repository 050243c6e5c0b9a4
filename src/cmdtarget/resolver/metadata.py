"""Resolution from command metadata instead of the payload."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from cmdtarget.errors import MissingTargetError
from cmdtarget.messages import CommandMessage
from cmdtarget.resolver.base import CommandTargetResolver, as_identifier, as_version
from cmdtarget.target import VersionedAggregateIdentifier

logger = logging.getLogger(__name__)


class MetaDataCommandTargetResolver(CommandTargetResolver):
    """Reads the aggregate identifier and version from message metadata.

    Commands without a ``metadata`` mapping are treated as having empty
    metadata.

    Parameters
    ----------
    identifier_key:
        Metadata key holding the aggregate identifier.
    version_key:
        Metadata key holding the expected version, or None to never
        resolve a version.
    """

    def __init__(self, identifier_key: str, version_key: str | None = None) -> None:
        self._identifier_key = identifier_key
        self._version_key = version_key

    def resolve_target(self, command: CommandMessage) -> VersionedAggregateIdentifier:
        metadata: Mapping[str, Any] = getattr(command, "metadata", None) or {}
        identifier = as_identifier(metadata.get(self._identifier_key))
        version = None
        if self._version_key is not None:
            version = as_version(metadata.get(self._version_key))
        if identifier is None:
            raise MissingTargetError(
                command.payload_type,
                f"the aggregate identifier in metadata key {self._identifier_key!r}",
            )
        logger.debug("Resolved aggregate %r from metadata (version=%r)", identifier, version)
        return VersionedAggregateIdentifier(identifier, version)

    def __repr__(self) -> str:
        return (
            f"MetaDataCommandTargetResolver(identifier_key={self._identifier_key!r}, "
            f"version_key={self._version_key!r})"
        )
