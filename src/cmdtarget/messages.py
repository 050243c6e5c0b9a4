"""Minimal command envelope.

Resolvers only need two things from a command: its payload and the
payload's declared type.  Any object exposing ``payload`` and
``payload_type`` satisfies ``CommandMessage``; ``GenericCommandMessage``
is provided for callers that do not have an envelope of their own.
"""
from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CommandMessage(Protocol):
    """What a resolver reads from a command."""

    @property
    def payload(self) -> Any: ...

    @property
    def payload_type(self) -> type: ...


@dataclass(frozen=True)
class GenericCommandMessage:
    """A command payload with metadata and a unique message identifier."""

    payload: Any
    metadata: Mapping[str, Any] = field(default_factory=dict)
    identifier: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def payload_type(self) -> type:
        return type(self.payload)

    def with_metadata(self, **entries: Any) -> GenericCommandMessage:
        """Return a copy with ``entries`` merged into the metadata."""
        return GenericCommandMessage(
            payload=self.payload,
            metadata={**self.metadata, **entries},
            identifier=self.identifier,
        )


def as_command_message(command: Any) -> CommandMessage:
    """Return ``command`` if it already is a message, otherwise wrap it.

    Objects that merely have ``payload`` and ``payload_type`` attributes
    count as messages only when ``payload_type`` is a class, so payloads
    with fields of those names are still wrapped.
    """
    if isinstance(command, GenericCommandMessage):
        return command
    if isinstance(command, CommandMessage) and isinstance(command.payload_type, type):
        return command
    return GenericCommandMessage(command)
