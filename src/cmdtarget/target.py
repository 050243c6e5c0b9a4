"""The resolved target of a command."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class VersionedAggregateIdentifier:
    """Identifier of the aggregate a command targets, plus its expected version.

    Parameters
    ----------
    identifier:
        String form of the aggregate identifier. Never ``None``.
    version:
        Expected aggregate version for optimistic concurrency checks, or
        ``None`` when the command does not require one.
    """

    identifier: str
    version: int | None = None

    def __post_init__(self) -> None:
        if self.identifier is None:
            raise ValueError("A VersionedAggregateIdentifier requires a non-null identifier")

    def __str__(self) -> str:
        if self.version is None:
            return self.identifier
        return f"{self.identifier}@{self.version}"
