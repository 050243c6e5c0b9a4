"""Resolver interface and the value coercions shared by all resolvers."""
from __future__ import annotations

import numbers
import re
from abc import ABC, abstractmethod
from typing import Any, Final

from cmdtarget.errors import InvalidVersionError
from cmdtarget.messages import CommandMessage
from cmdtarget.target import VersionedAggregateIdentifier

LONG_MIN: Final[int] = -(2**63)
LONG_MAX: Final[int] = 2**63 - 1

_DECIMAL_INTEGER: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")


class CommandTargetResolver(ABC):
    """Determines which aggregate instance a command should be applied to."""

    @abstractmethod
    def resolve_target(self, command: CommandMessage) -> VersionedAggregateIdentifier:
        """Return the identifier and expected version targeted by ``command``.

        Raises
        ------
        cmdtarget.errors.InvalidCommandTargetError
            If the command does not identify a valid target.
        """


def as_identifier(raw: Any) -> str | None:
    """Return the string form of ``raw``, or None if it is absent or empty."""
    if raw is None:
        return None
    return str(raw) or None


def as_version(raw: Any) -> int | None:
    """Coerce ``raw`` to a signed 64-bit version number.

    Numbers are truncated with ``int()``; anything else must be strict
    base-10 text with an optional sign.

    Raises
    ------
    InvalidVersionError
        If ``raw`` is not None and cannot be turned into a version.
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise InvalidVersionError(raw, "booleans are not versions")
    if isinstance(raw, numbers.Number):
        try:
            version = int(raw)  # type: ignore[call-overload]
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvalidVersionError(raw, "it cannot be converted to an integer") from exc
    else:
        text = str(raw)
        if _DECIMAL_INTEGER.fullmatch(text) is None:
            raise InvalidVersionError(raw)
        version = int(text)
    if not LONG_MIN <= version <= LONG_MAX:
        raise InvalidVersionError(raw, "it does not fit in a signed 64-bit integer")
    return version
