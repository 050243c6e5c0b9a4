"""Error types raised while resolving the target aggregate of a command.

Every failure caused by the shape or content of a command payload is an
``InvalidCommandTargetError``.  Callers should treat that category as a
rejection of the command, never as a reason to retry.  Misuse of the
resolver builder is reported separately through ``BuilderReusedError``
so that programming mistakes are not confused with bad commands.
"""
from __future__ import annotations

from typing import Any


class CommandTargetError(Exception):
    """Root of every exception raised by cmdtarget."""


class InvalidCommandTargetError(CommandTargetError, ValueError):
    """The command does not describe a valid target aggregate."""


class MissingTargetError(InvalidCommandTargetError):
    """Raised when no identifier could be found for a command payload.

    Parameters
    ----------
    payload_type:
        The declared type of the offending payload.
    source:
        Description of where the identifier was expected to come from,
        e.g. ``"a field or method carrying the TargetAggregateIdentifier marker"``.
    """

    def __init__(self, payload_type: type, source: str) -> None:
        self.payload_type = payload_type
        self.source = source
        super().__init__(
            "Invalid command. It does not identify the target aggregate. "
            f"Make sure the [{payload_type.__name__}] class provides {source} "
            "and that it returns a non-null value."
        )


class InvalidTargetMemberError(InvalidCommandTargetError):
    """Raised when a marked member cannot serve as a target accessor."""

    def __init__(self, member: str, reason: str) -> None:
        self.member = member
        self.reason = reason
        super().__init__(f"Member {member} cannot provide the target aggregate: {reason}.")


class InvalidVersionError(InvalidCommandTargetError):
    """Raised when the expected aggregate version is not an integer."""

    def __init__(self, value: Any, reason: str = "it is not a number") -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"The value provided for the version ({value!r}) is invalid: {reason}.")


class TargetExtractionError(InvalidCommandTargetError):
    """Raised when reading a marked member fails.

    The original exception is chained as ``__cause__`` and kept on
    ``original`` for diagnostics.
    """

    def __init__(self, member: str, original: BaseException) -> None:
        self.member = member
        self.original = original
        super().__init__(
            "An exception occurred while extracting aggregate information "
            f"from {member}: {original!r}"
        )


class BuilderReusedError(CommandTargetError, RuntimeError):
    """Raised when a resolver builder is used after it has built a resolver."""

    def __init__(self) -> None:
        super().__init__(
            "This builder has already produced a resolver and cannot be used again. "
            "Call AnnotationCommandTargetResolver.builder() for a new one."
        )
