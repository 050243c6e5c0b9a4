#!/usr/bin/env python3
"""Example: cmdtarget custom and meta markers

Two ways to keep message classes free of the built-in markers:

* a meta marker, which is honoured by the default resolver because it
  is itself marked with ``TargetAggregateIdentifier``;
* an unrelated custom marker, wired in with the resolver builder.

Usage:
    python examples/02_custom_markers.py
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from cmdtarget import (
    AnnotationCommandTargetResolver,
    TargetAggregateIdentifier,
    marked_field,
    marker,
)

AccountKey = marker("AccountKey", TargetAggregateIdentifier)
StreamId = marker("StreamId")
Revision = marker("Revision")


@dataclass
class CloseAccount:
    account: str = marked_field(AccountKey)


@dataclass
class AppendEvent:
    stream: Annotated[str, StreamId]
    revision: Annotated[str, Revision]


def main() -> None:
    default_resolver = AnnotationCommandTargetResolver()
    print(default_resolver.resolve(CloseAccount("acc-1")))

    stream_resolver = (
        AnnotationCommandTargetResolver.builder()
        .with_identifier_marker(StreamId)
        .with_version_marker(Revision)
        .build()
    )
    print(stream_resolver.resolve(AppendEvent("stream-9", "12")))


if __name__ == "__main__":
    main()
