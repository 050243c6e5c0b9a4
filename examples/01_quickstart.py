#!/usr/bin/env python3
"""Example: cmdtarget quickstart

Mark the members of a command payload and resolve the aggregate the
command targets.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install cmdtarget
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Annotated

import cmdtarget
from cmdtarget import TargetAggregateIdentifier, TargetAggregateVersion


@dataclass
class ShipOrder:
    order_id: Annotated[uuid.UUID, TargetAggregateIdentifier]
    expected_version: Annotated[int, TargetAggregateVersion]
    carrier: str


class CancelOrder:
    """Accessor methods work too, and win over fields."""

    def __init__(self, order_id: str) -> None:
        self._order_id = order_id

    @TargetAggregateIdentifier
    def target(self) -> str:
        return self._order_id


def main() -> None:
    print(f"cmdtarget version: {cmdtarget.__version__}")

    ship = ShipOrder(uuid.uuid4(), expected_version=4, carrier="DHL")
    target = cmdtarget.resolve_target(ship)
    print(f"ShipOrder   -> {target.identifier} (expected version {target.version})")

    target = cmdtarget.resolve_target(CancelOrder("order-17"))
    print(f"CancelOrder -> {target.identifier} (no version check)")

    try:
        cmdtarget.resolve_target({"order_id": "order-18"})
    except cmdtarget.InvalidCommandTargetError as exc:
        print(f"Rejected: {exc}")


if __name__ == "__main__":
    main()
