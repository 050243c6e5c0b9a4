"""Registry used to look up resolver implementations by name."""
from __future__ import annotations

from cmdtarget.plugins.registry import (
    ENTRYPOINT_GROUP,
    PluginAlreadyRegisteredError,
    PluginNotFoundError,
    PluginRegistry,
)

__all__ = [
    "ENTRYPOINT_GROUP",
    "PluginAlreadyRegisteredError",
    "PluginNotFoundError",
    "PluginRegistry",
]
