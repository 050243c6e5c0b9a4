"""Command target resolvers.

``resolvers`` is the shared registry; it ships with ``"annotation"``
and ``"metadata"`` registered.
"""
from __future__ import annotations

from cmdtarget.plugins.registry import PluginRegistry
from cmdtarget.resolver.annotation import (
    AnnotationCommandTargetResolver,
    Builder,
    create_resolver,
    find_marked_member,
)
from cmdtarget.resolver.base import CommandTargetResolver, as_identifier, as_version
from cmdtarget.resolver.config import ResolverConfig
from cmdtarget.resolver.metadata import MetaDataCommandTargetResolver

resolvers: PluginRegistry[CommandTargetResolver] = PluginRegistry(CommandTargetResolver, "resolvers")
resolvers.register_class("annotation", AnnotationCommandTargetResolver)
resolvers.register_class("metadata", MetaDataCommandTargetResolver)

__all__ = [
    "AnnotationCommandTargetResolver",
    "Builder",
    "CommandTargetResolver",
    "MetaDataCommandTargetResolver",
    "ResolverConfig",
    "as_identifier",
    "as_version",
    "create_resolver",
    "find_marked_member",
    "resolvers",
]
