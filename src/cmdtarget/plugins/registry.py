"""Named registry of resolver implementations.

Built-in resolvers register themselves at import time.  Third-party
packages contribute more by declaring entry-points under the
``cmdtarget.resolvers`` group::

    [project.entry-points."cmdtarget.resolvers"]
    routing-slip = "my_package.routing:RoutingSlipTargetResolver"

which ``load_entrypoints`` discovers and registers.
"""
from __future__ import annotations

import importlib.metadata
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENTRYPOINT_GROUP = "cmdtarget.resolvers"


class PluginNotFoundError(KeyError):
    """Raised when a requested name is not in the registry."""

    def __init__(self, name: str, registry_name: str, available: list[str]) -> None:
        self.plugin_name = name
        self.registry_name = registry_name
        super().__init__(
            f"No {registry_name} entry named {name!r}. "
            f"Known names: {', '.join(available) or '(none)'}."
        )


class PluginAlreadyRegisteredError(ValueError):
    """Raised when a name is registered twice."""

    def __init__(self, name: str, registry_name: str) -> None:
        self.plugin_name = name
        self.registry_name = registry_name
        super().__init__(f"{name!r} is already registered in the {registry_name} registry.")


class PluginRegistry(Generic[T]):
    """Maps names to implementation classes of a common base.

    Parameters
    ----------
    base_class:
        Every registered class must subclass this.
    name:
        Registry name used in error messages.
    """

    def __init__(self, base_class: type[T], name: str) -> None:
        self._base_class = base_class
        self._name = name
        self._plugins: dict[str, type[T]] = {}

    def register(self, name: str) -> Callable[[type[T]], type[T]]:
        """Class decorator registering the decorated class under ``name``."""

        def decorator(cls: type[T]) -> type[T]:
            self.register_class(name, cls)
            return cls

        return decorator

    def register_class(self, name: str, cls: type[T]) -> None:
        """Register ``cls`` under ``name``.

        Raises
        ------
        PluginAlreadyRegisteredError
            If ``name`` is taken.
        TypeError
            If ``cls`` does not subclass the registry's base class.
        """
        if name in self._plugins:
            raise PluginAlreadyRegisteredError(name, self._name)
        if not (isinstance(cls, type) and issubclass(cls, self._base_class)):
            raise TypeError(
                f"Cannot register {cls!r} as {name!r}: "
                f"not a subclass of {self._base_class.__name__}."
            )
        self._plugins[name] = cls
        logger.debug("Registered %r -> %s in %s registry", name, cls.__qualname__, self._name)

    def deregister(self, name: str) -> None:
        if name not in self._plugins:
            raise PluginNotFoundError(name, self._name, self.names())
        del self._plugins[name]
        logger.debug("Deregistered %r from %s registry", name, self._name)

    def get(self, name: str) -> type[T]:
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginNotFoundError(name, self._name, self.names()) from None

    def create(self, name: str, *args: Any, **kwargs: Any) -> T:
        """Instantiate the class registered under ``name``."""
        return self.get(name)(*args, **kwargs)

    def names(self) -> list[str]:
        """Registered names in alphabetical order."""
        return sorted(self._plugins)

    def items(self) -> list[tuple[str, type[T]]]:
        return [(name, self._plugins[name]) for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    def __repr__(self) -> str:
        return f"PluginRegistry(name={self._name!r}, names={self.names()})"

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> None:
        """Register every class published under the entry-point ``group``.

        Names that are already registered are skipped, so calling this
        repeatedly is harmless.  Entry-points that fail to import or do
        not subclass the base class are logged and skipped.
        """
        for ep in importlib.metadata.entry_points(group=group):
            if ep.name in self._plugins:
                logger.debug("Entry-point %r already registered in %s; skipping.", ep.name, self._name)
                continue
            try:
                cls = ep.load()
            except Exception:
                logger.exception("Failed to load entry-point %r from group %r; skipping.", ep.name, group)
                continue
            try:
                self.register_class(ep.name, cls)
            except (PluginAlreadyRegisteredError, TypeError):
                logger.warning(
                    "Entry-point %r loaded but could not be registered in %s; skipping.",
                    ep.name,
                    self._name,
                )
