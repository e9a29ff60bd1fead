# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Registry mapping item type names to node factories.

Parents use it to turn plain configuration mappings into nodes, so a whole
collection can be declared as data::

    tabs.add([{'label': 'One'}, {'type': 'Panel', 'label': 'Two'}])

Every Node subclass registers itself under its class name when defined.
Other factories can be added explicitly::

    @default_registry.register('tab')
    def make_tab(**config):
        return Tab(config)
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from .exceptions import UnknownItemTypeError

Factory = Callable[..., Any]


class TypeRegistry:
    """A name -> factory mapping.

    Re-registering a name replaces the previous factory.
    """

    __slots__ = ('_factories',)

    def __init__(self) -> None:
        self._factories: dict[str, Factory] = {}

    def __repr__(self) -> str:
        return f"TypeRegistry({sorted(self._factories)})"

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def register(self, name: str, factory: Factory | None = None) -> Any:
        """Register a factory under ``name``.

        Can be called directly or used as a decorator::

            registry.register('Tab', Tab)

            @registry.register('Tab')
            def make_tab(**config): ...
        """
        if not isinstance(name, str) or not name:
            raise TypeError(f"type name must be a non-empty string, not {name!r}")

        if factory is None:
            def decorator(fn: Factory) -> Factory:
                self._factories[name] = fn
                return fn
            return decorator

        self._factories[name] = factory
        return factory

    def unregister(self, name: str) -> Factory | None:
        """Remove and return the factory for ``name`` (None if absent)."""
        return self._factories.pop(name, None)

    def get(self, name: str) -> Factory | None:
        return self._factories.get(name)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def create(self, name: str, config: Mapping[str, Any] | None = None) -> Any:
        """Build an item of type ``name`` from ``config``.

        Raises:
            UnknownItemTypeError: If nothing is registered under ``name``.
        """
        factory = self._factories.get(name)
        if factory is None:
            raise UnknownItemTypeError(f"No item type registered as '{name}'")
        return factory(**dict(config or {}))


default_registry = TypeRegistry()
