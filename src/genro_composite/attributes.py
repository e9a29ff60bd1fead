# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Declared attributes with change events.

An AttributeHost subclass declares its attributes in a class-level ``ATTRS``
dict; declarations are merged along the MRO, so subclasses only list what
they add or override::

    class Checkbox(AttributeHost):
        ATTRS = {
            'checked': Attribute(False, validator=lambda v: isinstance(v, bool)),
        }

Every committed change fires ``<name>_change`` through the event system:
"on" subscribers can veto it, "after" subscribers see the committed value.
Each change event carries a :class:`Source` telling who performed it.
"""

from __future__ import annotations

import copy
import logging
from enum import Enum, IntEnum
from typing import Any, Callable, Mapping

from .events import EventFacade, EventTarget
from .exceptions import UnknownAttributeError

logger = logging.getLogger(__name__)


class Selected(IntEnum):
    """Tri-state value of the ``selected`` attribute."""

    UNSELECTED = 0
    SELECTED = 1
    PARTIAL = 2


class SourceKind(Enum):
    EXTERNAL = 'external'
    PROPAGATED = 'propagated'


class Source:
    """Provenance of an attribute change.

    ``Source.EXTERNAL`` marks changes made by callers outside the tree.
    ``Source.propagated_from(node)`` marks changes a node performed while
    reconciling its children; the node uses it to ignore its own echoes.
    """

    __slots__ = ('kind', 'origin_id')

    EXTERNAL: Source

    def __init__(self, kind: SourceKind, origin_id: str | None = None) -> None:
        self.kind = kind
        self.origin_id = origin_id

    @classmethod
    def propagated_from(cls, node: Any) -> Source:
        return cls(SourceKind.PROPAGATED, node.id)

    def is_from(self, node: Any) -> bool:
        """True if ``node`` performed the change."""
        return self.kind is SourceKind.PROPAGATED and self.origin_id == node.id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Source):
            return NotImplemented
        return self.kind is other.kind and self.origin_id == other.origin_id

    def __hash__(self) -> int:
        return hash((self.kind, self.origin_id))

    def __repr__(self) -> str:
        if self.kind is SourceKind.EXTERNAL:
            return "Source.EXTERNAL"
        return f"Source.propagated_from({self.origin_id!r})"


Source.EXTERNAL = Source(SourceKind.EXTERNAL)


class Attribute:
    """Declaration of a single attribute.

    Args:
        value: Default value. Lists, dicts and sets are copied per instance.
        validator: Predicate; a value it rejects is not stored.
        read_only: If True, only the host itself can change it (via ``_set``).
        write_once: If True, the first explicit write locks the value.
        setter: Callable or method name; receives the incoming value and
            returns the value to store.
        getter: Callable or method name; receives the stored value and
            returns what ``get()`` reports.
    """

    __slots__ = ('value', 'validator', 'read_only', 'write_once', 'setter', 'getter')

    def __init__(
        self,
        value: Any = None,
        validator: Callable[[Any], bool] | None = None,
        read_only: bool = False,
        write_once: bool = False,
        setter: Callable[..., Any] | str | None = None,
        getter: Callable[..., Any] | str | None = None,
    ) -> None:
        self.value = value
        self.validator = validator
        self.read_only = read_only
        self.write_once = write_once
        self.setter = setter
        self.getter = getter

    def __repr__(self) -> str:
        return f"Attribute(value={self.value!r})"


def _same_value(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if type(a) is not type(b) and not (isinstance(a, int) and isinstance(b, int)):
        return False
    return bool(a == b)


class AttributeHost(EventTarget):
    """Storage for declared attributes, with ``<name>_change`` events.

    Construction accepts a configuration mapping plus keyword arguments;
    keyword arguments override mapping keys. Keys that are not declared
    attributes are ignored.
    """

    ATTRS: dict[str, Attribute] = {}
    _attr_decls: dict[str, Attribute] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Merge ATTRS declarations of the whole MRO into _attr_decls."""
        super().__init_subclass__(**kwargs)
        decls: dict[str, Attribute] = {}
        for base in reversed(cls.__mro__):
            own = base.__dict__.get('ATTRS')
            if own:
                decls.update(own)
        cls._attr_decls = decls

    def __init__(self, config: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        super().__init__()
        self._values: dict[str, Any] = {}
        self._written: set[str] = set()

        for name, decl in self._attr_decls.items():
            self._values[name] = copy.copy(decl.value)
            self.publish(f"{name}_change", default_fn=self._def_attr_change)

        final_config: dict[str, Any] = {}
        if config:
            final_config.update(config)
        final_config.update(kwargs)
        self._init_attrs(final_config)

    def _init_attrs(self, config: dict[str, Any]) -> None:
        for name, value in config.items():
            decl = self._attr_decls.get(name)
            if decl is None:
                logger.debug("%s: ignoring undeclared config key %r", type(self).__name__, name)
                continue
            if decl.read_only:
                logger.debug("%s: read-only attribute %r not configurable", type(self).__name__, name)
                continue
            if decl.validator is not None and not decl.validator(value):
                logger.debug("%s: invalid initial value for %r: %r", type(self).__name__, name, value)
                continue
            self._values[name] = self._apply_setter(decl, value)
            self._written.add(name)

    # ==================== Access ====================

    def _decl(self, name: str) -> Attribute:
        try:
            return self._attr_decls[name]
        except KeyError:
            raise UnknownAttributeError(
                f"'{type(self).__name__}' has no attribute '{name}'"
            ) from None

    def _resolve(self, fn: Callable[..., Any] | str) -> Callable[..., Any]:
        if isinstance(fn, str):
            return getattr(self, fn)
        return fn

    def _apply_setter(self, decl: Attribute, value: Any) -> Any:
        if decl.setter is None:
            return value
        return self._resolve(decl.setter)(value)

    def get(self, name: str) -> Any:
        """Return the current value of a declared attribute.

        Raises:
            UnknownAttributeError: If the attribute was never declared.
        """
        decl = self._decl(name)
        value = self._values[name]
        if decl.getter is not None:
            return self._resolve(decl.getter)(value)
        return value

    def set(self, name: str, value: Any, source: Source | None = None) -> bool:
        """Set a declared attribute.

        Args:
            name: Attribute name.
            value: New value.
            source: Provenance of the change; ``Source.EXTERNAL`` if omitted.

        Returns:
            False if the write was refused (read-only, already written
            write-once, rejected by the validator, or vetoed by an "on"
            subscriber), True otherwise.
        """
        decl = self._decl(name)
        if decl.read_only:
            logger.debug("%s: refusing write to read-only %r", self, name)
            return False
        return self._set_value(name, decl, value, source)

    def _set(self, name: str, value: Any, source: Source | None = None) -> bool:
        """Internal write, allowed on read-only attributes."""
        return self._set_value(name, self._decl(name), value, source)

    def _set_value(self, name: str, decl: Attribute, value: Any, source: Source | None) -> bool:
        if decl.write_once and name in self._written:
            logger.debug("%s: %r is write-once and already set", self, name)
            return False
        if decl.validator is not None and not decl.validator(value):
            logger.debug("%s: invalid value for %r: %r", self, name, value)
            return False

        new_value = self._apply_setter(decl, value)
        prev_value = self._values[name]
        if _same_value(new_value, prev_value):
            return True

        return self.fire(
            f"{name}_change",
            attr_name=name,
            new_value=new_value,
            prev_value=prev_value,
            source=source if source is not None else Source.EXTERNAL,
        )

    def _def_attr_change(self, event: EventFacade) -> None:
        self._values[event.attr_name] = event.new_value
        self._written.add(event.attr_name)

    def get_attrs(self) -> dict[str, Any]:
        """Return a dict of every declared attribute and its current value."""
        return {name: self.get(name) for name in self._attr_decls}
