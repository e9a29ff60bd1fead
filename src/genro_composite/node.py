# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Node - the unit of a composite tree."""

from __future__ import annotations

import itertools
import weakref
from typing import Any, Callable, Mapping, TYPE_CHECKING

from .attributes import Attribute, AttributeHost, Selected
from .registry import default_registry

if TYPE_CHECKING:
    from .parent import ParentNode

_id_counter = itertools.count()


def _is_selected_value(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value in (0, 1, 2)


class Node(AttributeHost):
    """A node that can be a child of a ParentNode.

    Each node has:
    - id: Unique identifier generated as classname_N
    - label: Free text
    - selected: Selected.UNSELECTED, SELECTED or PARTIAL (0, 1, 2)
    - focused: Boolean
    - parent: The ParentNode owning it, held as a weak reference

    Subclasses are registered in the default type registry under their
    class name, so parents can build them from configuration mappings.
    Pass ``register=False`` in the class statement to opt out.

    Example:
        >>> node = Node(label='Inbox')
        >>> node.set('selected', 1)
        True
        >>> node.selected
        <Selected.SELECTED: 1>
    """

    ATTRS = {
        'label': Attribute('', validator=lambda v: isinstance(v, str)),
        'selected': Attribute(
            Selected.UNSELECTED, validator=_is_selected_value, setter=Selected,
        ),
        'focused': Attribute(False, validator=lambda v: isinstance(v, bool)),
        'parent': Attribute(
            None, read_only=True, setter='_store_parent', getter='_load_parent',
        ),
        'rendered': Attribute(False, read_only=True),
    }

    def __init_subclass__(cls, register: bool = True, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if register:
            default_registry.register(cls.__name__, cls)

    def __init__(self, config: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self.id = f"{type(self).__name__.lower()}_{next(_id_counter)}"
        self.content_box: list[Node] = []
        self._render_hooks: list[Callable[[], Any]] = []
        super().__init__(config, **kwargs)

    def __repr__(self) -> str:
        label = self.get('label')
        if label:
            return f"{type(self).__name__}({self.id!r}, label={label!r})"
        return f"{type(self).__name__}({self.id!r})"

    # ==================== Parent reference ====================

    def _store_parent(self, value: ParentNode | None) -> weakref.ref | None:
        return weakref.ref(value) if value is not None else None

    def _load_parent(self, ref: weakref.ref | None) -> ParentNode | None:
        return ref() if ref is not None else None

    # ==================== Shortcuts ====================

    @property
    def label(self) -> str:
        return self.get('label')

    @property
    def selected(self) -> Selected:
        return self.get('selected')

    @property
    def focused(self) -> bool:
        return self.get('focused')

    @property
    def parent(self) -> ParentNode | None:
        return self.get('parent')

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def root(self) -> Node:
        """Get the topmost ancestor (self when detached)."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def depth(self) -> int:
        """Get the depth of this node in the hierarchy (root=0)."""
        parent = self.parent
        return parent.depth + 1 if parent is not None else 0

    @property
    def index(self) -> int | None:
        """Position of this node among its parent's items, or None."""
        parent = self.parent
        return parent.index_of(self) if parent is not None else None

    # ==================== Lifecycle ====================

    def remove(self) -> Node | None:
        """Detach this node from its parent.

        Goes through the parent's ``remove(index)`` protocol, so listeners
        of ``item_removed`` can veto it.

        Returns:
            This node if it was removed, None otherwise.
        """
        parent = self.parent
        if parent is None:
            return None
        index = parent.index_of(self)
        if index is None:
            return None
        return parent.remove(index)

    # ==================== Rendering ====================

    def add_render_hook(self, hook: Callable[[], Any]) -> None:
        """Register a callable run right after ``render_ui()``."""
        self._render_hooks.append(hook)

    def render_ui(self) -> None:
        """Build this node's own content. Subclasses override."""
        pass

    def render(self, container: list | None = None) -> Node:
        """Render the node into ``container`` (once).

        Args:
            container: Any list-like; the node is appended to it.

        Returns:
            The node itself for chaining.
        """
        if self.get('rendered'):
            return self
        if container is not None:
            container.append(self)
        self.render_ui()
        for hook in list(self._render_hooks):
            hook()
        self._set('rendered', True)
        return self


default_registry.register('Node', Node)
