# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ParentNode - a Node owning an ordered collection of child nodes.

This module provides the two halves of the composite behaviour:

Hierarchy:
    ``add()``, ``remove()``, ``remove_all()`` and ``item()`` maintain the
    ordered ``items`` list. A child belongs to at most one parent: adding it
    somewhere else detaches it first. Both structural changes go through
    cancelable lifecycle events, ``item_added`` and ``item_removed``, whose
    default actions perform the actual splice.

Selection:
    The parent keeps ``selection``, ``selected`` and ``active_item``
    consistent with the ``selected``/``focused`` state of its children:

    - R1: a child's ``selected`` change recomputes ``selection``; under
      single-select the previously selected sibling is deselected.
    - R2: a ``selection`` change recomputes the parent's own ``selected``
      (0 none, 1 all, 2 some).
    - R3: setting the parent's ``selected`` to 0 or 1 from outside
      cascades to its children.
    - R4: a child gaining focus becomes ``active_item``.

    Changes the parent performs itself are tagged with
    ``Source.propagated_from(parent)`` and ignored by its own rules, which
    keeps nested parents from ping-ponging updates.

Example:
    >>> tabs = ParentNode(default_item_type='Node')
    >>> first, second = tabs.add([{'label': 'One'}, {'label': 'Two'}])
    >>> first.set('selected', 1)
    True
    >>> second.set('selected', 1)
    True
    >>> first.selected, tabs.selection is second
    (<Selected.UNSELECTED: 0>, True)
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping, Sequence

from .attributes import Attribute, Selected, Source
from .events import EventFacade, Subscription
from .exceptions import UnknownItemTypeError
from .node import Node
from .registry import TypeRegistry, default_registry

logger = logging.getLogger(__name__)


def _is_item_type(value: Any) -> bool:
    return isinstance(value, str) or (isinstance(value, type) and issubclass(value, Node))


class ParentNode(Node):
    """A Node that owns and reconciles an ordered list of child nodes.

    Attributes (use ``get()``):
        items: Copy of the children list, in order. Read-only.
        multiple: True for multi-select, False for single-select. Write-once.
            When unset, the nearest ancestor that sets it decides, and the
            default is single-select.
        selection: The selected child (single-select), the list of selected
            children (multi-select), or None. Read-only.
        active_item: The focused child, or None. Read-only.
        default_item_type: Type name (or Node class) used to build children
            from configuration mappings that carry no ``type`` key.

    Events:
        item_added: Payload ``item``, ``index``. Default action inserts.
        item_removed: Payload ``item``, ``index``. Default action detaches.
    """

    ATTRS = {
        'default_item_type': Attribute(None, validator=_is_item_type),
        'active_item': Attribute(None, read_only=True),
        'multiple': Attribute(
            None, validator=lambda v: isinstance(v, bool), write_once=True,
        ),
        'selection': Attribute(
            None, read_only=True, setter='_compute_selection', getter='_get_selection',
        ),
        'items': Attribute(None, read_only=True, getter='_get_items'),
    }

    registry: TypeRegistry = default_registry

    def __init__(self, config: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        final_config: dict[str, Any] = {}
        if config:
            final_config.update(config)
        final_config.update(kwargs)
        initial_items = final_config.pop('items', None)

        self._items: list[Node] = []
        self._item_subscriptions: dict[str, tuple[Subscription, ...]] = {}
        super().__init__(final_config)

        self.publish('item_added', default_fn=self._def_item_added)
        self.publish('item_removed', default_fn=self._def_item_removed)

        self.after('selection_change', self._after_selection_change)
        self.after('selected_change', self._after_parent_selected_change)
        self.after('multiple_change', self._after_multiple_change)
        self.add_render_hook(self._render_items)

        if initial_items:
            self.add(initial_items)

    # ==================== Special Methods ====================

    def __iter__(self) -> Iterator[Node]:
        """Iterate over children in order."""
        return iter(list(self._items))

    def __contains__(self, item: object) -> bool:
        return any(child is item for child in self._items)

    def _get_items(self, _stored: Any) -> list[Node]:
        return list(self._items)

    def _get_selection(self, stored: Any) -> Node | list[Node] | None:
        return list(stored) if isinstance(stored, list) else stored

    @property
    def items(self) -> list[Node]:
        return list(self._items)

    @property
    def selection(self) -> Node | list[Node] | None:
        return self.get('selection')

    @property
    def active_item(self) -> Node | None:
        return self.get('active_item')

    # ==================== Lookup ====================

    def item(self, index: int) -> Node | None:
        """Get the child at ``index`` (negative counts from the end).

        Returns:
            The child, or None if the index is out of range.
        """
        position = self._normalize_index(index)
        return self._items[position] if position is not None else None

    def index_of(self, item: Node) -> int | None:
        """Position of ``item`` among the children, or None."""
        for i, child in enumerate(self._items):
            if child is item:
                return i
        return None

    def _normalize_index(self, index: Any) -> int | None:
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        if index < 0:
            index = len(self._items) + index
        if index < 0 or index >= len(self._items):
            return None
        return index

    # ==================== Policy ====================

    def is_multiple(self) -> bool:
        """True if multi-select applies to this parent.

        The nearest node, starting from self and walking up, that sets
        ``multiple`` decides.
        """
        node: Node | None = self
        while node is not None:
            if isinstance(node, ParentNode):
                multiple = node.get('multiple')
                if multiple is not None:
                    return multiple
            node = node.parent
        return False

    def _has_ancestor(self, node: Node) -> bool:
        ancestor = self.parent
        while ancestor is not None:
            if ancestor is node:
                return True
            ancestor = ancestor.parent
        return False

    # ==================== Item construction ====================

    def _create_item(self, config: Mapping[str, Any]) -> Node | None:
        """Build a child from a configuration mapping.

        The type comes from ``config['type']`` when present, otherwise from
        ``default_item_type``. Returns None if no factory is found or the
        factory rejects the configuration.
        """
        final_config = dict(config)
        item_type = final_config.pop('type', None) or self.get('default_item_type')

        if isinstance(item_type, type) and issubclass(item_type, Node):
            return item_type(final_config)
        if not isinstance(item_type, str):
            logger.debug("%s: no item type for config %r", self, config)
            return None
        try:
            item = self.registry.create(item_type, final_config)
        except UnknownItemTypeError:
            logger.debug("%s: unknown item type %r", self, item_type)
            return None
        except TypeError as error:
            logger.debug("%s: factory for %r rejected %r: %s", self, item_type, final_config, error)
            return None
        if not isinstance(item, Node):
            logger.debug("%s: factory for %r returned %r", self, item_type, item)
            return None
        return item

    # ==================== Hierarchy ====================

    def add(
        self,
        item: Node | Mapping[str, Any] | Sequence[Node | Mapping[str, Any]],
        index: int | None = None,
    ) -> Node | list[Node] | None:
        """Add a child, a configuration mapping, or a sequence of either.

        If the child already has a parent it is removed from it first.

        Args:
            item: A Node, a mapping (built via ``_create_item``), or a list
                or tuple of those.
            index: Insert position. None, or a value outside
                ``0..len(items)``, appends. For sequences, elements are
                inserted consecutively starting at ``index``.

        Returns:
            The added node; for sequences the list of added nodes. None if
            nothing was added (construction failed or ``item_added`` was
            prevented).

        Example:
            >>> parent.add(Node(label='a'))
            >>> parent.add({'type': 'Tab', 'label': 'b'}, 0)
            >>> parent.add([{'label': 'c'}, {'label': 'd'}])
        """
        if isinstance(item, (list, tuple)):
            added: list[Node] = []
            for element in item:
                position = index + len(added) if index is not None else None
                child = self.add(element, position)
                if child is not None:
                    added.append(child)
            return added or None

        if isinstance(item, Node):
            child = item
        elif isinstance(item, Mapping):
            child = self._create_item(item)
        else:
            logger.debug("%s: cannot add %r", self, item)
            child = None

        if child is None:
            return None
        if child is self or self._has_ancestor(child):
            logger.debug("%s: refusing to add ancestor %r", self, child)
            return None

        if self.fire('item_added', item=child, index=index):
            return child
        return None

    def _def_item_added(self, event: EventFacade) -> bool | None:
        item = event.item
        previous = item.parent
        if previous is not None and item.remove() is None:
            logger.debug("%s: %r could not leave %r", self, item, previous)
            return False

        items = self._items
        index = event.index
        if isinstance(index, int) and not isinstance(index, bool) and 0 <= index <= len(items):
            items.insert(index, item)
        else:
            items.append(item)
            event.index = len(items) - 1

        self._item_subscriptions[item.id] = (
            item.after('selected_change', lambda e: self._after_item_selected_change(item, e)),
            item.after('focused_change', lambda e: self._after_item_focused_change(item, e)),
        )
        item.add_target(self)
        item._set('parent', self)
        if isinstance(item, ParentNode) and item.get('multiple') is None:
            item._reconcile_policy()

        if item.get('selected') > 0:
            self._deselect_others(item)
        self._refresh_selection()
        return None

    def remove(self, index: int | None = None) -> Node | None:
        """Remove the child at ``index``.

        Called without an index, removes this node from its own parent.

        Returns:
            The removed node, or None if the index is out of range or
            ``item_removed`` was prevented.
        """
        if index is None:
            return super().remove()

        position = self._normalize_index(index)
        if position is None:
            return None
        item = self._items[position]
        if self.fire('item_removed', item=item, index=position):
            return item
        return None

    def _def_item_removed(self, event: EventFacade) -> bool | None:
        item = event.item

        # Clear state while still attached so the aggregates see it
        if item.get('focused'):
            item.set('focused', False)
        if item.get('selected'):
            item.set('selected', Selected.UNSELECTED)

        position = self.index_of(item)
        if position is None:
            return False
        del self._items[position]

        for subscription in self._item_subscriptions.pop(item.id, ()):
            subscription.detach()
        item.remove_target(self)
        item._set('parent', None)
        if item in self.content_box:
            self.content_box.remove(item)
        if isinstance(item, ParentNode) and item.get('multiple') is None:
            item._reconcile_policy()

        if self.get('active_item') is item:
            self._set('active_item', None)
        self._refresh_selection()
        return None

    def remove_all(self) -> list[Node] | None:
        """Remove every child.

        Returns:
            The list of removed nodes, or None if none was removed.
        """
        removed: list[Node] = []
        for item in list(self._items):
            index = self.index_of(item)
            if index is not None and self.remove(index) is not None:
                removed.append(item)
        return removed or None

    # ==================== Selection ====================

    def _compute_selection(self, _value: Any) -> Node | list[Node] | None:
        """Setter of ``selection``: always recomputed from the children."""
        items = self._items
        if self.is_multiple():
            if not items:
                return None
            return [item for item in items if item.get('selected') > 0]
        for item in items:
            if item.get('selected') > 0:
                return item
        return None

    def _aggregate_selected(self) -> Selected:
        items = self._items
        if not any(item.get('selected') > 0 for item in items):
            return Selected.UNSELECTED
        if all(item.get('selected') == Selected.SELECTED for item in items):
            return Selected.SELECTED
        return Selected.PARTIAL

    def _refresh_selection(self) -> None:
        source = Source.propagated_from(self)
        self._set('selection', None, source=source)
        self.set('selected', self._aggregate_selected(), source=source)

    def _deselect_others(self, item: Node) -> None:
        """Under single-select, deselect every sibling of ``item``."""
        if self.is_multiple():
            return
        source = Source.propagated_from(self)
        for other in list(self._items):
            if other is not item and other.get('selected') > 0:
                other.set('selected', Selected.UNSELECTED, source=source)

    def _reconcile_policy(self) -> None:
        """Reshape selection after the select policy of this parent changed.

        Descendants inheriting the policy are reconciled first. Under
        single-select only the first selected child stays selected.
        """
        for item in list(self._items):
            if isinstance(item, ParentNode) and item.get('multiple') is None:
                item._reconcile_policy()
        if not self.is_multiple():
            for item in list(self._items):
                if item.get('selected') > 0:
                    self._deselect_others(item)
                    break
        self._refresh_selection()

    def _after_multiple_change(self, event: EventFacade) -> None:
        if event.target is self:
            self._reconcile_policy()

    def _after_item_selected_change(self, item: Node, event: EventFacade) -> None:
        """R1: a child's selected state changed."""
        if event.target is not item or event.source.is_from(self):
            return
        if event.new_value > 0:
            self._deselect_others(item)
        self._refresh_selection()

    def _after_selection_change(self, event: EventFacade) -> None:
        """R2: recompute our own selected state from the selection."""
        if event.target is not self:
            return
        self.set('selected', self._aggregate_selected(), source=Source.propagated_from(self))

    def _after_parent_selected_change(self, event: EventFacade) -> None:
        """R3: push a full select/deselect of this parent down to its children."""
        value = event.new_value
        if event.target is not self or event.source.is_from(self) or not self._items:
            return
        if value == Selected.PARTIAL:
            return

        source = Source.propagated_from(self)
        if value == Selected.SELECTED and not self.is_multiple():
            keep = self.get('selection') or self._items[0]
            for item in list(self._items):
                item.set('selected', Selected.SELECTED if item is keep else Selected.UNSELECTED, source=source)
        else:
            for item in list(self._items):
                item.set('selected', value, source=source)
        self._refresh_selection()

    def _after_item_focused_change(self, item: Node, event: EventFacade) -> None:
        """R4: track the focused child."""
        if event.target is not item:
            return
        if event.new_value:
            self._set('active_item', item)
        elif self.get('active_item') is item:
            self._set('active_item', None)

    # ==================== Rendering ====================

    def _render_items(self) -> None:
        for item in list(self._items):
            item.render(self.content_box)
