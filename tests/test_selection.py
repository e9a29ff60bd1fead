# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for selection, aggregate selected state and active item."""

from genro_composite import Node, ParentNode, Selected, Source


def make_parent(count, **config):
    parent = ParentNode(**config)
    children = parent.add([Node() for _ in range(count)])
    return parent, children


class TestPolicy:
    """Tests for the multiple flag and its inheritance."""

    def test_default_is_single_select(self):
        """Test a parent without multiple anywhere is single-select."""
        assert ParentNode().is_multiple() is False
        assert ParentNode().get('multiple') is None

    def test_multiple_is_write_once(self):
        """Test multiple cannot change once set."""
        parent = ParentNode(multiple=True)
        assert parent.set('multiple', False) is False
        assert parent.get('multiple') is True

        later = ParentNode()
        assert later.set('multiple', True) is True
        assert later.set('multiple', False) is False

    def test_multiple_validator(self):
        """Test multiple only accepts booleans."""
        parent = ParentNode()
        assert parent.set('multiple', 1) is False
        assert parent.get('multiple') is None

    def test_inherited_from_ancestor(self):
        """Test a nested parent without multiple follows its ancestors."""
        top = ParentNode(multiple=True)
        group = top.add(ParentNode())
        inner = group.add(ParentNode())
        override = top.add(ParentNode(multiple=False))

        assert group.is_multiple() is True
        assert inner.is_multiple() is True
        assert override.is_multiple() is False

    def test_adopted_group_follows_new_multiple(self):
        """Test a group without multiple reshapes its selection under a multi-select parent."""
        group, (a, b) = make_parent(2)
        b.set('selected', 1)
        assert group.selection is b

        top = ParentNode(multiple=True)
        top.add(group)

        assert group.is_multiple() is True
        assert group.selection == [b]

    def test_moved_group_follows_single_select(self):
        """Test an empty multi-select selection becomes None under a single-select parent."""
        multi = ParentNode(multiple=True)
        group = multi.add(ParentNode())
        group.add([Node(), Node()])
        assert group.selection == []

        single = ParentNode(multiple=False)
        single.add(group)

        assert group.is_multiple() is False
        assert group.selection is None

    def test_detached_group_falls_back_to_single_select(self):
        """Test removing a group from a multi-select parent restores the default policy."""
        top = ParentNode(multiple=True)
        group = top.add(ParentNode())
        group.add([Node(), Node()])

        top.remove(0)

        assert group.is_multiple() is False
        assert group.selection is None

    def test_late_multiple_reshapes_selection(self):
        """Test writing multiple after construction recomputes selection."""
        parent, (a, b) = make_parent(2)
        a.set('selected', 1)

        assert parent.set('multiple', True) is True
        assert parent.selection == [a]

        b.set('selected', 1)
        assert parent.selection == [a, b]

    def test_inherited_single_select_keeps_first_selected(self):
        """Test a group that starts inheriting single-select keeps one selected child."""
        top = ParentNode(multiple=True)
        middle = top.add(ParentNode())
        group = middle.add(ParentNode())
        a, b, c = group.add([Node(), Node(), Node()])
        b.set('selected', 1)
        c.set('selected', 1)
        assert group.selection == [b, c]

        assert middle.set('multiple', False) is True

        assert group.is_multiple() is False
        assert [child.selected for child in (a, b, c)] == [0, 1, 0]
        assert group.selection is b
        assert group.selected == Selected.PARTIAL


class TestSingleSelect:
    """Tests for single-select parents."""

    def test_select_child(self):
        """Test selecting a child sets selection to it."""
        parent, (a, b) = make_parent(2)
        a.set('selected', 1)
        assert parent.selection is a
        assert parent.selected == Selected.PARTIAL

    def test_exclusivity(self):
        """Test selecting a second child deselects the first."""
        parent, (a, b) = make_parent(2)
        a.set('selected', 1)
        b.set('selected', 1)
        assert a.selected == Selected.UNSELECTED
        assert b.selected == Selected.SELECTED
        assert parent.selection is b

    def test_deselection_tagged_with_parent(self):
        """Test the parent tags the deselection it performs."""
        events = []
        parent, (a, b) = make_parent(2)
        a.set('selected', 1)
        a.after('selected_change', events.append)
        b.set('selected', 1)

        assert len(events) == 1
        assert events[0].new_value == 0
        assert events[0].source == Source.propagated_from(parent)

    def test_deselect_clears_selection(self):
        """Test deselecting the selected child empties selection."""
        parent, (a, b) = make_parent(2)
        a.set('selected', 1)
        a.set('selected', 0)
        assert parent.selection is None
        assert parent.selected == Selected.UNSELECTED

    def test_only_child_selected_is_full(self):
        """Test a single selected child out of one makes the parent selected."""
        parent, (a,) = make_parent(1)
        a.set('selected', 1)
        assert parent.selected == Selected.SELECTED

    def test_add_selected_child_takes_over(self):
        """Test adding an already selected child deselects the current one."""
        parent, (a, b) = make_parent(2)
        a.set('selected', 1)
        node = parent.add(Node(selected=1))
        assert parent.selection is node
        assert a.selected == Selected.UNSELECTED

    def test_selection_events(self):
        """Test selection_change reports the recomputed selection."""
        seen = []
        parent, (a, b) = make_parent(2)
        parent.after('selection_change', lambda e: seen.append(e.new_value))
        a.set('selected', 1)
        b.set('selected', 1)
        assert seen == [a, b]


class TestMultiSelect:
    """Tests for multi-select parents."""

    def test_selection_in_items_order(self):
        """Test selection lists selected children in items order."""
        parent, (a, b, c) = make_parent(3, multiple=True)
        c.set('selected', 1)
        a.set('selected', 1)
        assert parent.selection == [a, c]
        assert b.selected == Selected.UNSELECTED

    def test_empty_selection(self):
        """Test no selected child gives an empty list."""
        parent, children = make_parent(2, multiple=True)
        assert parent.selection == []
        assert ParentNode(multiple=True).selection is None

    def test_roll_up(self):
        """Test the aggregate follows all, some and none."""
        parent, (a, b, c) = make_parent(3, multiple=True)
        for child in (a, b, c):
            child.set('selected', 1)
        assert parent.selected == Selected.SELECTED

        a.set('selected', 0)
        assert parent.selected == Selected.PARTIAL

        b.set('selected', 0)
        c.set('selected', 0)
        assert parent.selected == Selected.UNSELECTED
        assert parent.selection == []

    def test_selection_is_a_copy(self):
        """Test mutating the returned selection list does not change the parent."""
        parent, (a, b) = make_parent(2, multiple=True)
        a.set('selected', 1)

        parent.selection.append(b)
        parent.get('selection').clear()

        assert parent.get('selection') == [a]
        assert parent.selection == [a]
        assert b.selected == Selected.UNSELECTED

    def test_aggregate_follows_new_children(self):
        """Test adding an unselected child makes a full parent partial."""
        parent, (a,) = make_parent(1, multiple=True)
        a.set('selected', 1)
        assert parent.selected == Selected.SELECTED
        parent.add(Node())
        assert parent.selected == Selected.PARTIAL

    def test_aggregate_follows_removed_children(self):
        """Test removing the only unselected child makes the parent full."""
        parent, (a, b) = make_parent(2, multiple=True)
        a.set('selected', 1)
        assert parent.selected == Selected.PARTIAL
        parent.remove(1)
        assert parent.selected == Selected.SELECTED


class TestNested:
    """Tests for parents nested inside parents."""

    def test_multi_group_under_single_parent(self):
        """Test a partially selected group reports partial upward only."""
        top = ParentNode(multiple=False)
        group = top.add(ParentNode(multiple=True))
        a, b, c = group.add([Node(), Node(), Node()])

        a.set('selected', 1)
        c.set('selected', 1)

        assert group.selection == [a, c]
        assert group.selected == Selected.PARTIAL
        assert top.selection is group
        assert [child.selected for child in (a, b, c)] == [1, 0, 1]

    def test_group_roll_up_reaches_grandparent(self):
        """Test a fully selected group is reported to the grandparent."""
        top = ParentNode(multiple=True)
        group, other = top.add([ParentNode(), Node()])
        a, b = group.add([Node(), Node()])

        a.set('selected', 1)
        b.set('selected', 1)
        assert group.selected == Selected.SELECTED
        assert top.selection == [group]
        assert top.selected == Selected.PARTIAL

        other.set('selected', 1)
        assert top.selected == Selected.SELECTED

    def test_cascade_from_group_toggle(self):
        """Test selecting a group selects every child of it."""
        top = ParentNode(multiple=True)
        group = top.add(ParentNode())
        a, b, c = group.add([Node(), Node(), Node()])

        group.set('selected', 1)

        assert [child.selected for child in (a, b, c)] == [1, 1, 1]
        assert group.selection == [a, b, c]
        assert group.selected == Selected.SELECTED
        assert top.selection == [group]
        assert top.selected == Selected.SELECTED

    def test_cascade_reaches_grandchildren_without_partial(self):
        """Test a cascade selects nested groups without a partial step."""
        top = ParentNode(multiple=True)
        group = top.add(ParentNode())
        leaf = group.add(Node())
        subgroup = group.add(ParentNode())
        x, y = subgroup.add([Node(), Node()])
        seen = []
        subgroup.after(
            'selected_change',
            lambda e: seen.append(e.new_value) if e.target is subgroup else None,
        )

        group.set('selected', 1)

        assert leaf.selected == Selected.SELECTED
        assert x.selected == Selected.SELECTED and y.selected == Selected.SELECTED
        assert seen == [Selected.SELECTED]
        assert group.selected == Selected.SELECTED

    def test_cascade_deselect(self):
        """Test deselecting a group deselects every child."""
        parent, (a, b) = make_parent(2, multiple=True)
        a.set('selected', 1)
        b.set('selected', 1)

        parent.set('selected', 0)
        assert [a.selected, b.selected] == [0, 0]
        assert parent.selection == []

    def test_partial_does_not_cascade(self):
        """Test setting a group partial leaves its children alone."""
        parent, (a, b) = make_parent(2, multiple=True)
        assert parent.set('selected', 2) is True
        assert [a.selected, b.selected] == [0, 0]
        assert parent.selected == Selected.PARTIAL

    def test_cascade_single_select_keeps_one(self):
        """Test a single-select group selects one child on cascade."""
        parent, (a, b, c) = make_parent(3)
        parent.set('selected', 1)
        assert [a.selected, b.selected, c.selected] == [1, 0, 0]
        assert parent.selection is a
        assert parent.selected == Selected.PARTIAL

        b.set('selected', 1)
        parent.set('selected', 0)
        parent.set('selected', 1)
        assert parent.selection is a

    def test_cascade_single_select_keeps_current(self):
        """Test the currently selected child survives a single-select cascade."""
        parent, (a, b) = make_parent(2)
        b.set('selected', 1)
        parent.set('selected', 0)
        b.set('selected', 1)
        assert parent.selected == Selected.PARTIAL
        parent.set('selected', 1)
        assert [a.selected, b.selected] == [0, 1]

    def test_grandchild_events_ignored_by_grandparent(self):
        """Test a grandchild change only reaches the grandparent via its group."""
        top = ParentNode(multiple=True)
        group = top.add(ParentNode())
        sibling = top.add(Node())
        x, y = group.add([Node(), Node()])

        x.set('selected', 1)
        assert top.selection == [group]
        assert sibling.selected == Selected.UNSELECTED


class TestActiveItem:
    """Tests for active_item tracking."""

    def test_focus_sets_active_item(self):
        """Test the focused child becomes the active item."""
        parent, (a, b) = make_parent(2)
        a.set('focused', True)
        assert parent.active_item is a
        b.set('focused', True)
        assert parent.active_item is b

    def test_blur_of_other_child_keeps_active_item(self):
        """Test a non-active child losing focus changes nothing."""
        parent, (a, b) = make_parent(2)
        a.set('focused', True)
        b.set('focused', True)
        a.set('focused', False)
        assert parent.active_item is b

    def test_blur_of_active_item_clears(self):
        """Test the active child losing focus clears active_item."""
        parent, (a, b) = make_parent(2)
        a.set('focused', True)
        a.set('focused', False)
        assert parent.active_item is None

    def test_active_item_is_read_only(self):
        """Test active_item cannot be set from outside."""
        parent, (a,) = make_parent(1)
        assert parent.set('active_item', a) is False

    def test_focus_bubbles_to_parent(self):
        """Test child focus events are observable through the parent."""
        seen = []
        parent, (a,) = make_parent(1)
        parent.after('focused_change', lambda e: seen.append(e.target))
        a.set('focused', True)
        assert seen == [a]


class TestRemovalClearsState:
    """Tests for state cleanup on removal."""

    def test_remove_selected_focused_child(self):
        """Test removing the active, selected child clears derived state."""
        parent, (a, b) = make_parent(2)
        a.set('selected', 1)
        a.set('focused', True)

        assert parent.remove(0) is a
        assert parent.active_item is None
        assert parent.selection is None
        assert parent.selected == Selected.UNSELECTED
        assert a not in parent.items
        assert a.selected == Selected.UNSELECTED
        assert a.focused is False

    def test_remove_from_multi_selection(self):
        """Test a removed child leaves the multi selection."""
        parent, (a, b, c) = make_parent(3, multiple=True)
        a.set('selected', 1)
        b.set('selected', 1)
        parent.remove(0)
        assert parent.selection == [b]
        assert parent.selected == Selected.PARTIAL

    def test_move_clears_state_in_old_parent(self):
        """Test moving a selected child updates the old parent."""
        first, (a,) = make_parent(1)
        second = ParentNode()
        a.set('selected', 1)
        second.add(a)
        assert first.selection is None
        assert first.selected == Selected.UNSELECTED
        assert second.selection is None

    def test_remove_all_resets(self):
        """Test remove_all leaves an empty, unselected parent."""
        parent, children = make_parent(3, multiple=True)
        for child in children:
            child.set('selected', 1)
        parent.remove_all()
        assert parent.selection is None
        assert parent.selected == Selected.UNSELECTED
