# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Two-phase custom events with default actions and bubbling.

Every event goes through two moments:

- **on**: subscribers are notified before the default action runs. Any of
  them may call ``event.prevent_default()`` to veto it.
- **after**: subscribers are notified once the default action has run.

Events bubble from the firing target to the targets registered with
``add_target()``, so a parent can observe the events of its children.

Example:
    >>> target = EventTarget()
    >>> target.publish('saved', default_fn=lambda e: print('default'))
    >>> target.on('saved', lambda e: print('on'))
    >>> target.after('saved', lambda e: print('after'))
    >>> target.fire('saved')
    on
    default
    after
    True
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

logger = logging.getLogger(__name__)

EventCallback = Callable[['EventFacade'], Any]

ON = 'on'
AFTER = 'after'


class EventFacade:
    """The object handed to every subscriber of an event.

    Payload passed to ``fire()`` is exposed as plain attributes
    (``event.item``, ``event.new_value``, ...).
    """

    def __init__(self, event_type: str, target: EventTarget, **payload: Any) -> None:
        self.type = event_type
        self.target = target
        self.current_target = target
        self.prevented = False
        self.stopped = False
        self.__dict__.update(payload)

    def __repr__(self) -> str:
        return f"EventFacade({self.type!r}, target={self.target!r})"

    def prevent_default(self) -> None:
        """Veto the default action. Only meaningful in the "on" moment."""
        self.prevented = True

    def stop_propagation(self) -> None:
        """Stop bubbling past the current target."""
        self.stopped = True


class Subscription:
    """Handle returned by ``on()``/``after()``, used to detach the callback."""

    __slots__ = ('owner', 'event_type', 'phase', 'callback', 'active')

    def __init__(
        self,
        owner: EventTarget,
        event_type: str,
        phase: str,
        callback: EventCallback,
    ) -> None:
        self.owner = owner
        self.event_type = event_type
        self.phase = phase
        self.callback = callback
        self.active = True

    def __repr__(self) -> str:
        return f"Subscription({self.phase}:{self.event_type})"

    def detach(self) -> None:
        """Remove the callback. Detaching twice is a no-op."""
        self.owner._detach(self)


class _Publication:
    __slots__ = ('default_fn', 'prevented_fn', 'bubbles')

    def __init__(
        self,
        default_fn: EventCallback | None,
        prevented_fn: EventCallback | None,
        bubbles: bool,
    ) -> None:
        self.default_fn = default_fn
        self.prevented_fn = prevented_fn
        self.bubbles = bubbles


class EventTarget:
    """Mixin providing publish/fire/on/after and event bubbling."""

    def __init__(self) -> None:
        self._subscribers: dict[tuple[str, str], list[Subscription]] = {}
        self._publications: dict[str, _Publication] = {}
        self._bubble_targets: list[EventTarget] = []

    # ==================== Subscription ====================

    def publish(
        self,
        event_type: str,
        default_fn: EventCallback | None = None,
        prevented_fn: EventCallback | None = None,
        bubbles: bool = True,
    ) -> None:
        """Declare an event and its default action.

        Args:
            event_type: Name of the event.
            default_fn: Called between the "on" and "after" moments unless
                an "on" subscriber prevented it. Returning ``False``
                explicitly reports failure: ``fire()`` then returns False
                and the "after" moment is skipped.
            prevented_fn: Called instead of default_fn when prevented.
            bubbles: If False, the event is not propagated to targets.
        """
        self._publications[event_type] = _Publication(default_fn, prevented_fn, bubbles)

    def on(self, event_type: str, callback: EventCallback) -> Subscription:
        """Subscribe to the "on" moment (before the default action)."""
        return self._subscribe(event_type, ON, callback)

    def after(self, event_type: str, callback: EventCallback) -> Subscription:
        """Subscribe to the "after" moment (after the default action)."""
        return self._subscribe(event_type, AFTER, callback)

    def _subscribe(self, event_type: str, phase: str, callback: EventCallback) -> Subscription:
        subscription = Subscription(self, event_type, phase, callback)
        self._subscribers.setdefault((event_type, phase), []).append(subscription)
        return subscription

    def _detach(self, subscription: Subscription) -> None:
        subscription.active = False
        subscribers = self._subscribers.get((subscription.event_type, subscription.phase))
        if subscribers and subscription in subscribers:
            subscribers.remove(subscription)

    # ==================== Bubbling ====================

    def add_target(self, target: EventTarget) -> None:
        """Make events fired by this object bubble to ``target``."""
        if target is not self and target not in self._bubble_targets:
            self._bubble_targets.append(target)

    def remove_target(self, target: EventTarget) -> None:
        """Stop bubbling events to ``target``."""
        if target in self._bubble_targets:
            self._bubble_targets.remove(target)

    def _iter_bubble_chain(self) -> Iterator[EventTarget]:
        """Yield self and every bubble target, each at most once."""
        seen: set[int] = set()
        pending: list[EventTarget] = [self]
        while pending:
            current = pending.pop(0)
            if id(current) in seen:
                continue
            seen.add(id(current))
            yield current
            pending.extend(current._bubble_targets)

    # ==================== Firing ====================

    def fire(self, event_type: str, **payload: Any) -> bool:
        """Fire an event through both moments.

        Args:
            event_type: Name of the event.
            **payload: Exposed as attributes of the EventFacade.

        Returns:
            False if the default action was prevented or reported failure,
            True otherwise.
        """
        publication = self._publications.get(event_type)
        bubbles = publication.bubbles if publication is not None else True
        event = EventFacade(event_type, self, **payload)

        self._notify(event, ON, bubbles)

        if event.prevented:
            logger.debug("%s: default action of %r prevented", self, event_type)
            if publication is not None and publication.prevented_fn is not None:
                publication.prevented_fn(event)
            return False

        if publication is not None and publication.default_fn is not None:
            if publication.default_fn(event) is False:
                logger.debug("%s: default action of %r failed", self, event_type)
                return False

        event.stopped = False
        self._notify(event, AFTER, bubbles)
        return True

    def _notify(self, event: EventFacade, phase: str, bubbles: bool) -> None:
        chain = self._iter_bubble_chain() if bubbles else iter((self,))
        for current in chain:
            event.current_target = current
            # Snapshot: callbacks may subscribe or detach while dispatching
            for subscription in list(current._subscribers.get((event.type, phase), ())):
                if subscription.active:
                    subscription.callback(event)
            if event.stopped:
                break
        event.current_target = self
