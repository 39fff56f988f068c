"""
Change notifications between the engines and the GUI.

Every successful mutator on the wave engine, camera or lighting controller
emits one event, and the GUI panels listen to resynchronise their widgets.
The application owns a single ``EventBus`` and passes it to the engines;
there is no module-level instance.
"""

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

logger = logging.getLogger(__name__)

Handler = Callable[["Event"], None]


class EventType(Enum):
    """Everything the engines announce."""

    # Wave engine
    PATTERN_CHANGED = auto()
    SPEED_CHANGED = auto()
    ANIMATION_TOGGLED = auto()
    ALL_LIGHTS_TOGGLED = auto()
    ANIMATION_RESET = auto()
    POINT_CHANGED = auto()  # {"kind": "convergence" | "divergence", "index": int}
    BRIGHTNESS_CHANGED = auto()  # {"kind": "low" | "high", "value": float}

    # Camera
    CAMERA_PRESET_CHANGED = auto()
    CAMERA_TELEPORTED = auto()
    CAMERA_TRANSITION_FINISHED = auto()

    # Sky and display
    LIGHTING_PRESET_CHANGED = auto()
    SUN_MOVED = auto()
    SCALE_CIRCLES_TOGGLED = auto()


@dataclass
class Event:
    """One notification: what changed, the new values, and who changed it."""

    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str | None = None


@dataclass(order=True)
class _Subscription:
    # Sorted by (-priority, seq) so higher priority runs first and ties keep
    # subscription order.
    sort_key: tuple[int, int]
    handler: Handler = field(compare=False)


class EventBus:
    """Synchronous publish/subscribe hub with a bounded history."""

    def __init__(self, name: str = "default", max_history: int = 100):
        self.name = name
        self._handlers: dict[EventType | str, list[_Subscription]] = {}
        self._history: deque[Event] = deque(maxlen=max_history)
        self._seq = 0

    def subscribe(self, event_type: EventType | str, callback: Handler, priority: int = 0) -> None:
        """
        Register ``callback`` for ``event_type``.

        Parameters
        ----------
        event_type : EventType | str
            Event to listen for; plain strings work for ad-hoc events
        callback : Handler
            Called with the ``Event`` on every emit
        priority : int
            Higher runs earlier; equal priorities run in subscription order
        """
        self._seq += 1
        subs = self._handlers.setdefault(event_type, [])
        subs.append(_Subscription((-priority, self._seq), callback))
        subs.sort()

    def unsubscribe(self, event_type: EventType | str, callback: Handler) -> bool:
        """Remove the first registration of ``callback``; False if absent."""
        subs = self._handlers.get(event_type, [])
        for sub in subs:
            if sub.handler == callback:
                subs.remove(sub)
                return True
        return False

    def has_subscribers(self, event_type: EventType | str) -> bool:
        return bool(self._handlers.get(event_type))

    def emit(self, event_type: EventType | str, source: str | None = None, **data) -> None:
        """
        Deliver an event to its handlers, in priority order.

        A handler that raises is logged and skipped; the emitter (usually a
        mutator called from a GUI callback or the frame loop) never sees it.
        """
        event = Event(type=event_type, data=data, source=source)
        self._history.append(event)

        for sub in tuple(self._handlers.get(event_type, ())):
            try:
                sub.handler(event)
            except Exception as e:
                name = getattr(sub.handler, "__qualname__", repr(sub.handler))
                logger.error(f"[{self.name}] {name} failed on {event_type}: {e}", exc_info=True)

    def get_history(
        self,
        event_type: EventType | str | None = None,
        limit: int | None = None,
    ) -> list[Event]:
        """Recent events, oldest first, optionally filtered and truncated."""
        events = [e for e in self._history if event_type is None or e.type == event_type]
        return events[-limit:] if limit is not None else events

    def clear_history(self) -> None:
        self._history.clear()


__all__ = [
    "Event",
    "EventBus",
    "EventType",
]
