"""
Event bus for StoryLoom session changes.

Front ends (the debug console, an editor preview) react to the session
without the session knowing about them.

    bus = get_event_bus()
    bus.on(EventType.SCENE_CHANGED, lambda e: redraw(e.data["after"]))
    bus.on_any(audit_log.append)

The SessionController emits; handlers run synchronously, in subscription
order, before emit() returns.
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Session events that can be published."""

    # Lifecycle
    SESSION_STARTED = "session.started"
    SESSION_RESET = "session.reset"
    SESSION_PAUSED = "session.paused"
    SESSION_RESUMED = "session.resumed"

    # Story flow
    CHOICE_RESOLVED = "choice.resolved"
    ITEM_USED = "item.used"
    SCENE_CHANGED = "scene.changed"
    QUEST_STATUS_CHANGED = "quest.status_changed"
    TRIGGER_FIRED = "trigger.fired"

    # Persistence
    STATE_SAVED = "state.saved"
    STATE_LOADED = "state.loaded"

    # Tooling
    DEBUG_COMMAND = "debug.command"


@dataclass
class GameEvent:
    """One published session change; data keys depend on the type."""
    type: EventType
    data: dict = field(default_factory=dict)
    project_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        details = " ".join(f"{k}={v}" for k, v in self.data.items())
        return f"{self.type.value} {details}".rstrip()


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """
    Synchronous publish/subscribe with a bounded history.

    A handler that raises is logged and skipped; emit() never fails
    because of a subscriber.
    """

    def __init__(self, history_limit: int = 100):
        self._handlers: defaultdict[EventType, list[EventHandler]] = defaultdict(list)
        self._catch_all: list[EventHandler] = []
        self._recent: deque[GameEvent] = deque(maxlen=history_limit)

    # ─── Subscriptions ──────────────────────────────────────────

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to one event type. Subscribing twice is a no-op."""
        handlers = self._handlers[event_type]
        if handler not in handlers:
            handlers.append(handler)

    def on_any(self, handler: EventHandler) -> None:
        """Subscribe to every event type."""
        if handler not in self._catch_all:
            self._catch_all.append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def off_any(self, handler: EventHandler) -> None:
        if handler in self._catch_all:
            self._catch_all.remove(handler)

    def clear(self) -> None:
        """Drop every subscription (history is kept)."""
        self._handlers.clear()
        self._catch_all.clear()

    def listener_count(self, event_type: EventType) -> int:
        """Handlers that will see an event of this type, catch-alls included."""
        return len(self._handlers.get(event_type, [])) + len(self._catch_all)

    # ─── Publishing ─────────────────────────────────────────────

    def emit(self, event_type: EventType, project_id: str = "", **data) -> GameEvent:
        """Record the event and hand it to subscribers. Returns the event."""
        event = GameEvent(type=event_type, data=data, project_id=project_id)
        self._recent.append(event)

        for handler in [*self._handlers.get(event_type, []), *self._catch_all]:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler {handler!r} failed on {event_type.value}")
        return event

    def get_history(
        self,
        event_type: EventType | None = None,
        project_id: str | None = None,
    ) -> list[GameEvent]:
        """Recent events, oldest first, optionally filtered."""
        return [
            e for e in self._recent
            if (event_type is None or e.type == event_type)
            and (project_id is None or e.project_id == project_id)
        ]


_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Process-wide bus, created on first use."""
    global _bus
    if _bus is None:
        _bus = EventBus()
    return _bus


def reset_event_bus() -> None:
    """Forget the process-wide bus (tests)."""
    global _bus
    _bus = None
