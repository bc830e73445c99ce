"""
Outbound reward signals for the mission system.

The engine calls `emit` only after a transition is committed. Delivery is
fire-and-forget: a failing subscriber is logged and never propagates back
into the engine. Inside a request the emitter is a `DeferredEmitter`, which
queues each signal on the response's background tasks so subscribers run
after the response is sent.
"""
import logging
from typing import Callable, List

from fastapi import BackgroundTasks, Depends

logger = logging.getLogger(__name__)

CHECKIN = "checkin"
MATCH_WIN = "match_win"
EVENT_TYPES = frozenset({CHECKIN, MATCH_WIN})

Handler = Callable[[str, int], None]


class EventEmitter:
    def __init__(self) -> None:
        self._handlers: List[Handler] = []

    def subscribe(self, handler: Handler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: Handler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, event: str, user_id: int) -> None:
        if event not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event}")
        for handler in list(self._handlers):
            try:
                handler(event, user_id)
            except Exception:
                logger.exception("Reward signal %s for user %s was dropped", event, user_id)


def log_signal(event: str, user_id: int) -> None:
    """Default subscriber: the mission system consumes these from the log stream."""
    logger.info("reward signal %s -> user %s", event, user_id)


class DeferredEmitter(EventEmitter):
    """Queues signals for `target` instead of delivering them in-line."""

    def __init__(self, target: EventEmitter, tasks: BackgroundTasks) -> None:
        super().__init__()
        self.target = target
        self.tasks = tasks

    def subscribe(self, handler: Handler) -> None:
        self.target.subscribe(handler)

    def unsubscribe(self, handler: Handler) -> None:
        self.target.unsubscribe(handler)

    def emit(self, event: str, user_id: int) -> None:
        if event not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event}")
        self.tasks.add_task(self.target.emit, event, user_id)


emitter = EventEmitter()
emitter.subscribe(log_signal)


def get_signal_bus() -> EventEmitter:
    """Dependency returning the process-wide emitter."""
    return emitter


def get_event_emitter(
    background_tasks: BackgroundTasks,
    bus: EventEmitter = Depends(get_signal_bus)
) -> EventEmitter:
    """Per-request emitter that delivers after the response goes out."""
    return DeferredEmitter(bus, background_tasks)
