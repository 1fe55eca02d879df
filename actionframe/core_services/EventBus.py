from collections import defaultdict
from typing import Any, Callable

from actionframe.core_services.ErrorHandler import ErrorHandler
from actionframe.service_container._Injector import singleton


@singleton
class EventBus:
    """
    In-process observer registry keyed by event name.

    Listeners are a side channel: a failing listener is logged and the
    remaining listeners still run. Nothing raised by a listener reaches
    the code that fired the event.
    """

    def __init__(self):
        self._subscribers: dict[str, list[Callable[[Any], None]]] = defaultdict(list)
        self.errors = ErrorHandler("actionframe.events")

    def subscribe(self, event: str, handler: Callable[[Any], None]):
        self._subscribers[event].append(handler)
        return handler

    def listen(self, event: str):
        """Decorator form of subscribe()."""
        def decorator(handler):
            return self.subscribe(event, handler)
        return decorator

    def forget(self, event: str):
        self._subscribers.pop(event, None)

    def has_listeners(self, event: str) -> bool:
        return bool(self._subscribers.get(event))

    def fire(self, event: str, payload: Any = None):
        for handler in list(self._subscribers.get(event, [])):
            with self.errors.handle_errors(
                    {Exception: f"[Event Error] listener {getattr(handler, '__name__', handler)} for '{event}' failed"}):
                handler(payload)

    # the observer contract names this operation notify()
    notify = fire
