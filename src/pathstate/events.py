"""
Name-keyed event emitter used as the observable base of every store.

Handlers subscribe to an event name and are called synchronously, in
subscription order, with the positional arguments passed to trigger(). The
special event ``'all'`` receives every event, with the event name prepended.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]

ALL_EVENTS = "all"


class EventEmitter:
    """Synchronous publish/subscribe keyed by event name.

    Thread safety: Not thread-safe (all operations expected on one thread).
    """

    def __init__(self, catch_errors: bool = False):
        """
        Args:
            catch_errors: Log handler exceptions and keep dispatching instead
                of propagating them to the caller of trigger().
        """
        self._handlers: Dict[str, List[Handler]] = {}
        self._catch_errors = catch_errors

    def on(self, event: str, callback: Handler) -> None:
        """Subscribe ``callback`` to ``event`` (subscribing twice is a no-op)."""
        handlers = self._handlers.setdefault(event, [])
        if callback not in handlers:
            handlers.append(callback)

    def once(self, event: str, callback: Handler) -> None:
        """Subscribe ``callback`` for the next ``event`` only."""
        def wrapper(*args):
            self.off(event, wrapper)
            return callback(*args)
        wrapper.__wrapped__ = callback
        self.on(event, wrapper)

    def off(self, event: Optional[str] = None, callback: Optional[Handler] = None) -> None:
        """Unsubscribe.

        ``off()`` removes everything, ``off(event)`` every handler of one event,
        ``off(callback=cb)`` one handler from every event, and
        ``off(event, cb)`` one handler from one event.
        """
        events = [event] if event is not None else list(self._handlers)
        for name in events:
            if callback is None:
                self._handlers.pop(name, None)
                continue
            handlers = self._handlers.get(name)
            if not handlers:
                continue
            handlers[:] = [h for h in handlers if h != callback and getattr(h, "__wrapped__", None) != callback]
            if not handlers:
                del self._handlers[name]

    def has_listeners(self, event: str) -> bool:
        return bool(self._handlers.get(event)) or bool(self._handlers.get(ALL_EVENTS))

    def trigger(self, event: str, *args: Any) -> None:
        """Call the handlers of ``event``, then the ``'all'`` handlers."""
        for callback in list(self._handlers.get(event, ())):
            self._call(event, callback, args)
        if event != ALL_EVENTS:
            for callback in list(self._handlers.get(ALL_EVENTS, ())):
                self._call(event, callback, (event,) + args)

    def _call(self, event: str, callback: Handler, args: tuple) -> None:
        if not self._catch_errors:
            callback(*args)
            return
        try:
            callback(*args)
        except Exception as e:
            logger.warning(f"Error in {event!r} handler {callback!r}: {e}")
