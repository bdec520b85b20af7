"""
AttributeStore: the observable attribute container that models are built on.

The store owns a model's attribute dict, its event emitter, its change cycle
and tracker, and the validation gate. On its own it behaves as a flat
observable store: keys are plain top-level names and every changed key fires
``change:<key>`` followed by one root ``change``. DeepModel wraps a store and
adds path addressing on top of the same machinery.
"""
from contextlib import contextmanager
import logging
from typing import Any, Callable, Dict, Generator, List, Optional

from pathstate.config import DEFAULT_CONFIG, ModelConfig
from pathstate.errors import ValidationRejected
from pathstate.events import EventEmitter, Handler
from pathstate.paths import Path, PathCodec
from pathstate.tracker import ChangeCycle, ChangeTracker

logger = logging.getLogger(__name__)

Validator = Callable[[Dict[str, Any], Dict[str, Any]], Any]
Notifier = Callable[[List[str], Dict[str, Any]], None]

_NO_VALUE = object()


class AttributeStore:
    """Observable attribute storage with change cycles and validation.

    Attributes:
        attributes: The live attribute dict.
        events: EventEmitter that handlers subscribe to.
        cycle: Reentrancy state machine shared by every mutation.
        tracker: Changed map and previous snapshot.
        validator: Optional ``(candidate, options) -> error | None``.
        validation_error: Last rejection, or None after a successful check.
        owner: Object passed to handlers as the model (the store by default).
    """

    def __init__(
        self,
        attributes: Optional[Dict[str, Any]] = None,
        *,
        config: Optional[ModelConfig] = None,
        validator: Optional[Validator] = None,
        owner: Any = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.attributes: Dict[str, Any] = {}
        self.events = EventEmitter(catch_errors=self.config.catch_handler_errors)
        self.cycle = ChangeCycle()
        self.tracker = ChangeTracker(PathCodec(self.config.separator), self.config.equals)
        self.validator = validator
        self.validation_error: Optional[ValidationRejected] = None
        self.owner = owner if owner is not None else self
        self._snapshot_due = False

        if attributes:
            self.set(attributes, silent=True, validate=False)
        self.tracker.reset(self.attributes)

    # === Events ===

    def on(self, event: str, callback: Handler) -> None:
        self.events.on(event, callback)

    def once(self, event: str, callback: Handler) -> None:
        self.events.once(event, callback)

    def off(self, event: Optional[str] = None, callback: Optional[Handler] = None) -> None:
        self.events.off(event, callback)

    def trigger(self, event: str, *args: Any) -> None:
        self.events.trigger(event, *args)

    # === Validation ===

    def check(self, candidate: Dict[str, Any], options: Dict[str, Any]) -> Optional[ValidationRejected]:
        """Run the validator on ``candidate`` unless ``validate=False``.

        Returns:
            None if accepted, otherwise the (falsy) ValidationRejected, which is
            also kept on ``validation_error``.
        """
        if self.validator is None or not options.get("validate", True):
            return None
        error = self.validator(candidate, options)
        if not error:
            self.validation_error = None
            return None
        self.validation_error = ValidationRejected(error, candidate)
        logger.debug(f"Validation rejected change: {error!r}")
        return self.validation_error

    # === Mutation cycle ===

    @contextmanager
    def mutation(self, options: Dict[str, Any]) -> Generator[bool, None, None]:
        """Run a block of writes as one change cycle.

        Nested mutations (from handlers) join the running cycle. Only the
        outermost block dispatches root ``change`` events on exit, unless
        silent. The snapshot and changed map are rebuilt by the first
        record() of the outermost block, so a block that changes nothing
        leaves them as they were. Yields True for the outermost block.
        """
        outermost = self.cycle.enter()
        try:
            if outermost:
                self._snapshot_due = True
            yield outermost
            if outermost and not options.get("silent"):
                self.cycle.flush(lambda: self.trigger("change", self.owner, options))
        finally:
            if outermost:
                self._snapshot_due = False
                self.cycle.finish()

    def record(self, segments: Path, value: Any) -> None:
        """Note a write that changed the tree (call before applying it)."""
        if self._snapshot_due:
            self.tracker.begin(self.attributes)
            self._snapshot_due = False
        self.tracker.record(segments, value)

    def publish(self, changes: List[str], options: Dict[str, Any],
                notify: Optional[Notifier] = None) -> None:
        """Fire the events of a changed batch and queue it for the root ``change``.

        Args:
            changes: Changed paths, in firing order.
            options: Options of the mutating call.
            notify: ``(changes, options)`` callable firing the per-path events;
                defaults to one ``change:<key>`` per top-level key.
        """
        if not changes or options.get("silent"):
            return
        (notify or self._notify_keys)(changes, options)
        self.cycle.queue(changes)

    def _notify_keys(self, changes: List[str], options: Dict[str, Any]) -> None:
        for attr in changes:
            self.trigger(f"change:{attr}", self.owner, self.attributes.get(attr), options)

    # === Flat attribute API ===

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def has(self, key: str) -> bool:
        return self.attributes.get(key) is not None

    def set(self, key: Any, value: Any = _NO_VALUE, **options: Any):
        """Set one key (``set('a', 1)``) or several (``set({'a': 1, 'b': 2})``).

        Keys are top-level names; values are stored as given. With
        ``unset=True`` the keys are deleted instead.

        Returns:
            The owner on success, or a falsy ValidationRejected.
        """
        attrs = key if isinstance(key, dict) else {key: value}
        unset = options.get("unset", False)
        equals = self.config.equals

        candidate = dict(self.attributes)
        for attr, val in attrs.items():
            if unset:
                candidate.pop(attr, None)
            else:
                candidate[attr] = val
        rejected = self.check(candidate, options)
        if rejected is not None:
            return rejected

        with self.mutation(options):
            changes = []
            for attr, val in attrs.items():
                current = self.attributes.get(attr, _NO_VALUE)
                if unset:
                    if current is _NO_VALUE:
                        continue
                    self.record((attr,), None)
                    del self.attributes[attr]
                elif current is _NO_VALUE or not equals(current, val):
                    self.record((attr,), val)
                    self.attributes[attr] = val
                else:
                    continue
                changes.append(attr)
            self.publish(changes, options)
        return self.owner

    def unset(self, key: str, **options: Any):
        return self.set(key, None, unset=True, **options)
