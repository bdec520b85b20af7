"""
Change tracking for one model: the mutation-cycle state machine, the
changed map, and the previous-attributes snapshot.

A top-level set() runs one cycle:

    IDLE --enter()--> MUTATING --flush()--> DISPATCHING --finish()--> IDLE

Calls made from event handlers while a cycle is running (reentrant calls) do
not start a new cycle. They apply their writes, fire their own path events
and queue a batch; the outermost call drains the queue in flush(), firing one
root ``change`` per drain until handlers stop queueing new batches.
"""
from collections import deque
from enum import Enum
import logging
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple, Union

from pathstate.flatten import to_flat_paths
from pathstate.paths import Path, PathCodec
from pathstate.tree import MISSING, exists, set_value, walk
from pathstate.values import copy_tree

logger = logging.getLogger(__name__)


class CyclePhase(Enum):
    IDLE = "idle"
    MUTATING = "mutating"
    DISPATCHING = "dispatching"


class ChangeCycle:
    """Reentrancy guard and pending-notification queue."""

    def __init__(self):
        self.phase = CyclePhase.IDLE
        self._pending: Deque[Tuple[str, ...]] = deque()

    @property
    def active(self) -> bool:
        return self.phase is not CyclePhase.IDLE

    @property
    def pending(self) -> bool:
        return bool(self._pending)

    def enter(self) -> bool:
        """Start a cycle if none is running. Returns True for the outermost call."""
        if self.phase is CyclePhase.IDLE:
            self.phase = CyclePhase.MUTATING
            return True
        return False

    def queue(self, paths) -> None:
        """Queue a batch of changed paths awaiting a root ``change`` event."""
        self._pending.append(tuple(paths))

    def flush(self, emit: Callable[[], None]) -> int:
        """Emit one root event per drain of the queue until it stays empty.

        Each iteration empties the queue before calling ``emit``; only batches
        queued by handlers during that emit cause another iteration.

        Returns:
            Number of root events emitted.
        """
        self.phase = CyclePhase.DISPATCHING
        emitted = 0
        while self._pending:
            batches = len(self._pending)
            self._pending.clear()
            logger.debug(f"Dispatching root change for {batches} pending batch(es)")
            emit()
            emitted += 1
        return emitted

    def finish(self) -> None:
        """Return to IDLE, discarding anything still queued."""
        self._pending.clear()
        self.phase = CyclePhase.IDLE


class ChangeTracker:
    """Changed map and previous-attributes snapshot of one model.

    Attributes:
        changed: Nested tree of values written since the current top-level
            cycle began (``None`` for removed paths).
        previous_attributes: Copy of the tree taken when that cycle began, or
            None before the first cycle.
    """

    def __init__(self, codec: PathCodec, equals: Callable[[Any, Any], bool]):
        self.codec = codec
        self.equals = equals
        self.changed: Dict[str, Any] = {}
        self.previous_attributes: Optional[Dict[str, Any]] = None

    def begin(self, attributes: Dict[str, Any]) -> None:
        """Snapshot ``attributes`` and clear the changed map (outermost call only)."""
        self.previous_attributes = copy_tree(attributes)
        self.changed = {}

    def reset(self, attributes: Dict[str, Any]) -> None:
        """Forget every change: the snapshot becomes the current tree."""
        self.begin(attributes)

    def record(self, segments: Path, value: Any) -> None:
        set_value(self.changed, segments, copy_tree(value))

    def diff(self, before: Dict[str, Any], after: Dict[str, Any]) -> List[str]:
        """Flattened paths whose values differ between two trees.

        A path present on one side only counts as different. Paths of
        ``after`` come first, in its order, then paths only in ``before``.
        """
        sep = self.codec.separator
        old = to_flat_paths(before, sep)
        new = to_flat_paths(after, sep)
        paths = []
        for path, value in new.items():
            if path not in old or not self.equals(old[path], value):
                paths.append(path)
        paths.extend(path for path in old if path not in new)
        return paths

    def changed_attributes(self, reference: Dict[str, Any],
                           diff: Optional[Dict[str, Any]] = None) -> Union[Dict[str, Any], bool]:
        """Flat map of changed paths, or False when there are none.

        Args:
            reference: Tree that ``diff`` is compared against.
            diff: Optional candidate attributes (nested or flat). When given,
                returns the entries of ``diff`` whose values differ from
                ``reference``; otherwise returns the flattened changed map.
        """
        sep = self.codec.separator
        if diff is None:
            return to_flat_paths(self.changed, sep) if self.changed else False

        changed = {}
        for path, value in to_flat_paths(diff, sep).items():
            current = walk(reference, self.codec.parse(path))
            if current is MISSING or not self.equals(current, value):
                changed[path] = value
        return changed or False

    def has_changed(self, path=None) -> bool:
        if path is None:
            return bool(self.changed)
        return exists(self.changed, self.codec.parse(path))
