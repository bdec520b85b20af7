"""
DeepModel: an observable model whose attributes are addressed by path.

Keys passed to get/set/has/unset may be paths into nested dicts and lists:

    >>> model = DeepModel({'user': {'name': {'first': 'Sterling'}}, 'spies': [{'name': 'Lana'}]})
    >>> model.get('user.name.first')
    'Sterling'
    >>> model.get('spies[0].name')
    'Lana'

Every change fires ``change:<path>`` for the changed path, then a wildcard
``change:<ancestor>.*`` for each ancestor (deepest first, once per call), and
the outermost call finishes with a single root ``change``.

The model is a thin path-aware layer over an AttributeStore, which owns the
attribute dict, the event emitter, the change cycle and the validation gate.
"""
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Union

from pathstate.config import DEFAULT_CONFIG, ModelConfig
from pathstate.errors import InvalidPathError, NotAnArrayError, ValidationRejected
from pathstate.events import Handler
from pathstate.flatten import deep_merge, iter_paths, to_flat_paths
from pathstate.paths import Path, PathCodec, PathLike
from pathstate.store import AttributeStore
from pathstate.tree import MISSING, exists, get_value, set_value, walk
from pathstate.values import ValueKind, classify, copy_tree

logger = logging.getLogger(__name__)

_NO_VALUE = object()


class _Write(NamedTuple):
    """One assignment (or deletion) requested by a set() call."""
    segments: Path
    path: str      # canonical string form of segments
    value: Any
    unset: bool


class DeepModel:
    """Observable attribute model with nested path addressing.

    Class attributes:
        defaults: Attributes merged (deeply) under the constructor attributes.
            May also be a method returning a dict.
        id_attribute: Attribute exposed as ``model.id``.
        config: ModelConfig used when none is passed to the constructor.

    Events (handler arguments):
        ``change:<path>`` and ``change:<path>.*`` -> (model, value, options)
        ``change`` -> (model, options)
        ``add:<path>`` / ``remove:<path>`` -> (model, element)
        ``all`` -> (event_name, *args) for every event above
    """
    defaults: Dict[str, Any] = {}
    id_attribute: str = "id"
    config: ModelConfig = DEFAULT_CONFIG

    def __init__(self, attributes: Optional[Dict[str, Any]] = None, *, config: Optional[ModelConfig] = None):
        """
        Args:
            attributes: Initial attributes, nested and/or keyed by path.
            config: Per-instance configuration (separator, equality, ...).

        Raises:
            TypeError: if ``attributes`` is not a dict.
        """
        if attributes is None:
            attributes = {}
        if not isinstance(attributes, dict):
            raise TypeError(f"attributes must be a dict, got {type(attributes).__name__}")

        self.config = config or type(self).config
        self._codec = PathCodec(self.config.separator)
        self._store = AttributeStore(config=self.config, validator=self._run_validate, owner=self)

        defaults = self.defaults() if callable(self.defaults) else self.defaults
        self.set(deep_merge(defaults or {}, attributes), silent=True, validate=False)
        self._store.tracker.reset(self.attributes)

    def __repr__(self):
        return f"{type(self).__name__}({self.attributes!r})"

    # === State views ===

    @property
    def store(self) -> AttributeStore:
        return self._store

    @property
    def codec(self) -> PathCodec:
        return self._codec

    @property
    def attributes(self) -> Dict[str, Any]:
        """The live attribute tree (mutate it only through the model)."""
        return self._store.attributes

    @property
    def changed(self) -> Dict[str, Any]:
        """Nested map of values written since the current cycle began."""
        return self._store.tracker.changed

    @property
    def validation_error(self) -> Optional[ValidationRejected]:
        return self._store.validation_error

    @property
    def id(self) -> Any:
        return self.get(self.id_attribute)

    # === Events ===

    def on(self, event: str, callback: Handler) -> None:
        self._store.on(event, callback)

    def once(self, event: str, callback: Handler) -> None:
        self._store.once(event, callback)

    def off(self, event: Optional[str] = None, callback: Optional[Handler] = None) -> None:
        self._store.off(event, callback)

    def trigger(self, event: str, *args: Any) -> None:
        self._store.trigger(event, *args)

    # === Validation ===

    def validate(self, attributes: Dict[str, Any], options: Dict[str, Any]) -> Any:
        """Return an error (anything truthy) to reject ``attributes``.

        Override in a subclass, or assign a ``(attributes, options)`` callable
        to ``model.validate``. The default accepts everything.
        """
        return None

    def _run_validate(self, attributes: Dict[str, Any], options: Dict[str, Any]) -> Any:
        return self.validate(attributes, options)

    def is_valid(self) -> bool:
        return self._store.check(copy_tree(self.attributes), {}) is None

    # === Reading ===

    def get(self, path: PathLike, default: Any = None) -> Any:
        return get_value(self.attributes, self._codec.parse(path), default)

    def has(self, path: PathLike) -> bool:
        """True if the path holds a value other than None."""
        return self.get(path) is not None

    def to_json(self) -> Dict[str, Any]:
        return copy_tree(self.attributes)

    # === Writing ===

    def set(self, key: Any, value: Any = _NO_VALUE, **options: Any) -> Union['DeepModel', ValidationRejected]:
        """Set attributes by path.

        ``set('user.name', {'first': 'Lana'})`` replaces the subtree at the
        literal path. ``set({'user': {'name': {'first': 'Lana'}}})`` is flattened
        first, so each leaf is written on its own and siblings are kept.

        Options (keyword arguments):
            silent: Apply the change without firing events.
            unset: Delete the given paths instead of assigning them.
            validate: Pass False to skip validation.
            Anything else is forwarded to handlers in the options dict.

        Returns:
            The model, or a falsy ValidationRejected when validation fails (in
            which case nothing was changed and no event fired).
        """
        if key is None:
            return self
        if isinstance(key, DeepModel):
            key = key.to_json()

        unset = bool(options.get("unset"))
        if isinstance(key, dict):
            if value is not _NO_VALUE:
                raise TypeError("set() with a dict takes options as keyword arguments only")
            flat = to_flat_paths(key, self._codec.separator)
            writes = [self._make_write(path, val, unset) for path, val in flat.items()]
        else:
            writes = [self._make_write(key, None if value is _NO_VALUE else value, unset)]

        candidate = copy_tree(self.attributes)
        self._apply(candidate, writes)
        rejected = self._store.check(candidate, options)
        if rejected is not None:
            return rejected

        with self._store.mutation(options):
            changes = self._apply(self.attributes, writes, record=True)
            self._store.publish(changes, options, self._notify)
        return self

    def unset(self, path: PathLike, **options: Any) -> Union['DeepModel', ValidationRejected]:
        """Delete the value at ``path``; does nothing if the path is absent."""
        if not exists(self.attributes, self._codec.parse(path)):
            return self
        return self.set(path, None, **{**options, "unset": True})

    def clear(self, **options: Any) -> Union['DeepModel', ValidationRejected]:
        """Delete every attribute in a single change cycle."""
        paths = list(iter_paths(self.attributes, self._codec.separator))
        if not paths:
            return self
        return self.set(dict.fromkeys(paths), **{**options, "unset": True})

    def add(self, path: PathLike, value: Any, **options: Any) -> Union['DeepModel', ValidationRejected]:
        """Append ``value`` to the list at ``path`` and fire ``add:<path>``.

        Raises:
            NotAnArrayError: if the value at ``path`` is not a list.
        """
        segments = self._codec.parse(path)
        array = get_value(self.attributes, segments)
        array_path = self._codec.serialize(segments)
        if classify(array) is not ValueKind.ARRAY:
            raise NotAnArrayError(array_path, array)

        index = len(array)
        element_segments = segments + (index,)
        with self._store.mutation(options):
            result = self.set(element_segments, value, **options)
            if not result:
                return result

            logger.debug(f"Added element {index} to {array_path!r}")
            if not options.get("silent"):
                self.trigger(f"add:{array_path}", self, get_value(self.attributes, element_segments))
        return self

    def remove(self, path: PathLike, **options: Any) -> Union['DeepModel', ValidationRejected]:
        """Remove the list element at ``path``, shifting later elements down.

        Fires ``remove:<list path>`` with the removed element, then
        ``change:<list path>`` and ``change:<ancestor>`` for each ancestor of
        the list (deepest first), then one root ``change``.

        Raises:
            NotAnArrayError: if the parent of ``path`` is not a list.
            InvalidPathError: if the last segment of ``path`` is not an index.
            IndexError: if the index is past the end of the list.
        """
        segments = self._codec.parse(path)
        parent, index = segments[:-1], segments[-1] if segments else None
        array = get_value(self.attributes, parent)
        array_path = self._codec.serialize(parent)
        if not parent or classify(array) is not ValueKind.ARRAY:
            raise NotAnArrayError(array_path, array)
        if not isinstance(index, int):
            raise InvalidPathError(f"remove() needs an index as the last segment, got {index!r}")

        remaining = list(array)
        removed = remaining.pop(index)
        with self._store.mutation(options):
            result = self.set(parent, remaining, **{**options, "silent": True})
            if not result:
                return result

            logger.debug(f"Removed element {index} from {array_path!r}")
            self._store.publish([array_path], options,
                                lambda changes, opts: self._notify_removal(parent, removed, opts))
        return self

    def clone(self) -> 'DeepModel':
        return type(self)(self.to_json(), config=self.config)

    # === Change tracking ===

    def changed_attributes(self, diff: Optional[Dict[str, Any]] = None) -> Union[Dict[str, Any], bool]:
        """Flat map of what changed, or False.

        Without ``diff``: every path written during the last change cycle.
        With ``diff``: the entries of ``diff`` that would change the model,
        compared against the attributes as they were before the running
        cycle (or the current attributes when no cycle is running).
        """
        tracker = self._store.tracker
        reference = self.attributes
        if self._store.cycle.active and tracker.previous_attributes is not None:
            reference = tracker.previous_attributes
        return tracker.changed_attributes(reference, diff)

    def has_changed(self, path: Optional[PathLike] = None) -> bool:
        return self._store.tracker.has_changed(path)

    def previous(self, path: PathLike) -> Any:
        """Value of ``path`` before the last change cycle (None if no snapshot)."""
        snapshot = self._store.tracker.previous_attributes
        if snapshot is None:
            return None
        return get_value(snapshot, self._codec.parse(path))

    def previous_attributes(self) -> Optional[Dict[str, Any]]:
        snapshot = self._store.tracker.previous_attributes
        return None if snapshot is None else copy_tree(snapshot)

    # === Internals ===

    def _make_write(self, path: PathLike, value: Any, unset: bool) -> _Write:
        segments = self._codec.parse(path)
        return _Write(segments, self._codec.serialize(segments), value, unset)

    def _apply(self, tree: Dict[str, Any], writes: List[_Write], record: bool = False) -> List[str]:
        """Apply ``writes`` to ``tree`` in order and return the changed paths.

        A write equal to the current value (or an unset of an absent path) is
        skipped. For the others the changed paths are the leaves that differ
        between the old and the new value at the written path, followed by the
        written path itself.
        """
        equals = self.config.equals
        tracker = self._store.tracker
        changes: Dict[str, None] = {}
        for write in writes:
            old = walk(tree, write.segments)
            if write.unset:
                if old is MISSING:
                    continue
            elif old is not MISSING and equals(old, write.value):
                continue

            before = {} if old is MISSING else {write.path: old}
            after = {} if write.unset else {write.path: write.value}
            for path in tracker.diff(before, after):
                path = self._codec.normalize(path)
                if path != write.path:
                    changes[path] = None
            changes[write.path] = None

            new_value = None if write.unset else copy_tree(write.value)
            if record:
                self._store.record(write.segments, new_value)
            set_value(tree, write.segments, new_value, unset=write.unset)
        return list(changes)

    def _notify_removal(self, parent: Path, removed: Any, options: Dict[str, Any]) -> None:
        """Fire remove:<list> and a change event for the list and each of its ancestors."""
        self.trigger(f"remove:{self._codec.serialize(parent)}", self, removed)
        for prefix in (parent, *self._codec.ancestors(parent)):
            self.trigger(f"change:{self._codec.serialize(prefix)}", self,
                         get_value(self.attributes, prefix), options)

    def _notify(self, changes: List[str], options: Dict[str, Any]) -> None:
        """Fire path events, each followed by its not-yet-fired wildcard ancestors."""
        fired = set()
        for path in changes:
            segments = self._codec.parse(path)
            self.trigger(f"change:{path}", self, get_value(self.attributes, segments), options)
            for prefix in self._codec.ancestors(segments):
                wildcard = self._codec.wildcard(prefix)
                if wildcard in fired:
                    continue
                fired.add(wildcard)
                self.trigger(f"change:{wildcard}", self, get_value(self.attributes, prefix), options)
