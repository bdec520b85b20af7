"""
Tree accessor: read, test, write and delete values in nested dict/list trees.

All operations share walk(), which descends one segment at a time and hands
each step to a visitor. Reads use a visitor that stops at the first missing
child; writes use one that creates missing containers on the way down.

Dict keys are always strings: an int segment used against a dict addresses
the key ``str(segment)``.
"""
from typing import Any, Callable

from pathstate.errors import InvalidPathError
from pathstate.paths import Path, Segment
from pathstate.values import ValueKind, classify


class _Missing:
    """Sentinel type for 'no value here' (distinct from a stored None)."""
    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False


MISSING = _Missing()

# visitor(container, prefix, segment) -> next node or MISSING to stop
Visitor = Callable[[Any, Path, Segment], Any]


def read_child(container: Any, prefix: Path, segment: Segment) -> Any:
    """Visitor returning the child at ``segment`` or MISSING."""
    match classify(container):
        case ValueKind.RECORD:
            return container.get(str(segment), MISSING)
        case ValueKind.ARRAY:
            if isinstance(segment, int) and segment < len(container):
                return container[segment]
            return MISSING
        case _:
            return MISSING


def walk(root: Any, segments: Path, visit: Visitor = read_child) -> Any:
    """Descend from ``root`` along ``segments``.

    ``visit`` is called for every step, in increasing prefix length, with the
    current container, the segments consumed so far and the segment about to
    be taken. Whatever it returns becomes the next node; MISSING ends the walk.

    Returns:
        The node reached after the last segment, or MISSING.
    """
    node = root
    for depth, segment in enumerate(segments):
        node = visit(node, segments[:depth], segment)
        if node is MISSING:
            return MISSING
    return node


def get_value(root: Any, segments: Path, default: Any = None) -> Any:
    """Value at ``segments``, or ``default`` when any step is absent."""
    node = walk(root, segments)
    return default if node is MISSING else node


def exists(root: Any, segments: Path) -> bool:
    """True if every segment is present (a stored None counts as present)."""
    return walk(root, segments) is not MISSING


def set_value(root: Any, segments: Path, value: Any, unset: bool = False) -> None:
    """Assign (or delete, with ``unset``) the value at ``segments``.

    Missing or non-container intermediates are replaced by a new ``{}``, or by
    ``[]`` when the following segment is an index. Deleting never creates
    anything: if the parent does not exist the call does nothing.

    Raises:
        InvalidPathError: for the empty path, or a string key against a list.
    """
    if not segments:
        raise InvalidPathError("Cannot assign to the root of the tree")

    if unset:
        parent = walk(root, segments[:-1])
        if parent is not MISSING:
            _delete(parent, segments[-1])
        return

    def vivify(container: Any, prefix: Path, segment: Segment) -> Any:
        child = read_child(container, prefix, segment)
        if classify(child) is ValueKind.SCALAR:
            following = segments[len(prefix) + 1]
            child = [] if isinstance(following, int) else {}
            _assign(container, segment, child)
        return child

    parent = walk(root, segments[:-1], vivify)
    _assign(parent, segments[-1], value)


def delete_value(root: Any, segments: Path) -> None:
    set_value(root, segments, None, unset=True)


def _assign(container: Any, segment: Segment, value: Any) -> None:
    match classify(container):
        case ValueKind.RECORD:
            container[str(segment)] = value
        case ValueKind.ARRAY:
            if not isinstance(segment, int):
                raise InvalidPathError(f"Cannot address a list with key {segment!r}")
            if segment < len(container):
                container[segment] = value
            else:
                # no bounds check: pad the gap with holes
                container.extend([None] * (segment - len(container)))
                container.append(value)
        case _:
            raise InvalidPathError(f"Cannot assign {segment!r} inside a {type(container).__name__}")


def _delete(container: Any, segment: Segment) -> None:
    match classify(container):
        case ValueKind.RECORD:
            container.pop(str(segment), None)
        case ValueKind.ARRAY:
            if isinstance(segment, int) and segment < len(container):
                del container[segment]
        case _:
            pass
