"""
Value kinds for attribute trees.

Every value stored in a model is exactly one of three kinds. The kind is
decided once by classify() and every traversal dispatches on it, instead of
repeating isinstance checks through the recursion.
"""
from enum import Enum
from typing import Any


class ValueKind(Enum):
    """Shape of a value inside an attribute tree."""
    SCALAR = "scalar"  # anything that is not a plain container
    ARRAY = "array"    # list
    RECORD = "record"  # dict


def classify(value: Any) -> ValueKind:
    """Return the kind of a value.

    Only ``dict`` and ``list`` are containers. Tuples, dataclass instances,
    datetimes and every other object are scalars: they are stored and compared
    as opaque values and never traversed.
    """
    if isinstance(value, dict):
        return ValueKind.RECORD
    if isinstance(value, list):
        return ValueKind.ARRAY
    return ValueKind.SCALAR


def copy_tree(value: Any) -> Any:
    """Copy containers recursively; scalars are shared by reference."""
    match classify(value):
        case ValueKind.RECORD:
            return {key: copy_tree(child) for key, child in value.items()}
        case ValueKind.ARRAY:
            return [copy_tree(child) for child in value]
        case _:
            return value


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality used for change detection.

    Containers are equal when they have the same kind and equal children.
    Scalars compare with ``==``, except that ``True``/``1`` and ``False``/``0``
    are treated as different values.
    """
    if a is b:
        return True
    kind = classify(a)
    if kind is not classify(b):
        return False
    match kind:
        case ValueKind.RECORD:
            if a.keys() != b.keys():
                return False
            return all(deep_equal(a[key], b[key]) for key in a)
        case ValueKind.ARRAY:
            if len(a) != len(b):
                return False
            return all(deep_equal(x, y) for x, y in zip(a, b))
        case _:
            if isinstance(a, bool) != isinstance(b, bool):
                return False
            try:
                return bool(a == b)
            except (TypeError, ValueError):
                # e.g. numpy arrays refuse truthiness of an elementwise ==
                return False
