"""
Flattening between nested attribute trees and flat path-keyed maps.

Only non-empty dicts are descended into. Lists, empty dicts and every scalar
are leaves and keep their own path:

    >>> to_flat_paths({'user': {'name': {'first': 'Sterling'}}, 'tags': ['a']})
    {'user.name.first': 'Sterling', 'tags': ['a']}
"""
from typing import Any, Dict, Iterator

from pathstate.paths import PathCodec
from pathstate.tree import set_value
from pathstate.values import ValueKind, classify, copy_tree


def _descends(value: Any) -> bool:
    return classify(value) is ValueKind.RECORD and bool(value)


def to_flat_paths(obj: Dict[str, Any], separator: str = ".") -> Dict[str, Any]:
    """Map every leaf of ``obj`` to its full path.

    Keys of ``obj`` may already be paths ('user.name'); they are joined with
    the separator as-is, so flattening an already-flat map returns an equal
    map. The input is never mutated and key order follows the input.
    """
    flat: Dict[str, Any] = {}
    for key, value in obj.items():
        if _descends(value):
            for child_path, leaf in to_flat_paths(value, separator).items():
                flat[f"{key}{separator}{child_path}"] = leaf
        else:
            flat[str(key)] = value
    return flat


def iter_paths(obj: Dict[str, Any], separator: str = ".") -> Iterator[str]:
    """Yield every path in ``obj``, children before their parent.

    Containers that to_flat_paths() would descend into are yielded after all
    of their descendants, so deleting the paths in this order never finds a
    path already removed by an earlier deletion of its parent.
    """
    for key, value in obj.items():
        if _descends(value):
            for child_path in iter_paths(value, separator):
                yield f"{key}{separator}{child_path}"
        yield str(key)


def nest(flat: Dict[str, Any], codec: PathCodec) -> Dict[str, Any]:
    """Build a nested tree from a flat path map (inverse of to_flat_paths)."""
    tree: Dict[str, Any] = {}
    for path, value in flat.items():
        set_value(tree, codec.parse(path), copy_tree(value))
    return tree


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return a new tree with ``override`` merged over ``base``.

    Dicts present on both sides are merged recursively; anywhere else the
    override value wins. Neither argument is mutated.
    """
    merged = copy_tree(base)
    for key, value in override.items():
        current = merged.get(key)
        if classify(current) is ValueKind.RECORD and classify(value) is ValueKind.RECORD:
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy_tree(value)
    return merged
