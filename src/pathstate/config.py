"""
Per-model configuration.

Each model carries its own ModelConfig (instance argument or class attribute),
so two models in the same process can use different separators or equality
functions without touching shared state.
"""
from dataclasses import dataclass
from typing import Any, Callable

from pathstate.values import deep_equal

_RESERVED_SEPARATORS = frozenset("[]*")


@dataclass(frozen=True)
class ModelConfig:
    """Behaviour knobs for a DeepModel / AttributeStore.

    Attributes:
        separator: Single character joining property segments ('user.name').
        equals: Deep-equality predicate deciding whether a write is a change.
        catch_handler_errors: If True, exceptions raised by event handlers are
            logged and dispatch continues. If False (default) they propagate
            to the caller of the mutating method.
    """
    separator: str = "."
    equals: Callable[[Any, Any], bool] = deep_equal
    catch_handler_errors: bool = False

    def __post_init__(self):
        sep = self.separator
        if not isinstance(sep, str) or len(sep) != 1:
            raise ValueError(f"separator must be a single character, got {sep!r}")
        if sep.isdigit() or sep in _RESERVED_SEPARATORS:
            raise ValueError(f"separator {sep!r} is reserved for path syntax")
        if not callable(self.equals):
            raise ValueError("equals must be callable")


DEFAULT_CONFIG = ModelConfig()
