"""
Observable attribute models addressed by nested paths.

Key Features:
- Dot/bracket paths into nested dicts and lists ('addresses[0].city')
- Per-path, wildcard ('user.*') and root change events
- Change tracking with a previous-attributes snapshot
- Validation gate that rejects a whole set() atomically
- Reentrant mutation from inside change handlers

Quick Start:
    >>> from pathstate import DeepModel
    >>> model = DeepModel({'user': {'name': {'first': 'Sterling'}}})
    >>> model.on('change:user.*', lambda m, value, options: print(value))
    >>> model.set('user.name.first', 'Lana')  # prints {'name': {'first': 'Lana'}}

Modules:
    - paths: path string <-> segment tuple codec
    - tree: reads and writes on nested dict/list trees
    - flatten: nested tree <-> flat path map
    - events: name-keyed event emitter
    - tracker: change cycle state machine and changed/previous tracking
    - store: flat observable attribute store
    - model: DeepModel
    - config: per-model configuration
"""
from pathstate.config import DEFAULT_CONFIG, ModelConfig
from pathstate.errors import InvalidPathError, NotAnArrayError, PathStateError, ValidationRejected
from pathstate.events import ALL_EVENTS, EventEmitter
from pathstate.flatten import deep_merge, iter_paths, nest, to_flat_paths
from pathstate.model import DeepModel
from pathstate.paths import PathCodec
from pathstate.store import AttributeStore
from pathstate.tracker import ChangeCycle, ChangeTracker, CyclePhase
from pathstate.tree import MISSING, delete_value, exists, get_value, set_value, walk
from pathstate.values import ValueKind, classify, copy_tree, deep_equal

__all__ = [
    # Model
    'DeepModel',
    'AttributeStore',
    # Configuration
    'ModelConfig',
    'DEFAULT_CONFIG',
    # Errors
    'PathStateError',
    'InvalidPathError',
    'NotAnArrayError',
    'ValidationRejected',
    # Events
    'EventEmitter',
    'ALL_EVENTS',
    # Change tracking
    'ChangeCycle',
    'ChangeTracker',
    'CyclePhase',
    # Paths and trees
    'PathCodec',
    'MISSING',
    'walk',
    'get_value',
    'exists',
    'set_value',
    'delete_value',
    'to_flat_paths',
    'iter_paths',
    'nest',
    'deep_merge',
    # Values
    'ValueKind',
    'classify',
    'copy_tree',
    'deep_equal',
]
