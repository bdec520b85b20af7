"""
Path codec: converts between path strings and segment tuples.

A path string uses a separator between property names and ``[n]`` for list
indices, e.g. ``addresses[0].city`` or ``spies.1.name``. Parsed paths are
tuples whose items are ``str`` property names or non-negative ``int`` indices.
"""
import re
from typing import Iterator, Sequence, Tuple, Union

from pathstate.errors import InvalidPathError

Segment = Union[str, int]
Path = Tuple[Segment, ...]
PathLike = Union[str, Sequence[Segment]]

# One separator-delimited part: an optional name followed by any number of [n]
_PART = re.compile(r"([^\[\]]*)((?:\[[0-9]+\])*)")
_INDEX = re.compile(r"\[([0-9]+)\]")
_DIGITS = re.compile(r"[0-9]+")


class PathCodec:
    """Parse and serialize paths for one separator."""

    def __init__(self, separator: str = "."):
        self.separator = separator

    def parse(self, path: PathLike) -> Path:
        """Parse a path string (or validate a segment sequence) into a tuple.

        Args:
            path: ``'user.name'``, ``'addresses[0].city'``, or a pre-split
                sequence such as ``['addresses', 0, 'city']``.

        Returns:
            Tuple of segments. ``''`` parses to ``('',)``.

        Raises:
            InvalidPathError: for any other argument type, unbalanced or
                non-numeric brackets, or invalid sequence segments.
        """
        if isinstance(path, str):
            return self._parse_string(path)
        if isinstance(path, (list, tuple)):
            for segment in path:
                _check_segment(segment, path)
            return tuple(path)
        raise InvalidPathError(f"Path must be a string or a sequence of segments, got {type(path).__name__}")

    def _parse_string(self, path: str) -> Path:
        segments = []
        for part in path.split(self.separator):
            match = _PART.fullmatch(part)
            if match is None:
                raise InvalidPathError(f"Malformed path {path!r}: bad segment {part!r}")
            name, brackets = match.groups()
            if name or not brackets:
                segments.append(int(name) if _DIGITS.fullmatch(name) else name)
            segments.extend(int(index) for index in _INDEX.findall(brackets))
        return tuple(segments)

    def serialize(self, segments: Sequence[Segment]) -> str:
        """Render segments back into a path string (indices use ``[n]``)."""
        parts = []
        for position, segment in enumerate(segments):
            if isinstance(segment, int):
                parts.append(f"[{segment}]")
            elif position == 0:
                parts.append(segment)
            else:
                parts.append(f"{self.separator}{segment}")
        return "".join(parts)

    def normalize(self, path: PathLike) -> str:
        """Canonical string form of a path ('spies.1.name' -> 'spies[1].name')."""
        return self.serialize(self.parse(path))

    def wildcard(self, prefix: Sequence[Segment]) -> str:
        """Name of the wildcard event path for a subtree: ``'user.name.*'``."""
        return f"{self.serialize(prefix)}{self.separator}*"

    @staticmethod
    def ancestors(segments: Path) -> Iterator[Path]:
        """Proper, non-empty prefixes of a path, deepest first."""
        for length in range(len(segments) - 1, 0, -1):
            yield segments[:length]


def _check_segment(segment, path) -> None:
    if isinstance(segment, bool):
        raise InvalidPathError(f"Invalid segment {segment!r} in {path!r}")
    if isinstance(segment, int):
        if segment < 0:
            raise InvalidPathError(f"Negative index {segment} in {path!r}")
        return
    if not isinstance(segment, str):
        raise InvalidPathError(f"Invalid segment {segment!r} in {path!r}")
