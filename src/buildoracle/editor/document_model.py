"""Dataclasses representing the observed document and its region annotations."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from ..core.paths import path_keys
from ..core.ranges import PositionRange

__all__ = [
    "DEPENDENCY_ANCESTORS",
    "DocumentRegion",
    "DocumentText",
    "RegionKind",
]

DEPENDENCY_ANCESTORS = "dependency-ancestors"


class RegionKind(Enum):
    """Kinds of region annotation the engine attaches to a document."""

    ORDINARY_COMMAND = "ordinary-command"
    COMMENT = "comment"
    PENDING = "pending"
    ERROR = "error"


def _freeze(properties: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(properties or {}))


@dataclass(slots=True, frozen=True)
class DocumentRegion:
    """A typed, annotated span over document positions."""

    span: PositionRange
    kind: RegionKind = RegionKind.ORDINARY_COMMAND
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "span", PositionRange.from_value(self.span))
        object.__setattr__(self, "kind", RegionKind(self.kind))
        object.__setattr__(self, "properties", _freeze(self.properties))

    @classmethod
    def command(
        cls,
        start: int,
        end: int,
        *,
        ancestors: str | Iterable[str] | None = None,
        **properties: Any,
    ) -> DocumentRegion:
        """Build an ordinary-command region, optionally recording ancestors."""

        payload = dict(properties)
        if ancestors is not None:
            payload[DEPENDENCY_ANCESTORS] = frozenset(path_keys(ancestors))
        return cls(PositionRange(start, end), RegionKind.ORDINARY_COMMAND, payload)

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end

    def covers(self, position: int) -> bool:
        return self.span.covers(position)

    def get(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    @property
    def ancestors(self) -> frozenset[str]:
        """Return the recorded dependency ancestors (empty when unset)."""

        value = self.properties.get(DEPENDENCY_ANCESTORS)
        if value is None:
            return frozenset()
        return frozenset(path_keys(value))


@dataclass(slots=True)
class DocumentText:
    """Document contents with 1-based line addressing."""

    text: str = ""
    path: Optional[Path] = None
    _line_starts: list[int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._line_starts = _compute_line_starts(self.text)

    def update_text(self, new_text: str) -> None:
        """Replace the document contents and refresh the line index."""

        self.text = new_text
        self._line_starts = _compute_line_starts(new_text)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_position(self, line: int) -> int:
        """Return the offset of the first character of ``line``.

        Lines past the end of the document clamp to the end of the text, the
        same way jumping to a line beyond the last one lands on the final
        position.
        """

        if line < 1:
            raise ValueError(f"Line numbers start at 1, got {line}")
        if line > self.line_count:
            return len(self.text)
        return self._line_starts[line - 1]

    def line_end(self, line: int) -> int:
        """Return the offset just before the newline that terminates ``line``."""

        start = self.line_position(line)
        newline = self.text.find("\n", start)
        return len(self.text) if newline < 0 else newline

    def line_at(self, position: int) -> int:
        """Return the 1-based line containing ``position``."""

        clamped = max(0, min(position, len(self.text)))
        return bisect_right(self._line_starts, clamped)


def _compute_line_starts(text: str) -> list[int]:
    starts = [0]
    offset = text.find("\n")
    while offset >= 0:
        starts.append(offset + 1)
        offset = text.find("\n", offset + 1)
    return starts
