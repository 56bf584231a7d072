"""Document position spans."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class PositionRange:
    """Half-open ``[start, end)`` span of absolute document offsets.

    Reversed or negative spans raise ``ValueError``.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        start = self._coerce_index(self.start, "start")
        end = self._coerce_index(self.end, "end")
        if end < start:
            raise ValueError(f"PositionRange end {end} precedes start {start}")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @staticmethod
    def _coerce_index(value: Any, label: str) -> int:
        if isinstance(value, bool):
            raise ValueError(f"PositionRange {label} must be an integer")
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"PositionRange {label} must be an integer") from exc
        if number < 0:
            raise ValueError(f"PositionRange {label} must not be negative, got {number}")
        return number

    def covers(self, position: int) -> bool:
        """Return ``True`` when ``position`` lies inside ``[start, end)``."""

        return self.start <= position < self.end

    def to_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_value(cls, value: Any) -> PositionRange:
        """Coerce a ``PositionRange`` or ``(start, end)`` pair."""

        if isinstance(value, PositionRange):
            return value
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            if len(value) != 2:
                raise ValueError("PositionRange sequences must have exactly two entries")
            return cls(value[0], value[1])
        raise TypeError(f"Unsupported PositionRange input: {value!r}")
