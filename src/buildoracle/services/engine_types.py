"""Interfaces onto the external command-processing engine.

The engine owns and mutates all of this state; the oracle only reads it
through :class:`EngineView`, so tests can substitute a fake engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol, Sequence, runtime_checkable

from ..editor.document_model import DocumentRegion, DocumentText


@dataclass(slots=True, frozen=True)
class CommandQueueState:
    """Point-in-time view of the engine's pending work."""

    pending_commands: int = 0
    secondary_queue_active: bool = False

    @property
    def is_quiescent(self) -> bool:
        """Return ``True`` when nothing is queued and no secondary action runs."""

        return self.pending_commands == 0 and not self.secondary_queue_active


class LockState(Enum):
    """Processing state of a document line."""

    LOCKED = "locked"
    UNLOCKED = "unlocked"

    @classmethod
    def coerce(cls, value: "LockState | str") -> "LockState":
        if isinstance(value, LockState):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown lock state {value!r}; expected 'locked' or 'unlocked'") from exc


@runtime_checkable
class EngineView(Protocol):
    """Read-only accessor for the engine's shared state."""

    def queue_state(self) -> CommandQueueState:
        ...

    def locked_end(self) -> int | None:
        """Return the end of the locked region, or ``None`` when nothing is locked."""
        ...

    def document(self) -> DocumentText:
        ...

    def regions(self) -> Iterable[DocumentRegion]:
        ...

    def included_files(self) -> Iterable[str]:
        """Return the files currently locked as ancestors of processed content."""
        ...

    def messages(self) -> Sequence[str]:
        ...


class CommandSubmitter(Protocol):
    """Front-end action that queues commands up to a document line."""

    def submit_to_line(self, line: int) -> None:
        ...


class EventPump(Protocol):
    """Yields control to the engine's event processing for a bounded interval."""

    def pump(self, interval: float) -> None:
        ...


__all__ = [
    "CommandQueueState",
    "CommandSubmitter",
    "EngineView",
    "EventPump",
    "LockState",
]
