"""Shared test helpers and stub engines.

Import from here instead of duplicating engine fakes in individual test files.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from buildoracle.editor.document_model import DocumentRegion, DocumentText, RegionKind
from buildoracle.services.engine_types import CommandQueueState
from buildoracle.utils.file_times import file_modified_ns, touch


@dataclass(slots=True)
class ScriptedCommand:
    """Behaviour of the command on one document line."""

    ancestors: tuple[str, ...] = ()
    rebuilds: tuple[Path, ...] = ()


class FakeEngine:
    """In-memory engine that treats every line as one command.

    Nothing happens until :meth:`step` runs; each step either compiles the
    pending ancestors of the next command (the secondary queue) or processes
    that command and extends the locked region over its line.
    """

    def __init__(self, text: str, commands: dict[int, ScriptedCommand] | None = None) -> None:
        self._document = DocumentText(text)
        self._commands = dict(commands or {})
        self._queue: deque[int] = deque()
        self._processed: list[int] = []
        self._secondary_active = False
        self._messages: list[str] = []
        self.steps = 0

    # EngineView -------------------------------------------------------
    def queue_state(self) -> CommandQueueState:
        return CommandQueueState(len(self._queue), self._secondary_active)

    def locked_end(self) -> int | None:
        if not self._processed:
            return None
        return self._document.line_end(self._processed[-1])

    def document(self) -> DocumentText:
        return self._document

    def regions(self) -> Iterable[DocumentRegion]:
        start = 0
        result = []
        for line in self._processed:
            end = self._document.line_end(line)
            script = self._commands.get(line)
            ancestors = script.ancestors if script and script.ancestors else None
            result.append(DocumentRegion.command(start, end, ancestors=ancestors))
            start = end
        return result

    def included_files(self) -> Iterable[str]:
        files: list[str] = []
        for line in self._processed:
            script = self._commands.get(line)
            if script:
                files.extend(script.ancestors)
        return files

    def messages(self) -> Sequence[str]:
        return list(self._messages)

    # CommandSubmitter -------------------------------------------------
    def submit_to_line(self, line: int) -> None:
        last = self._queue[-1] if self._queue else (self._processed[-1] if self._processed else 0)
        self._queue.extend(range(last + 1, line + 1))

    # Engine internals -------------------------------------------------
    def step(self) -> None:
        self.steps += 1
        if not self._queue:
            return
        line = self._queue[0]
        script = self._commands.get(line)
        if script and script.rebuilds and not self._secondary_active:
            self._secondary_active = True
            return
        if self._secondary_active:
            for target in script.rebuilds if script else ():
                _rebuild(target)
                self._messages.append(f"Compiling {target.name}\nDone compiling {target.name}")
            self._secondary_active = False
        self._queue.popleft()
        self._processed.append(line)

    def drain(self) -> None:
        while not self.queue_state().is_quiescent:
            self.step()


class StepPump:
    """Event pump that advances a :class:`FakeEngine` by one step per cycle."""

    def __init__(self, engine: FakeEngine) -> None:
        self._engine = engine
        self.intervals: list[float] = []

    def pump(self, interval: float) -> None:
        self.intervals.append(interval)
        self._engine.step()


class StaticView:
    """Engine view with fixed state, for oracle checks that need no processing."""

    def __init__(
        self,
        text: str,
        regions: Sequence[DocumentRegion] = (),
        *,
        locked_end: int | None = None,
        included: Sequence[str] = (),
        messages: Sequence[str] = (),
        queue: CommandQueueState | None = None,
    ) -> None:
        self._document = DocumentText(text)
        self._regions = list(regions)
        self._locked_end = locked_end
        self._included = list(included)
        self._messages = list(messages)
        self.queue = queue or CommandQueueState()

    def queue_state(self) -> CommandQueueState:
        return self.queue

    def locked_end(self) -> int | None:
        return self._locked_end

    def document(self) -> DocumentText:
        return self._document

    def regions(self) -> Iterable[DocumentRegion]:
        return list(self._regions)

    def included_files(self) -> Iterable[str]:
        return list(self._included)

    def messages(self) -> Sequence[str]:
        return list(self._messages)


def comment_region(start: int, end: int) -> DocumentRegion:
    return DocumentRegion((start, end), RegionKind.COMMENT)


def _rebuild(target: Path) -> None:
    previous = file_modified_ns(target)
    stamp = time.time_ns() if previous is None else previous + 1_000_000_000
    touch(target, modified_ns=stamp)
