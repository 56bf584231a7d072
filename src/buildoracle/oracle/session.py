"""Oracle facade bound to a single engine instance."""

from __future__ import annotations

import logging
from typing import Iterable

from ..core.paths import PathLike
from ..editor.document_model import DocumentRegion, RegionKind
from ..services.engine_types import CommandSubmitter, EngineView, EventPump, LockState
from ..services.event_pump import SleepEventPump
from ..services.quiescence import WaitConfig, wait_for_quiescence, wait_for_quiescence_async
from ..services.settings import get_active_settings
from . import regions, verifiers

__all__ = ["BuildOracle"]

LOGGER = logging.getLogger(__name__)


class BuildOracle:
    """Checks the state of one engine after driving it to quiescence.

    All read operations are only meaningful right after a wait returns; the
    engine may be mutating its state at any other time.
    """

    def __init__(
        self,
        view: EngineView,
        *,
        pump: EventPump | None = None,
        submitter: CommandSubmitter | None = None,
        config: WaitConfig | None = None,
    ) -> None:
        if view is None:
            raise ValueError("view is required")
        self._view = view
        self._pump = pump or SleepEventPump()
        self._submitter = submitter
        self._config = config

    @property
    def view(self) -> EngineView:
        return self._view

    @property
    def config(self) -> WaitConfig:
        """Return the explicit wait config, else the one from the active settings."""

        return self._config or get_active_settings().wait_config()

    def wait_for_quiescence(self) -> int:
        return wait_for_quiescence(self._view, self._pump, self.config)

    async def wait_for_quiescence_async(self) -> int:
        return await wait_for_quiescence_async(self._view, self.config)

    def process_to_line(self, line: int) -> int:
        """Submit commands up to ``line`` and wait until the engine settles."""

        if self._submitter is None:
            raise RuntimeError("BuildOracle was created without a command submitter")
        LOGGER.debug("Processing to line %d", line)
        self._submitter.submit_to_line(line)
        return self.wait_for_quiescence()

    def region_at(self, line: int, kind: RegionKind = RegionKind.ORDINARY_COMMAND) -> DocumentRegion:
        return regions.region_at(self._view, line, kind)

    def dependency_ancestors(self, line: int) -> frozenset[str]:
        return regions.dependency_ancestors(self._view, line)

    def locked_state(self, line: int) -> LockState:
        return verifiers.locked_state(self._view, line)

    def assert_locked_state(self, line: int, expected: LockState | str) -> None:
        verifiers.assert_locked_state(self._view, line, expected)

    def assert_lines_locked(self, lines: Iterable[int], expected: LockState | str) -> None:
        for line in lines:
            verifiers.assert_locked_state(self._view, line, expected)

    def assert_ancestors(self, line: int, expected: str | Iterable[str]) -> None:
        verifiers.assert_ancestors(self._view, line, expected)

    def assert_files_locked(self, files: PathLike | Iterable[PathLike], expected: LockState | str) -> None:
        verifiers.assert_files_locked(self._view, files, expected)

    def last_message_line(self) -> str | None:
        return verifiers.last_message_line(self._view)
