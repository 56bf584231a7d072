"""Blocking wait that drives the engine's command queue until it drains."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from ..errors import QuiescenceTimeoutError
from .engine_types import CommandQueueState, EngineView, EventPump

__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "WaitConfig",
    "wait_for_quiescence",
    "wait_for_quiescence_async",
]

LOGGER = logging.getLogger(__name__)
DEFAULT_POLL_INTERVAL = 0.1

Clock = Callable[[], float]


@dataclass(slots=True, frozen=True)
class WaitConfig:
    """Tunable parameters for the quiescence wait.

    ``timeout`` of ``None`` waits indefinitely; the surrounding test runner's
    own timeout is then the only bound.
    """

    poll_interval: float = DEFAULT_POLL_INTERVAL
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if self.timeout is not None and self.timeout < 0:
            raise ValueError("timeout must be non-negative")


def wait_for_quiescence(
    view: EngineView,
    pump: EventPump,
    config: WaitConfig | None = None,
    *,
    clock: Clock = time.monotonic,
) -> int:
    """Block until the engine reports an empty queue and no secondary action.

    Returns the number of pump cycles spent waiting (``0`` when the engine
    was already quiescent).
    """

    active = config or WaitConfig()
    started = clock()
    cycles = 0
    state = view.queue_state()
    while not state.is_quiescent:
        _check_timeout(active, started, clock(), state)
        pump.pump(active.poll_interval)
        cycles += 1
        state = view.queue_state()
    LOGGER.debug("Engine quiescent after %d pump cycles (%.3fs)", cycles, clock() - started)
    return cycles


async def wait_for_quiescence_async(
    view: EngineView,
    config: WaitConfig | None = None,
) -> int:
    """Asyncio variant for engines that run on the caller's event loop."""

    active = config or WaitConfig()
    loop = asyncio.get_running_loop()
    started = loop.time()
    cycles = 0
    state = view.queue_state()
    while not state.is_quiescent:
        _check_timeout(active, started, loop.time(), state)
        await asyncio.sleep(active.poll_interval)
        cycles += 1
        state = view.queue_state()
    LOGGER.debug("Engine quiescent after %d async cycles (%.3fs)", cycles, loop.time() - started)
    return cycles


def _check_timeout(config: WaitConfig, started: float, now: float, state: CommandQueueState) -> None:
    if config.timeout is None:
        return
    elapsed = now - started
    if elapsed < config.timeout:
        return
    raise QuiescenceTimeoutError(
        message=(
            f"engine not quiescent after {elapsed:.3f}s "
            f"({state.pending_commands} pending commands, "
            f"secondary queue active={state.secondary_queue_active})"
        ),
        details={
            "pending_commands": state.pending_commands,
            "secondary_queue_active": state.secondary_queue_active,
            "elapsed": elapsed,
        },
        timeout=config.timeout,
    )
