"""Strategies for yielding control to the engine while waiting on it."""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from dataclasses import dataclass
from typing import Any, cast

__all__ = [
    "AsyncioEventPump",
    "QtEventPump",
    "QtRuntime",
    "SleepEventPump",
    "create_qt_runtime",
]

LOGGER = logging.getLogger(__name__)


class SleepEventPump:
    """Pump for engines driven by their own threads: just sleep."""

    def pump(self, interval: float) -> None:
        time.sleep(max(0.0, interval))


class AsyncioEventPump:
    """Run a (not yet running) asyncio loop so engine tasks can progress."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def pump(self, interval: float) -> None:
        if self._loop.is_running():
            raise RuntimeError(
                "AsyncioEventPump cannot drive a running loop; use wait_for_quiescence_async instead"
            )
        self._loop.run_until_complete(asyncio.sleep(max(0.0, interval)))


class QtEventPump:
    """Spin a nested Qt event loop for ``interval`` seconds."""

    def __init__(self, app: Any | None = None) -> None:
        try:  # Local import to avoid mandatory PySide6 dependency at import time.
            from PySide6.QtCore import QCoreApplication
        except ImportError as exc:  # pragma: no cover - depends on desktop stack
            raise RuntimeError("PySide6 must be installed to pump Qt events.") from exc
        self._app = app or QCoreApplication.instance()
        if self._app is None:
            raise RuntimeError("A QCoreApplication must exist before pumping Qt events.")

    def pump(self, interval: float) -> None:
        from PySide6.QtCore import QEventLoop, QTimer

        loop = QEventLoop()
        QTimer.singleShot(max(0, int(interval * 1000)), loop.quit)
        loop.exec()


@dataclass(slots=True)
class QtRuntime:
    """Container returned by :func:`create_qt_runtime`."""

    app: Any
    loop: asyncio.AbstractEventLoop


def create_qt_runtime(app_name: str = "buildoracle") -> QtRuntime:
    """Create a headless QCoreApplication with a qasync event loop.

    Engines hosted on Qt schedule their asyncio work on this loop, so either
    :class:`QtEventPump` or :class:`AsyncioEventPump` can drive them.
    """

    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError as exc:  # pragma: no cover - depends on desktop stack
        raise RuntimeError("PySide6 must be installed to host a Qt engine.") from exc

    try:
        from qasync import QEventLoop
    except ImportError as exc:  # pragma: no cover - depends on env setup
        raise RuntimeError("qasync is required to run the async Qt event loop.") from exc

    app = cast(Any, QCoreApplication.instance() or QCoreApplication(sys.argv))
    app.setApplicationName(app_name)
    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)
    LOGGER.debug("Qt runtime created (app=%s)", app_name)
    return QtRuntime(app=app, loop=loop)
