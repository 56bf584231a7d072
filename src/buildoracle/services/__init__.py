"""Service layer helpers (engine interfaces, waiting, settings)."""

from .engine_types import CommandQueueState, CommandSubmitter, EngineView, EventPump, LockState
from .event_pump import AsyncioEventPump, QtEventPump, SleepEventPump, create_qt_runtime
from .quiescence import WaitConfig, wait_for_quiescence, wait_for_quiescence_async
from .settings import (
    EnvironmentSettings,
    SettingsStore,
    apply_test_configuration,
    get_active_settings,
)

__all__ = [
    "AsyncioEventPump",
    "CommandQueueState",
    "CommandSubmitter",
    "EngineView",
    "EnvironmentSettings",
    "EventPump",
    "LockState",
    "QtEventPump",
    "SettingsStore",
    "SleepEventPump",
    "WaitConfig",
    "apply_test_configuration",
    "create_qt_runtime",
    "get_active_settings",
    "wait_for_quiescence",
    "wait_for_quiescence_async",
]
