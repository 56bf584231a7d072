"""Environment settings, persistence helpers and the fixed test profile."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping

from .quiescence import DEFAULT_POLL_INTERVAL, WaitConfig

__all__ = [
    "AutoSaveMode",
    "DeactivationAction",
    "EnvironmentSettings",
    "SettingsStore",
    "TEST_PROFILE",
    "apply_test_configuration",
    "get_active_settings",
    "set_active_settings",
]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".buildoracle"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "BUILDORACLE_VERBOSE_COMPILE_DEBUG": "verbose_compile_debug",
    "BUILDORACLE_KEEP_GOING": "compile_keep_going",
}
_FLOAT_ENV_OVERRIDES: Mapping[str, str] = {
    "BUILDORACLE_POLL_INTERVAL": "poll_interval",
    "BUILDORACLE_WAIT_TIMEOUT": "wait_timeout",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_WAIT_FIELDS = ("poll_interval", "wait_timeout")


def _check_wait_tuning(name: str, value: Any) -> float | None:
    """Return ``value`` as seconds, raising ``ValueError`` when out of range."""

    if value is None and name == "wait_timeout":
        return None
    number = float(value)
    if name == "poll_interval" and not number > 0:
        raise ValueError(f"poll_interval must be positive, got {number}")
    if name == "wait_timeout" and not number >= 0:
        raise ValueError(f"wait_timeout must be non-negative, got {number}")
    return number


class DeactivationAction(Enum):
    """What the engine does to processed content when a document is deactivated."""

    ASK = "ask"
    RETRACT = "retract"
    PROCESS = "process"


class AutoSaveMode(Enum):
    """Which modified documents are saved before dependencies are compiled."""

    ASK_PRIMARY = "ask-primary"
    ASK_ALL = "ask-all"
    SAVE_PRIMARY_ONLY = "save-primary-only"
    SAVE_ALL = "save-all"


@dataclass(slots=True, frozen=True)
class EnvironmentSettings:
    """Process-wide flags of the compilation environment under test."""

    delete_old_backups: bool = False
    compile_before_require: bool = False
    compile_keep_going: bool = True
    deactivation_action: DeactivationAction = DeactivationAction.ASK
    multi_window_layout: bool = True
    auto_save_before_compile: AutoSaveMode = AutoSaveMode.ASK_PRIMARY
    verbose_compile_debug: bool = False
    poll_interval: float = DEFAULT_POLL_INTERVAL
    wait_timeout: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "deactivation_action", DeactivationAction(self.deactivation_action))
        object.__setattr__(self, "auto_save_before_compile", AutoSaveMode(self.auto_save_before_compile))
        for name in _WAIT_FIELDS:
            object.__setattr__(self, name, _check_wait_tuning(name, getattr(self, name)))

    def wait_config(self) -> WaitConfig:
        """Return the quiescence wait parameters these settings describe."""

        return WaitConfig(poll_interval=self.poll_interval, timeout=self.wait_timeout)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["deactivation_action"] = self.deactivation_action.value
        data["auto_save_before_compile"] = self.auto_save_before_compile.value
        return data


TEST_PROFILE: Mapping[str, Any] = {
    "delete_old_backups": True,
    "compile_before_require": True,
    "compile_keep_going": True,
    "deactivation_action": DeactivationAction.RETRACT,
    "multi_window_layout": False,
    "auto_save_before_compile": AutoSaveMode.SAVE_PRIMARY_ONLY,
    "verbose_compile_debug": False,
}

_ACTIVE_SETTINGS = EnvironmentSettings()


def get_active_settings() -> EnvironmentSettings:
    """Return the settings currently applied to the environment."""

    return _ACTIVE_SETTINGS


def set_active_settings(settings: EnvironmentSettings) -> EnvironmentSettings:
    """Install ``settings`` process-wide and return the previous settings."""

    global _ACTIVE_SETTINGS
    previous = _ACTIVE_SETTINGS
    _ACTIVE_SETTINGS = settings
    return previous


def apply_test_configuration(base: EnvironmentSettings | None = None) -> EnvironmentSettings:
    """Apply the fixed test profile on top of ``base`` (or the active settings).

    Wait tuning (``poll_interval``/``wait_timeout``) is carried over from the
    base so a loaded settings file can still bound the quiescence wait.
    """

    settings = replace(base or get_active_settings(), **TEST_PROFILE)
    set_active_settings(settings)
    LOGGER.info("Applied test configuration profile: %s", sorted(TEST_PROFILE))
    return settings


class SettingsStore:
    """Persistence adapter for :class:`EnvironmentSettings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> EnvironmentSettings:
        """Load settings from disk, applying runtime and environment overrides."""

        payload = self._read_payload()
        settings = EnvironmentSettings()
        if payload:
            data = _filter_fields(payload)
            for name in _WAIT_FIELDS:
                if name not in data:
                    continue
                try:
                    _check_wait_tuning(name, data[name])
                except (TypeError, ValueError) as exc:
                    LOGGER.warning("Settings file %s has invalid %s=%r: %s", self._path, name, data.pop(name), exc)
            try:
                settings = EnvironmentSettings(**data)
            except (TypeError, ValueError) as exc:
                LOGGER.warning("Settings payload contained unexpected data: %s", exc)
                settings = EnvironmentSettings()
            LOGGER.debug("Settings loaded from %s: %s", self._path, sorted(data))

        if overrides:
            settings = self._apply_overrides(settings, overrides, source="runtime")
        return self._apply_env_overrides(settings)

    def save(self, settings: EnvironmentSettings) -> Path:
        """Persist settings to disk with atomic file writes."""

        payload = settings.to_dict()
        payload["version"] = _SETTINGS_VERSION
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            payload = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Settings file %s does not contain an object", self._path)
            return {}
        return payload

    def _apply_overrides(
        self,
        settings: EnvironmentSettings,
        overrides: Mapping[str, Any],
        *,
        source: str,
    ) -> EnvironmentSettings:
        allowed = {field.name for field in fields(EnvironmentSettings)}
        filtered = {key: value for key, value in overrides.items() if key in allowed}
        if filtered:
            LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
            settings = replace(settings, **filtered)
        return settings

    def _apply_env_overrides(self, settings: EnvironmentSettings) -> EnvironmentSettings:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        for env_name, field_name in _FLOAT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = _check_wait_tuning(field_name, value)
            except (TypeError, ValueError) as exc:
                LOGGER.warning("Environment override %s=%s is rejected: %s", env_name, value, exc)
        if overrides:
            settings = self._apply_overrides(settings, overrides, source="environment")
        return settings


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {field.name for field in fields(EnvironmentSettings)}
    return {key: value for key, value in payload.items() if key in allowed}
