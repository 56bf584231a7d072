"""Boolean correctness checks composed from engine state and region lookups."""

from __future__ import annotations

import logging
from typing import Iterable

from ..core.paths import PathLike, path_keys
from ..errors import AncestorMismatchError, ErrorCode, LockedStateError, VerificationError
from ..services.engine_types import EngineView, LockState
from .regions import dependency_ancestors

__all__ = [
    "assert_ancestors",
    "assert_files_locked",
    "assert_locked_state",
    "last_message_line",
    "locked_state",
]

LOGGER = logging.getLogger(__name__)


def locked_state(view: EngineView, line: int) -> LockState:
    """Return whether ``line`` lies inside the locked region.

    A line is locked when a boundary exists and the line's first position is
    at or before it; otherwise it is unlocked.
    """

    boundary = view.locked_end()
    position = view.document().line_position(line)
    locked = boundary is not None and position <= boundary
    unlocked = boundary is None or position > boundary
    if locked == unlocked:
        raise LockedStateError(
            error_code=ErrorCode.INCONSISTENT_LOCKED_STATE,
            message=f"inconsistent locked state at line {line} (position {position}, boundary {boundary})",
            details={"line": line, "position": position, "boundary": boundary},
        )
    return LockState.LOCKED if locked else LockState.UNLOCKED


def assert_locked_state(view: EngineView, line: int, expected: LockState | str) -> None:
    """Fail unless ``line`` is in the ``expected`` locked state."""

    wanted = LockState.coerce(expected)
    boundary = view.locked_end()
    if wanted is LockState.LOCKED and boundary is None:
        raise LockedStateError(
            message=f"expected line {line} locked, but nothing is locked",
            details={"line": line, "expected": wanted.value, "boundary": None},
        )
    actual = locked_state(view, line)
    LOGGER.debug("Line %d is %s (boundary %s)", line, actual.value, boundary)
    if actual is not wanted:
        raise LockedStateError(
            message=f"expected line {line} {wanted.value}, found {actual.value} (boundary {boundary})",
            details={"line": line, "expected": wanted.value, "actual": actual.value, "boundary": boundary},
        )


def assert_ancestors(view: EngineView, line: int, expected: str | Iterable[str]) -> None:
    """Fail unless the ancestors recorded at ``line`` equal ``expected`` as a set.

    Paths are compared as exact strings; no normalization is applied. A bare
    string is a single expected ancestor.
    """

    wanted = frozenset(path_keys(expected))
    recorded = dependency_ancestors(view, line)
    if recorded == wanted:
        return
    missing = wanted - recorded
    extra = recorded - wanted
    raise AncestorMismatchError(
        message=(
            f"ancestor sets differ at line {line}: "
            f"missing {_format_set(missing)}, extra {_format_set(extra)}"
        ),
        details={"line": line, "missing": sorted(missing), "extra": sorted(extra)},
        missing=missing,
        extra=extra,
    )


def assert_files_locked(
    view: EngineView,
    files: PathLike | Iterable[PathLike],
    expected: LockState | str,
) -> None:
    """Fail unless each file is (or is not) locked as an ancestor.

    Every file is checked before failing, so one call reports all mismatches.
    """

    wanted = LockState.coerce(expected)
    included = set(view.included_files())
    mismatched: list[str] = []
    for path in path_keys(files):
        is_locked = path in included
        if is_locked != (wanted is LockState.LOCKED):
            mismatched.append(path)
    if mismatched:
        raise VerificationError(
            error_code=ErrorCode.FILES_LOCKED,
            message=f"expected files {wanted.value}, but these are not: {', '.join(mismatched)}",
            details={"expected": wanted.value, "paths": mismatched},
        )


def last_message_line(view: EngineView) -> str | None:
    """Return the final line of the most recent engine message, if any."""

    messages = view.messages()
    if not messages:
        return None
    lines = messages[-1].rstrip("\n").split("\n")
    return lines[-1]


def _format_set(values: Iterable[str]) -> str:
    return "{" + ", ".join(repr(value) for value in sorted(values)) + "}"
