"""Modification-time snapshots used to prove files were, or were not, rebuilt."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..core.paths import PathLike, path_keys
from ..errors import ErrorCode, FileTimeError, VerificationError

__all__ = [
    "FileTimeFailure",
    "FileTimeRecord",
    "FileTimeSet",
    "assert_unchanged",
    "assert_updated",
    "file_modified_ns",
    "is_newer",
    "partition",
    "snapshot",
    "touch",
]

LOGGER = logging.getLogger(__name__)

@dataclass(slots=True, frozen=True)
class FileTimeRecord:
    """A path paired with its modification time in nanoseconds.

    ``modified_ns`` is ``None`` when the file could not be stat'ed.
    """

    path: str
    modified_ns: int | None

    @property
    def exists(self) -> bool:
        return self.modified_ns is not None


@dataclass(slots=True, frozen=True)
class FileTimeFailure:
    """One file that failed a staleness check."""

    path: str
    recorded_ns: int | None
    current_ns: int | None
    reason: str

    def describe(self) -> str:
        return (
            f"{self.path}: {self.reason} "
            f"(recorded {_format_ns(self.recorded_ns)}, found {_format_ns(self.current_ns)})"
        )


class FileTimeSet(Mapping[str, FileTimeRecord]):
    """Immutable mapping from path to :class:`FileTimeRecord`.

    Iteration follows insertion order, but no operation depends on it.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Iterable[FileTimeRecord] = ()) -> None:
        self._records: dict[str, FileTimeRecord] = {}
        for record in records:
            self._records[record.path] = record

    def __getitem__(self, key: str) -> FileTimeRecord:
        return self._records[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        body = ", ".join(f"{path!r}: {_format_ns(rec.modified_ns)}" for path, rec in self._records.items())
        return f"FileTimeSet({{{body}}})"

    def records(self) -> tuple[FileTimeRecord, ...]:
        return tuple(self._records.values())


def file_modified_ns(path: PathLike) -> int | None:
    """Return the modification time of ``path`` in nanoseconds, or ``None``."""

    try:
        return os.stat(path).st_mtime_ns
    except OSError:
        return None


def is_newer(path: PathLike, than: int | None) -> bool:
    """Return ``True`` when ``path`` exists and was modified after ``than``.

    A missing reference time means the file did not exist before, so any
    existing file counts as newer.
    """

    current = file_modified_ns(path)
    if current is None:
        return False
    return than is None or current > than


def snapshot(files: PathLike | Iterable[PathLike]) -> FileTimeSet:
    """Record the current modification time of every path in ``files``.

    A single path is recorded as one file.
    """

    records = [FileTimeRecord(key, file_modified_ns(key)) for key in path_keys(files)]
    result = FileTimeSet(records)
    missing = sum(1 for record in result.values() if not record.exists)
    LOGGER.debug("Snapshot captured %d file times (%d missing)", len(result), missing)
    return result


def partition(
    file_times: FileTimeSet,
    keys: PathLike | Iterable[PathLike],
    *,
    strict: bool = True,
) -> tuple[FileTimeSet, FileTimeSet]:
    """Split ``file_times`` into ``(complement, selected)`` by ``keys``.

    With ``strict`` (the default) every key must be present in
    ``file_times``. Otherwise absent keys are skipped and simply do not
    appear in ``selected``.
    """

    wanted = set(path_keys(keys))
    missing = sorted(wanted.difference(file_times))
    if missing:
        if strict:
            raise VerificationError(
                error_code=ErrorCode.MISSING_KEYS,
                message=f"partition keys not present in file time set: {missing}",
                details={"missing": missing},
            )
        LOGGER.debug("Partition skipped %d absent keys: %s", len(missing), missing)
    complement = FileTimeSet(rec for path, rec in file_times.items() if path not in wanted)
    selected = FileTimeSet(rec for path, rec in file_times.items() if path in wanted)
    return complement, selected


def assert_unchanged(file_times: FileTimeSet) -> None:
    """Fail unless every file still has exactly its recorded modification time."""

    failures: list[FileTimeFailure] = []
    for record in file_times.values():
        current = file_modified_ns(record.path)
        if current is None:
            failures.append(FileTimeFailure(record.path, record.modified_ns, None, "cannot stat file"))
        elif current != record.modified_ns:
            failures.append(FileTimeFailure(record.path, record.modified_ns, current, "expected unchanged"))
    _raise_failures("unchanged", file_times, failures)


def assert_updated(file_times: FileTimeSet) -> None:
    """Fail unless every file was modified after its recorded time.

    A file recorded as missing that now exists counts as updated.
    """

    failures: list[FileTimeFailure] = []
    for record in file_times.values():
        current = file_modified_ns(record.path)
        if current is None:
            failures.append(FileTimeFailure(record.path, record.modified_ns, None, "cannot stat file"))
        elif record.modified_ns is not None and current <= record.modified_ns:
            failures.append(FileTimeFailure(record.path, record.modified_ns, current, "expected updated"))
    _raise_failures("updated", file_times, failures)


def _raise_failures(check: str, file_times: FileTimeSet, failures: list[FileTimeFailure]) -> None:
    if not failures:
        LOGGER.debug("All %d files %s", len(file_times), check)
        return
    lines = "\n".join(f"  {failure.describe()}" for failure in failures)
    raise FileTimeError(
        message=f"{len(failures)} of {len(file_times)} files not {check}:\n{lines}",
        details={"check": check, "paths": [failure.path for failure in failures]},
        failures=tuple(failures),
    )


def _format_ns(value: int | None) -> str:
    return "<absent>" if value is None else str(value)


def touch(path: PathLike, *, modified_ns: int | None = None) -> None:
    """Create ``path`` if needed and set its modification time.

    Tests use this to stand in for a rebuild without waiting on a real
    compiler; ``modified_ns`` pins the time exactly.
    """

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.touch()
    if modified_ns is not None:
        os.utime(target, ns=(modified_ns, modified_ns))
