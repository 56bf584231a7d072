"""Tests for the modification-time snapshot registry."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from buildoracle.errors import FileTimeError, VerificationError
from buildoracle.utils import file_times
from buildoracle.utils.file_times import FileTimeRecord, FileTimeSet

BASE_NS = 1_700_000_000_000_000_000


def _make(tmp_path: Path, *names: str) -> list[str]:
    paths = []
    for offset, name in enumerate(names):
        target = tmp_path / name
        file_times.touch(target, modified_ns=BASE_NS + offset)
        paths.append(str(target))
    return paths


def test_snapshot_records_mtimes_and_absent_marker(tmp_path: Path) -> None:
    present, = _make(tmp_path, "x")
    missing = str(tmp_path / "missing.vo")

    result = file_times.snapshot([present, missing])

    assert result[present] == FileTimeRecord(present, BASE_NS)
    assert result[missing].modified_ns is None
    assert not result[missing].exists


def test_snapshot_collapses_duplicate_paths(tmp_path: Path) -> None:
    path, = _make(tmp_path, "x")

    result = file_times.snapshot([path, path, Path(path)])

    assert len(result) == 1


def test_file_time_set_is_order_independent(tmp_path: Path) -> None:
    x, y = _make(tmp_path, "x", "y")

    assert file_times.snapshot([x, y]) == file_times.snapshot([y, x])


def test_partition_splits_complement_and_selected(tmp_path: Path) -> None:
    x, y, z = _make(tmp_path, "x", "y", "z")
    original = file_times.snapshot([x, y, z])

    complement, selected = file_times.partition(original, [y])

    assert set(complement) == {x, z}
    assert set(selected) == {y}
    assert selected[y] == original[y]
    assert complement[x] == original[x] and complement[z] == original[z]
    assert len(original) == 3


def test_snapshot_and_partition_accept_a_single_path(tmp_path: Path) -> None:
    x, y = _make(tmp_path, "x", "y")

    single = file_times.snapshot(x)
    both = file_times.snapshot([x, y])
    complement, selected = file_times.partition(both, Path(y))

    assert list(single) == [x]
    assert single[x].modified_ns == BASE_NS
    assert set(complement) == {x}
    assert set(selected) == {y}


def test_partition_strict_rejects_missing_keys(tmp_path: Path) -> None:
    x, = _make(tmp_path, "x")
    original = file_times.snapshot([x])

    with pytest.raises(VerificationError, match="not present") as excinfo:
        file_times.partition(original, [x, "nope", "also-nope"])

    assert excinfo.value.details["missing"] == ["also-nope", "nope"]


def test_partition_lenient_skips_missing_keys(tmp_path: Path) -> None:
    x, y = _make(tmp_path, "x", "y")
    original = file_times.snapshot([x, y])

    complement, selected = file_times.partition(original, [y, "nope"], strict=False)

    assert set(complement) == {x}
    assert set(selected) == {y}


def test_assert_unchanged_passes_for_untouched_files(tmp_path: Path) -> None:
    paths = _make(tmp_path, "a", "b")
    recorded = file_times.snapshot(paths)

    file_times.assert_unchanged(recorded)


def test_assert_unchanged_reports_every_stale_file(tmp_path: Path) -> None:
    a, b, c = _make(tmp_path, "a", "b", "c")
    recorded = file_times.snapshot([a, b, c])
    file_times.touch(a, modified_ns=BASE_NS + 100)
    os.remove(c)

    with pytest.raises(FileTimeError) as excinfo:
        file_times.assert_unchanged(recorded)

    failed = {failure.path for failure in excinfo.value.failures}
    assert failed == {a, c}
    assert "2 of 3 files not unchanged" in str(excinfo.value)


def test_assert_unchanged_fails_for_recorded_missing_file(tmp_path: Path) -> None:
    recorded = file_times.snapshot([tmp_path / "never"])

    with pytest.raises(FileTimeError, match="cannot stat"):
        file_times.assert_unchanged(recorded)


def test_assert_updated_requires_strictly_newer(tmp_path: Path) -> None:
    a, b = _make(tmp_path, "a", "b")
    recorded = file_times.snapshot([a, b])
    file_times.touch(a, modified_ns=BASE_NS + 1_000)

    with pytest.raises(FileTimeError) as excinfo:
        file_times.assert_updated(recorded)

    assert [failure.path for failure in excinfo.value.failures] == [b]
    assert excinfo.value.failures[0].reason == "expected updated"


def test_assert_updated_counts_created_files(tmp_path: Path) -> None:
    target = tmp_path / "new.vo"
    recorded = file_times.snapshot([target])
    file_times.touch(target)

    file_times.assert_updated(recorded)


def test_assert_updated_fails_when_absent_file_is_still_absent(tmp_path: Path) -> None:
    target = tmp_path / "never.vo"
    recorded = file_times.snapshot([target])

    with pytest.raises(FileTimeError, match="cannot stat") as excinfo:
        file_times.assert_updated(recorded)

    failure, = excinfo.value.failures
    assert failure.path == str(target)
    assert failure.recorded_ns is None and failure.current_ns is None


def test_unchanged_and_updated_are_mutually_exclusive(tmp_path: Path) -> None:
    a, = _make(tmp_path, "a")
    recorded = file_times.snapshot([a])

    file_times.assert_unchanged(recorded)
    with pytest.raises(FileTimeError):
        file_times.assert_updated(recorded)

    file_times.touch(a, modified_ns=BASE_NS + 5)

    file_times.assert_updated(recorded)
    with pytest.raises(FileTimeError):
        file_times.assert_unchanged(recorded)


def test_same_timestamp_rewrite_reads_as_unchanged(tmp_path: Path) -> None:
    # A rebuild inside one mtime tick is indistinguishable from no rebuild.
    target = tmp_path / "coarse.vo"
    file_times.touch(target, modified_ns=BASE_NS)
    recorded = file_times.snapshot([target])
    target.write_bytes(b"rebuilt")
    os.utime(target, ns=(BASE_NS, BASE_NS))

    file_times.assert_unchanged(recorded)


def test_is_newer_handles_missing_reference(tmp_path: Path) -> None:
    a, = _make(tmp_path, "a")

    assert file_times.is_newer(a, None)
    assert file_times.is_newer(a, BASE_NS - 1)
    assert not file_times.is_newer(a, BASE_NS)
    assert not file_times.is_newer(tmp_path / "missing", None)


def test_file_time_set_repr_marks_absent_entries() -> None:
    records = FileTimeSet([FileTimeRecord("gone", None)])

    assert "<absent>" in repr(records)
    assert records.records() == (FileTimeRecord("gone", None),)
