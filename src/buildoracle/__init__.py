"""Correctness oracle for asynchronous background-compilation engines."""

from .editor.document_model import DEPENDENCY_ANCESTORS, DocumentRegion, DocumentText, RegionKind
from .errors import VerificationError
from .oracle import (
    BuildOracle,
    assert_ancestors,
    assert_files_locked,
    assert_locked_state,
    dependency_ancestors,
    region_at,
)
from .services.engine_types import CommandQueueState, LockState
from .services.quiescence import WaitConfig, wait_for_quiescence, wait_for_quiescence_async
from .services.settings import apply_test_configuration
from .utils.file_times import FileTimeRecord, FileTimeSet, assert_unchanged, assert_updated, partition, snapshot

__version__ = "0.1.0"

__all__ = [
    "BuildOracle",
    "CommandQueueState",
    "DEPENDENCY_ANCESTORS",
    "DocumentRegion",
    "DocumentText",
    "FileTimeRecord",
    "FileTimeSet",
    "LockState",
    "RegionKind",
    "VerificationError",
    "WaitConfig",
    "apply_test_configuration",
    "assert_ancestors",
    "assert_files_locked",
    "assert_locked_state",
    "assert_unchanged",
    "assert_updated",
    "dependency_ancestors",
    "partition",
    "region_at",
    "snapshot",
    "wait_for_quiescence",
    "wait_for_quiescence_async",
]
