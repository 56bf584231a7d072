"""Region lookups and verifiers over engine state."""

from .regions import dependency_ancestors, region_at, regions_at
from .session import BuildOracle
from .verifiers import (
    assert_ancestors,
    assert_files_locked,
    assert_locked_state,
    last_message_line,
    locked_state,
)

__all__ = [
    "BuildOracle",
    "assert_ancestors",
    "assert_files_locked",
    "assert_locked_state",
    "dependency_ancestors",
    "last_message_line",
    "locked_state",
    "region_at",
    "regions_at",
]
