"""Verification failure types raised by the oracle.

Every failure is an :class:`AssertionError` so test runners report it as a
failed test case rather than an error in the harness. Each type carries a
machine-readable code and structured details alongside the message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Sequence


class ErrorCode:
    """Constants for verification error codes."""

    REGION_LOOKUP = "region_lookup"
    LOCKED_STATE = "locked_state"
    INCONSISTENT_LOCKED_STATE = "inconsistent_locked_state"
    ANCESTOR_MISMATCH = "ancestor_mismatch"
    FILES_LOCKED = "files_locked"
    FILE_TIMES = "file_times"
    MISSING_KEYS = "missing_keys"
    QUIESCENCE_TIMEOUT = "quiescence_timeout"


@dataclass
class VerificationError(AssertionError):
    """Base class for every failed verification.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable description of the violated condition.
        details: Additional structured information about the failure.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    severity: ClassVar[str] = "failure"

    def __post_init__(self) -> None:
        AssertionError.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return self.message


@dataclass
class RegionLookupError(VerificationError):
    """Raised when a line is not covered by exactly one region of a kind."""

    error_code: str = field(default=ErrorCode.REGION_LOOKUP)
    message: str = field(default="Region lookup failed")
    details: dict[str, Any] = field(default_factory=dict)

    line: int = 0
    found: int = 0


@dataclass
class LockedStateError(VerificationError):
    """Raised when a line's locked state differs from the expectation."""

    error_code: str = field(default=ErrorCode.LOCKED_STATE)
    message: str = field(default="Locked state mismatch")
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class AncestorMismatchError(VerificationError):
    """Raised when recorded dependency ancestors differ from the expected set."""

    error_code: str = field(default=ErrorCode.ANCESTOR_MISMATCH)
    message: str = field(default="Ancestor sets differ")
    details: dict[str, Any] = field(default_factory=dict)

    missing: frozenset[str] = field(default_factory=frozenset)
    extra: frozenset[str] = field(default_factory=frozenset)


@dataclass
class FileTimeError(VerificationError):
    """Raised when one or more files fail a staleness check.

    ``failures`` lists every offending file, not just the first one found.
    """

    error_code: str = field(default=ErrorCode.FILE_TIMES)
    message: str = field(default="File timestamp check failed")
    details: dict[str, Any] = field(default_factory=dict)

    failures: Sequence[Any] = ()


@dataclass
class QuiescenceTimeoutError(VerificationError):
    """Raised when the command queue does not drain within the configured timeout."""

    error_code: str = field(default=ErrorCode.QUIESCENCE_TIMEOUT)
    message: str = field(default="Command queue did not become quiescent")
    details: dict[str, Any] = field(default_factory=dict)

    timeout: float = 0.0


__all__ = [
    "AncestorMismatchError",
    "ErrorCode",
    "FileTimeError",
    "LockedStateError",
    "QuiescenceTimeoutError",
    "RegionLookupError",
    "VerificationError",
]
