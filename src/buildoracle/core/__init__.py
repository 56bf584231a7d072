"""Core domain types shared by the oracle modules."""

from .paths import path_keys
from .ranges import PositionRange

__all__ = ["PositionRange", "path_keys"]
