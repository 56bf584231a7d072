"""Normalization of path arguments that may be a single path or many."""

from __future__ import annotations

import os
from typing import Iterable, Union

PathLike = Union[str, os.PathLike]

__all__ = ["PathLike", "path_keys"]


def path_keys(value: PathLike | Iterable[PathLike]) -> list[str]:
    """Return ``value`` as a list of ``str`` keys.

    A bare string or ``os.PathLike`` is one path, never a sequence of
    characters.
    """

    if isinstance(value, (str, os.PathLike)):
        return [os.fspath(value)]
    if isinstance(value, bytes):
        raise TypeError("byte paths are not supported")
    return [os.fspath(entry) for entry in value]
