"""Lookups over the region annotations the engine attaches to a document."""

from __future__ import annotations

import logging

from ..editor.document_model import DocumentRegion, RegionKind
from ..errors import RegionLookupError
from ..services.engine_types import EngineView

__all__ = ["dependency_ancestors", "region_at", "regions_at"]

LOGGER = logging.getLogger(__name__)


def regions_at(
    view: EngineView,
    line: int,
    kind: RegionKind = RegionKind.ORDINARY_COMMAND,
) -> list[DocumentRegion]:
    """Return every region of ``kind`` covering the start of ``line``."""

    kind = RegionKind(kind)
    position = view.document().line_position(line)
    return [region for region in view.regions() if region.kind is kind and region.covers(position)]


def region_at(
    view: EngineView,
    line: int,
    kind: RegionKind = RegionKind.ORDINARY_COMMAND,
) -> DocumentRegion:
    """Return the single region of ``kind`` covering ``line``.

    Raises:
        RegionLookupError: when no region or more than one region matches.
    """

    kind = RegionKind(kind)
    matches = regions_at(view, line, kind)
    if len(matches) != 1:
        raise RegionLookupError(
            message=f"expected exactly one {kind.value} region at line {line}, found {len(matches)}",
            details={"spans": [region.span.to_dict() for region in matches]},
            line=line,
            found=len(matches),
        )
    region = matches[0]
    LOGGER.debug("Line %d resolved to %s region %s", line, kind.value, region.span.to_tuple())
    return region


def dependency_ancestors(view: EngineView, line: int) -> frozenset[str]:
    """Return the ancestors recorded on the command region at ``line``."""

    return region_at(view, line).ancestors
