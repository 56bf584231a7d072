"""Editor package containing the observed document model."""

from . import document_model
from .document_model import DEPENDENCY_ANCESTORS, DocumentRegion, DocumentText, RegionKind

__all__ = [
    "DEPENDENCY_ANCESTORS",
    "DocumentRegion",
    "DocumentText",
    "RegionKind",
    "document_model",
]
