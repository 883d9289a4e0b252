"""Software bill of materials for built JDKs."""

from .assembler import SBOMAssembler, SBOMPropertyError
from .generator import CycloneDXJsonGenerator, SBOMDocumentGenerator, SBOMError

__all__ = [
    "SBOMAssembler",
    "SBOMPropertyError",
    "CycloneDXJsonGenerator",
    "SBOMDocumentGenerator",
    "SBOMError",
]
