"""Cell data model.

- identity: packed 64-bit sample/cell identity
- header: column tags and provenance
- cell: one record and its text renderings
- flags: flag bit layout and mask matching
- polygon: region-of-interest containment
- gates: marker gates
- graph: spatial neighbor structure
- frame: pandas export
"""

from cellsift.cells.identity import CellId
from cellsift.cells.header import CellHeader, Tag, TagCategory
from cellsift.cells.cell import Cell, format_rounded, format_trimmed
from cellsift.cells.flags import PHENO_BITS, ROI_FLAG, flags_match
from cellsift.cells.polygon import Polygon, parse_polygons
from cellsift.cells.gates import GateMap, ResolvedGate
from cellsift.cells.graph import CellGraph
from cellsift.cells.frame import cells_to_frame

__all__ = [
    "CellId",
    "CellHeader",
    "Tag",
    "TagCategory",
    "Cell",
    "format_rounded",
    "format_trimmed",
    "PHENO_BITS",
    "ROI_FLAG",
    "flags_match",
    "Polygon",
    "parse_polygons",
    "GateMap",
    "ResolvedGate",
    "CellGraph",
    "cells_to_frame",
]
