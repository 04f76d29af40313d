"""Category-wise removal of graph, meta and feature tags."""

import logging
from typing import Optional

import numpy as np

from cellsift.cells.cell import Cell
from cellsift.cells.header import CellHeader, TagCategory
from cellsift.pipeline.stage import CellStage

__all__ = ['CleanStage']

logger = logging.getLogger(__name__)


class CleanStage(CellStage):
    """Drop whole tag categories.

    Parameters
    ----------
    graph, meta, features : bool
        Remove GraphColumn, MetaColumn and FeatureColumn tags respectively.
        Removing features empties every cell's value vector.
    """

    kind = "clean"

    def __init__(self, graph: bool = False, meta: bool = False, features: bool = False,
                 cmd: Optional[str] = None):
        super().__init__(cmd)
        self.drop = set()
        if graph:
            self.drop.add(TagCategory.GRAPH)
        if meta:
            self.drop.add(TagCategory.META)
        if features:
            self.drop.add(TagCategory.FEATURE)
        logger.info("CleanStage initialized: graph=%s, meta=%s, features=%s",
                    graph, meta, features)

    def process_header(self, header: CellHeader) -> CellHeader:
        tags = [t for t in header.tags if t.category not in self.drop]
        removed = len(header.tags) - len(tags)
        if removed == 0:
            self.header = header
            return header
        self.header = header.replace_tags(tags).with_provenance(self.provenance_entry)
        logger.debug("Clean removed %d tags", removed)
        return self.header

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        if TagCategory.FEATURE in self.drop and len(cell.cols):
            return cell.with_cols(np.zeros(0, dtype=np.float32))
        return cell
