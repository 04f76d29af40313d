"""Snapshot cell positions and build the spatial neighbor graph."""

import logging
from typing import List, Optional

from cellsift.cells.cell import Cell
from cellsift.cells.graph import CellGraph
from cellsift.cells.header import CellHeader, Tag, TagCategory
from cellsift.contracts.failure import StageConfigError
from cellsift.pipeline.stage import CellStage

__all__ = ['BuildStage']

logger = logging.getLogger(__name__)


class BuildStage(CellStage):
    """Forward cells unchanged and build a CellGraph over them.

    A graph tag ``name`` is added to the header unless it is already there.
    After ``finalize()`` the graph is available as ``stage.graph``.
    """

    kind = "build"

    def __init__(self, name: str = "spatial", radius: float = 100.0,
                 cmd: Optional[str] = None):
        super().__init__(cmd)
        if radius <= 0:
            raise StageConfigError(f"Graph radius must be positive, got {radius}")
        self.name = name
        self.radius = float(radius)
        self.graph: Optional[CellGraph] = None
        self._ids: List[int] = []
        self._xy: List[tuple] = []
        self._flags: List[int] = []
        logger.info("BuildStage initialized: name=%s, radius=%s", name, self.radius)

    def process_header(self, header: CellHeader) -> CellHeader:
        for tag in header.tags:
            if tag.name == self.name:
                if tag.category != TagCategory.GRAPH:
                    raise StageConfigError(
                        f"Tag '{self.name}' already exists with category {tag.category.value}"
                    )
                self.header = header
                return header
        tag = Tag(self.name, TagCategory.GRAPH, f"radius={self.radius:g}")
        self.header = header.with_tag(tag).with_provenance(self.provenance_entry)
        return self.header

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        self._ids.append(cell.id)
        self._xy.append((cell.x, cell.y))
        self._flags.append(cell.flags)
        return cell

    def finalize(self) -> None:
        if self._ids:
            self.graph = CellGraph(self._ids, self._xy, self._flags)
        else:
            self.graph = CellGraph.empty()
        logger.info("Built graph '%s' over %d cells", self.name, len(self.graph))
