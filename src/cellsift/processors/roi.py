"""Polygon region-of-interest filtering and labelling."""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from cellsift.cells.cell import Cell
from cellsift.cells.flags import ROI_FLAG
from cellsift.cells.polygon import Polygon
from cellsift.contracts.failure import StageConfigError
from cellsift.pipeline.stage import CellStage

__all__ = ['RoiStage']

logger = logging.getLogger(__name__)


class RoiStage(CellStage):
    """Test each cell's (x, y) against a set of polygons.

    Parameters
    ----------
    polygons : iterable of Polygon or vertex sequences
    label : bool
        When True, set ROI_FLAG in ``cflag`` for contained cells and keep
        every cell. When False, keep only contained cells.
    """

    kind = "roi"

    def __init__(self, polygons: Iterable[Union[Polygon, Sequence[Tuple[float, float]]]],
                 label: bool = False, cmd: Optional[str] = None):
        super().__init__(cmd)
        try:
            self.polygons: List[Polygon] = [
                p if isinstance(p, Polygon) else Polygon(p) for p in polygons
            ]
        except ValueError as e:
            raise StageConfigError(f"Invalid ROI polygon: {e}") from e
        self.label = bool(label)
        self.n_inside = 0
        if not self.polygons:
            logger.warning("RoiStage has no polygons; %s",
                           "no cell will be labelled" if self.label else "every cell will be dropped")
        logger.info("RoiStage initialized: %d polygons, label=%s", len(self.polygons), self.label)

    def contains(self, x: float, y: float) -> bool:
        for poly in self.polygons:
            xmin, ymin, xmax, ymax = poly.bbox
            if xmin <= x <= xmax and ymin <= y <= ymax and poly.contains(x, y):
                return True
        return False

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        inside = self.contains(cell.x, cell.y)
        if inside:
            self.n_inside += 1
        if self.label:
            if inside:
                cell.cflag |= ROI_FLAG
            return cell
        return cell if inside else None

    def finalize(self) -> None:
        logger.debug("ROI: %d cells inside", self.n_inside)
