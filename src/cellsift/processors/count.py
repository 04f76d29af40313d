"""Count the cells that reach this stage."""

import logging
from typing import Optional, TextIO

from cellsift.cells.cell import Cell
from cellsift.pipeline.stage import CellStage

__all__ = ['CountStage']

logger = logging.getLogger(__name__)


class CountStage(CellStage):
    """Count cells and forward them unchanged.

    Parameters
    ----------
    out : text stream, optional
        When given, ``finalize()`` writes the total to it.
    """

    kind = "count"

    def __init__(self, out: Optional[TextIO] = None, cmd: Optional[str] = None):
        super().__init__(cmd)
        self.out = out
        self.count = 0
        self._reported = False

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        self.count += 1
        return cell

    def report(self, out: Optional[TextIO] = None) -> int:
        """Write the total as one line (once) and return it."""
        out = out if out is not None else self.out
        if out is not None and not self._reported:
            out.write(f"{self.count}\n")
            self._reported = True
        return self.count

    def finalize(self) -> None:
        logger.info("Counted %d cells", self.count)
        if self.out is not None:
            self.report()
