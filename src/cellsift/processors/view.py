"""Render cells as delimited text."""

import logging
import sys
from typing import Optional, TextIO

from cellsift.cells.cell import Cell
from cellsift.cells.header import CellHeader
from cellsift.contracts.failure import StageConfigError
from cellsift.pipeline.stage import CellStage

__all__ = ['ViewStage', 'VIEW_STYLES']

logger = logging.getLogger(__name__)

VIEW_STYLES = ("compact", "named", "crevasse")


class ViewStage(CellStage):
    """Write one text line per cell and forward the cell unchanged.

    Parameters
    ----------
    out : text stream, optional
        Destination, standard output by default.
    print_header : bool
        Write the column line before the first cell.
    header_only : bool
        Write the column line and stop the pipeline before any cell.
    round : int
        Fractional digits.
    style : {"compact", "named", "crevasse"}
        ``compact`` prints positional fields, ``named`` prints
        ``name:value`` fields. Both round coordinates and truncate values.
        ``crevasse`` prints only cell id, x, y and values, ignoring ``round``.
    """

    kind = "view"

    def __init__(self, out: Optional[TextIO] = None, print_header: bool = False,
                 header_only: bool = False, round: int = 2, style: str = "compact",
                 cmd: Optional[str] = None):
        super().__init__(cmd)
        if style not in VIEW_STYLES:
            raise StageConfigError(f"Unknown view style '{style}', expected one of {VIEW_STYLES}")
        if not 0 <= round <= 9:
            raise StageConfigError(f"round must be within 0..9, got {round}")
        self.out = out if out is not None else sys.stdout
        self.print_header = print_header
        self.header_only = header_only
        self.round = round
        self.style = style
        logger.info("ViewStage initialized: style=%s, round=%d", style, round)

    def process_header(self, header: CellHeader) -> CellHeader:
        self.header = header
        if self.print_header or self.header_only:
            self.out.write(header.to_line() + "\n")
        if self.header_only:
            self.stop_after_header = True
        return header

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        if self.style == "named":
            line = cell.render_named(self.header, self.round)
        elif self.style == "crevasse":
            line = cell.render_crevasse(self.header)
        else:
            line = cell.render(self.round)
        self.out.write(line + "\n")
        return cell

    def finalize(self) -> None:
        self.out.flush()
