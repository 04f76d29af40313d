"""Bitwise selection over the combined flag space."""

import logging
from typing import Optional

from cellsift.cells.cell import Cell
from cellsift.cells.flags import FLAG_MASK, flags_match
from cellsift.contracts.failure import StageConfigError
from cellsift.pipeline.stage import CellStage

__all__ = ['SelectStage']

logger = logging.getLogger(__name__)


class SelectStage(CellStage):
    """Keep cells whose ``cflag | pflag`` has every AND bit and, when the OR
    mask is nonzero, at least one OR bit. ``invert`` keeps the complement.

    With both masks zero every cell is kept (and ``invert`` drops all).
    """

    kind = "select"

    def __init__(self, and_mask: int = 0, or_mask: int = 0, invert: bool = False,
                 cmd: Optional[str] = None):
        super().__init__(cmd)
        for name, mask in (("and_mask", and_mask), ("or_mask", or_mask)):
            if not 0 <= mask <= FLAG_MASK:
                raise StageConfigError(f"{name} {mask:#x} does not fit in 64 bits")
        self.and_mask = int(and_mask)
        self.or_mask = int(or_mask)
        self.invert = bool(invert)
        self.n_dropped = 0
        logger.info("SelectStage initialized: and=%#x, or=%#x, invert=%s",
                    self.and_mask, self.or_mask, self.invert)

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        keep = flags_match(cell.flags, self.and_mask, self.or_mask) != self.invert
        if keep:
            return cell
        self.n_dropped += 1
        return None

    def finalize(self) -> None:
        logger.debug("Select dropped %d cells", self.n_dropped)
