"""Column projection: keep only the named feature columns."""

import logging
from typing import Iterable, Optional

import numpy as np

from cellsift.cells.cell import Cell
from cellsift.cells.header import CellHeader
from cellsift.contracts.failure import StageConfigError
from cellsift.pipeline.stage import CellStage

__all__ = ['CutStage']

logger = logging.getLogger(__name__)


class CutStage(CellStage):
    """Drop every feature column not named in ``include``.

    Non-feature tags are left alone. Included columns keep their original
    relative order. Running the stage twice with the same names gives the
    same header and cells as running it once.
    """

    kind = "cut"

    def __init__(self, include: Iterable[str], cmd: Optional[str] = None):
        super().__init__(cmd)
        self.include = list(dict.fromkeys(include))
        self._keep: Optional[np.ndarray] = None
        self.n_removed = 0
        logger.info("CutStage initialized: include=%s", self.include)

    def process_header(self, header: CellHeader) -> CellHeader:
        names = header.feature_names()
        missing = [name for name in self.include if name not in names]
        if missing:
            raise StageConfigError(f"Cut column(s) not a feature in header: {', '.join(missing)}")

        wanted = set(self.include)
        self._keep = np.array([i for i, n in enumerate(names) if n in wanted], dtype=np.intp)
        self.n_removed = len(names) - len(self._keep)

        if self.n_removed == 0:
            self.header = header
            return header

        tags = [t for t in header.tags if not t.is_feature or t.name in wanted]
        self.header = header.replace_tags(tags).with_provenance(self.provenance_entry)
        logger.debug("Cut removes %d of %d feature columns", self.n_removed, len(names))
        return self.header

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        if self.n_removed == 0:
            return cell
        keep = self._keep[self._keep < len(cell.cols)]
        return cell.with_cols(cell.cols[keep])
