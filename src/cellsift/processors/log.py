"""In-place base-10 logarithm of selected feature columns."""

import logging
from typing import Iterable, Optional, Union

import numpy as np

from cellsift.cells.cell import Cell
from cellsift.cells.header import CellHeader
from cellsift.contracts.failure import StageConfigError
from cellsift.pipeline.stage import CellStage

__all__ = ['LogStage']

logger = logging.getLogger(__name__)


class LogStage(CellStage):
    """Replace values in the given columns with their log10.

    Columns are given by feature name or zero-based feature position.
    Non-positive and NaN values are passed through unchanged; the first
    one is warned about once, the total is logged at finalize.
    """

    kind = "log"

    def __init__(self, columns: Iterable[Union[int, str]], cmd: Optional[str] = None):
        super().__init__(cmd)
        self.columns = list(columns)
        self._positions = np.zeros(0, dtype=np.intp)
        self._warned = False
        self.passed_through = 0
        logger.info("LogStage initialized: columns=%s", self.columns)

    def process_header(self, header: CellHeader) -> CellHeader:
        n = header.n_features
        positions = []
        for col in self.columns:
            if isinstance(col, str):
                idx = header.feature_index(col)
                if idx is None:
                    raise StageConfigError(f"Log column '{col}' not found in header")
            else:
                idx = int(col)
                if not 0 <= idx < n:
                    raise StageConfigError(
                        f"Log column position {idx} outside 0..{n - 1}"
                    )
            positions.append(idx)
        self._positions = np.array(sorted(set(positions)), dtype=np.intp)
        self.header = header
        return header

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        idx = self._positions[self._positions < len(cell.cols)]
        if idx.size == 0:
            return cell
        values = cell.cols[idx]
        ok = values > 0
        bad = int(idx.size - np.count_nonzero(ok))
        if bad:
            if not self._warned:
                logger.warning("Non-positive value %s in column %d of cell %d:%d; "
                               "passing through unchanged (further cases counted)",
                               values[~ok][0], idx[~ok][0], cell.sample_id, cell.cell_id)
                self._warned = True
            self.passed_through += bad
        cell.cols[idx[ok]] = np.log10(values[ok])
        return cell

    def finalize(self) -> None:
        if self.passed_through:
            logger.info("Log passed through %d non-positive values", self.passed_through)
