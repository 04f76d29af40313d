"""Threshold gating: set one phenotype bit per satisfied gate."""

import logging
from typing import List, Mapping, Optional, Union

import numpy as np

from cellsift.cells.cell import Cell
from cellsift.cells.gates import GateMap, ResolvedGate
from cellsift.cells.header import CellHeader
from cellsift.pipeline.stage import CellStage

__all__ = ['PhenoStage']

logger = logging.getLogger(__name__)


class PhenoStage(CellStage):
    """OR a gate's phenotype bit into ``pflag`` when its marker value lies
    in the gate's closed interval.

    Gates are independent and never drop cells. A marker position past the
    end of a short vector never matches.

    Parameters
    ----------
    gates : GateMap or mapping
        Marker name to Gate / (low, high). Declaration order assigns bits.
    """

    kind = "pheno"

    def __init__(self, gates: Union[GateMap, Mapping], cmd: Optional[str] = None):
        super().__init__(cmd)
        self.gates = gates if isinstance(gates, GateMap) else GateMap(gates)
        self._resolved: List[ResolvedGate] = []
        self.hits = np.zeros(len(self.gates), dtype=np.int64)
        logger.info("PhenoStage initialized: %d gates (%s)",
                    len(self.gates), ", ".join(self.gates))

    def process_header(self, header: CellHeader) -> CellHeader:
        self._resolved = self.gates.resolve(header)
        self.header = header
        return header

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        n = len(cell.cols)
        for gate in self._resolved:
            if gate.index < n and gate.accepts(cell.cols[gate.index]):
                cell.pflag |= 1 << gate.bit
                self.hits[gate.bit] += 1
        return cell

    def finalize(self) -> None:
        for gate in self._resolved:
            logger.debug("Gate %s (bit %d): %d cells", gate.marker, gate.bit,
                         self.hits[gate.bit])
