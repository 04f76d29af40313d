"""Marker gates: marker name to closed value interval.

Each gate contributes one phenotype bit, numbered by declaration order.
Marker names are resolved against a header once, before any cell is seen.
"""

import logging
from typing import Dict, Iterator, List, Mapping, NamedTuple, Tuple, Union

from cellsift.cells.flags import PHENO_BITS
from cellsift.cells.header import CellHeader
from cellsift.contracts.failure import StageConfigError
from cellsift.schemas.param import Gate

__all__ = ['GateMap', 'ResolvedGate']

logger = logging.getLogger(__name__)


class ResolvedGate(NamedTuple):
    """Gate bound to a feature position."""
    marker: str
    index: int
    bit: int
    low: float
    high: float

    def accepts(self, value: float) -> bool:
        return self.low <= value <= self.high


class GateMap:
    """Ordered mapping of marker name to Gate.

    Parameters
    ----------
    gates : mapping
        ``{marker: Gate}`` or ``{marker: (low, high)}``. Insertion order
        assigns phenotype bits 0, 1, 2, ...

    Examples
    --------
    >>> gm = GateMap({"CD3": (1.0, 5.0), "CD8": (0.5, 2.0)})
    >>> gm.bit_of("CD8")
    1
    """

    def __init__(self, gates: Mapping[str, Union[Gate, Tuple[float, float]]]):
        self._gates: Dict[str, Gate] = {}
        for marker, gate in gates.items():
            if not isinstance(gate, Gate):
                if isinstance(gate, Mapping):
                    gate = Gate(**gate)
                else:
                    low, high = gate
                    gate = Gate(low=low, high=high)
            self._gates[marker] = gate
        if len(self._gates) > PHENO_BITS:
            raise StageConfigError(
                f"{len(self._gates)} gates given but only {PHENO_BITS} phenotype bits exist"
            )

    def __len__(self):
        return len(self._gates)

    def __iter__(self) -> Iterator[str]:
        return iter(self._gates)

    def items(self):
        return self._gates.items()

    def bit_of(self, marker: str) -> int:
        return list(self._gates).index(marker)

    def resolve(self, header: CellHeader) -> List[ResolvedGate]:
        """Bind every gate to its feature position in ``header``.

        Raises
        ------
        StageConfigError
            If any marker is not a feature column of the header.
        """
        missing = [m for m in self._gates if header.feature_index(m) is None]
        if missing:
            raise StageConfigError(
                f"Gate marker(s) not found in header: {', '.join(missing)}"
            )
        resolved = []
        for bit, (marker, gate) in enumerate(self._gates.items()):
            index = header.feature_index(marker)
            resolved.append(ResolvedGate(marker, index, bit, gate.low, gate.high))
            logger.debug("Gate %s -> column %d, bit %d, [%s, %s]",
                         marker, index, bit, gate.low, gate.high)
        return resolved
