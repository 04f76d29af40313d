"""Spatial neighbor structure over a snapshot of cells.

CellGraph holds the identity, position and combined flags of every cell
in a stream and answers radius queries through a scipy cKDTree. It is
produced by the build stage and consumed by radial banding. Neighbor
references are packed identities, never stream positions, so a graph can
be shifted into another sample-id range when streams are concatenated.
"""

import logging
from typing import Iterable, Sequence

import numpy as np
from scipy.spatial import cKDTree

from cellsift.cells.cell import Cell
from cellsift.cells.identity import MAX_ID32

__all__ = ['CellGraph']

logger = logging.getLogger(__name__)


class CellGraph:
    """Read-only neighbor index over cell positions.

    Parameters
    ----------
    ids : array-like of uint64
        Packed identities.
    xy : array-like, shape (n, 2)
        Cell coordinates.
    flags : array-like of uint64
        Combined ``cflag | pflag`` per cell.

    Examples
    --------
    >>> g = CellGraph.from_cells([Cell.create(0, 1, 0, 0), Cell.create(0, 2, 3, 4)])
    >>> g.neighbors_within(0, 0, 6.0).tolist()
    [0, 1]
    """

    def __init__(self, ids, xy, flags):
        self.ids = np.asarray(ids, dtype=np.uint64).reshape(-1)
        self.xy = np.asarray(xy, dtype=np.float64).reshape(-1, 2)
        self.flags = np.asarray(flags, dtype=np.uint64).reshape(-1)
        if not (len(self.ids) == len(self.xy) == len(self.flags)):
            raise ValueError(
                f"CellGraph arrays differ in length: ids={len(self.ids)}, "
                f"xy={len(self.xy)}, flags={len(self.flags)}"
            )
        self._tree = None

    @classmethod
    def from_cells(cls, cells: Iterable[Cell]) -> "CellGraph":
        cells = list(cells)
        return cls(
            [c.id for c in cells],
            [(c.x, c.y) for c in cells],
            [c.flags for c in cells],
        )

    @classmethod
    def empty(cls) -> "CellGraph":
        return cls([], np.zeros((0, 2)), [])

    @property
    def tree(self) -> cKDTree:
        if self._tree is None:
            self._tree = cKDTree(self.xy)
            logger.debug("Built cKDTree over %d cells", len(self))
        return self._tree

    def __len__(self):
        return len(self.ids)

    def __eq__(self, other):
        if not isinstance(other, CellGraph):
            return NotImplemented
        return (np.array_equal(self.ids, other.ids)
                and np.array_equal(self.xy, other.xy)
                and np.array_equal(self.flags, other.flags))

    def neighbors_within(self, x: float, y: float, radius: float) -> np.ndarray:
        """Indices of cells within ``radius`` (inclusive) of (x, y), sorted."""
        if len(self) == 0:
            return np.zeros(0, dtype=np.intp)
        idx = self.tree.query_ball_point((float(x), float(y)), r=float(radius))
        return np.sort(np.asarray(idx, dtype=np.intp))

    def distances(self, x: float, y: float, indices: np.ndarray) -> np.ndarray:
        d = self.xy[indices] - np.array([x, y], dtype=np.float64)
        return np.hypot(d[:, 0], d[:, 1])

    def shifted(self, offset: int) -> "CellGraph":
        """Copy with ``offset`` added to the sample-id half of every identity."""
        if offset == 0 or len(self) == 0:
            return CellGraph(self.ids, self.xy, self.flags)
        samples = self.ids >> np.uint64(32)
        if int(samples.max()) + int(offset) > MAX_ID32:
            raise ValueError(f"Sample-id offset {offset} overflows 32 bits")
        cells = self.ids & np.uint64(MAX_ID32)
        new_ids = ((samples + np.uint64(offset)) << np.uint64(32)) | cells
        return CellGraph(new_ids, self.xy, self.flags)

    @classmethod
    def concat(cls, graphs: Sequence["CellGraph"]) -> "CellGraph":
        graphs = list(graphs)
        if not graphs:
            return cls.empty()
        return cls(
            np.concatenate([g.ids for g in graphs]),
            np.concatenate([g.xy for g in graphs]),
            np.concatenate([g.flags for g in graphs]),
        )
