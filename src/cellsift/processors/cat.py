"""Concatenate several cell streams with disjoint sample ids."""

import logging
from typing import List, Optional, Sequence

from cellsift.cells.cell import Cell
from cellsift.cells.graph import CellGraph
from cellsift.cells.header import CellHeader
from cellsift.cells.identity import MAX_ID32
from cellsift.contracts.failure import RecordError, StageConfigError
from cellsift.pipeline.stage import CellStage

__all__ = ['CatStage']

logger = logging.getLogger(__name__)


class CatStage(CellStage):
    """Merge streams into one, shifting sample ids so streams never collide.

    ``process_header`` is called once per input stream. The first header is
    the master; later headers must have the same feature columns in the
    same order. Cells of the first stream pass unchanged. Every later
    stream gets an offset added to the sample-id half of each identity:

    - stream 2 uses ``offset`` when given, which must exceed every sample
      id emitted so far;
    - otherwise (and for every later stream) the offset is one past the
      larger of the running maximum cell id and the running maximum
      sample id.

    Parameters
    ----------
    offset : int, optional
        Seed offset for the second stream.

    Examples
    --------
    >>> cat = CatStage()
    >>> cat.process_header(header_a)   # master
    >>> ...cells of a...
    >>> cat.process_header(header_b)   # offset = 1 + max(max_cell_id, max sample id)
    >>> ...cells of b, shifted...
    >>> cat.stream_offsets
    [0, 42]
    """

    kind = "cat"
    multi_stream = True

    def __init__(self, offset: Optional[int] = None, cmd: Optional[str] = None):
        super().__init__(cmd)
        if offset is not None and not 0 <= offset <= MAX_ID32:
            raise StageConfigError(f"Cat offset {offset} outside unsigned 32-bit range")
        self.offset = offset
        self.master: Optional[CellHeader] = None
        self.stream_offsets: List[int] = []
        self.max_cell_id = 0
        self.max_sample_id = -1  # nothing emitted yet
        self._current = 0
        logger.info("CatStage initialized: offset=%s", offset)

    @property
    def n_streams(self) -> int:
        return len(self.stream_offsets)

    def process_header(self, header: CellHeader) -> CellHeader:
        if self.master is None:
            self.master = header.with_provenance(self.provenance_entry)
            self.header = self.master
            self.stream_offsets.append(0)
            self._current = 0
            return self.master

        if not header.same_features(self.master):
            raise StageConfigError(
                f"Stream {self.n_streams + 1} feature columns {header.feature_names()} "
                f"differ from the first stream's {self.master.feature_names()}"
            )

        if self.n_streams == 1 and self.offset is not None:
            if self.offset <= self.max_sample_id:
                raise StageConfigError(
                    f"Cat offset {self.offset} does not exceed the largest sample id "
                    f"already emitted ({self.max_sample_id})"
                )
            offset = self.offset
        else:
            offset = 1 + max(self.max_cell_id, self.max_sample_id)

        self.stream_offsets.append(offset)
        self._current = offset
        logger.info("Cat stream %d: sample-id offset %d", self.n_streams, offset)
        return self.master

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        if self._current:
            sample = cell.sample_id + self._current
            if sample > MAX_ID32:
                raise RecordError(
                    f"Shifted sample id {sample} of cell {cell.cell_id} overflows 32 bits"
                )
            cell.set_sample_id(sample)
        if cell.cell_id > self.max_cell_id:
            self.max_cell_id = cell.cell_id
        if cell.sample_id > self.max_sample_id:
            self.max_sample_id = cell.sample_id
        return cell

    def remap_graphs(self, graphs: Sequence[CellGraph]) -> CellGraph:
        """Shift each stream's graph by that stream's offset and join them.

        Parameters
        ----------
        graphs : sequence of CellGraph
            One graph per input stream, in stream order.
        """
        graphs = list(graphs)
        if len(graphs) != self.n_streams:
            raise StageConfigError(
                f"Got {len(graphs)} graphs for {self.n_streams} concatenated streams"
            )
        try:
            shifted = [g.shifted(off) for g, off in zip(graphs, self.stream_offsets)]
        except ValueError as e:
            raise RecordError(str(e)) from e
        return CellGraph.concat(shifted)

    def finalize(self) -> None:
        logger.info("Concatenated %d streams (max cell id %d, offsets %s)",
                    self.n_streams, self.max_cell_id, self.stream_offsets)
