"""Pipeline driver.

Chains stages over one or more cell streams, enforces the header and cell
contracts at every stage boundary, writes survivors to the sink and maps
failures onto a StageStatus for the dispatch layer.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from cellsift.cells.cell import Cell
from cellsift.cells.header import CellHeader
from cellsift.contracts import (
    ContractViolation,
    RecordError,
    StageConfigError,
    StageStatus,
    assert_cell_shape,
    assert_header_consistent,
)
from cellsift.pipeline.stage import CellStage, LineStage
from cellsift.pipeline.wire import CellReader, CellWriter

__all__ = ['CellPipeline', 'run_ingest']

logger = logging.getLogger(__name__)

_FATAL = (StageConfigError, RecordError, ContractViolation)

Stream = Union[CellReader, Tuple[CellHeader, Iterable[Cell]]]


class CellPipeline:
    """Drive cells through an ordered list of stages.

    Parameters
    ----------
    stages : sequence of CellStage
        Stages in order. Only the first stage may accept more than one
        stream (see ``run_streams``).
    sink : CellWriter, optional
        Receives the final header and every surviving cell. The pipeline
        closes it when the run ends.
    progress_interval : int
        Cells between progress messages when ``verbose``.
    verbose : bool
        Log progress at DEBUG while running.

    Examples
    --------
    >>> status = CellPipeline([SelectStage(and_mask=1)], sink=CellWriter(out)).run(header, cells)
    >>> status is StageStatus.OK
    True
    """

    def __init__(self, stages: Sequence[CellStage], sink: Optional[CellWriter] = None,
                 progress_interval: int = 100000, verbose: bool = False):
        self.stages: List[CellStage] = list(stages)
        self.sink = sink
        self.progress_interval = progress_interval
        self.verbose = verbose

        self.cells_in = 0
        self.cells_out = 0
        self.stopped = False
        self._headers: List[CellHeader] = []
        self._streams_seen = 0

        logger.info("CellPipeline initialized: stages=%s",
                    [s.kind for s in self.stages])

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def run(self, header: CellHeader, cells: Iterable[Cell]) -> StageStatus:
        """Run one stream to completion and finalize every stage."""
        return self.run_streams([(header, cells)])

    def run_stream(self, reader: CellReader) -> StageStatus:
        """Run one decoded binary stream."""
        return self.run_streams([reader])

    def run_streams(self, streams: Iterable[Stream]) -> StageStatus:
        """Run several streams through the same stages, in order.

        Every stream's header is offered to the first stage, which must
        accept multiple streams (the concatenation stage). Stages after it
        see the merged header once.
        """
        try:
            for stream in streams:
                header, cells = self._unpack(stream)
                self._run_one(header, cells)
                if self.stopped:
                    break
            for stage in self.stages:
                stage.finalize()
        except _FATAL as e:
            if isinstance(e, ContractViolation):
                logger.critical("Pipeline contract violated: %s", e)
            else:
                logger.error("Pipeline aborted (%s): %s", type(e).__name__, e)
            return StageStatus.ABORT
        finally:
            if self.sink is not None:
                self.sink.close()

        logger.info("Pipeline finished: %d cells in, %d cells out",
                    self.cells_in, self.cells_out)
        return StageStatus.OK

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _unpack(stream: Stream):
        if isinstance(stream, CellReader):
            return stream.header, stream
        header, cells = stream
        return header, cells

    def _run_one(self, header: CellHeader, cells: Iterable[Cell]):
        self._streams_seen += 1
        if self._streams_seen == 1:
            self._push_header(header)
        else:
            self._push_later_header(header)
        if self.stopped:
            logger.debug("Stopped after header; no cells read")
            return
        for cell in cells:
            self._push_cell(cell)

    def _push_header(self, header: CellHeader):
        assert_header_consistent(header)
        for stage in self.stages:
            header = stage.process_header(header)
            assert_header_consistent(header)
            self._headers.append(header)
            if stage.stop_after_header:
                self.stopped = True
                return
        if self.sink is not None:
            self.sink.write_header(header)

    def _push_later_header(self, header: CellHeader):
        if not self.stages or not self.stages[0].multi_stream:
            raise StageConfigError(
                "More than one input stream requires a concatenation stage first"
            )
        assert_header_consistent(header)
        self.stages[0].process_header(header)

    def _push_cell(self, cell: Cell):
        self.cells_in += 1
        if self.verbose and self.cells_in % self.progress_interval == 0:
            logger.debug("Processed %d cells (%d kept)", self.cells_in, self.cells_out)
        for stage, header in zip(self.stages, self._headers):
            cell = stage.process_cell(cell)
            if cell is None:
                return
            assert_cell_shape(cell, header)
        self.cells_out += 1
        if self.sink is not None:
            self.sink.write_cell(cell)


def run_ingest(stage: LineStage, header: CellHeader, lines: Iterable) -> StageStatus:
    """Drive an ingestion stage over text lines.

    Parameters
    ----------
    stage : LineStage
        Ingestion stage; it owns its output.
    header : CellHeader
        Schema of the lines (see ``header_from_columns``).
    lines : iterable of str or sequence of str
        Raw delimited lines or pre-tokenized fields.
    """
    try:
        stage.process_header(header)
        for line in lines:
            stage.process_line(line)
        stage.finalize()
    except _FATAL as e:
        logger.error("Ingestion aborted (%s): %s", type(e).__name__, e)
        return StageStatus.ABORT
    finally:
        stage.close()
    return StageStatus.OK
