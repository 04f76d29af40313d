"""Stage contracts shared by every processor.

A CellStage sees the header exactly once, then each cell exactly once,
in arrival order, then ``finalize()``. A LineStage is the ingestion-side
sibling that consumes text lines instead of decoded cells.

Return conventions
------------------
process_header
    The header to forward. Raise StageConfigError when the stage cannot
    be configured against it.
process_cell
    The cell to forward, or None when the stage filters it out. Raise
    RecordError when the record is unusable and the stream must stop.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Union

from cellsift.cells.cell import Cell
from cellsift.cells.header import CellHeader

__all__ = ['CellStage', 'LineStage']

logger = logging.getLogger(__name__)


class CellStage(ABC):
    """Base class for stages over decoded cells.

    Parameters
    ----------
    cmd : str, optional
        Command string recorded in the header provenance when this stage
        changes the schema. Defaults to ``"cellsift <kind>"``.
    """

    kind = "stage"
    # True for stages that merge several input streams
    multi_stream = False

    def __init__(self, cmd: Optional[str] = None):
        self.cmd = cmd
        self.header: Optional[CellHeader] = None
        # set by stages that end the stream once the header is out
        self.stop_after_header = False

    @property
    def provenance_entry(self) -> str:
        return self.cmd if self.cmd else f"cellsift {self.kind}"

    def process_header(self, header: CellHeader) -> CellHeader:
        """Record the header and forward it unchanged."""
        self.header = header
        return header

    @abstractmethod
    def process_cell(self, cell: Cell) -> Optional[Cell]:
        ...

    def finalize(self) -> None:
        """Called once after the last cell."""

    def __repr__(self):
        return f"{type(self).__name__}(kind={self.kind!r})"


class LineStage(ABC):
    """Base class for stages over raw text lines."""

    kind = "line"

    def __init__(self, cmd: Optional[str] = None):
        self.cmd = cmd
        self.header: Optional[CellHeader] = None

    @property
    def provenance_entry(self) -> str:
        return self.cmd if self.cmd else f"cellsift {self.kind}"

    @abstractmethod
    def process_header(self, header: CellHeader) -> CellHeader:
        ...

    @abstractmethod
    def process_line(self, line: Union[str, Sequence[str]]) -> Optional[Cell]:
        ...

    def finalize(self) -> None:
        """Called once after the last line."""

    def close(self) -> None:
        """Release the stage's output. Called by the driver on success and on abort."""
