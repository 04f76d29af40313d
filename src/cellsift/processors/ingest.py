"""Text-to-binary ingestion of delimited cell tables.

Columns are addressed by zero-based position. Marker values are read from
the inclusive [start_col, end_col] range, skipping the x, y and id
columns. Malformed numbers become 0.0 and blank lines are skipped; rows with fewer markers than the
header declares are kept and warned about; rows too short to hold the
identity and coordinate columns abort ingestion.
"""

import csv
import logging
from typing import List, Optional, Sequence, Union

from cellsift.cells.cell import Cell
from cellsift.cells.header import CellHeader
from cellsift.contracts.failure import RecordError, StageConfigError
from cellsift.pipeline.stage import LineStage
from cellsift.pipeline.wire import CellWriter

__all__ = ['IngestStage', 'header_from_columns', 'tokenize']

logger = logging.getLogger(__name__)

MIN_FIELDS = 3
SENTINEL = 0.0


def tokenize(line: str, delimiter: str = ",") -> List[str]:
    """Split one delimited line, honouring quotes."""
    line = line.rstrip("\r\n")
    if not line:
        return []
    return next(csv.reader([line], delimiter=delimiter))


def _marker_positions(n_fields: int, x_col: int, y_col: int, start_col: int, end_col: int,
                      id_col: Optional[int]) -> List[int]:
    skip = {x_col, y_col}
    if id_col is not None:
        skip.add(id_col)
    last = min(end_col, n_fields - 1)
    return [i for i in range(start_col, last + 1) if i not in skip]


def header_from_columns(columns: Union[str, Sequence[str]], x_col: int, y_col: int,
                        start_col: int, end_col: int, id_col: Optional[int] = None,
                        delimiter: str = ",") -> CellHeader:
    """Build the ingestion header from a table's column-name row.

    Parameters
    ----------
    columns : str or sequence of str
        Header row, raw or already split.
    x_col, y_col, start_col, end_col, id_col : int
        Same layout as IngestStage.

    Returns
    -------
    CellHeader
        One feature tag per marker column, in column order.

    Raises
    ------
    StageConfigError
        If a layout position is outside the row or marker names repeat.
    """
    if isinstance(columns, str):
        columns = tokenize(columns, delimiter)
    columns = [c.strip() for c in columns]
    n = len(columns)
    for label, pos in (("x_col", x_col), ("y_col", y_col), ("start_col", start_col),
                       ("id_col", id_col)):
        if pos is not None and not 0 <= pos < n:
            raise StageConfigError(f"{label}={pos} outside the {n} header columns")
    if end_col < start_col:
        raise StageConfigError(f"end_col ({end_col}) must be >= start_col ({start_col})")

    names = [columns[i] for i in _marker_positions(n, x_col, y_col, start_col, end_col, id_col)]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise StageConfigError(f"Duplicate marker column names: {duplicates}")
    return CellHeader.from_features(names)


class IngestStage(LineStage):
    """Parse delimited lines into cells and write them to a binary sink.

    Parameters
    ----------
    sink : CellWriter
        Receives the header first, then one cell per line. Closed at
        ``finalize()``.
    x_col, y_col : int
        Coordinate columns.
    start_col, end_col : int
        Inclusive marker column range.
    id_col : int, optional
        Cell id column; when None the zero-based line counter is used.
    sample_id : int
        Sample id stamped on every cell.
    delimiter : str
        Field delimiter for raw lines.
    """

    kind = "ingest"

    def __init__(self, sink: CellWriter, x_col: int, y_col: int, start_col: int, end_col: int,
                 id_col: Optional[int] = None, sample_id: int = 0, delimiter: str = ",",
                 cmd: Optional[str] = None):
        super().__init__(cmd)
        if end_col < start_col:
            raise StageConfigError(f"end_col ({end_col}) must be >= start_col ({start_col})")
        self.sink = sink
        self.x_col = x_col
        self.y_col = y_col
        self.start_col = start_col
        self.end_col = end_col
        self.id_col = id_col
        self.sample_id = sample_id
        self.delimiter = delimiter

        self._n_features = 0
        self._required = max(p for p in (x_col, y_col, start_col, id_col) if p is not None)
        self.line_count = 0
        self.short_rows = 0
        self.malformed = 0
        self.blank_lines = 0

        logger.info("IngestStage initialized: x=%d, y=%d, markers=[%d, %d], id_col=%s, sample=%d",
                    x_col, y_col, start_col, end_col, id_col, sample_id)

    def process_header(self, header: CellHeader) -> CellHeader:
        self.header = header.with_provenance(self.provenance_entry)
        self._n_features = self.header.n_features
        self.sink.write_header(self.header)
        return self.header

    def _number(self, text: str) -> float:
        try:
            return float(text)
        except ValueError:
            self.malformed += 1
            logger.debug("Malformed number %r on line %d, using %s",
                         text, self.line_count, SENTINEL)
            return SENTINEL

    def _cell_id(self, text: str) -> int:
        try:
            return int(text)
        except ValueError:
            pass
        value = self._number(text)
        return int(value) if value.is_integer() else 0

    def process_line(self, line: Union[str, Sequence[str]]) -> Optional[Cell]:
        fields = tokenize(line, self.delimiter) if isinstance(line, str) else list(line)
        if not fields or (len(fields) == 1 and not fields[0].strip()):
            self.blank_lines += 1
            return None
        n = len(fields)
        if n < MIN_FIELDS:
            raise RecordError(
                f"Line {self.line_count}: {n} fields, at least {MIN_FIELDS} required"
            )
        if self._required >= n:
            raise RecordError(
                f"Line {self.line_count}: column {self._required} requested "
                f"but the line has only {n} fields"
            )

        values = []
        for pos in _marker_positions(n, self.x_col, self.y_col, self.start_col,
                                     self.end_col, self.id_col):
            # scanned past the declared count, not stored
            if len(values) >= self._n_features:
                continue
            values.append(self._number(fields[pos]))

        if len(values) < self._n_features:
            self.short_rows += 1
            level = logging.WARNING if self.short_rows == 1 else logging.DEBUG
            logger.log(level, "Line %d has %d marker values, header declares %d",
                       self.line_count, len(values), self._n_features)

        cell_id = self.line_count if self.id_col is None else self._cell_id(fields[self.id_col])
        try:
            cell = Cell.create(self.sample_id, cell_id,
                               self._number(fields[self.x_col]),
                               self._number(fields[self.y_col]),
                               values)
        except ValueError as e:
            raise RecordError(f"Line {self.line_count}: {e}") from e

        self.sink.write_cell(cell)
        self.line_count += 1
        return cell

    def finalize(self) -> None:
        if self.short_rows:
            logger.warning("%d of %d lines had fewer marker values than declared",
                           self.short_rows, self.line_count)
        if self.malformed:
            logger.info("%d malformed numeric fields replaced by %s", self.malformed, SENTINEL)
        if self.blank_lines:
            logger.debug("Skipped %d blank lines", self.blank_lines)
        logger.info("Ingested %d cells", self.line_count)
        self.close()

    def close(self) -> None:
        self.sink.close()
