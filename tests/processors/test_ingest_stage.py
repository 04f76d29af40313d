"""Tests for delimited-text ingestion."""

import io
import logging

import pytest

from cellsift.cells import CellHeader
from cellsift.contracts import RecordError, StageConfigError
from cellsift.pipeline import CellWriter
from cellsift.processors import IngestStage, header_from_columns
from cellsift.processors.ingest import tokenize
from tests.helpers.cells import decode_stream

pytestmark = pytest.mark.unit

COLUMNS = "id,x,y,CD3,CD8,CD20"


@pytest.fixture
def sink(binary_out):
    return CellWriter(binary_out)


def _ingest(sink, lines, header=None, **layout):
    layout.setdefault("x_col", 1)
    layout.setdefault("y_col", 2)
    layout.setdefault("start_col", 3)
    layout.setdefault("end_col", 5)
    stage = IngestStage(sink, **layout)
    stage.process_header(header or CellHeader.from_features(["CD3", "CD8", "CD20"]))
    cells = [stage.process_line(line) for line in lines]
    return stage, cells


class TestHeaderFromColumns:

    def test_marker_range(self):
        header = header_from_columns(COLUMNS, x_col=1, y_col=2, start_col=3, end_col=5)
        assert header.feature_names() == ["CD3", "CD8", "CD20"]

    def test_skips_layout_columns_inside_range(self):
        header = header_from_columns(["x", "y", "id", "A", "B"], x_col=0, y_col=1,
                                     start_col=0, end_col=4, id_col=2)
        assert header.feature_names() == ["A", "B"]

    def test_end_col_clipped_to_row(self):
        header = header_from_columns(COLUMNS, x_col=1, y_col=2, start_col=3, end_col=50)
        assert header.n_features == 3

    def test_tab_delimited(self):
        header = header_from_columns("id\tx\ty\tCD3", 1, 2, 3, 3, delimiter="\t")
        assert header.feature_names() == ["CD3"]

    def test_position_outside_row(self):
        with pytest.raises(StageConfigError, match="x_col=9"):
            header_from_columns(COLUMNS, x_col=9, y_col=2, start_col=3, end_col=5)

    def test_duplicate_markers(self):
        with pytest.raises(StageConfigError, match="Duplicate"):
            header_from_columns("id,x,y,A,A", 1, 2, 3, 4)


class TestIngestStage:

    def test_cells_written_to_sink(self, sink, binary_out):
        stage, cells = _ingest(sink, ["7,1.5,2.5,10,20,30", "8,3,4,1,2,3"])
        stage.finalize()
        header, decoded = decode_stream(binary_out.getvalue())
        assert header.provenance == ["cellsift ingest"]
        assert decoded == cells
        assert cells[0].cols.tolist() == [10, 20, 30]
        assert (cells[0].x, cells[0].y) == (1.5, 2.5)
        assert sink.stream.closed is False

    def test_line_numbers_are_cell_ids(self, sink):
        _, cells = _ingest(sink, ["a,0,0,1,2,3"] * 3, sample_id=4)
        assert [tuple(c.cell_id_parts) for c in cells] == [(4, 0), (4, 1), (4, 2)]

    def test_id_column(self, sink):
        _, cells = _ingest(sink, ["17,0,0,1,2,3", "x,0,0,1,2,3"], id_col=0)
        assert [c.cell_id for c in cells] == [17, 0]

    def test_malformed_numbers_become_zero(self, sink):
        stage, cells = _ingest(sink, ["0,abc,1,2,,NaNx"])
        assert cells[0].x == 0.0
        assert cells[0].cols.tolist() == [2, 0, 0]
        assert stage.malformed == 3

    def test_short_rows_kept_and_warned_once(self, sink, caplog):
        with caplog.at_level(logging.DEBUG, logger="cellsift.processors.ingest"):
            stage, cells = _ingest(sink, ["0,1,1,5", "1,2,2,6,7"])
        assert [c.cols.tolist() for c in cells] == [[5], [6, 7]]
        assert stage.short_rows == 2
        warnings = [r for r in caplog.records
                    if r.levelno == logging.WARNING and "marker values" in r.getMessage()]
        assert len(warnings) == 1

    def test_extra_fields_not_stored(self, sink):
        _, cells = _ingest(sink, ["0,1,1,1,2,3,4,5"], end_col=10)
        assert cells[0].cols.tolist() == [1, 2, 3]

    def test_too_few_fields(self, sink):
        with pytest.raises(RecordError, match="at least 3"):
            _ingest(sink, ["1,2"])

    def test_layout_past_end_of_line(self, sink):
        with pytest.raises(RecordError, match="only 3 fields"):
            _ingest(sink, ["0,1,2"])

    def test_pre_split_fields(self, sink):
        _, cells = _ingest(sink, [["0", "1", "2", "3", "4", "5"]])
        assert cells[0].cols.tolist() == [3, 4, 5]

    def test_blank_lines_skipped(self, sink):
        stage, cells = _ingest(sink, ["0,1,1,1,2,3", "", "\n", [], "1,2,2,4,5,6"])
        assert cells[1:4] == [None, None, None]
        assert [tuple(c.cell_id_parts) for c in (cells[0], cells[4])] == [(0, 0), (0, 1)]
        assert stage.line_count == 2
        assert stage.blank_lines == 3

    def test_finalize_closes_owned_sink(self, tmp_path):
        path = tmp_path / "cells.bin"
        sink = CellWriter.open(path)
        stage, _ = _ingest(sink, ["0,1,1,1,2,3"])
        stage.finalize()
        assert sink.stream.closed
        header, cells = decode_stream(path.read_bytes())
        assert len(cells) == 1

    def test_end_before_start(self, sink):
        with pytest.raises(StageConfigError, match="end_col"):
            IngestStage(sink, 1, 2, 5, 3)


def test_tokenize_quotes():
    assert tokenize('1,"a,b",3\n') == ["1", "a,b", "3"]
    assert tokenize("") == []
