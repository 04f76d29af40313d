"""Tests for the binary cell stream codec."""

import io
import math
import struct

import pytest

from cellsift.cells import Cell, CellHeader, Tag, TagCategory
from cellsift.contracts import WireFormatError
from cellsift.pipeline.wire import MAGIC, CellReader, CellWriter, encode_cell
from tests.helpers.cells import decode_stream, encode_stream

pytestmark = pytest.mark.unit


@pytest.fixture
def header():
    return CellHeader(
        [Tag("CD3"), Tag("Ki-67"), Tag("slide", TagCategory.META, "S1 ü"),
         Tag("spatial", TagCategory.GRAPH, "radius=50")],
        ["cellsift ingest", "cellsift build"],
    )


@pytest.fixture
def cells():
    return [
        Cell.create(0, 0, 1.5, -2.25, [1.0, 2.0], cflag=1 << 48, pflag=3),
        Cell.create(7, 4294967295, 0.0, 0.0, [math.nan, math.inf]),
        Cell.create(1, 2, 3.0, 4.0, []),
    ]


class TestRoundTrip:

    def test_header_and_cells(self, header, cells):
        data = encode_stream(header, cells)
        assert data.startswith(MAGIC)
        got_header, got_cells = decode_stream(data)
        assert got_header == header
        assert got_cells == cells

    def test_empty_stream(self, header):
        got_header, got_cells = decode_stream(encode_stream(header, []))
        assert got_header == header
        assert got_cells == []

    def test_cell_field_layout(self):
        payload = encode_cell(Cell.create(1, 2, 0.5, 0.25, [9.0]))
        assert struct.unpack("<QQQffIf", payload) == ((1 << 32) | 2, 0, 0, 0.5, 0.25, 1, 9.0)

    def test_writer_counts_cells(self, header, cells, binary_out):
        writer = CellWriter(binary_out)
        writer.write_header(header)
        for cell in cells:
            writer.write_cell(cell)
        writer.close()
        assert writer.cells_written == 3
        # caller-owned stream stays open
        assert not binary_out.closed

    def test_open_and_close_owned_file(self, header, cells, tmp_path):
        path = tmp_path / "cells.bin"
        with CellWriter.open(path) as writer:
            writer.write_header(header)
            writer.write_cell(cells[0])
        assert writer.stream.closed
        with open(path, "rb") as fh:
            reader = CellReader(fh)
            assert list(reader) == [cells[0]]

    def test_close_twice(self, header, tmp_path):
        writer = CellWriter.open(tmp_path / "cells.bin")
        writer.write_header(header)
        writer.close()
        writer.close()
        assert writer.stream.closed


class TestMalformedStreams:

    def test_truncated_cell_frame(self, header, cells):
        data = encode_stream(header, cells)
        reader = CellReader(io.BytesIO(data[:-3]))
        with pytest.raises(WireFormatError, match="Truncated"):
            list(reader)

    def test_truncated_header(self, header):
        data = encode_stream(header, [])
        with pytest.raises(WireFormatError, match="Truncated"):
            CellReader(io.BytesIO(data[:-1]))

    def test_bad_magic(self, header):
        data = b"XXXX" + encode_stream(header, [])[4:]
        with pytest.raises(WireFormatError, match="magic"):
            CellReader(io.BytesIO(data))

    def test_empty_input(self):
        with pytest.raises(WireFormatError):
            CellReader(io.BytesIO(b""))

    def test_second_header(self, header):
        data = encode_stream(header, [])
        # append another header frame (skip the 6-byte preamble)
        data = data + data[6:]
        with pytest.raises(WireFormatError, match="Second header"):
            list(CellReader(io.BytesIO(data)))

    def test_unknown_frame_kind(self, header):
        data = encode_stream(header, []) + struct.pack("<cI", b"Z", 0)
        with pytest.raises(WireFormatError, match="Unknown frame kind"):
            list(CellReader(io.BytesIO(data)))

    def test_cell_before_header(self, binary_out):
        with pytest.raises(WireFormatError, match="before header"):
            CellWriter(binary_out).write_cell(Cell.create(0, 0))

    def test_header_written_twice(self, header, binary_out):
        writer = CellWriter(binary_out)
        writer.write_header(header)
        with pytest.raises(WireFormatError, match="already written"):
            writer.write_header(header)
