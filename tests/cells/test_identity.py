"""Tests for packed cell identities."""

import pytest

from cellsift.cells import Cell, CellId
from cellsift.cells.identity import MAX_ID32, MAX_ID64

pytestmark = pytest.mark.unit


class TestCellIdPacking:
    """Pack/unpack over the full 32-bit range."""

    def test_sample_id_is_high_half(self):
        assert CellId(3, 17).pack() == (3 << 32) | 17
        assert CellId(3, 17).pack() == 12884901905

    @pytest.mark.parametrize("sample_id,cell_id", [
        (0, 0),
        (0, MAX_ID32),
        (MAX_ID32, 0),
        (MAX_ID32, MAX_ID32),
        (1, 2),
        (123456, 7654321),
    ])
    def test_round_trip(self, sample_id, cell_id):
        packed = CellId(sample_id, cell_id).pack()
        assert 0 <= packed <= MAX_ID64
        assert CellId.unpack(packed) == (sample_id, cell_id)

    @pytest.mark.parametrize("sample_id,cell_id", [
        (-1, 0),
        (0, -1),
        (MAX_ID32 + 1, 0),
        (0, MAX_ID32 + 1),
    ])
    def test_out_of_range_halves_rejected(self, sample_id, cell_id):
        with pytest.raises(ValueError, match="32-bit"):
            CellId(sample_id, cell_id).pack()

    @pytest.mark.parametrize("packed", [-1, MAX_ID64 + 1])
    def test_out_of_range_packed_rejected(self, packed):
        with pytest.raises(ValueError, match="64-bit"):
            CellId.unpack(packed)

    def test_with_sample_keeps_cell(self):
        assert CellId(1, 9).with_sample(4) == CellId(4, 9)
        assert CellId(1, 9).with_cell(4) == CellId(1, 4)


class TestCellIdentityAccessors:
    """Cell reads and writes its identity only through CellId."""

    def test_create_sets_both_halves(self):
        cell = Cell.create(5, 7)
        assert cell.sample_id == 5
        assert cell.cell_id == 7
        assert cell.id == CellId(5, 7).pack()

    def test_set_sample_id_keeps_cell_id(self):
        cell = Cell.create(5, 7)
        cell.set_sample_id(MAX_ID32)
        assert cell.cell_id_parts == CellId(MAX_ID32, 7)

    def test_set_cell_id_keeps_sample_id(self):
        cell = Cell.create(5, 7)
        cell.set_cell_id(0)
        assert cell.cell_id_parts == CellId(5, 0)

    def test_set_sample_id_overflow_raises(self):
        cell = Cell.create(5, 7)
        with pytest.raises(ValueError):
            cell.set_sample_id(MAX_ID32 + 1)
