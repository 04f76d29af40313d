"""Tests for gating and bitwise selection."""

import pytest

from cellsift.cells import Cell, CellHeader, ROI_FLAG
from cellsift.contracts import StageConfigError
from cellsift.processors import PhenoStage, SelectStage
from tests.helpers.cells import run_stage

pytestmark = pytest.mark.unit


@pytest.fixture
def header():
    return CellHeader.from_features(["CD3", "CD8"])


def _pflags(stage, header, cells):
    _, out = run_stage(stage, header, cells)
    return [c.pflag for c in out]


class TestPhenoStage:

    def test_sets_bits_per_gate(self, marker_header, marker_cells):
        stage = PhenoStage({"CD3": (5, 20), "CD8": (5, 20)})
        assert _pflags(stage, marker_header, marker_cells) == [0b01, 0b10, 0b11]

    def test_bounds_inclusive(self, header):
        cells = [Cell.create(0, i, cols=[v, 0]) for i, v in enumerate([1.0, 2.0, 3.0, 0.999])]
        assert _pflags(PhenoStage({"CD3": (1, 3)}), header, cells) == [1, 1, 1, 0]

    def test_never_drops_and_keeps_existing_bits(self, header):
        cell = Cell.create(0, 0, cols=[0, 0], pflag=0b100, cflag=ROI_FLAG)
        _, out = run_stage(PhenoStage({"CD3": (5, 6)}), header, [cell])
        assert len(out) == 1
        assert out[0].pflag == 0b100
        assert out[0].cflag == ROI_FLAG

    def test_short_vector_never_matches(self, header):
        cell = Cell.create(0, 0, cols=[1.0])
        assert _pflags(PhenoStage({"CD8": (-100, 100)}), header, [cell]) == [0]

    def test_missing_marker(self, header):
        with pytest.raises(StageConfigError, match="CD20"):
            PhenoStage({"CD20": (0, 1)}).process_header(header)

    @pytest.mark.parametrize("narrow,wide", [
        ((4, 6), (3, 7)),
        ((0, 0), (-1, 1)),
        ((10, 10), (0, 100)),
    ])
    def test_widening_never_clears_a_bit(self, header, narrow, wide):
        def cells():
            return [Cell.create(0, i, cols=[float(i), 0]) for i in range(12)]
        narrow_flags = _pflags(PhenoStage({"CD3": narrow}), header, cells())
        wide_flags = _pflags(PhenoStage({"CD3": wide}), header, cells())
        for n, w in zip(narrow_flags, wide_flags):
            assert n & ~w == 0


class TestSelectStage:

    @pytest.fixture
    def cells(self):
        flags = [0b000, 0b001, 0b010, 0b011, 0b100, 0b111]
        return [Cell.create(0, i, pflag=f) for i, f in enumerate(flags)]

    def _kept(self, stage, cells):
        _, out = run_stage(stage, CellHeader(), cells)
        return [c.cell_id for c in out]

    def test_zero_masks_keep_everything(self, cells):
        assert self._kept(SelectStage(), cells) == [0, 1, 2, 3, 4, 5]

    def test_and_mask(self, cells):
        assert self._kept(SelectStage(and_mask=0b011), cells) == [3, 5]

    def test_or_mask(self, cells):
        assert self._kept(SelectStage(or_mask=0b110), cells) == [2, 3, 4, 5]

    def test_and_with_or(self, cells):
        assert self._kept(SelectStage(and_mask=0b001, or_mask=0b110), cells) == [3, 5]

    @pytest.mark.parametrize("and_mask,or_mask", [(0, 0), (1, 0), (0, 6), (1, 6), (7, 0)])
    def test_invert_is_exact_complement(self, cells, and_mask, or_mask):
        kept = set(self._kept(SelectStage(and_mask, or_mask), cells))
        dropped = set(self._kept(SelectStage(and_mask, or_mask, invert=True), cells))
        assert kept | dropped == {c.cell_id for c in cells}
        assert not kept & dropped

    def test_structural_and_phenotype_bits_share_one_space(self):
        cells = [Cell.create(0, 0, cflag=ROI_FLAG, pflag=1), Cell.create(0, 1, pflag=1)]
        assert self._kept(SelectStage(and_mask=ROI_FLAG | 1), cells) == [0]

    def test_mask_too_wide(self):
        with pytest.raises(StageConfigError, match="64 bits"):
            SelectStage(and_mask=1 << 64)
