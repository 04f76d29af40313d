"""Tests for the column projection and cleanup stages."""

import pytest

from cellsift.cells import Cell, CellHeader, Tag, TagCategory
from cellsift.contracts import StageConfigError
from cellsift.processors import CleanStage, CutStage
from tests.helpers.cells import run_stage

pytestmark = pytest.mark.unit


@pytest.fixture
def header():
    return CellHeader(
        [Tag("A"), Tag("meta1", TagCategory.META), Tag("B"), Tag("C"),
         Tag("g", TagCategory.GRAPH)],
        ["cellsift ingest"],
    )


@pytest.fixture
def cells():
    return [Cell.create(0, i, cols=[i, 10 + i, 20 + i]) for i in range(3)]


class TestCutStage:

    def test_keeps_included_in_original_order(self, header, cells):
        out_header, out = run_stage(CutStage(["C", "A"]), header, cells)
        assert out_header.feature_names() == ["A", "C"]
        assert out_header.names() == ["A", "meta1", "C", "g"]
        assert out_header.provenance == ["cellsift ingest", "cellsift cut"]
        assert [c.cols.tolist() for c in out] == [[0, 20], [1, 21], [2, 22]]

    def test_idempotent(self, header, cells):
        once_header, once = run_stage(CutStage(["A", "C"]), header, cells)
        twice_header, twice = run_stage(CutStage(["A", "C"]), once_header, once)
        assert twice_header == once_header
        assert twice == once

    def test_nothing_removed_leaves_header_alone(self, header, cells):
        out_header, out = run_stage(CutStage(["A", "B", "C"]), header, cells)
        assert out_header == header
        assert out == cells

    def test_missing_column_is_config_error(self, header):
        with pytest.raises(StageConfigError, match="Z"):
            CutStage(["A", "Z"]).process_header(header)

    @pytest.mark.parametrize("name", ["meta1", "g"])
    def test_non_feature_column_is_config_error(self, header, name):
        with pytest.raises(StageConfigError, match=name):
            CutStage(["A", name]).process_header(header)

    def test_short_vector(self, header):
        stage = CutStage(["C"])
        stage.process_header(header)
        assert stage.process_cell(Cell.create(0, 0, cols=[1.0])).cols.tolist() == []

    def test_custom_cmd_in_provenance(self, header):
        out_header = CutStage(["A"], cmd="cellsift cut --include A").process_header(header)
        assert out_header.provenance[-1] == "cellsift cut --include A"


class TestCleanStage:

    def test_drop_graph_and_meta(self, header, cells):
        out_header, out = run_stage(CleanStage(graph=True, meta=True), header, cells)
        assert out_header.names() == ["A", "B", "C"]
        assert out_header.provenance[-1] == "cellsift clean"
        assert out == cells

    def test_drop_features_empties_vectors(self, header, cells):
        out_header, out = run_stage(CleanStage(features=True), header, cells)
        assert out_header.names() == ["meta1", "g"]
        assert all(len(c.cols) == 0 for c in out)

    def test_no_switches_is_a_no_op(self, header, cells):
        out_header, out = run_stage(CleanStage(), header, cells)
        assert out_header == header
        assert out == cells

    def test_nothing_to_remove_adds_no_provenance(self):
        header = CellHeader.from_features(["A"])
        assert CleanStage(graph=True).process_header(header).provenance == []
