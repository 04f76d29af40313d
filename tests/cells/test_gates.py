"""Tests for GateMap resolution."""

import pytest
from pydantic import ValidationError

from cellsift.cells import CellHeader, GateMap
from cellsift.contracts import StageConfigError
from cellsift.schemas import Gate

pytestmark = pytest.mark.unit


class TestGateMap:

    def test_bits_follow_declaration_order(self):
        gm = GateMap({"CD8": (0.5, 2.0), "CD3": {"low": 1, "high": 5}})
        assert gm.bit_of("CD8") == 0
        assert gm.bit_of("CD3") == 1
        assert list(gm) == ["CD8", "CD3"]

    def test_resolve_binds_feature_positions(self, marker_header):
        gm = GateMap({"CD8": Gate(low=0, high=1), "CD3": (2, 3)})
        resolved = gm.resolve(marker_header)
        assert [(g.marker, g.index, g.bit) for g in resolved] == [("CD8", 1, 0), ("CD3", 0, 1)]

    def test_missing_marker_is_config_error(self, marker_header):
        gm = GateMap({"CD3": (0, 1), "FOXP3": (0, 1)})
        with pytest.raises(StageConfigError, match="FOXP3"):
            gm.resolve(marker_header)

    def test_non_feature_tag_is_not_a_marker(self, marker_header):
        with pytest.raises(StageConfigError, match="slide"):
            GateMap({"slide": (0, 1)}).resolve(marker_header)

    def test_too_many_gates(self):
        gates = {f"M{i}": (0, 1) for i in range(49)}
        with pytest.raises(StageConfigError, match="48"):
            GateMap(gates)

    def test_interval_is_closed(self):
        header = CellHeader.from_features(["A"])
        (gate,) = GateMap({"A": (1.0, 2.0)}).resolve(header)
        assert gate.accepts(1.0)
        assert gate.accepts(2.0)
        assert not gate.accepts(2.0001)
        assert not gate.accepts(float("nan"))


class TestGateModel:

    def test_low_above_high_rejected(self):
        with pytest.raises(ValidationError, match="must not exceed"):
            Gate(low=2, high=1)

    def test_pair_accepted(self):
        assert Gate.model_validate((1, 2)) == Gate(low=1, high=2)
