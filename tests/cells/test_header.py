"""Tests for CellHeader and Tag."""

import pytest

from cellsift.cells import CellHeader, Tag, TagCategory

pytestmark = pytest.mark.unit


class TestTag:

    def test_default_category_is_feature(self):
        assert Tag("CD3").is_feature

    def test_category_accepts_wire_code(self):
        tag = Tag("slide", "ME", "S1")
        assert tag.category is TagCategory.META
        assert not tag.is_feature

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError, match="non-empty"):
            Tag("")

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            Tag("x", "ZZ")


class TestCellHeader:

    def test_feature_lookup(self, marker_header):
        assert marker_header.feature_names() == ["CD3", "CD8"]
        assert marker_header.n_features == 2
        assert marker_header.feature_index("CD8") == 1
        assert marker_header.feature_index("slide") is None
        assert marker_header.feature_index("missing") is None

    def test_non_feature_tags(self, marker_header):
        assert [t.name for t in marker_header.tags_of(TagCategory.GRAPH)] == ["spatial"]
        assert [t.name for t in marker_header.tags_of("ME")] == ["slide"]
        assert marker_header.has_tag("spatial")

    def test_with_tag_and_provenance_return_new_headers(self, marker_header):
        extended = marker_header.with_tag(Tag("CD20")).with_provenance("cellsift radial")
        assert extended.feature_names() == ["CD3", "CD8", "CD20"]
        assert extended.provenance == ["cellsift ingest", "cellsift radial"]
        # original untouched
        assert marker_header.feature_names() == ["CD3", "CD8"]
        assert marker_header.provenance == ["cellsift ingest"]

    def test_tags_property_is_a_copy(self, marker_header):
        tags = marker_header.tags
        tags.append(Tag("extra"))
        assert not marker_header.has_tag("extra")

    def test_to_line(self, marker_header):
        assert marker_header.to_line() == "sid,cid,cflag,pflag,x,y,CD3,CD8"
        assert CellHeader().to_line("\t") == "sid\tcid\tcflag\tpflag\tx\ty"

    def test_same_features_ignores_other_tags(self, marker_header):
        assert marker_header.same_features(CellHeader.from_features(["CD3", "CD8"]))
        assert not marker_header.same_features(CellHeader.from_features(["CD8", "CD3"]))

    def test_equality_includes_provenance(self):
        a = CellHeader.from_features(["A"])
        assert a == a.copy()
        assert a != a.with_provenance("x")
