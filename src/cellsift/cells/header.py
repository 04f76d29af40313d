"""Cell stream header: ordered column tags plus a provenance log.

The header is the schema every cell in a stream is interpreted against.
Feature tags (category ``MA``) align 1:1, in order, with each cell's
value vector. Meta (``ME``) and graph (``GA``) tags describe the stream
and the auxiliary neighbor structure; they carry no per-cell values.

Headers are treated as frozen once emitted: stages that change the
schema build a new CellHeader rather than editing the one they received.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

__all__ = ['TagCategory', 'Tag', 'CellHeader']

# leading columns every cell line carries before its feature values
ID_COLUMNS = ("sid", "cid", "cflag", "pflag", "x", "y")


class TagCategory(str, Enum):
    """Column category, stored on the wire as its two-letter code."""
    FEATURE = "MA"
    META = "ME"
    GRAPH = "GA"


@dataclass(frozen=True)
class Tag:
    """Named, typed column descriptor."""
    name: str
    category: TagCategory = TagCategory.FEATURE
    value: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("Tag name must be non-empty")
        # accept "MA"/"ME"/"GA" codes as well as the enum
        object.__setattr__(self, "category", TagCategory(self.category))

    @property
    def is_feature(self) -> bool:
        return self.category is TagCategory.FEATURE


class CellHeader:
    """Ordered tags plus provenance strings.

    Parameters
    ----------
    tags : iterable of Tag
        Column descriptors in stream order.
    provenance : iterable of str, optional
        One entry per stage that materially changed the schema.

    Examples
    --------
    >>> header = CellHeader.from_features(["CD3", "CD8"])
    >>> header.feature_names()
    ['CD3', 'CD8']
    >>> header.feature_index("CD8")
    1
    """

    def __init__(self, tags: Iterable[Tag] = (), provenance: Iterable[str] = ()):
        self._tags: List[Tag] = list(tags)
        self._provenance: List[str] = list(provenance)

    @classmethod
    def from_features(cls, names: Iterable[str], provenance: Iterable[str] = ()) -> "CellHeader":
        return cls([Tag(n, TagCategory.FEATURE) for n in names], provenance)

    @property
    def tags(self) -> List[Tag]:
        return list(self._tags)

    @property
    def provenance(self) -> List[str]:
        return list(self._provenance)

    def feature_tags(self) -> List[Tag]:
        return [t for t in self._tags if t.is_feature]

    def feature_names(self) -> List[str]:
        return [t.name for t in self._tags if t.is_feature]

    @property
    def n_features(self) -> int:
        return sum(1 for t in self._tags if t.is_feature)

    def names(self) -> List[str]:
        return [t.name for t in self._tags]

    def has_tag(self, name: str) -> bool:
        return any(t.name == name for t in self._tags)

    def feature_index(self, name: str) -> Optional[int]:
        """Position of a feature column in the cell value vector, or None."""
        for i, tag_name in enumerate(self.feature_names()):
            if tag_name == name:
                return i
        return None

    def tags_of(self, category: TagCategory) -> List[Tag]:
        category = TagCategory(category)
        return [t for t in self._tags if t.category is category]

    def replace_tags(self, tags: Sequence[Tag]) -> "CellHeader":
        """New header with the given tags and this header's provenance."""
        return CellHeader(tags, self._provenance)

    def with_tag(self, tag: Tag) -> "CellHeader":
        return CellHeader(self._tags + [tag], self._provenance)

    def with_provenance(self, entry: str) -> "CellHeader":
        return CellHeader(self._tags, self._provenance + [entry])

    def copy(self) -> "CellHeader":
        return CellHeader(self._tags, self._provenance)

    def same_features(self, other: "CellHeader") -> bool:
        """True when both headers have the same feature columns in the same order."""
        return self.feature_names() == other.feature_names()

    def to_line(self, delimiter: str = ",") -> str:
        """Render the column layout of a cell line as one line of text."""
        return delimiter.join(list(ID_COLUMNS) + self.feature_names())

    def __eq__(self, other):
        if not isinstance(other, CellHeader):
            return NotImplemented
        return self._tags == other._tags and self._provenance == other._provenance

    def __repr__(self):
        return (f"CellHeader(n_tags={len(self._tags)}, n_features={self.n_features}, "
                f"provenance={len(self._provenance)})")
