"""Radial neighborhood banding.

For every subject cell, count the graph cells lying in each band
(annulus) around it whose flags satisfy the band's AND/OR masks. The
counts are appended to the subject's feature vector, one column per band.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

import numpy as np
from pydantic import ValidationError

from cellsift.cells.cell import Cell
from cellsift.cells.flags import flags_match_array
from cellsift.cells.graph import CellGraph
from cellsift.cells.header import CellHeader, Tag, TagCategory
from cellsift.contracts.failure import StageConfigError
from cellsift.pipeline.stage import CellStage
from cellsift.schemas.param import RadialBand

__all__ = ['RadialStage']

logger = logging.getLogger(__name__)


def _as_band(band) -> RadialBand:
    if isinstance(band, RadialBand):
        return band
    return RadialBand.model_validate(band)


class RadialStage(CellStage):
    """Append per-band neighbor counts to every cell.

    A counterpart belongs to a band when its distance ``d`` from the
    subject satisfies ``inner < d < outer`` and its combined flags pass
    the band's masks. The subject itself is never counted.

    Parameters
    ----------
    bands : sequence of RadialBand (or mappings)
        Non-empty, labels unique.
    graph : CellGraph
        Neighbor structure from the build stage. Required before the
        header is processed.
    """

    kind = "radial"

    def __init__(self, bands: Sequence, graph: Optional[CellGraph] = None,
                 cmd: Optional[str] = None):
        super().__init__(cmd)
        try:
            self.bands: List[RadialBand] = [_as_band(b) for b in bands]
        except ValidationError as e:
            raise StageConfigError(f"Invalid radial band: {e}") from e
        if not self.bands:
            raise StageConfigError("Radial banding needs at least one band")
        labels = [b.label for b in self.bands]
        duplicates = sorted({lab for lab in labels if labels.count(lab) > 1})
        if duplicates:
            raise StageConfigError(f"Radial band labels must be unique, repeated: {duplicates}")

        self.graph = graph
        self.max_outer = max(b.outer for b in self.bands)
        self._n_prev = 0
        logger.info("RadialStage initialized: %d bands, max outer radius %s",
                    len(self.bands), self.max_outer)

    @classmethod
    def from_arrays(cls, inner: Sequence[float], outer: Sequence[float],
                    or_masks: Sequence[int], and_masks: Sequence[int],
                    labels: Sequence[str], graph: Optional[CellGraph] = None,
                    cmd: Optional[str] = None) -> "RadialStage":
        """Build from parallel per-band arrays.

        Raises
        ------
        StageConfigError
            If the arrays are empty or differ in length.
        """
        arrays = {"inner": inner, "outer": outer, "or_masks": or_masks,
                  "and_masks": and_masks, "labels": labels}
        lengths = {name: len(values) for name, values in arrays.items()}
        if len(set(lengths.values())) != 1:
            raise StageConfigError(f"Radial band arrays differ in length: {lengths}")
        if lengths["inner"] == 0:
            raise StageConfigError("Radial band arrays are empty")
        bands = [
            {"inner": i, "outer": o, "or_mask": om, "and_mask": am, "label": lab}
            for i, o, om, am, lab in zip(inner, outer, or_masks, and_masks, labels)
        ]
        return cls(bands, graph=graph, cmd=cmd)

    @property
    def labels(self) -> List[str]:
        return [b.label for b in self.bands]

    def process_header(self, header: CellHeader) -> CellHeader:
        if self.graph is None:
            raise StageConfigError("Radial banding needs a graph; run the build stage first")
        clashes = [lab for lab in self.labels if header.has_tag(lab)]
        if clashes:
            raise StageConfigError(f"Radial band label(s) already used in header: {clashes}")
        self._n_prev = header.n_features
        tags = header.tags + [Tag(lab, TagCategory.FEATURE) for lab in self.labels]
        self.header = header.replace_tags(tags).with_provenance(self.provenance_entry)
        return self.header

    def classify(self, cell: Cell) -> np.ndarray:
        """Per-band counterpart counts for one subject cell."""
        counts = np.zeros(len(self.bands), dtype=np.float32)
        idx = self.graph.neighbors_within(cell.x, cell.y, self.max_outer)
        if idx.size:
            idx = idx[self.graph.ids[idx] != np.uint64(cell.id)]
        if idx.size == 0:
            return counts
        d = self.graph.distances(cell.x, cell.y, idx)
        flags = self.graph.flags[idx]
        for k, band in enumerate(self.bands):
            in_ring = (d > band.inner) & (d < band.outer)
            counts[k] = np.count_nonzero(in_ring & flags_match_array(flags, band.and_mask, band.or_mask))
        return counts

    def classify_many(self, cells: Iterable[Cell], workers: Optional[int] = None) -> np.ndarray:
        """Counts for many subjects, evaluated in a thread pool.

        Returns
        -------
        np.ndarray, shape (n_cells, n_bands)
            Rows in input order; equal to calling ``classify`` serially.
        """
        if self.graph is None:
            raise StageConfigError("Radial banding needs a graph; run the build stage first")
        cells = list(cells)
        if not cells:
            return np.zeros((0, len(self.bands)), dtype=np.float32)
        # build the tree before the workers share it
        _ = self.graph.tree
        with ThreadPoolExecutor(max_workers=workers) as ex:
            rows = list(ex.map(self.classify, cells))
        return np.vstack(rows)

    def process_cell(self, cell: Cell) -> Optional[Cell]:
        cols = cell.cols
        if len(cols) < self._n_prev:
            pad = np.full(self._n_prev - len(cols), np.nan, dtype=np.float32)
            cols = np.concatenate([cols, pad])
        return cell.with_cols(np.concatenate([cols, self.classify(cell)]))
