"""Polygon regions of interest and point containment.

Containment uses the ray-crossing (even-odd) rule with half-open edges:
an edge is counted when the point's y lies in [min(y_i, y_j), max(y_i, y_j))
and the crossing lies strictly to the right of the point. On the unit
square the left and bottom edges are inside and the right and top edges
are outside; polygons tiling the plane assign every shared-edge point to
exactly one tile.
"""

import logging
import re
from typing import Iterable, List, Sequence, Tuple

import numpy as np

__all__ = ['Polygon', 'parse_polygons']

logger = logging.getLogger(__name__)

_PAIR_SEP = re.compile(r"[\s;]+")


class Polygon:
    """Closed polygon given by its vertices (the closing edge is implicit).

    Parameters
    ----------
    vertices : sequence of (x, y)
        At least three vertices.
    name : str, optional
        Label carried for reporting.

    Examples
    --------
    >>> square = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
    >>> square.contains(0.5, 0.5), square.contains(2, 2)
    (True, False)
    """

    def __init__(self, vertices: Sequence[Tuple[float, float]], name: str = ""):
        verts = np.asarray(vertices, dtype=np.float64)
        if verts.ndim != 2 or verts.shape[1] != 2:
            raise ValueError(f"Polygon vertices must be (x, y) pairs, got shape {verts.shape}")
        if len(verts) < 3:
            raise ValueError(f"Polygon needs at least 3 vertices, got {len(verts)}")
        self.vertices = verts
        self.name = name

        # edge endpoints, edge i runs from vertex i to vertex i+1 (wrapping)
        self._x0 = verts[:, 0]
        self._y0 = verts[:, 1]
        self._x1 = np.roll(self._x0, -1)
        self._y1 = np.roll(self._y0, -1)
        self.bbox = (verts[:, 0].min(), verts[:, 1].min(), verts[:, 0].max(), verts[:, 1].max())

    def __len__(self):
        return len(self.vertices)

    def __repr__(self):
        return f"Polygon(name={self.name!r}, n_vertices={len(self)})"

    def contains(self, x: float, y: float) -> bool:
        """Ray-crossing containment of a single point."""
        x = float(x)
        y = float(y)
        spans = (self._y0 > y) != (self._y1 > y)
        if not spans.any():
            return False
        x0 = self._x0[spans]
        y0 = self._y0[spans]
        x1 = self._x1[spans]
        y1 = self._y1[spans]
        x_cross = x0 + (y - y0) * (x1 - x0) / (y1 - y0)
        return bool(np.count_nonzero(x < x_cross) % 2)

    def contains_points(self, xs, ys) -> np.ndarray:
        """Vectorized containment; returns a boolean array."""
        xs = np.asarray(xs, dtype=np.float64).reshape(-1, 1)
        ys = np.asarray(ys, dtype=np.float64).reshape(-1, 1)
        spans = (self._y0 > ys) != (self._y1 > ys)
        with np.errstate(divide="ignore", invalid="ignore"):
            x_cross = self._x0 + (ys - self._y0) * (self._x1 - self._x0) / (self._y1 - self._y0)
        crossings = np.count_nonzero(spans & (xs < x_cross), axis=1)
        return (crossings % 2).astype(bool)


def _parse_vertices(text: str) -> List[Tuple[float, float]]:
    vertices = []
    for pair in _PAIR_SEP.split(text.strip()):
        if not pair:
            continue
        parts = pair.split(",")
        if len(parts) != 2:
            raise ValueError(f"Malformed polygon vertex '{pair}', expected 'x,y'")
        vertices.append((float(parts[0]), float(parts[1])))
    return vertices


def parse_polygons(lines: Iterable[str]) -> List[Polygon]:
    """Parse one polygon per line.

    Each line is an optional ``name:`` prefix followed by ``x,y`` vertex
    pairs separated by whitespace or ``;``. Blank lines and lines starting
    with ``#`` are skipped.

    >>> [p.name for p in parse_polygons(["tumor: 0,0 4,0 4,4", "0,0;1,0;0,1"])]
    ['tumor', '']
    """
    polygons = []
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        name = ""
        if ":" in line:
            name, line = line.split(":", 1)
            name = name.strip()
        try:
            polygons.append(Polygon(_parse_vertices(line), name=name))
        except ValueError as e:
            raise ValueError(f"Polygon line {lineno}: {e}") from e
    logger.debug("Parsed %d polygons", len(polygons))
    return polygons
