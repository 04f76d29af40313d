"""One cell record and its text renderings.

A Cell holds a packed identity, a structural flag mask (cflag), a
phenotype flag mask (pflag), x/y coordinates and a float32 value vector
aligned with the header's feature tags. The vector length is fixed when
the cell is built; stages that reshape it produce a new Cell through
with_cols().
"""

import math
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import numpy as np

from cellsift.cells.identity import CellId

if TYPE_CHECKING:
    from cellsift.cells.header import CellHeader

__all__ = ['Cell', 'format_rounded', 'format_trimmed']


def _as_float32(values) -> np.ndarray:
    return np.asarray(values, dtype=np.float32).reshape(-1)


@dataclass
class Cell:
    """Single measurement row.

    Attributes
    ----------
    id : int
        Packed 64-bit identity (see CellId).
    cflag : int
        Structural flag mask.
    pflag : int
        Phenotype flag mask.
    x, y : float
        Coordinates, stored in single precision.
    cols : np.ndarray
        float32 feature values aligned with the header's feature tags.
    """

    id: int = 0
    cflag: int = 0
    pflag: int = 0
    x: float = 0.0
    y: float = 0.0
    cols: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float32))

    def __post_init__(self):
        self.cols = _as_float32(self.cols)
        self.x = float(np.float32(self.x))
        self.y = float(np.float32(self.y))

    @classmethod
    def create(cls, sample_id: int, cell_id: int, x: float = 0.0, y: float = 0.0,
               cols=(), cflag: int = 0, pflag: int = 0) -> "Cell":
        return cls(CellId(sample_id, cell_id).pack(), cflag, pflag, x, y, cols)

    @property
    def cell_id_parts(self) -> CellId:
        return CellId.unpack(self.id)

    @property
    def sample_id(self) -> int:
        return CellId.unpack(self.id).sample_id

    @property
    def cell_id(self) -> int:
        return CellId.unpack(self.id).cell_id

    def set_sample_id(self, sample_id: int) -> None:
        self.id = CellId.unpack(self.id).with_sample(sample_id).pack()

    def set_cell_id(self, cell_id: int) -> None:
        self.id = CellId.unpack(self.id).with_cell(cell_id).pack()

    @property
    def flags(self) -> int:
        """Combined structural and phenotype bit-space."""
        return self.cflag | self.pflag

    def with_cols(self, cols) -> "Cell":
        """Copy of this cell with a new value vector."""
        return replace(self, cols=_as_float32(cols))

    def render(self, round: int = 2) -> str:
        """Compact comma-delimited line.

        Coordinates are rounded to nearest, feature values truncated.
        """
        parts = [str(self.sample_id), str(self.cell_id), str(self.cflag), str(self.pflag),
                 format_rounded(self.x, round), format_rounded(self.y, round)]
        parts.extend(format_trimmed(v, round) for v in self.cols)
        return ",".join(parts)

    def render_named(self, header: "CellHeader", round: int = 2) -> str:
        """Named-field line, ``name:value`` per field, rounded like render()."""
        parts = [f"sid:{self.sample_id}", f"cid:{self.cell_id}",
                 f"cflag:{self.cflag}", f"pflag:{self.pflag}",
                 f"x:{format_rounded(self.x, round)}", f"y:{format_rounded(self.y, round)}"]
        names = header.feature_names()
        parts.extend(f"{name}:{format_trimmed(v, round)}"
                     for name, v in zip(names, self.cols))
        return ",".join(parts)

    def render_crevasse(self, header: "CellHeader") -> str:
        """Cell id, coordinates and feature values only, in ``%g`` form.

        The line always has a delimiter after y, so a cell without features
        ends with a trailing comma.
        """
        values = ",".join(f"{float(v):g}" for _, v in zip(header.feature_names(), self.cols))
        return f"{self.cell_id},{self.x:g},{self.y:g},{values}"

    def __eq__(self, other):
        if not isinstance(other, Cell):
            return NotImplemented
        return (self.id == other.id and self.cflag == other.cflag
                and self.pflag == other.pflag and self.x == other.x
                and self.y == other.y and np.array_equal(self.cols, other.cols, equal_nan=True))


def _nonfinite(value: float) -> str:
    if math.isnan(value):
        return "nan"
    return "inf" if value > 0 else "-inf"


def format_rounded(value: float, digits: int) -> str:
    """Round to nearest at ``digits`` fractional digits.

    Integral results print without a decimal point, everything else prints
    fixed-point with exactly ``digits`` digits.

    >>> format_rounded(2.0, 2), format_rounded(1.234, 2), format_rounded(1.5, 2)
    ('2', '1.23', '1.50')
    """
    value = float(value)
    if not math.isfinite(value):
        return _nonfinite(value)
    scale = 10.0 ** digits
    rounded = math.copysign(math.floor(abs(value) * scale + 0.5), value) / scale
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.{digits}f}"


def format_trimmed(value: float, digits: int) -> str:
    """Truncate to ``digits`` fractional digits, then trim trailing zeros.

    >>> format_trimmed(1.239, 2), format_trimmed(1.5, 2), format_trimmed(3.0, 2)
    ('1.23', '1.5', '3')
    """
    value = float(value)
    if not math.isfinite(value):
        return _nonfinite(value)
    out = f"{value:f}"
    point = out.find(".")
    if point != -1:
        out = out[:point + digits + 1] if digits > 0 else out[:point]
        if "." in out:
            out = out.rstrip("0").rstrip(".")
    if out in ("-0", "-", ""):
        out = "0"
    return out

