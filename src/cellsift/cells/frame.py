"""Export a header and its cells to a pandas DataFrame."""

import logging
from typing import Iterable

import numpy as np
import pandas as pd

from cellsift.cells.cell import Cell
from cellsift.cells.header import CellHeader

__all__ = ['cells_to_frame', 'IDENTITY_COLUMNS']

logger = logging.getLogger(__name__)

IDENTITY_COLUMNS = ["sample_id", "cell_id", "cflag", "pflag", "x", "y"]


def cells_to_frame(header: CellHeader, cells: Iterable[Cell]) -> pd.DataFrame:
    """Build a DataFrame with one row per cell.

    Parameters
    ----------
    header : CellHeader
        Stream header; its feature names become the value columns.
    cells : iterable of Cell
        Cells in stream order.

    Returns
    -------
    pd.DataFrame
        Columns ``sample_id, cell_id, cflag, pflag, x, y`` followed by the
        feature names. Cells shorter than the header are padded with NaN.
    """
    names = header.feature_names()
    n = len(names)
    meta_rows = []
    values = []
    for cell in cells:
        meta_rows.append((cell.sample_id, cell.cell_id, cell.cflag, cell.pflag, cell.x, cell.y))
        row = np.full(n, np.nan, dtype=np.float32)
        k = min(len(cell.cols), n)
        row[:k] = cell.cols[:k]
        values.append(row)

    df = pd.DataFrame(meta_rows, columns=IDENTITY_COLUMNS)
    df = df.astype({"sample_id": "uint32", "cell_id": "uint32",
                    "cflag": "uint64", "pflag": "uint64",
                    "x": "float32", "y": "float32"})
    feature_block = np.vstack(values) if values else np.zeros((0, n), dtype=np.float32)
    features = pd.DataFrame(feature_block, columns=names, index=df.index)
    out = pd.concat([df, features], axis=1)
    logger.debug("Exported %d cells x %d features", len(out), n)
    return out
