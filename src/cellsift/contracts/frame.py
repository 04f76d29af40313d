"""DataFrame export contract.

Enforces the guarantee that an exported frame contains the identity
columns, well-formed identities, and one column per header feature.
"""

from typing import Optional

import pandas as pd

from cellsift.cells.frame import IDENTITY_COLUMNS
from cellsift.cells.header import CellHeader
from cellsift.contracts.base import require


def assert_frame_output(df: pd.DataFrame, header: Optional[CellHeader] = None,
                        min_expected_rows: int = 0) -> None:
    """Enforce the frame export contract.

    Called after cells_to_frame(). Verifies that the output DataFrame
    has required columns and data is well-formed. Feature values may be
    NaN (short vectors, passed-through log values); identities may not.

    Parameters
    ----------
    df : pd.DataFrame
        Output from cells_to_frame()
    header : CellHeader, optional
        When given, the feature columns must match its feature names.
    min_expected_rows : int, optional
        Minimum number of rows expected (default 0, allows empty streams)

    Raises
    ------
    ContractViolation
        If structural requirements are violated
    """
    require(
        isinstance(df, pd.DataFrame),
        f"Frame contract violated: output is {type(df)}, expected DataFrame"
    )

    for col in IDENTITY_COLUMNS:
        require(
            col in df.columns,
            f"Frame contract violated: missing required column '{col}'"
        )

    if len(df) > 0:
        require(
            not df[IDENTITY_COLUMNS].isna().any().any(),
            "Frame contract violated: identity columns must not contain NaN"
        )

    if header is not None:
        features = list(df.columns[len(IDENTITY_COLUMNS):])
        require(
            features == header.feature_names(),
            f"Frame contract violated: feature columns {features} "
            f"do not match header {header.feature_names()}"
        )

    require(
        len(df) >= min_expected_rows,
        f"Frame contract violated: got {len(df)} cells, expected >= {min_expected_rows}"
    )
