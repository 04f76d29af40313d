"""Header and cell shape contracts.

Enforces the guarantees every stage relies on: tag names are unique
within a header, and no cell carries more values than its header has
feature columns.
"""

from cellsift.cells.cell import Cell
from cellsift.cells.header import CellHeader
from cellsift.contracts.base import require


def assert_header_consistent(header: CellHeader) -> None:
    """Enforce the header contract.

    Called by the runner on every header a stage emits.

    Parameters
    ----------
    header : CellHeader
        Header returned by ``process_header``.

    Raises
    ------
    ContractViolation
        If the object is not a header or a tag name repeats.
    """
    require(
        isinstance(header, CellHeader),
        f"Header contract violated: got {type(header)}, expected CellHeader"
    )

    names = header.names()
    seen = set()
    duplicates = []
    for name in names:
        if name in seen:
            duplicates.append(name)
        seen.add(name)
    require(
        not duplicates,
        f"Header contract violated: duplicate tag name(s) {sorted(set(duplicates))}"
    )


def assert_cell_shape(cell: Cell, header: CellHeader) -> None:
    """Enforce the cell contract against the header currently in force.

    Raises
    ------
    ContractViolation
        If the cell's value vector is longer than the header's feature
        column count.
    """
    require(
        len(cell.cols) <= header.n_features,
        f"Cell contract violated: cell {cell.sample_id}:{cell.cell_id} has "
        f"{len(cell.cols)} values but header has {header.n_features} feature columns"
    )
