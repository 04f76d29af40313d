"""Invariant checks on cell streams.

Stages call require() where a header or cell must satisfy a shape that
an earlier stage promised, e.g. a cell never carrying more values than
its header declares features.
"""

from cellsift.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Raise ContractViolation when ``condition`` is false.

    Parameters
    ----------
    condition : bool
        Invariant on the current header or cell.
    message : str
        Description of the broken invariant.

    Raises
    ------
    ContractViolation
        The stream is internally inconsistent; not recoverable.

    Examples
    --------
    >>> require(len(cell.cols) <= header.n_features, "cell has more values than features")
    """
    if not condition:
        raise ContractViolation(message)
