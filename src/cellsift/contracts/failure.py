"""Centralized failure types for the cell stream pipeline.

Configuration errors and fatal record errors abort the pipeline. Contract
violations indicate a stage broke an invariant it promised. Recoverable
data conditions (malformed numerics, short rows, log-domain values) are
handled inside the stages and never raise.
"""

from enum import IntEnum


class StageStatus(IntEnum):
    """Status returned to the dispatch layer.

    OK (0): the stream completed
    ABORT (1): a stage failed; the process should exit non-zero
    """
    OK = 0
    ABORT = 1


class StageConfigError(ValueError):
    """Raised at schema time when a stage cannot be configured.

    Examples: a requested marker is absent from the header, a later stream
    of a concatenation has a different column layout, radial band arrays
    have unequal lengths. Never retried.
    """
    pass


class RecordError(RuntimeError):
    """Raised when a record cannot be processed and the stream must stop."""
    pass


class WireFormatError(RecordError):
    """Raised when the binary cell stream is malformed or truncated."""
    pass


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in stage logic, not bad user input or dirty data.
    It means a stage did not produce the invariants it promised (e.g. a
    cell carries more values than its header has feature columns).

    Key distinction:
    - StageConfigError: user/config error
    - ContractViolation: pipeline bug (programmer error)
    - Recoverable data issues: handled in the stage, never raised
    """
    pass
