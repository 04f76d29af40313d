"""Pipeline contracts: fail-fast enforcement of stage invariants.

This package enforces semantic guarantees between pipeline stages.
Contracts fail immediately and loudly when stages don't produce their
promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Stages handle dirty-data edge cases
"""

from cellsift.contracts.failure import (
    ContractViolation,
    RecordError,
    StageConfigError,
    StageStatus,
    WireFormatError,
)
from cellsift.contracts.base import require
from cellsift.contracts.header import assert_header_consistent, assert_cell_shape
from cellsift.contracts.frame import assert_frame_output

__all__ = [
    "ContractViolation",
    "RecordError",
    "StageConfigError",
    "StageStatus",
    "WireFormatError",
    "require",
    "assert_header_consistent",
    "assert_cell_shape",
    "assert_frame_output",
]
