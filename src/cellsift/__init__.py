"""`cellsift` - streaming stages over spatial single-cell tables.

Subpackages:
- cells: identity, header, record, geometry and graph types
- pipeline: wire codec, stage contract, runner, catalog
- processors: the stage implementations
- schemas: layered pydantic configuration
- contracts: invariant checks and error types
"""

__version__ = "0.1.0"
