"""Pipeline modules.

- wire: binary cell stream codec
- stage: stage contracts
- runner: stage driver
- catalog: stage kinds built from configuration
"""

from cellsift.pipeline.wire import CellReader, CellWriter
from cellsift.pipeline.stage import CellStage, LineStage
from cellsift.pipeline.runner import CellPipeline, run_ingest

__all__ = [
    "CellReader",
    "CellWriter",
    "CellStage",
    "LineStage",
    "CellPipeline",
    "run_ingest",
]
