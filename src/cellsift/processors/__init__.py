"""Cell stream stages.

- cut: keep named feature columns
- clean: drop tag categories
- pheno: threshold gating into phenotype bits
- select: bitwise selection
- count: cell counting
- log: log10 transform
- roi: polygon containment
- view: text rendering
- build: spatial graph construction
- cat: multi-stream concatenation
- radial: radial neighborhood banding
- ingest: delimited text to binary
"""

from cellsift.processors.cut import CutStage
from cellsift.processors.clean import CleanStage
from cellsift.processors.pheno import PhenoStage
from cellsift.processors.select import SelectStage
from cellsift.processors.count import CountStage
from cellsift.processors.log import LogStage
from cellsift.processors.roi import RoiStage
from cellsift.processors.view import ViewStage
from cellsift.processors.build import BuildStage
from cellsift.processors.cat import CatStage
from cellsift.processors.radial import RadialStage
from cellsift.processors.ingest import IngestStage, header_from_columns

__all__ = [
    "CutStage",
    "CleanStage",
    "PhenoStage",
    "SelectStage",
    "CountStage",
    "LogStage",
    "RoiStage",
    "ViewStage",
    "BuildStage",
    "CatStage",
    "RadialStage",
    "IngestStage",
    "header_from_columns",
]
