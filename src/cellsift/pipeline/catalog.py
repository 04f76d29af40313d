"""Closed catalog of stage kinds.

Maps each stage kind to a constructor configured from the InternalConfig
section of the same name. Collaborators that are not configuration
(output streams, the radial graph) are passed as keyword arguments.
"""

import logging
from typing import TYPE_CHECKING, Callable, Dict

from cellsift.cells.gates import GateMap
from cellsift.contracts.failure import StageConfigError
from cellsift.pipeline.stage import CellStage
from cellsift.pipeline.wire import CellWriter
from cellsift.processors import (
    BuildStage,
    CatStage,
    CleanStage,
    CountStage,
    CutStage,
    IngestStage,
    LogStage,
    PhenoStage,
    RadialStage,
    RoiStage,
    SelectStage,
    ViewStage,
)

if TYPE_CHECKING:
    from cellsift.schemas import InternalConfig

__all__ = ['STAGE_KINDS', 'build_stage', 'build_ingest']

logger = logging.getLogger(__name__)


def _cut(config, **kw):
    return CutStage(config.cut.include, **kw)


def _clean(config, **kw):
    c = config.clean
    return CleanStage(graph=c.graph, meta=c.meta, features=c.features, **kw)


def _pheno(config, **kw):
    return PhenoStage(GateMap(config.pheno.gates), **kw)


def _select(config, **kw):
    s = config.select
    return SelectStage(and_mask=s.and_mask, or_mask=s.or_mask, invert=s.invert, **kw)


def _count(config, **kw):
    return CountStage(**kw)


def _log(config, **kw):
    return LogStage(config.log.columns, **kw)


def _roi(config, **kw):
    return RoiStage(config.roi.polygons, label=config.roi.label, **kw)


def _view(config, **kw):
    v = config.view
    return ViewStage(print_header=v.print_header, header_only=v.header_only,
                     round=v.round, style=v.style, **kw)


def _build(config, **kw):
    return BuildStage(name=config.build.name, radius=config.build.radius, **kw)


def _cat(config, **kw):
    return CatStage(offset=config.cat.offset, **kw)


def _radial(config, **kw):
    return RadialStage(config.radial.bands, **kw)


STAGE_KINDS: Dict[str, Callable[..., CellStage]] = {
    "cut": _cut,
    "clean": _clean,
    "pheno": _pheno,
    "select": _select,
    "count": _count,
    "log": _log,
    "roi": _roi,
    "view": _view,
    "build": _build,
    "cat": _cat,
    "radial": _radial,
}


def build_stage(kind: str, config: "InternalConfig", **collaborators) -> CellStage:
    """Construct a stage of the given kind from its config section.

    Parameters
    ----------
    kind : str
        One of STAGE_KINDS.
    config : InternalConfig
        Resolved runtime configuration.
    **collaborators
        Non-config constructor arguments: ``out`` for view/count,
        ``graph`` for radial, ``cmd`` for any stage.

    Raises
    ------
    StageConfigError
        Unknown kind, or a collaborator the stage does not accept.
    """
    try:
        factory = STAGE_KINDS[kind]
    except KeyError:
        raise StageConfigError(
            f"Unknown stage kind '{kind}', expected one of {sorted(STAGE_KINDS)}"
        ) from None
    try:
        stage = factory(config, **collaborators)
    except TypeError as e:
        raise StageConfigError(f"Cannot build '{kind}' stage: {e}") from e
    logger.debug("Built %s stage", kind)
    return stage


def build_ingest(config: "InternalConfig", sink: CellWriter, **collaborators) -> IngestStage:
    """Construct the ingestion stage from ``config.ingest``."""
    i = config.ingest
    return IngestStage(sink, x_col=i.x_col, y_col=i.y_col, start_col=i.start_col,
                       end_col=i.end_col, id_col=i.id_col, sample_id=i.sample_id,
                       delimiter=i.delimiter, **collaborators)
