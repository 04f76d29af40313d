"""ParamConfig: Expert defaults for the cellsift stages.

This module defines the complete default configuration. ALL stage
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives
InternalConfig. Gate and RadialBand are shared with the stages themselves.
"""

from typing import Literal, Optional, Union
from pydantic import Field, field_validator, model_validator
from cellsift.schemas.base import CellsiftBaseModel

MAX_MASK = 0xFFFFFFFFFFFFFFFF
MAX_ID32 = 0xFFFFFFFF


def coerce_mask(v):
    """Accept ints or int strings in any base ("0x3", "0b101", "12")."""
    if isinstance(v, str):
        return int(v.strip(), 0)
    return v


# =============================================================================
# Shared value models
# =============================================================================

class Gate(CellsiftBaseModel):
    """Closed interval [low, high] on one marker."""
    low: float
    high: float

    model_config = CellsiftBaseModel.model_config.copy()
    model_config.update({"frozen": True})

    @model_validator(mode="before")
    @classmethod
    def accept_pair(cls, v):
        """Accept a (low, high) pair as well as a mapping."""
        if isinstance(v, (list, tuple)):
            low, high = v
            return {"low": low, "high": high}
        return v

    @model_validator(mode="after")
    def check_order(self):
        if self.low > self.high:
            raise ValueError(f"Gate low ({self.low}) must not exceed high ({self.high})")
        return self


class RadialBand(CellsiftBaseModel):
    """One annulus: counterparts strictly between inner and outer radius
    whose flags satisfy the AND/OR masks are counted under ``label``."""
    inner: float = Field(ge=0)
    outer: float = Field(gt=0)
    and_mask: int = Field(0, ge=0, le=MAX_MASK)
    or_mask: int = Field(0, ge=0, le=MAX_MASK)
    label: str = Field(min_length=1)

    model_config = CellsiftBaseModel.model_config.copy()
    model_config.update({"frozen": True})

    @field_validator("and_mask", "or_mask", mode="before")
    @classmethod
    def parse_masks(cls, v):
        return coerce_mask(v)

    @model_validator(mode="after")
    def check_radii(self):
        if self.outer <= self.inner:
            raise ValueError(
                f"Band '{self.label}': outer radius ({self.outer}) must exceed inner ({self.inner})"
            )
        return self


# =============================================================================
# Nested Configuration Models
# =============================================================================

class IngestConfig(CellsiftBaseModel):
    """Text-to-binary ingestion layout (zero-based column positions)."""
    delimiter: str = Field(",", min_length=1, max_length=1)
    id_col: Optional[int] = Field(None, ge=0, description="Cell id column; None numbers lines")
    x_col: int = Field(1, ge=0)
    y_col: int = Field(2, ge=0)
    start_col: int = Field(3, ge=0, description="First marker column (inclusive)")
    end_col: int = Field(3, ge=0, description="Last marker column (inclusive)")
    sample_id: int = Field(0, ge=0, le=MAX_ID32)

    model_config = CellsiftBaseModel.model_config.copy()
    # delimiters may be whitespace
    model_config.update({"str_strip_whitespace": False})


class CutConfig(CellsiftBaseModel):
    """Column projection."""
    include: list[str] = Field(default_factory=list)


class CleanConfig(CellsiftBaseModel):
    """Category-wise column removal."""
    graph: bool = False
    meta: bool = False
    features: bool = False


class PhenoConfig(CellsiftBaseModel):
    """Marker gates, in phenotype-bit order."""
    gates: dict[str, Gate] = Field(default_factory=dict)


class SelectConfig(CellsiftBaseModel):
    """Bitwise selection over the combined flag space."""
    and_mask: int = Field(0, ge=0, le=MAX_MASK)
    or_mask: int = Field(0, ge=0, le=MAX_MASK)
    invert: bool = False

    @field_validator("and_mask", "or_mask", mode="before")
    @classmethod
    def parse_masks(cls, v):
        return coerce_mask(v)


class LogConfig(CellsiftBaseModel):
    """Columns to log10-transform, by name or zero-based feature position."""
    columns: list[Union[int, str]] = Field(default_factory=list)


class RoiConfig(CellsiftBaseModel):
    """Polygon regions of interest."""
    label: bool = False
    polygons: list[list[tuple[float, float]]] = Field(default_factory=list)


class ViewConfig(CellsiftBaseModel):
    """Text rendering."""
    print_header: bool = False
    header_only: bool = False
    round: int = Field(2, ge=0, le=9, description="Fractional digits")
    style: Literal["compact", "named", "crevasse"] = "compact"


class BuildConfig(CellsiftBaseModel):
    """Spatial neighbor structure."""
    name: str = Field("spatial", min_length=1)
    radius: float = Field(100.0, gt=0)


class CatConfig(CellsiftBaseModel):
    """Concatenation; offset seeds the second stream's sample-id shift."""
    offset: Optional[int] = Field(None, ge=0, le=MAX_ID32)


class RadialConfig(CellsiftBaseModel):
    """Radial bands."""
    bands: list[RadialBand] = Field(default_factory=list)


class LoggingConfig(CellsiftBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class RuntimeConfig(CellsiftBaseModel):
    """Runner behavior."""
    verbose: bool = False
    progress_interval: int = Field(100000, ge=1, description="Cells between progress logs")


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(CellsiftBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all stage parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    ingest: IngestConfig = Field(default_factory=IngestConfig)
    cut: CutConfig = Field(default_factory=CutConfig)
    clean: CleanConfig = Field(default_factory=CleanConfig)
    pheno: PhenoConfig = Field(default_factory=PhenoConfig)
    select: SelectConfig = Field(default_factory=SelectConfig)
    log: LogConfig = Field(default_factory=LogConfig)
    roi: RoiConfig = Field(default_factory=RoiConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    cat: CatConfig = Field(default_factory=CatConfig)
    radial: RadialConfig = Field(default_factory=RadialConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
