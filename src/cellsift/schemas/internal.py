"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on
other than those whose absence has a defined meaning (id_col, cat offset).

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional, Union
from pydantic import Field, model_validator
from cellsift.schemas.base import CellsiftBaseModel
from cellsift.schemas.param import Gate, RadialBand, MAX_MASK

# phenotype bits available to gates; mirrors cellsift.cells.flags.PHENO_BITS
MAX_GATES = 48


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalIngestConfig(CellsiftBaseModel):
    """Runtime ingestion layout."""
    delimiter: str
    id_col: Optional[int]  # None means cell ids are line numbers
    x_col: int
    y_col: int
    start_col: int
    end_col: int
    sample_id: int

    model_config = CellsiftBaseModel.model_config.copy()
    model_config.update({"str_strip_whitespace": False})


class InternalCutConfig(CellsiftBaseModel):
    """Runtime projection configuration."""
    include: list[str]


class InternalCleanConfig(CellsiftBaseModel):
    """Runtime cleanup switches."""
    graph: bool
    meta: bool
    features: bool


class InternalPhenoConfig(CellsiftBaseModel):
    """Runtime gates."""
    gates: dict[str, Gate]


class InternalSelectConfig(CellsiftBaseModel):
    """Runtime selection masks."""
    and_mask: int = Field(ge=0, le=MAX_MASK)
    or_mask: int = Field(ge=0, le=MAX_MASK)
    invert: bool


class InternalLogConfig(CellsiftBaseModel):
    """Runtime log10 columns."""
    columns: list[Union[int, str]]


class InternalRoiConfig(CellsiftBaseModel):
    """Runtime ROI polygons."""
    label: bool
    polygons: list[list[tuple[float, float]]]


class InternalViewConfig(CellsiftBaseModel):
    """Runtime rendering settings."""
    print_header: bool
    header_only: bool
    round: int = Field(ge=0, le=9)
    style: Literal["compact", "named", "crevasse"]


class InternalBuildConfig(CellsiftBaseModel):
    """Runtime neighbor structure settings."""
    name: str
    radius: float = Field(gt=0)


class InternalCatConfig(CellsiftBaseModel):
    """Runtime concatenation settings."""
    offset: Optional[int]  # None means computed from the preceding streams


class InternalRadialConfig(CellsiftBaseModel):
    """Runtime radial bands."""
    bands: list[RadialBand]


class InternalLoggingConfig(CellsiftBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class InternalRuntimeConfig(CellsiftBaseModel):
    """Runtime runner behavior."""
    verbose: bool
    progress_interval: int = Field(ge=1)


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(CellsiftBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Stage factories receive InternalConfig and access fields directly:

        stage = SelectStage(
            and_mask=config.select.and_mask,
            or_mask=config.select.or_mask,
            invert=config.select.invert,
        )

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code

    All of that happens during config resolution, not in runtime code.
    """

    ingest: InternalIngestConfig
    cut: InternalCutConfig
    clean: InternalCleanConfig
    pheno: InternalPhenoConfig
    select: InternalSelectConfig
    log: InternalLogConfig
    roi: InternalRoiConfig
    view: InternalViewConfig
    build: InternalBuildConfig
    cat: InternalCatConfig
    radial: InternalRadialConfig
    logging: InternalLoggingConfig
    runtime: InternalRuntimeConfig

    model_config = CellsiftBaseModel.model_config.copy()
    model_config.update({"frozen": True})  # Immutable after construction

    @model_validator(mode="after")
    def check_cross_field(self):
        """Checks that span more than one field of a section."""
        if self.ingest.end_col < self.ingest.start_col:
            raise ValueError(
                f"ingest.end_col ({self.ingest.end_col}) must be >= "
                f"ingest.start_col ({self.ingest.start_col})"
            )
        if len(self.pheno.gates) > MAX_GATES:
            raise ValueError(
                f"pheno.gates has {len(self.pheno.gates)} entries; at most {MAX_GATES} allowed"
            )
        labels = [b.label for b in self.radial.bands]
        duplicates = sorted({lab for lab in labels if labels.count(lab) > 1})
        if duplicates:
            raise ValueError(f"radial.bands labels must be unique, repeated: {duplicates}")
        return self
