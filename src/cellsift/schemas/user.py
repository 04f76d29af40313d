"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., X_COL → x_col, ROUND → round).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient: uppercase
and lowercase keys, ints where floats are expected, masks as hex strings,
gates as (low, high) pairs.
"""

from typing import Any, Literal, Optional, Union
from pydantic import Field, field_validator
from cellsift.schemas.base import CellsiftBaseModel
from cellsift.schemas.param import coerce_mask


class UserIngestConfig(CellsiftBaseModel):
    """User-facing ingestion layout."""
    delimiter: Optional[str] = None
    id_col: Optional[int] = None
    x_col: Optional[int] = None
    y_col: Optional[int] = None
    start_col: Optional[int] = None
    end_col: Optional[int] = None
    sample_id: Optional[int] = None

    @field_validator("delimiter", mode="before")
    @classmethod
    def unescape_tab(cls, v):
        """Allow a literal "\\t" for tab-delimited files."""
        if v in ("\\t", "tab", "TAB"):
            return "\t"
        return v

    model_config = CellsiftBaseModel.model_config.copy()
    # delimiters may be whitespace
    model_config.update({"str_strip_whitespace": False})


class UserViewConfig(CellsiftBaseModel):
    """User-facing rendering settings."""
    print_header: Optional[bool] = None
    header_only: Optional[bool] = None
    round: Optional[int] = None
    style: Optional[str] = None

    @field_validator("style", mode="before")
    @classmethod
    def normalize_style(cls, v):
        """Normalize style names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserConfig(CellsiftBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    This config is converted to internal overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(
            X_COL=1, Y_COL=2, START_COL=3, END_COL=12,
            GATES={"CD3": (200, 65535)},
            ROUND=3,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Ingestion (flat aliases)
    delimiter: Optional[str] = Field(None, alias="DELIMITER")
    id_col: Optional[int] = Field(None, alias="ID_COL")
    x_col: Optional[int] = Field(None, alias="X_COL")
    y_col: Optional[int] = Field(None, alias="Y_COL")
    start_col: Optional[int] = Field(None, alias="START_COL")
    end_col: Optional[int] = Field(None, alias="END_COL")
    sample_id: Optional[int] = Field(None, alias="SAMPLE_ID")

    # Stage parameters (flat aliases)
    include: Optional[list[str]] = Field(None, alias="INCLUDE")
    gates: Optional[dict[str, Any]] = Field(None, alias="GATES")
    and_mask: Optional[int] = Field(None, alias="AND_MASK")
    or_mask: Optional[int] = Field(None, alias="OR_MASK")
    invert: Optional[bool] = Field(None, alias="INVERT")
    log_columns: Optional[list[Union[int, str]]] = Field(None, alias="LOG_COLUMNS")
    polygons: Optional[list[list[tuple[float, float]]]] = Field(None, alias="POLYGONS")
    roi_label: Optional[bool] = Field(None, alias="ROI_LABEL")
    graph_radius: Optional[float] = Field(None, alias="GRAPH_RADIUS")
    cat_offset: Optional[int] = Field(None, alias="CAT_OFFSET")
    bands: Optional[list[dict[str, Any]]] = Field(None, alias="BANDS")

    # Rendering (flat aliases)
    round: Optional[int] = Field(None, alias="ROUND")
    style: Optional[str] = Field(None, alias="STYLE")
    print_header: Optional[bool] = Field(None, alias="PRINT_HEADER")

    # Logging
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )
    verbose: Optional[bool] = Field(None, alias="VERBOSE")

    # Nested overrides (advanced users)
    ingest: Optional[UserIngestConfig] = None
    view: Optional[UserViewConfig] = None
    clean: Optional[dict[str, bool]] = None
    build: Optional[dict[str, Any]] = None

    model_config = CellsiftBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore",
                         "str_strip_whitespace": False})

    @field_validator("and_mask", "or_mask", mode="before")
    @classmethod
    def parse_masks(cls, v):
        """Accept masks as ints or strings such as "0x3"."""
        if v is not None:
            return coerce_mask(v)
        return v

    @field_validator("delimiter", mode="before")
    @classmethod
    def unescape_tab(cls, v):
        """Allow a literal "\\t" for tab-delimited files."""
        if v in ("\\t", "tab", "TAB"):
            return "\t"
        return v

    @field_validator("style", "log_level", mode="before")
    @classmethod
    def normalize_names(cls, v):
        """Normalize style to lowercase and log level to uppercase."""
        if isinstance(v, str):
            v = v.strip()
            return v.upper() if v.lower() in {"debug", "info", "warning", "error", "critical"} else v.lower()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Ingest section
        ingest = {}
        for key in ("delimiter", "id_col", "x_col", "y_col", "start_col", "end_col", "sample_id"):
            value = getattr(self, key)
            if value is not None:
                ingest[key] = value
        if self.ingest is not None:
            ingest.update(self.ingest.model_dump(exclude_none=True))
        if ingest:
            overrides["ingest"] = ingest

        if self.include is not None:
            overrides["cut"] = {"include": self.include}

        if self.clean is not None:
            overrides["clean"] = dict(self.clean)

        if self.gates is not None:
            overrides["pheno"] = {"gates": self.gates}

        select = {}
        if self.and_mask is not None:
            select["and_mask"] = self.and_mask
        if self.or_mask is not None:
            select["or_mask"] = self.or_mask
        if self.invert is not None:
            select["invert"] = self.invert
        if select:
            overrides["select"] = select

        if self.log_columns is not None:
            overrides["log"] = {"columns": self.log_columns}

        roi = {}
        if self.polygons is not None:
            roi["polygons"] = self.polygons
        if self.roi_label is not None:
            roi["label"] = self.roi_label
        if roi:
            overrides["roi"] = roi

        # View section
        view = {}
        if self.round is not None:
            view["round"] = self.round
        if self.style is not None:
            view["style"] = self.style
        if self.print_header is not None:
            view["print_header"] = self.print_header
        if self.view is not None:
            view.update(self.view.model_dump(exclude_none=True))
        if view:
            overrides["view"] = view

        build = {}
        if self.graph_radius is not None:
            build["radius"] = self.graph_radius
        if self.build is not None:
            build.update(self.build)
        if build:
            overrides["build"] = build

        if self.cat_offset is not None:
            overrides["cat"] = {"offset": self.cat_offset}

        if self.bands is not None:
            overrides["radial"] = {"bands": self.bands}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        if self.verbose is not None:
            overrides["runtime"] = {"verbose": self.verbose}

        return overrides
