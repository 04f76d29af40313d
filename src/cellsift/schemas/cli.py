"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: verbosity, rounding, whether to stop after the header.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import Field, model_validator
from cellsift.schemas.base import CellsiftBaseModel


class CLIConfig(CellsiftBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Notes
    -----
    If ``verbose`` is set but ``log_level`` is not, the level is set to
    DEBUG here (schema responsibility, not runtime).

    Usage
    -----
        cli_cfg = CLIConfig(verbose=True, round=3)

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    verbose: Optional[bool] = None
    round: Optional[int] = Field(None, ge=0, le=9)
    header_only: Optional[bool] = None

    @model_validator(mode="after")
    def infer_debug_from_verbose(self):
        """Verbose runs log at DEBUG unless a level was given explicitly."""
        if self.verbose and self.log_level is None:
            self.log_level = "DEBUG"
        return self

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.verbose is not None:
            overrides["runtime"] = {"verbose": self.verbose}

        view_overrides = {}
        if self.round is not None:
            view_overrides["round"] = self.round
        if self.header_only is not None:
            view_overrides["header_only"] = self.header_only
        if view_overrides:
            overrides["view"] = view_overrides

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
