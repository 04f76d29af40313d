"""Pydantic configuration schemas for the cellsift stages.

All configuration validation, coercion, and normalization happens at
schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
Gate, RadialBand : class
    Value models shared with the stages
"""

from cellsift.schemas.resolve import resolve_config, deep_merge
from cellsift.schemas.internal import InternalConfig
from cellsift.schemas.param import ParamConfig, Gate, RadialBand
from cellsift.schemas.user import UserConfig
from cellsift.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'deep_merge',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
    'Gate',
    'RadialBand',
]
