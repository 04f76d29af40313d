"""Root-level pytest fixtures for the cellsift test suite.

Provides shared configuration fixtures following the Pydantic-based
layering, plus small header/cell builders. Tests should build configs
through these fixtures instead of hand-written dicts.
"""

import io
import logging

import pytest

from cellsift.cells import Cell, CellHeader, Tag, TagCategory
from cellsift.schemas import ParamConfig, UserConfig, resolve_config


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_select_from_config(internal_config):
    ...     stage = build_stage("select", internal_config)
    ...     assert stage.and_mask == 0
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_round(make_config):
    ...     config = make_config(ROUND=4)
    ...     assert config.view.round == 4
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Cell Fixtures
# =============================================================================

@pytest.fixture
def marker_header():
    """Header with two markers, one meta tag and one graph tag."""
    return CellHeader(
        [
            Tag("CD3"),
            Tag("CD8"),
            Tag("slide", TagCategory.META, "S1"),
            Tag("spatial", TagCategory.GRAPH, "radius=100"),
        ],
        ["cellsift ingest"],
    )


@pytest.fixture
def marker_cells():
    """Three cells against ``marker_header``."""
    return [
        Cell.create(0, 0, 1.0, 1.0, [10.0, 0.5]),
        Cell.create(0, 1, 2.0, 2.0, [0.5, 10.0]),
        Cell.create(0, 2, 3.0, 3.0, [10.0, 10.0]),
    ]


@pytest.fixture
def text_out():
    """In-memory text sink for rendering stages."""
    return io.StringIO()


@pytest.fixture
def binary_out():
    """In-memory binary sink for writers."""
    return io.BytesIO()


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest set it up."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
