"""Root logger configuration for cellsift runs.

Console output goes to standard error so rendered cells on standard
output stay clean.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from cellsift.schemas import InternalConfig

__all__ = ['setup_logging', 'setup_logging_from_config', 'LOG_FORMAT', 'DATE_FORMAT']

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level: Union[str, int] = "INFO",
                  log_path: Optional[Union[str, Path]] = None) -> logging.Logger:
    """Configure the root logger with a console and an optional file handler.

    Existing root handlers are removed first, so calling this twice does
    not duplicate output.

    Parameters
    ----------
    level : str or int
        Level name ("DEBUG", "INFO", ...) or numeric level.
    log_path : str or Path, optional
        When given, also log to this file (parent directories are created).

    Returns
    -------
    logging.Logger
        The root logger.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    # Clear existing handlers and add new ones
    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    return root


def setup_logging_from_config(config: "InternalConfig",
                              log_path: Optional[Union[str, Path]] = None) -> logging.Logger:
    """Configure logging from ``config.logging.level``."""
    return setup_logging(config.logging.level, log_path)
