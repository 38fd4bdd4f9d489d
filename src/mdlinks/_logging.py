"""Logging configuration for mdlinks.

Modules log through ``logging.getLogger(__name__)``. The CLI calls
``configure_logging`` once; messages go to stderr through rich so stdout
carries only extracted data.

The level comes from the ``logging.level`` config value or the
MDLINKS_LOG_LEVEL environment variable (default WARNING).
"""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "mdlinks"


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a rich stderr handler to the package logger.

    Subsequent calls only update the level.
    """
    logger = logging.getLogger(LOGGER_NAME)

    level_name = (level or os.environ.get("MDLINKS_LOG_LEVEL") or "WARNING").upper()
    resolved = getattr(logging, level_name, logging.WARNING)
    logger.setLevel(resolved)

    if logger.handlers:
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)

    # Avoid duplicate messages through the root logger
    logger.propagate = False
