"""
Logging Setup
"""
import logging
from typing import Optional

from leadflow.core.config import Settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for processes embedding the lead engine.

    Args:
        level: Log level name (default: Settings.log_level)
    """
    if level is None:
        level = Settings().log_level

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )
    logging.getLogger(__name__).debug(f"Logging configured at {level.upper()}")
