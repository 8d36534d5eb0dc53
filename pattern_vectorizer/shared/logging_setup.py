"""
Logging setup for command-line use.

Library modules only create module-level loggers; configuring handlers is
left to the entry point.
"""

import logging
from typing import Optional

from pattern_vectorizer.shared.config import LoggingConfig


def configure_logging(config: Optional[LoggingConfig] = None, verbose: bool = False) -> None:
    """Apply the logging level and format from configuration."""
    config = config or LoggingConfig()
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper(), logging.INFO)

    logging.basicConfig(level=level, format=config.format, force=True)
    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(level))
