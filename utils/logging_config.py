"""
Logging setup for scripts and services embedding the scheduler.

Library modules only create module-level loggers; configuring handlers is
left to the application, usually via setup_logging(config['logging']).
"""

import logging
import sys
from typing import Any, Dict, Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
VALID_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def setup_logging(settings: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Configure the root logger with a single stdout handler.

    Args:
        settings: ``{'level': 'INFO', 'format': '...'}`` (both optional)

    Returns:
        The root logger
    """
    settings = settings or {}
    level_name = str(settings.get('level', 'INFO')).upper()
    if level_name not in VALID_LEVELS:
        raise ValueError(f'Log level must be one of: {VALID_LEVELS}')

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(settings.get('format', DEFAULT_FORMAT)))
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level_name))

    return root_logger
