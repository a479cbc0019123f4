"""
Logging setup driven by LoggingSettings.
"""

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

from .settings import LoggingSettings


def configure_logging(settings: Optional[LoggingSettings] = None) -> logging.Logger:
    """Configure the root logger from settings.

    Args:
        settings: Logging settings; defaults are used when omitted

    Returns:
        The configured root logger
    """
    settings = settings or LoggingSettings()
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.level.upper(), logging.INFO))

    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(settings.format)

    if settings.console_output:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    if settings.file:
        file_handler = RotatingFileHandler(
            settings.file,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root
