"""
Configuration Management System

Handles the model API key, HTTP settings, history limits and logging for the
GeoGebra natural-language drawing service.
"""

from .config_manager import ConfigManager
from .logging_setup import configure_logging
from .settings import (
    LLMSettings,
    HistorySettings,
    WebInterfaceSettings,
    LoggingSettings,
    SystemSettings
)

__all__ = [
    'ConfigManager',
    'configure_logging',
    'LLMSettings',
    'HistorySettings',
    'WebInterfaceSettings',
    'LoggingSettings',
    'SystemSettings'
]
