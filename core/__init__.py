"""
Core Interfaces and Data Models

Defines the interfaces and data structures shared by the translation service
and the command executor.
"""

from .interfaces import (
    ICommandTranslator,
    ICommandSanitizer,
    IGeometrySession
)
from .data_models import (
    ConversationRole,
    ConversationTurn,
    ExecutionReport,
    ExecutionState,
    ExtractionResult,
    TranslationMode,
    TranslationResult
)
from .base_component import BaseComponent

__all__ = [
    'ICommandTranslator',
    'ICommandSanitizer',
    'IGeometrySession',
    'ConversationRole',
    'ConversationTurn',
    'ExecutionReport',
    'ExecutionState',
    'ExtractionResult',
    'TranslationMode',
    'TranslationResult',
    'BaseComponent'
]
