"""
Session Executor Component

Applies translated command batches to a live geometry session, one request at
a time per conversation.
"""

from .command_executor import (
    CommandExecutor,
    CommandExecutionError,
    EmptyBatchError,
    ExecutionError,
    SessionNotReadyError,
    normalize_commands
)
from .request_guard import CancellationToken, RequestGuard, TranslationSession
from .sessions import AppletApiSession

__all__ = [
    'CommandExecutor',
    'CommandExecutionError',
    'EmptyBatchError',
    'ExecutionError',
    'SessionNotReadyError',
    'normalize_commands',
    'CancellationToken',
    'RequestGuard',
    'TranslationSession',
    'AppletApiSession'
]
