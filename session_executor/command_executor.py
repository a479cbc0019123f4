"""
Sequential command executor for a live geometry session.

Applies a command batch strictly in order and stops at the first command the
engine rejects. Already-applied commands stay in effect: the engine has no
undo-on-error, so a failed batch leaves a partial construction.
"""

import logging
import re
from typing import Any, List, Optional

from core.data_models import ExecutionReport, ExecutionState
from core.interfaces import IGeometrySession


logger = logging.getLogger(__name__)


class ExecutionError(Exception):
    """Base exception for command execution errors."""
    pass


class SessionNotReadyError(ExecutionError):
    """Raised when the geometry session has not finished loading."""
    pass


class EmptyBatchError(ExecutionError):
    """Raised when there is nothing to execute."""
    pass


class CommandExecutionError(ExecutionError):
    """Raised when the engine rejects a command."""

    def __init__(self, index: int, command: str, cause: Optional[BaseException] = None):
        message = f"命令执行失败：{command}"
        if cause is not None:
            message = f"{message}（{cause}）"
        super().__init__(message)
        self.index = index
        self.command = command
        self.cause = cause


def normalize_commands(commands: Any) -> List[str]:
    """
    Accept a list of commands or one newline-separated string.

    Args:
        commands: List, tuple, string or None

    Returns:
        List[str]: Trimmed non-empty command lines
    """
    if not commands:
        return []
    if isinstance(commands, (list, tuple)):
        lines = [str(command) for command in commands]
    else:
        lines = re.split(r'\r?\n', str(commands))
    return [line.strip() for line in lines if line.strip()]


class CommandExecutor:
    """
    Applies command batches to a geometry session.

    Holds a reference to the session, never ownership. Assumes exclusive
    access to the session while a batch is applying.
    """

    def __init__(self, session: Optional[IGeometrySession] = None):
        """
        Initialize the executor.

        Args:
            session: Live geometry session; may be attached later
        """
        self.session = session
        self.state = ExecutionState.IDLE
        self.last_applied: List[str] = []
        self.last_report: Optional[ExecutionReport] = None

    def attach(self, session: Optional[IGeometrySession]) -> None:
        """Attach (or detach with None) the geometry session."""
        self.session = session
        self.state = ExecutionState.IDLE

    def is_ready(self) -> bool:
        return self.session is not None and bool(self.session.is_ready())

    def execute(self, commands: Any) -> ExecutionReport:
        """
        Apply commands in order, stopping at the first failure.

        Args:
            commands: Command batch (list or newline-separated string)

        Returns:
            ExecutionReport: The successful report; also stored as last_report

        Raises:
            SessionNotReadyError: If the session is missing or not ready
            EmptyBatchError: If the batch has no commands
            CommandExecutionError: If the engine rejects a command; later
                commands are not attempted
        """
        batch = normalize_commands(commands)
        if not self.is_ready():
            raise SessionNotReadyError("GeoGebra 尚未就绪，请稍等 applet 加载完成")
        if not batch:
            raise EmptyBatchError("没有可执行的 GeoGebra 命令")

        self.state = ExecutionState.PENDING
        attempted: List[str] = []

        for index, command in enumerate(batch):
            self.state = ExecutionState.APPLYING
            attempted.append(command)
            cause = None
            try:
                ok = self.session.evaluate(command)
            except Exception as e:
                ok, cause = False, e

            if not ok:
                error = CommandExecutionError(index, command, cause)
                self._finish(ExecutionReport(
                    state=ExecutionState.FAILED,
                    commands=batch,
                    attempted=attempted,
                    failed_index=index,
                    failed_command=command,
                    error=str(error)
                ))
                logger.warning(f"Command {index + 1}/{len(batch)} failed: {command}")
                if cause is not None:
                    raise error from cause
                raise error

        self.last_applied = batch
        report = ExecutionReport(state=ExecutionState.SUCCESS, commands=batch, attempted=attempted)
        self._finish(report)
        logger.info(f"Applied {len(batch)} commands")
        return report

    def reset(self) -> None:
        """Clear the record, then the construction when the session supports it."""
        self.last_applied = []
        self.last_report = None
        self.state = ExecutionState.IDLE
        reset = getattr(self.session, 'reset', None)
        if callable(reset):
            reset()

    def _finish(self, report: ExecutionReport) -> None:
        self.last_report = report
        self.state = ExecutionState(report.state)
