"""
Command Sanitizer Component

Filters candidate GeoGebra command lines down to a safe, executable subset.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Pattern, Sequence, Tuple

from core.interfaces import ICommandSanitizer


logger = logging.getLogger(__name__)


COMMENT_PREFIXES: Tuple[str, ...] = ('//', '#', '/*', '*/')

# Scripting commands run arbitrary side effects outside the construction
# model and may silently no-op in embedded applets.
DISALLOWED_COMMANDS: Tuple[str, ...] = (
    'SetClickScript',
    'SetUpdateScript',
    'RunClickScript',
    'RunUpdateScript',
    'Execute',
    'Button',
)


def _build_disallowed_pattern(names: Iterable[str]) -> Pattern[str]:
    alternatives = '|'.join(re.escape(name) for name in names)
    return re.compile(rf'^(?:{alternatives})\s*[(\[]', re.IGNORECASE)


DISALLOWED_PATTERN = _build_disallowed_pattern(DISALLOWED_COMMANDS)


@dataclass
class SanitizerViolation:
    """A candidate line that was dropped, and why."""
    index: int
    line: str
    reason: str  # 'empty', 'comment', 'disallowed'


def _coerce(line: Any) -> str:
    if line is None:
        return ''
    return str(line).strip()


def _classify(line: str, pattern: Pattern[str] = DISALLOWED_PATTERN) -> Optional[str]:
    """Return the reason a trimmed line must be dropped, or None if it is safe."""
    if not line:
        return 'empty'
    if line.startswith(COMMENT_PREFIXES):
        return 'comment'
    if pattern.match(line):
        return 'disallowed'
    return None


def sanitize_commands(lines: Optional[Iterable[Any]]) -> List[str]:
    """Filter candidate lines down to clean commands.

    Every element is coerced to text and trimmed; blank lines, comment lines
    and disallowed scripting commands are dropped. Order is preserved and the
    function is idempotent.

    Args:
        lines: Candidate lines; may contain non-strings or None

    Returns:
        List[str]: Clean commands in their original order
    """
    if lines is None:
        return []
    if isinstance(lines, str):
        lines = [lines]

    clean = []
    for raw in lines:
        line = _coerce(raw)
        if _classify(line) is None:
            clean.append(line)
    return clean


class CommandSanitizer(ICommandSanitizer):
    """
    Sanitizer that logs what it drops.

    Wraps sanitize_commands with an optional extended disallow-list and
    violation reporting for diagnostics.
    """

    def __init__(self, extra_disallowed: Sequence[str] = ()):
        """
        Initialize the sanitizer.

        Args:
            extra_disallowed: Additional command names to block
        """
        self.disallowed = tuple(DISALLOWED_COMMANDS) + tuple(extra_disallowed)
        self._pattern = (
            DISALLOWED_PATTERN if not extra_disallowed
            else _build_disallowed_pattern(self.disallowed)
        )
        self.dropped_count = 0

    def violations(self, lines: Optional[Iterable[Any]]) -> List[SanitizerViolation]:
        """
        Report every line that would be dropped.

        Args:
            lines: Candidate lines

        Returns:
            List[SanitizerViolation]: Dropped lines with their reasons
        """
        if lines is None:
            return []
        if isinstance(lines, str):
            lines = [lines]

        found = []
        for index, raw in enumerate(lines):
            line = _coerce(raw)
            reason = _classify(line, self._pattern)
            if reason is not None:
                found.append(SanitizerViolation(index=index, line=line, reason=reason))
        return found

    def sanitize(self, lines: Optional[Iterable[Any]]) -> List[str]:
        """
        Filter candidate lines, logging blocked commands.

        Args:
            lines: Candidate lines

        Returns:
            List[str]: Clean commands in order
        """
        if lines is None:
            return []
        if isinstance(lines, str):
            lines = [lines]
        lines = [_coerce(raw) for raw in lines]

        dropped = set()
        for violation in self.violations(lines):
            dropped.add(violation.index)
            if violation.reason == 'disallowed':
                logger.warning(f"Blocked scripting command: {violation.line}")
            elif violation.reason == 'comment':
                logger.debug(f"Dropped comment line: {violation.line}")
        self.dropped_count += len(dropped)

        return [line for index, line in enumerate(lines) if index not in dropped]
