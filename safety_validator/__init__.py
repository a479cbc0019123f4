"""
Safety Validator Component

Removes comments and blocked scripting commands before any command reaches
the geometry engine.
"""

from .command_sanitizer import (
    CommandSanitizer,
    SanitizerViolation,
    sanitize_commands,
    COMMENT_PREFIXES,
    DISALLOWED_COMMANDS
)

__all__ = [
    'CommandSanitizer',
    'SanitizerViolation',
    'sanitize_commands',
    'COMMENT_PREFIXES',
    'DISALLOWED_COMMANDS'
]
