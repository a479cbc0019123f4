"""
Core interfaces for the GeoGebra natural-language drawing service.

Defines abstract base classes that establish contracts for all major components.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from .data_models import TranslationResult


class ICommandTranslator(ABC):
    """Interface for translating natural language to GeoGebra commands."""

    @abstractmethod
    async def translate(self, user_text: str, history: Optional[Any] = None) -> TranslationResult:
        """Translate user text, with optional prior turns, into a command batch."""
        pass


class ICommandSanitizer(ABC):
    """Interface for filtering candidate command lines."""

    @abstractmethod
    def sanitize(self, lines: Sequence[Any]) -> List[str]:
        """Return the safe, executable subset of the lines, in order."""
        pass


class IGeometrySession(ABC):
    """Interface to a live geometry engine instance.

    The engine itself is external; implementations adapt it so that each
    command reports success or failure.
    """

    @abstractmethod
    def is_ready(self) -> bool:
        """Check whether the engine has finished loading."""
        pass

    @abstractmethod
    def evaluate(self, command: str) -> bool:
        """Apply one command; return False if the engine rejected it."""
        pass
