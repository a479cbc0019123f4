"""
Data models for the GeoGebra natural-language drawing service.

Defines the core data structures used throughout the system with Pydantic validation.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Any, List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


class ConversationRole(str, Enum):
    """Roles allowed in conversation history."""
    USER = "user"
    ASSISTANT = "assistant"


class TranslationMode(str, Enum):
    """Which path produced a translation."""
    FALLBACK = "fallback"
    MODEL = "model"


class ExecutionState(str, Enum):
    """Command executor states."""
    IDLE = "idle"
    PENDING = "pending"
    APPLYING = "applying"
    SUCCESS = "success"
    FAILED = "failed"


class ConversationTurn(BaseModel):
    """One prior message of a conversation."""
    role: ConversationRole = Field(..., description="Who wrote the message")
    content: str = Field(..., description="Message text")

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    def to_message(self) -> Dict[str, str]:
        """Render as a chat-completions message."""
        return {"role": self.role, "content": self.content}


class ExtractionResult(BaseModel):
    """Explanation text plus the ordered commands found alongside it."""
    commands: List[str] = Field(default_factory=list, description="Ordered GeoGebra commands")
    explanation: str = Field(default="", description="Natural-language explanation")

    model_config = ConfigDict(frozen=True)


class TranslationResult(BaseModel):
    """Result of translating one user request into commands."""
    mode: TranslationMode = Field(..., description="fallback or model")
    explanation: str = Field(default="", description="Explanation shown to the user")
    commands: List[str] = Field(default_factory=list, description="Sanitized command batch")
    need_clarification: bool = Field(default=False, description="True when no commands were produced")
    raw_model_output: Optional[str] = Field(None, description="Unmodified model reply")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    @field_validator('commands')
    @classmethod
    def validate_commands(cls, v):
        """Every command must be a non-empty trimmed line."""
        for command in v:
            if not command or command != command.strip() or '\n' in command:
                raise ValueError(f"Invalid command line: {command!r}")
        return v

    @model_validator(mode='after')
    def check_clarification(self):
        """need_clarification mirrors the absence of commands."""
        if self.need_clarification != (len(self.commands) == 0):
            raise ValueError("need_clarification must be true exactly when there are no commands")
        return self

    def to_response(self, include_raw: bool = False) -> Dict[str, Any]:
        """Render the HTTP response payload.

        Args:
            include_raw: Whether to include the raw model output

        Returns:
            JSON-serializable dictionary
        """
        payload: Dict[str, Any] = {
            "explanation": self.explanation,
            "commands": list(self.commands),
            "needClarification": self.need_clarification,
            "mode": self.mode,
        }
        if include_raw:
            payload["raw"] = self.raw_model_output
        return payload


class ExecutionReport(BaseModel):
    """Outcome of applying a command batch to a geometry session."""
    state: ExecutionState = Field(default=ExecutionState.IDLE, description="Final executor state")
    commands: List[str] = Field(default_factory=list, description="The batch that was submitted")
    attempted: List[str] = Field(default_factory=list, description="Commands handed to the engine, in order")
    failed_index: Optional[int] = Field(None, ge=0, description="Index of the failing command")
    failed_command: Optional[str] = Field(None, description="Text of the failing command")
    error: Optional[str] = Field(None, description="Failure message")

    model_config = ConfigDict(use_enum_values=True)

    def is_success(self) -> bool:
        """Check whether every command was applied."""
        return self.state == ExecutionState.SUCCESS
