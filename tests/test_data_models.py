"""
Unit tests for data models.

Tests Pydantic validation and response rendering.
"""

import pytest
from pydantic import ValidationError

from core.data_models import (
    ConversationRole, ConversationTurn, ExecutionReport, ExecutionState,
    ExtractionResult, TranslationMode, TranslationResult
)


class TestConversationTurn:
    """Test cases for ConversationTurn model."""

    def test_valid_turn(self):
        turn = ConversationTurn(role="user", content="画一个圆")

        assert turn.role == ConversationRole.USER
        assert turn.to_message() == {"role": "user", "content": "画一个圆"}

    def test_invalid_role(self):
        with pytest.raises(ValidationError):
            ConversationTurn(role="system", content="x")

    def test_frozen(self):
        turn = ConversationTurn(role="assistant", content="x")

        with pytest.raises(ValidationError):
            turn.content = "y"


class TestTranslationResult:
    """Test cases for TranslationResult model."""

    def test_to_response_without_raw(self):
        result = TranslationResult(
            mode=TranslationMode.MODEL,
            explanation="画圆",
            commands=["O = (0, 0)", "Circle(O, 5)"],
            need_clarification=False,
            raw_model_output="raw text"
        )

        assert result.to_response() == {
            "explanation": "画圆",
            "commands": ["O = (0, 0)", "Circle(O, 5)"],
            "needClarification": False,
            "mode": "model",
        }

    def test_to_response_with_raw(self):
        result = TranslationResult(mode="fallback", explanation="x", commands=[], need_clarification=True)

        payload = result.to_response(include_raw=True)

        assert payload["raw"] is None
        assert payload["mode"] == "fallback"

    def test_clarification_must_match_commands(self):
        with pytest.raises(ValidationError):
            TranslationResult(mode="model", commands=[], need_clarification=False)
        with pytest.raises(ValidationError):
            TranslationResult(mode="model", commands=["A = (0, 0)"], need_clarification=True)

    @pytest.mark.parametrize("command", ["", " A = (0, 0)", "A = (0, 0)\nB = (1, 1)"])
    def test_commands_must_be_clean_lines(self, command):
        with pytest.raises(ValidationError):
            TranslationResult(mode="model", commands=[command], need_clarification=False)

    def test_immutable(self):
        result = TranslationResult(mode="fallback", commands=[], need_clarification=True)

        with pytest.raises(ValidationError):
            result.explanation = "changed"


class TestExecutionReport:
    """Test cases for ExecutionReport model."""

    def test_defaults(self):
        report = ExecutionReport()

        assert report.state == ExecutionState.IDLE
        assert not report.is_success()

    def test_negative_index_rejected(self):
        with pytest.raises(ValidationError):
            ExecutionReport(state="failed", failed_index=-1)


def test_extraction_result_defaults():
    result = ExtractionResult()

    assert result.commands == []
    assert result.explanation == ""
