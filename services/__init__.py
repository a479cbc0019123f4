"""
Translation Service Component

Translates natural language to GeoGebra commands using a chat model, with a
rule-based fallback when no model key is configured.
"""

from .command_translator import GeometryCommandTranslator, InputValidationError, PromptTemplates
from .fallback_generator import FallbackGenerator, FallbackRule, rule_based_fallback
from .history_normalizer import append_exchange, format_assistant_turn, normalize_history
from .llm_client import ChatCompletionsClient, LLMResponse, LLMServiceError
from .response_extractor import extract_geogebra_block

__all__ = [
    'GeometryCommandTranslator',
    'InputValidationError',
    'PromptTemplates',
    'FallbackGenerator',
    'FallbackRule',
    'rule_based_fallback',
    'append_exchange',
    'format_assistant_turn',
    'normalize_history',
    'ChatCompletionsClient',
    'LLMResponse',
    'LLMServiceError',
    'extract_geogebra_block'
]
