"""
Conversation history handling.

Incoming history comes straight from request bodies, so normalization never
raises: malformed entries are dropped and what remains is bounded in count
and per-message size before it is sent to the model.
"""

import logging
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence

from core.data_models import ConversationRole, ConversationTurn
from services.response_extractor import format_geogebra_block


logger = logging.getLogger(__name__)


MAX_HISTORY_MESSAGES = 8
MAX_MESSAGE_CHARS = 4000
KEEP_HISTORY_MESSAGES = 12

_ALLOWED_ROLES = {role.value for role in ConversationRole}


def _coerce_turn(entry: Any, max_chars: int) -> Optional[ConversationTurn]:
    if isinstance(entry, ConversationTurn):
        role, content = entry.role, entry.content
    elif isinstance(entry, Mapping):
        role, content = entry.get('role'), entry.get('content')
    else:
        return None

    if isinstance(role, ConversationRole):
        role = role.value
    if not isinstance(role, str) or role not in _ALLOWED_ROLES:
        return None
    if not isinstance(content, str):
        return None

    content = content.strip()[:max_chars]
    if not content:
        return None
    return ConversationTurn(role=role, content=content)


def normalize_history(
    history: Any,
    max_messages: int = MAX_HISTORY_MESSAGES,
    max_chars: int = MAX_MESSAGE_CHARS
) -> List[ConversationTurn]:
    """
    Clean and bound prior conversation turns.

    Args:
        history: Anything; only a list/tuple of role/content entries yields turns
        max_messages: Keep at most this many of the most recent turns
        max_chars: Truncate each message to this many characters

    Returns:
        List[ConversationTurn]: Valid turns in their original order
    """
    if not isinstance(history, (list, tuple)):
        if history is not None:
            logger.debug(f"Ignoring non-list history of type {type(history).__name__}")
        return []

    turns = []
    for entry in history:
        turn = _coerce_turn(entry, max_chars)
        if turn is not None:
            turns.append(turn)

    dropped = len(history) - len(turns)
    if dropped:
        logger.debug(f"Dropped {dropped} malformed history entries")

    if max_messages <= 0:
        return []
    return turns[-max_messages:]


def format_assistant_turn(explanation: Optional[str], commands: Sequence[str]) -> str:
    """
    Render an assistant reply for the history: explanation then command block.

    Args:
        explanation: Explanation text
        commands: Commands that were returned

    Returns:
        str: Markdown text, empty when there is nothing to record
    """
    text = str(explanation or '').strip()
    if commands:
        text = f"{text}\n\n{format_geogebra_block(commands)}"
    return text.strip()


def append_exchange(
    history: Sequence[ConversationTurn],
    user_text: str,
    explanation: Optional[str],
    commands: Sequence[str],
    keep: int = KEEP_HISTORY_MESSAGES
) -> List[ConversationTurn]:
    """
    Return a new history with one user/assistant exchange appended.

    Args:
        history: Existing turns
        user_text: What the user asked
        explanation: Explanation returned for it
        commands: Commands returned for it
        keep: Keep at most this many recent turns

    Returns:
        List[ConversationTurn]: The bounded history
    """
    updated = list(history)
    updated.append(ConversationTurn(role=ConversationRole.USER, content=user_text))

    assistant = format_assistant_turn(explanation, commands)
    if assistant:
        updated.append(ConversationTurn(role=ConversationRole.ASSISTANT, content=assistant))

    if keep <= 0:
        return []
    return updated[-keep:]
