"""
Extraction of GeoGebra command blocks from model replies.

A reply is free text that may contain one fenced block tagged ``geogebra``;
the block holds one command per line and the rest of the reply is the
explanation shown to the user.
"""

import logging
import re
from typing import Optional

from core.data_models import ExtractionResult
from safety_validator.command_sanitizer import sanitize_commands


logger = logging.getLogger(__name__)


FENCE_TAG = "geogebra"

# The closing fence may follow the last command without a newline.
GEOGEBRA_FENCE = re.compile(r'```\s*' + FENCE_TAG + r'\s*\n(.*?)```', re.IGNORECASE | re.DOTALL)

LINE_SPLIT = re.compile(r'\r?\n')


def extract_geogebra_block(text: Optional[str]) -> ExtractionResult:
    """
    Split a model reply into commands and explanation.

    Args:
        text: Raw model reply; may be empty or None

    Returns:
        ExtractionResult: Sanitized commands from the first geogebra block and
        the reply text outside that block. Without a block, no commands and
        the whole trimmed reply as explanation.
    """
    if not text:
        return ExtractionResult(commands=[], explanation='')

    reply = str(text)
    match = GEOGEBRA_FENCE.search(reply)
    if not match:
        logger.debug("No geogebra block found in model reply")
        return ExtractionResult(commands=[], explanation=reply.strip())

    lines = [line.strip() for line in LINE_SPLIT.split(match.group(1))]
    commands = sanitize_commands(line for line in lines if line)

    explanation = (reply[:match.start()] + reply[match.end():]).strip()

    logger.debug(f"Extracted {len(commands)} commands from geogebra block")
    return ExtractionResult(commands=commands, explanation=explanation)


def format_geogebra_block(commands) -> str:
    """Render commands as a fenced geogebra block."""
    body = '\n'.join(commands)
    return f"```{FENCE_TAG}\n{body}\n```"
