"""
LLM Output Helpers
==================

Parsing and logging helpers for generative output.

Generated strategy output arrives as free text that is supposed to be
JSON. parse_json_robust() recovers the payload from the usual damage
(markdown fences, prose before/after, several candidate blocks) and
never raises.
"""

import json
import hashlib
import logging
from typing import Any, List, Optional, Tuple

logger = logging.getLogger(__name__)


# =============================================================================
# Robust JSON Parser
# =============================================================================

COMMON_PREFIXES = ("Here is the JSON:", "Response:", "JSON:", "Output:")


def _strip_fences(content: str) -> str:
    if "```json" in content:
        start = content.find("```json") + 7
        end = content.find("```", start)
        if end > start:
            return content[start:end].strip()
    elif "```" in content:
        start = content.find("```") + 3
        end = content.find("```", start)
        if end > start:
            return content[start:end].strip()
    return content


def _balanced_blocks(content: str, open_char: str, close_char: str) -> List[str]:
    """Top-level balanced {...} or [...] blocks, in order of appearance"""
    blocks = []
    depth = 0
    start_idx = None

    for i, char in enumerate(content):
        if char == open_char:
            if depth == 0:
                start_idx = i
            depth += 1
        elif char == close_char and depth > 0:
            depth -= 1
            if depth == 0 and start_idx is not None:
                blocks.append(content[start_idx:i + 1])
                start_idx = None

    return blocks


def parse_json_robust(content: str) -> Tuple[Optional[Any], bool, str]:
    """
    Parse JSON content robustly, handling common LLM output issues.

    Handles:
    - Empty content
    - Markdown code blocks (```json...```)
    - Prefix text before JSON
    - Multiple JSON objects (takes largest)
    - A bare top-level array

    Args:
        content: Raw content from LLM

    Returns:
        Tuple of (parsed_value, success, error_message)
    """
    if not content:
        return None, False, "Empty content"

    content = _strip_fences(content.strip())

    for prefix in COMMON_PREFIXES:
        if content.lower().startswith(prefix.lower()):
            content = content[len(prefix):].strip()

    if content:
        try:
            return json.loads(content), True, ""
        except json.JSONDecodeError:
            pass

    # Objects first (the expected shape), then arrays
    candidates = sorted(_balanced_blocks(content, "{", "}"), key=len, reverse=True)
    candidates += sorted(_balanced_blocks(content, "[", "]"), key=len, reverse=True)

    for block in candidates:
        try:
            return json.loads(block), True, ""
        except json.JSONDecodeError:
            continue

    return None, False, "No parsable JSON block found"


def safe_log_content(content: str, max_chars: int = 120) -> str:
    """
    Create a safe log representation of content.

    Args:
        content: Content to log
        max_chars: Maximum characters to show

    Returns:
        Safe log string with length and hash
    """
    if not content:
        return "(empty)"

    content_hash = hashlib.sha256(content.encode()).hexdigest()[:12]
    preview = content[:max_chars].replace('\n', ' ')

    return f"len={len(content)} hash={content_hash} preview='{preview}...'"
