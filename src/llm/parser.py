"""JSON extraction from LLM responses.

Chat models sometimes wrap their JSON in a markdown code block or put a
sentence in front of it. This module pulls the JSON value out of raw
model text, or fails with InvalidOutputError.

This is deliberately looser than a strict json.loads of the whole reply:
prose before or after the value and a surrounding fence are accepted.
A reply with no complete JSON value in it still fails.

It never repairs JSON: a truncated object such as {"title": "x" is
rejected, not completed.
"""

import json
import re
from typing import Any, Optional

from src.llm.exceptions import InvalidOutputError
from src.utils.logging import log, get_logger

MODULE = "llm.parser"
logger = get_logger()

CODE_BLOCK = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE)


def extract_json(raw: str) -> Any:
    """Extract a JSON value from LLM output.

    Handles:
    - Raw JSON: {"key": "value"}
    - Markdown blocks: ```json\\n{"key": "value"}\\n```
    - Preamble text: "Here is the result:\\n{"key": "value"}"
    - Trailing text: {"key": "value"}\\nLet me know if you need anything else.

    Raises:
        InvalidOutputError: no complete JSON value could be found
    """
    text = raw.strip()

    # Try 1: the whole thing
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Try 2: a fenced code block
    block = CODE_BLOCK.search(text)
    if block:
        try:
            return json.loads(block.group(1).strip())
        except json.JSONDecodeError:
            pass

    # Try 3: the first balanced object or array
    for open_char, close_char in (("{", "}"), ("[", "]")):
        start = text.find(open_char)
        if start == -1:
            continue
        candidate = _extract_balanced(text[start:], open_char, close_char)
        if candidate:
            try:
                return json.loads(candidate)
            except json.JSONDecodeError:
                pass

    log.warning(logger, MODULE, "extract_failed", "No valid JSON in model output",
                raw_length=len(raw), raw_head=raw[:200])
    raise InvalidOutputError(f"could not extract JSON ({len(raw)} chars)", raw_output=raw)


def _extract_balanced(text: str, open_char: str, close_char: str) -> Optional[str]:
    """Return the bracket expression `text` starts with, or None if it never closes.

    Brackets inside JSON strings are ignored.
    """
    depth = 0
    in_string = False
    escape_next = False

    for i, char in enumerate(text):
        if escape_next:
            escape_next = False
            continue
        if char == "\\" and in_string:
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return text[:i + 1]

    return None
