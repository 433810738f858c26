"""
Lenient JSON parsing for LLM output.

Models asked for "only JSON" still wrap it in markdown fences, leave
trailing commas, use single quotes or add comments. parse_ai_response
tries progressively rougher strategies:

    1. strip fences and blank lines, then json.loads
    2. cut the outermost {...} / [...] block, repair it, json.loads
    3. regex-scrape flat key: "value" pairs and key: [..] arrays
"""

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_BLANK_LINES = re.compile(r"^\s*[\r\n]", re.MULTILINE)

_UNQUOTED_KEY = re.compile(r"([{,]\s*)([a-zA-Z_$][a-zA-Z0-9_$]*)\s*:")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_ADJACENT_STRINGS = re.compile(r'"\s*\n\s*"')
_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_LINE_COMMENT = re.compile(r"^\s*//.*$", re.MULTILINE)

_KEY_VALUE = re.compile(r"""["']?([a-zA-Z_$][a-zA-Z0-9_$]*)["']?\s*:\s*["']([^"']*)["']""")
_KEY_ARRAY = re.compile(r"""["']?([a-zA-Z_$][a-zA-Z0-9_$]*)["']?\s*:\s*\[([\s\S]*?)\]""")


class AIResponseParseError(ValueError):
    """Raised when no usable JSON can be recovered from a model response."""


def strip_code_fences(text: str) -> str:
    cleaned = _FENCE.sub("", text.strip())
    return _BLANK_LINES.sub("", cleaned)


def repair_json(candidate: str) -> str:
    """Fix the usual LLM JSON mistakes. The result may still be invalid."""
    repaired = _BLOCK_COMMENT.sub("", candidate)
    repaired = _LINE_COMMENT.sub("", repaired)
    repaired = _UNQUOTED_KEY.sub(r'\1"\2":', repaired)
    repaired = repaired.replace("'", '"')
    repaired = _TRAILING_COMMA.sub(r"\1", repaired)
    repaired = _ADJACENT_STRINGS.sub('",\n"', repaired)
    return repaired


def extract_json_block(text: str) -> Optional[str]:
    """Outermost object or array in ``text``, whichever opens first."""
    blocks = []
    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = text.find(opener), text.rfind(closer)
        if start != -1 and end > start:
            blocks.append((start, text[start:end + 1]))
    if not blocks:
        return None
    return min(blocks)[1]


def extract_from_malformed_json(text: str) -> dict:
    result: dict[str, Any] = {}

    for match in _KEY_VALUE.finditer(text):
        result[match.group(1)] = match.group(2)

    for match in _KEY_ARRAY.finditer(text):
        items = [item.strip().strip("\"'") for item in match.group(2).split(",")]
        result[match.group(1)] = [item for item in items if item]

    if not result:
        raise AIResponseParseError("No extractable data found")
    return result


def parse_ai_response(text: str) -> Any:
    """
    Parse a model response into JSON data.

    Raises:
        AIResponseParseError: if nothing usable can be recovered
    """
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        logger.debug("Initial JSON parsing failed, attempting repairs")

    block = extract_json_block(cleaned)
    if block is None:
        logger.warning(f"No JSON structure found in AI response: {text[:200]!r}")
        raise AIResponseParseError("No valid JSON structure found in AI response")

    try:
        return json.loads(repair_json(block))
    except json.JSONDecodeError as e:
        logger.warning(f"JSON repair failed ({e}), falling back to field extraction")

    try:
        return extract_from_malformed_json(block)
    except AIResponseParseError:
        raise AIResponseParseError("Unable to parse AI response: Invalid JSON format") from None
