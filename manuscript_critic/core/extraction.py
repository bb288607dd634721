"""
Structured extraction from free-form model replies.

The model is asked for JSON but never trusted to return only JSON. The scan
walks the reply from the first opening brace, tracking nesting depth and string
literal boundaries so braces inside quoted text (dialogue, excerpts) are not
counted, and parses exactly the balanced span it finds. Failure is returned as
an ExtractionFailure value, never raised.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionFailure:
    """No well-formed object could be recovered; raw keeps the full reply."""
    raw: str
    reason: str = "no balanced JSON object found"


ExtractionResult = Union[Dict[str, Any], ExtractionFailure]


def find_object_span(text: str, start: int) -> Optional[Tuple[int, int]]:
    """
    Return the [start, end) span of the object opening at text[start].

    Returns None when the braces never balance (for example a truncated reply).
    """
    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]

        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return start, index + 1

    return None


def extract_json_object(raw_text: Optional[str]) -> ExtractionResult:
    """
    Recover the first well-formed JSON object embedded in a reply.

    The span opening at the first "{" is parsed. If it never balances the
    reply is a failure, since anything later is nested inside it. If it
    balances but does not parse, scanning resumes after its end, so nested
    fragments of a broken object are never returned.
    """
    if not raw_text or not raw_text.strip():
        logger.warning("[extract_json_object] Empty reply")
        return ExtractionFailure(raw=raw_text or "", reason="empty reply")

    reason = "no opening brace"
    position = raw_text.find("{")
    while position >= 0:
        span = find_object_span(raw_text, position)
        if span is None:
            reason = "unbalanced braces"
            break

        candidate = raw_text[span[0]:span[1]]
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            logger.debug(f"[extract_json_object] Candidate at {position} failed to parse: {e}")
            reason = f"invalid JSON: {e.msg}"
        else:
            logger.debug(f"[extract_json_object] Parsed object at [{span[0]}:{span[1]}]")
            return parsed

        position = raw_text.find("{", span[1])

    preview = raw_text[:200] + "..." if len(raw_text) > 200 else raw_text
    logger.warning(f"[extract_json_object] Extraction failed ({reason}) for reply (len={len(raw_text)}): {preview}")
    return ExtractionFailure(raw=raw_text, reason=reason)


def is_failure(result: ExtractionResult) -> bool:
    return isinstance(result, ExtractionFailure)
