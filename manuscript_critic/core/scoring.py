"""
Score normalization.

Guarantees the fixed category schema every renderer depends on: all fifteen
canonical keys present, every value an integer in [0, 100].
"""

import logging
import math
from typing import Any, Dict, Optional

from ..models import CANONICAL_CATEGORIES, DEFAULT_CATEGORY_SCORE

logger = logging.getLogger(__name__)


def _as_number(value: Any) -> Optional[float]:
    # bool is an int subclass but never a score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return float(value)


def clamp_score(value: Any, low: int = 0, high: int = 100, default: Optional[int] = DEFAULT_CATEGORY_SCORE) -> Optional[int]:
    """Round and clamp a numeric value; non-numeric values become default."""
    number = _as_number(value)
    if number is None:
        return default
    return int(max(low, min(high, round(number))))


def normalize_scores(partial_scores: Any) -> Dict[str, int]:
    """
    Fill in every canonical category.

    Missing or non-numeric canonical values become the neutral default (70);
    numeric values are clamped to [0, 100]. Extra numeric keys the model
    supplied are kept, clamped the same way; non-numeric extras are dropped
    with a warning.
    """
    if not isinstance(partial_scores, dict):
        if partial_scores is not None:
            logger.warning(f"[normalize_scores] Expected dict but got {type(partial_scores).__name__}, using defaults")
        partial_scores = {}

    normalized: Dict[str, int] = {}
    for category in CANONICAL_CATEGORIES:
        normalized[category] = clamp_score(partial_scores.get(category))

    for key, value in partial_scores.items():
        if key in normalized or not isinstance(key, str):
            continue
        extra = clamp_score(value, default=None)
        if extra is None:
            logger.warning(f"[normalize_scores] Dropping non-numeric score for extra key {key!r}")
            continue
        normalized[key] = extra

    return normalized


def normalize_overall_score(value: Any) -> int:
    """Overall score in [0, 100]; missing or non-numeric falls back to 70."""
    return clamp_score(value)
