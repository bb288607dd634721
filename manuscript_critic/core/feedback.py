"""
Parsing of the free-text sections of an analysis reply: strengths,
weaknesses, opportunities, genre fit and similar works.

Models tend to be loose with these shapes (a bare string where a list was
asked for, a quote without its wrapper object), so common variations are
coerced before validation. Items that still fail validation are dropped.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaValidationError

from ..models import FeedbackItem, GenreFitAnalysis, SimilarWork
from .scoring import clamp_score

logger = logging.getLogger(__name__)


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str) and item.strip()]
    return []


def _examples(value: Any) -> List[Dict[str, Any]]:
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, list):
        return []

    examples = []
    for item in value:
        if isinstance(item, str) and item.strip():
            examples.append({"text": item})
        elif isinstance(item, dict) and isinstance(item.get("text"), str):
            example = {key: val for key, val in item.items() if isinstance(val, str)}
            examples.append(example)
    return examples


def parse_feedback_items(raw_items: Any, section: str = "feedback") -> List[FeedbackItem]:
    """Validate a strengths/weaknesses/opportunities list."""
    if not isinstance(raw_items, list):
        return []

    items = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            logger.warning(f"[parse_feedback_items] Skipping non-object {section} item at index {index}")
            continue
        item = {key: value for key, value in raw.items() if value is not None}
        if isinstance(item.get("category"), str):
            item["category"] = item["category"].strip().lower().replace(" ", "_")
        item["examples"] = _examples(item.get("examples"))
        item["suggestions"] = _string_list(item.get("suggestions"))
        if "score" in item:
            item["score"] = clamp_score(item["score"], default=None)
            if item["score"] is None:
                item.pop("score")
        try:
            items.append(FeedbackItem.model_validate(item))
        except SchemaValidationError as e:
            logger.warning(f"[parse_feedback_items] Dropping {section} item {index}: {e.error_count()} validation error(s)")
    return items


def parse_genre_fit(raw: Any, genre: str) -> Optional[GenreFitAnalysis]:
    """Genre-fit section, or None when absent or unusable."""
    if not isinstance(raw, dict):
        return None

    data = dict(raw)
    data["genre"] = data.get("genre") if isinstance(data.get("genre"), str) and data.get("genre") else genre
    data["fitScore"] = clamp_score(data.get("fitScore", data.get("fit_score")))
    data.pop("fit_score", None)
    data["gaps"] = _string_list(data.get("gaps"))
    data["recommendations"] = _string_list(data.get("recommendations"))

    expectations = data.get("expectations")
    data["expectations"] = [item for item in expectations if isinstance(item, dict)] if isinstance(expectations, list) else []

    try:
        return GenreFitAnalysis.model_validate(data)
    except SchemaValidationError as e:
        logger.warning(f"[parse_genre_fit] Dropping genre fit: {e.error_count()} validation error(s)")
        return None


def parse_similar_works(raw: Any) -> List[SimilarWork]:
    """Comparable titles; entries that fail validation are dropped."""
    if not isinstance(raw, list):
        return []

    works = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            continue
        data = dict(item)
        data["similarityScore"] = clamp_score(data.get("similarityScore", data.get("similarity_score")))
        data.pop("similarity_score", None)
        data["sharedElements"] = _string_list(data.get("sharedElements", data.get("shared_elements")))
        data.pop("shared_elements", None)
        data["differentiators"] = _string_list(data.get("differentiators"))
        try:
            works.append(SimilarWork.model_validate(data))
        except SchemaValidationError as e:
            logger.warning(f"[parse_similar_works] Dropping similar work {index}: {e.error_count()} validation error(s)")
    return works
