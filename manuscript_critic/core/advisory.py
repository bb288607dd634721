"""
Advisory operations: quick single-aspect analysis, version comparison and fix
suggestions.

These reuse the compiler, gateway and extractor with narrow schemas. An
unparseable reply yields a default result flagged degraded; provider errors
still propagate.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..config import CritiqueOperation, CritiqueSettings
from ..models import (
    DEFAULT_CATEGORY_SCORE,
    ChangedAspect,
    FeedbackCategory,
    FixSuggestion,
    QuickAnalysisResult,
    SpecificIssue,
    VersionComparison,
)
from .errors import ValidationError
from .extraction import extract_json_object, is_failure
from .request_compiler import compile_fix_suggestion, compile_quick_analysis, compile_version_comparison
from .sampler import sample_manuscript
from .scoring import clamp_score

logger = logging.getLogger(__name__)

MAX_REWRITE_OPTIONS = 3

QUICK_ANALYSIS_FALLBACK = "Analysis could not be completed."
COMPARISON_FALLBACK = "Could not compare versions."
FIX_SUGGESTION_FALLBACK = "Could not generate suggestions."


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_quick_analysis(parsed: Dict[str, Any]) -> QuickAnalysisResult:
    return QuickAnalysisResult(
        score=clamp_score(parsed.get("score")),
        feedback=_text(parsed.get("feedback")),
        suggestions=_strings(parsed.get("suggestions")),
    )


def parse_version_comparison(parsed: Dict[str, Any]) -> VersionComparison:
    aspects = []
    raw_aspects = parsed.get("changedAspects")
    for item in raw_aspects if isinstance(raw_aspects, list) else []:
        if not isinstance(item, dict) or not isinstance(item.get("aspect"), str):
            continue
        aspects.append(ChangedAspect(
            aspect=item["aspect"],
            change=clamp_score(item.get("change"), low=-10, high=10, default=0),
            note=_text(item.get("note")),
        ))

    return VersionComparison(
        improvement=clamp_score(parsed.get("improvement"), low=-100, high=100, default=0),
        changed_aspects=aspects,
        summary=_text(parsed.get("summary")),
    )


def parse_fix_suggestion(parsed: Dict[str, Any]) -> FixSuggestion:
    options = _strings(parsed.get("rewriteOptions"))
    if len(options) > MAX_REWRITE_OPTIONS:
        logger.info(f"[parse_fix_suggestion] Truncating {len(options)} rewrite options to {MAX_REWRITE_OPTIONS}")
    return FixSuggestion(
        rewrite_options=options[:MAX_REWRITE_OPTIONS],
        explanation=_text(parsed.get("explanation")),
    )


class AdvisoryService:
    """Non-blocking helper operations around a shared completion gateway."""

    def __init__(self, gateway, settings: CritiqueSettings):
        self.gateway = gateway
        self.settings = settings

    async def quick_analysis(
        self,
        text: str,
        category: FeedbackCategory,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> QuickAnalysisResult:
        """Score one category on a short sample of the text."""
        if not text or not text.strip():
            raise ValidationError("Text is empty")

        sample = sample_manuscript(text, self.settings.quick_token_budget, self.settings.chars_per_token)
        prompt = compile_quick_analysis(sample, category)
        raw = await self.gateway.invoke(
            prompt.system,
            prompt.user,
            self.settings.max_tokens_for(CritiqueOperation.QUICK_ANALYSIS),
            cancel_event=cancel_event,
        )

        parsed = extract_json_object(raw)
        if is_failure(parsed):
            logger.warning(f"[quick_analysis] Unparseable reply for {category.value}, using default result")
            return QuickAnalysisResult(
                score=DEFAULT_CATEGORY_SCORE,
                feedback=QUICK_ANALYSIS_FALLBACK,
                degraded=True,
            )
        return parse_quick_analysis(parsed)

    async def compare_versions(
        self,
        original: str,
        revised: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> VersionComparison:
        """Assess a revision; positive improvement means the revision is better."""
        if not original or not original.strip() or not revised or not revised.strip():
            raise ValidationError("Both versions must contain text")

        budget = self.settings.comparison_token_budget
        prompt = compile_version_comparison(
            sample_manuscript(original, budget, self.settings.chars_per_token),
            sample_manuscript(revised, budget, self.settings.chars_per_token),
        )
        raw = await self.gateway.invoke(
            prompt.system,
            prompt.user,
            self.settings.max_tokens_for(CritiqueOperation.VERSION_COMPARISON),
            cancel_event=cancel_event,
        )

        parsed = extract_json_object(raw)
        if is_failure(parsed):
            logger.warning("[compare_versions] Unparseable reply, using default result")
            return VersionComparison(summary=COMPARISON_FALLBACK, degraded=True)
        return parse_version_comparison(parsed)

    async def suggest_fix(
        self,
        text: str,
        issue: SpecificIssue,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> FixSuggestion:
        """
        Up to three rewrites of the issue's excerpt.

        The issue's own excerpt is preferred; otherwise the start of text is used.
        """
        excerpt = issue.excerpt if issue.excerpt and issue.excerpt.strip() else (text or "")[:self.settings.fix_excerpt_chars]
        if not excerpt.strip():
            raise ValidationError("No excerpt to rewrite")

        prompt = compile_fix_suggestion(excerpt, issue)
        raw = await self.gateway.invoke(
            prompt.system,
            prompt.user,
            self.settings.max_tokens_for(CritiqueOperation.FIX_SUGGESTION),
            cancel_event=cancel_event,
        )

        parsed = extract_json_object(raw)
        if is_failure(parsed):
            logger.warning(f"[suggest_fix] Unparseable reply for {issue.id}, using default result")
            return FixSuggestion(explanation=FIX_SUGGESTION_FALLBACK, degraded=True)
        return parse_fix_suggestion(parsed)
