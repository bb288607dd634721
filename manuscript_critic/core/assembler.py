"""
Analysis Assembler - the full critique operation.

validate -> select -> sample -> compile -> invoke -> extract -> normalize ->
rank -> persist. The store sees exactly one write per successful run, and only
after the record is complete. Degraded records (unparseable replies) are
returned to the caller but never stored, so the previous analysis stays
current.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from ..config import CritiqueOperation, CritiqueSettings
from ..models import (
    DEFAULT_CATEGORY_SCORE,
    AnalysisRequest,
    AnalysisScope,
    ManuscriptAnalysis,
    ManuscriptMetadata,
)
from .errors import AnalysisCancelled, ValidationError
from .extraction import extract_json_object, is_failure
from .feedback import parse_feedback_items, parse_genre_fit, parse_similar_works
from .history import compute_score_changes
from .ranking import parse_issues, parse_priority_actions, rank_issues, rank_priority_actions
from .request_compiler import compile_analysis_request
from .sampler import count_words, is_sampled, sample_manuscript
from .scoring import normalize_overall_score, normalize_scores

logger = logging.getLogger(__name__)


def validate_request(request: AnalysisRequest, text: Optional[str], min_word_count: int = 0) -> str:
    """
    Check the request against the manuscript and return the text to analyze.

    For SELECTION scope the selection bounds are applied here.

    Raises:
        ValidationError: empty text, missing chapter id, bad selection bounds,
            or fewer than min_word_count words
    """
    if not text or not text.strip():
        raise ValidationError("Manuscript text is empty")

    if request.scope == AnalysisScope.CHAPTER and not request.chapter_id:
        raise ValidationError("CHAPTER scope requires a chapter_id")

    if request.scope == AnalysisScope.SELECTION:
        start, end = request.selection_start, request.selection_end
        if start is None or end is None:
            raise ValidationError("SELECTION scope requires selection_start and selection_end")
        if not 0 <= start < end:
            raise ValidationError(f"Invalid selection bounds [{start}, {end})")
        if start >= len(text):
            raise ValidationError(f"Selection starts at {start} but the text has {len(text)} characters")
        text = text[start:end]
        if not text.strip():
            raise ValidationError("Selected text is empty")

    word_count = count_words(text)
    if word_count < min_word_count:
        raise ValidationError(
            f"Not enough content to analyze: {word_count} words, at least {min_word_count} required"
        )

    return text


def resolve_metadata(request: AnalysisRequest, metadata: Optional[ManuscriptMetadata]) -> ManuscriptMetadata:
    """Request genre overrides the manuscript's stored genre."""
    metadata = metadata or ManuscriptMetadata()
    if request.genre:
        metadata = metadata.model_copy(update={"genre": request.genre})
    return metadata


def build_analysis_record(
    request: AnalysisRequest,
    parsed: Dict[str, Any],
    word_count: int,
    genre: Optional[str] = None,
    previous: Optional[ManuscriptAnalysis] = None,
) -> ManuscriptAnalysis:
    """Normalize and rank an extracted reply into a complete record."""
    overall_score = normalize_overall_score(parsed.get("overallScore"))
    scores = normalize_scores(parsed.get("scores"))

    genre_fit = None
    if request.compare_to_genre and genre:
        genre_fit = parse_genre_fit(parsed.get("genreFit"), genre)

    similar_works = None
    if request.find_similar_works:
        similar_works = parse_similar_works(parsed.get("similarWorks"))

    summary = parsed.get("executiveSummary")

    scope_key = request.scope_key
    return ManuscriptAnalysis(
        user_id=request.user_id,
        book_id=scope_key.book_id,
        scope=scope_key.scope,
        chapter_id=scope_key.chapter_id,
        overall_score=overall_score,
        scores=scores,
        strengths=parse_feedback_items(parsed.get("strengths"), "strength"),
        weaknesses=parse_feedback_items(parsed.get("weaknesses"), "weakness"),
        opportunities=parse_feedback_items(parsed.get("opportunities"), "opportunity"),
        issues=rank_issues(parse_issues(parsed.get("issues"))),
        executive_summary=summary if isinstance(summary, str) else "",
        priority_actions=rank_priority_actions(parse_priority_actions(parsed.get("priorityActions"))),
        genre_fit=genre_fit,
        similar_works=similar_works,
        word_count_analyzed=word_count,
        score_changes=compute_score_changes(previous, overall_score, scores),
    )


def build_degraded_record(request: AnalysisRequest, raw_text: str, word_count: int) -> ManuscriptAnalysis:
    """Neutral scores, empty structured fields, the raw reply as the summary."""
    scope_key = request.scope_key
    return ManuscriptAnalysis(
        user_id=request.user_id,
        book_id=scope_key.book_id,
        scope=scope_key.scope,
        chapter_id=scope_key.chapter_id,
        overall_score=DEFAULT_CATEGORY_SCORE,
        scores=normalize_scores({}),
        executive_summary=raw_text,
        word_count_analyzed=word_count,
        degraded=True,
    )


class AnalysisAssembler:
    """Runs the full critique and hands the finished record to the store."""

    def __init__(self, gateway, store, settings: CritiqueSettings):
        self.gateway = gateway
        self.store = store
        self.settings = settings

    async def run_analysis(
        self,
        request: AnalysisRequest,
        text: str,
        metadata: Optional[ManuscriptMetadata] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ManuscriptAnalysis:
        """
        Produce and persist one analysis.

        Args:
            request: Scope, focus areas and enrichment flags
            text: Full manuscript (or chapter) text
            metadata: Optional title, genre, audience, goals and voice notes
            cancel_event: Checked between attempts and before persisting

        Returns:
            The new ManuscriptAnalysis; degraded=True when the reply was unparseable

        Raises:
            ValidationError, ProviderTimeout, ProviderUnavailable,
            AnalysisCancelled, PersistenceError
        """
        analyzed_text = validate_request(request, text, self.settings.min_word_count)
        word_count = count_words(analyzed_text)
        metadata = resolve_metadata(request, metadata)

        sampled = sample_manuscript(analyzed_text, self.settings.token_budget, self.settings.chars_per_token)
        if is_sampled(analyzed_text, self.settings.token_budget, self.settings.chars_per_token):
            logger.info(f"[run_analysis] Sampled {len(analyzed_text)} chars down to {len(sampled)}")

        prompt = compile_analysis_request(
            sampled,
            metadata=metadata,
            focus_areas=request.focus_areas,
            include_genre_fit=request.compare_to_genre,
            include_similar_works=request.find_similar_works,
        )

        logger.info(
            f"[run_analysis] Book {request.book_id}, scope {request.scope.value}, "
            f"{word_count} words, focus: {[area.value for area in request.focus_areas]}"
        )
        raw = await self.gateway.invoke(
            prompt.system,
            prompt.user,
            self.settings.max_tokens_for(CritiqueOperation.FULL_ANALYSIS),
            cancel_event=cancel_event,
        )

        parsed = extract_json_object(raw)
        if is_failure(parsed):
            logger.warning(f"[run_analysis] Returning degraded record for book {request.book_id}: {parsed.reason}")
            return build_degraded_record(request, parsed.raw, word_count)

        previous = await self.store.get_latest_analysis(request.user_id, request.scope_key)
        record = build_analysis_record(request, parsed, word_count, genre=metadata.genre, previous=previous)

        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"[run_analysis] Cancelled before persisting analysis for book {request.book_id}")
            raise AnalysisCancelled("Cancelled before persisting")

        await self.store.upsert_analysis(request.user_id, request.scope_key, record)
        logger.info(
            f"[run_analysis] Stored analysis {record.id}: overall {record.overall_score}, "
            f"{len(record.issues)} issues, {len(record.priority_actions)} actions"
        )
        return record
