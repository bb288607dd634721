"""
HTTP API for the critique pipeline.

Caller identity comes from the X-User-Id header set by the upstream gateway;
authentication itself happens there.
"""

import logging
import os
from typing import List, Optional

from fastapi import FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .core.errors import (
    AnalysisCancelled,
    PersistenceError,
    ProviderTimeout,
    ProviderUnavailable,
    ValidationError,
)
from .critic import ManuscriptCritic
from .models import (
    AnalysisRequest,
    AnalysisScope,
    AnalysisScopeKey,
    FeedbackCategory,
    FixSuggestion,
    ManuscriptAnalysis,
    ManuscriptMetadata,
    QuickAnalysisResult,
    SpecificIssue,
    VersionComparison,
)
from .models.schemas import CritiqueModel

logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

ANALYZE_RATE_LIMIT = os.getenv("ANALYZE_RATE_LIMIT", "10/minute")


class AnalyzeBody(CritiqueModel):
    content: str
    scope: AnalysisScope = AnalysisScope.FULL_BOOK
    chapter_id: Optional[str] = None
    selection_start: Optional[int] = None
    selection_end: Optional[int] = None
    focus_areas: List[FeedbackCategory] = Field(default_factory=list)
    genre: Optional[str] = None
    compare_to_genre: bool = False
    find_similar_works: bool = False
    metadata: Optional[ManuscriptMetadata] = None


class QuickAnalysisBody(CritiqueModel):
    text: str
    category: FeedbackCategory


class CompareBody(CritiqueModel):
    original: str
    revised: str


class FixBody(CritiqueModel):
    issue: SpecificIssue
    text: str = ""


def _require_user(user_id: Optional[str]) -> str:
    if not user_id or not user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


def _scope_key(book_id: str, scope: AnalysisScope, chapter_id: Optional[str]) -> AnalysisScopeKey:
    # chapter_id only identifies CHAPTER analyses, matching AnalysisRequest.scope_key
    return AnalysisScopeKey(
        book_id=book_id,
        scope=scope,
        chapter_id=chapter_id if scope == AnalysisScope.CHAPTER else None,
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(critic: ManuscriptCritic, rate_limit: str = ANALYZE_RATE_LIMIT) -> FastAPI:
    """Build the FastAPI app around an already-wired critic."""
    app = FastAPI(title="Manuscript Critic API")

    limiter = Limiter(key_func=get_remote_address)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-User-Id"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(400, str(exc))

    @app.exception_handler(ProviderTimeout)
    async def provider_timeout_handler(request: Request, exc: ProviderTimeout):
        logger.error(f"[provider_timeout_handler] {request.url.path}: {exc}")
        return _error(504, "Analysis timed out. Please try again.")

    @app.exception_handler(ProviderUnavailable)
    async def provider_unavailable_handler(request: Request, exc: ProviderUnavailable):
        logger.error(f"[provider_unavailable_handler] {request.url.path}: {exc}")
        return _error(503, "Analysis service is unavailable. Please try again later.")

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error(f"[persistence_error_handler] {request.url.path}: {exc}")
        return _error(500, "Failed to save analysis")

    @app.exception_handler(AnalysisCancelled)
    async def cancelled_handler(request: Request, exc: AnalysisCancelled):
        return _error(409, "Analysis was cancelled")

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok", "demo_mode": critic.is_demo}

    @app.post("/api/feedback/{book_id}/analyze", response_model=ManuscriptAnalysis)
    @limiter.limit(rate_limit)
    async def analyze(book_id: str, body: AnalyzeBody, request: Request, x_user_id: Optional[str] = Header(None)):
        """Run a full critique and store it as the latest analysis for its scope."""
        user_id = _require_user(x_user_id)
        analysis_request = AnalysisRequest(
            user_id=user_id,
            book_id=book_id,
            scope=body.scope,
            chapter_id=body.chapter_id,
            selection_start=body.selection_start,
            selection_end=body.selection_end,
            focus_areas=body.focus_areas,
            genre=body.genre,
            compare_to_genre=body.compare_to_genre,
            find_similar_works=body.find_similar_works,
        )
        return await critic.run_analysis(analysis_request, body.content, metadata=body.metadata)

    @app.get("/api/feedback/{book_id}/analysis", response_model=ManuscriptAnalysis)
    async def latest_analysis(
        book_id: str,
        scope: AnalysisScope = AnalysisScope.FULL_BOOK,
        chapter_id: Optional[str] = Query(None, alias="chapterId"),
        x_user_id: Optional[str] = Header(None),
    ):
        user_id = _require_user(x_user_id)
        scope_key = _scope_key(book_id, scope, chapter_id)
        record = await critic.get_latest_analysis(user_id, scope_key)
        if record is None:
            raise HTTPException(status_code=404, detail="No analysis found")
        return record

    @app.get("/api/feedback/{book_id}/history", response_model=List[ManuscriptAnalysis])
    async def analysis_history(
        book_id: str,
        scope: AnalysisScope = AnalysisScope.FULL_BOOK,
        chapter_id: Optional[str] = Query(None, alias="chapterId"),
        limit: int = Query(20, ge=1, le=100),
        x_user_id: Optional[str] = Header(None),
    ):
        user_id = _require_user(x_user_id)
        scope_key = _scope_key(book_id, scope, chapter_id)
        return await critic.get_history(user_id, scope_key, limit=limit)

    @app.post("/api/feedback/quick", response_model=QuickAnalysisResult)
    async def quick_analysis(body: QuickAnalysisBody, x_user_id: Optional[str] = Header(None)):
        _require_user(x_user_id)
        return await critic.quick_analysis(body.text, body.category)

    @app.post("/api/feedback/compare", response_model=VersionComparison)
    async def compare_versions(body: CompareBody, x_user_id: Optional[str] = Header(None)):
        _require_user(x_user_id)
        return await critic.compare_versions(body.original, body.revised)

    @app.post("/api/feedback/fix", response_model=FixSuggestion)
    async def suggest_fix(body: FixBody, x_user_id: Optional[str] = Header(None)):
        _require_user(x_user_id)
        return await critic.suggest_fix(body.text, body.issue)

    return app
