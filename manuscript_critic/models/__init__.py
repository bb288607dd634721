"""
Manuscript Critic Data Models Module
Pydantic schemas for critique requests and records.
"""

from .schemas import (
    ANALYSIS_VERSION,
    CANONICAL_CATEGORIES,
    # Lookup Tables
    CATEGORY_INFO,
    DEFAULT_CATEGORY_SCORE,
    SEVERITY_RANK,
    # Enums
    AnalysisScope,
    # Input Models
    AnalysisRequest,
    AnalysisScopeKey,
    # Output Models
    ChangedAspect,
    EffortLevel,
    FeedbackCategory,
    # Critique Models
    FeedbackItem,
    FeedbackSeverity,
    FixSuggestion,
    GenreExpectation,
    GenreFitAnalysis,
    ImpactLevel,
    IssueLocation,
    IssueType,
    ManuscriptAnalysis,
    ManuscriptMetadata,
    PriorityAction,
    QuickAnalysisResult,
    ScoreChanges,
    SimilarWork,
    SpecificIssue,
    TextExample,
    VersionComparison,
)

__all__ = [
    "AnalysisScope",
    "FeedbackCategory",
    "FeedbackSeverity",
    "IssueType",
    "ImpactLevel",
    "EffortLevel",
    "CATEGORY_INFO",
    "SEVERITY_RANK",
    "CANONICAL_CATEGORIES",
    "DEFAULT_CATEGORY_SCORE",
    "ANALYSIS_VERSION",
    "ManuscriptMetadata",
    "AnalysisRequest",
    "AnalysisScopeKey",
    "TextExample",
    "FeedbackItem",
    "IssueLocation",
    "SpecificIssue",
    "PriorityAction",
    "GenreExpectation",
    "GenreFitAnalysis",
    "SimilarWork",
    "ScoreChanges",
    "ManuscriptAnalysis",
    "QuickAnalysisResult",
    "ChangedAspect",
    "VersionComparison",
    "FixSuggestion",
]
