"""
Pydantic data models for the manuscript critique pipeline.
Records serialize with camelCase field names, the contract the dashboard renders.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CritiqueModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class AnalysisScope(str, Enum):
    """Unit of text being analyzed."""
    FULL_BOOK = "FULL_BOOK"
    CHAPTER = "CHAPTER"
    SELECTION = "SELECTION"


class FeedbackCategory(str, Enum):
    """The fifteen canonical critique dimensions scored on every analysis."""
    PACING = "pacing"
    DIALOGUE = "dialogue"
    PROSE_QUALITY = "prose_quality"
    CHARACTER_DEVELOPMENT = "character_development"
    PLOT_STRUCTURE = "plot_structure"
    WORLD_BUILDING = "world_building"
    TENSION = "tension"
    EMOTIONAL_IMPACT = "emotional_impact"
    VOICE_CONSISTENCY = "voice_consistency"
    SHOW_DONT_TELL = "show_dont_tell"
    OPENING_HOOK = "opening_hook"
    CHAPTER_ENDINGS = "chapter_endings"
    SCENE_STRUCTURE = "scene_structure"
    DESCRIPTION_BALANCE = "description_balance"
    READABILITY = "readability"


class FeedbackSeverity(str, Enum):
    """Issue severity, most severe first."""
    CRITICAL = "critical"
    SIGNIFICANT = "significant"
    MODERATE = "moderate"
    MINOR = "minor"
    SUGGESTION = "suggestion"


class IssueType(str, Enum):
    """Closed set of issue kinds the critique can flag."""
    PACING_ISSUE = "pacing_issue"
    DIALOGUE_PROBLEM = "dialogue_problem"
    TELLING_NOT_SHOWING = "telling_not_showing"
    WEAK_VERB = "weak_verb"
    PASSIVE_VOICE = "passive_voice"
    REPETITION = "repetition"
    CLICHE = "cliche"
    INFO_DUMP = "info_dump"
    HEAD_HOPPING = "head_hopping"
    TENSE_INCONSISTENCY = "tense_inconsistency"
    CHARACTER_INCONSISTENCY = "character_inconsistency"
    PLOT_HOLE = "plot_hole"
    UNCLEAR_MOTIVATION = "unclear_motivation"
    WEAK_OPENING = "weak_opening"
    WEAK_ENDING = "weak_ending"
    OVERWRITING = "overwriting"
    UNDERWRITING = "underwriting"


class ImpactLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Effort uses the same three levels
EffortLevel = ImpactLevel


# ============================================================================
# Lookup Tables
# ============================================================================

CATEGORY_INFO: Dict[FeedbackCategory, Dict[str, str]] = {
    FeedbackCategory.PACING: {
        "name": "Pacing",
        "description": "Flow and rhythm of the story",
    },
    FeedbackCategory.DIALOGUE: {
        "name": "Dialogue",
        "description": "Character speech and conversations",
    },
    FeedbackCategory.PROSE_QUALITY: {
        "name": "Prose Quality",
        "description": "Writing style and sentence construction",
    },
    FeedbackCategory.CHARACTER_DEVELOPMENT: {
        "name": "Character Development",
        "description": "Character depth and growth",
    },
    FeedbackCategory.PLOT_STRUCTURE: {
        "name": "Plot Structure",
        "description": "Story architecture and progression",
    },
    FeedbackCategory.WORLD_BUILDING: {
        "name": "World Building",
        "description": "Setting and world details",
    },
    FeedbackCategory.TENSION: {
        "name": "Tension",
        "description": "Conflict and suspense",
    },
    FeedbackCategory.EMOTIONAL_IMPACT: {
        "name": "Emotional Impact",
        "description": "Reader emotional engagement",
    },
    FeedbackCategory.VOICE_CONSISTENCY: {
        "name": "Voice Consistency",
        "description": "Narrative voice stability",
    },
    FeedbackCategory.SHOW_DONT_TELL: {
        "name": "Show Don't Tell",
        "description": "Descriptive vs expository balance",
    },
    FeedbackCategory.OPENING_HOOK: {
        "name": "Opening Hook",
        "description": "Chapter/scene beginnings",
    },
    FeedbackCategory.CHAPTER_ENDINGS: {
        "name": "Chapter Endings",
        "description": "Chapter closings and cliffhangers",
    },
    FeedbackCategory.SCENE_STRUCTURE: {
        "name": "Scene Structure",
        "description": "Individual scene construction",
    },
    FeedbackCategory.DESCRIPTION_BALANCE: {
        "name": "Description Balance",
        "description": "Action vs description ratio",
    },
    FeedbackCategory.READABILITY: {
        "name": "Readability",
        "description": "Ease of reading and comprehension",
    },
}

# Lower rank sorts first
SEVERITY_RANK: Dict[FeedbackSeverity, int] = {
    FeedbackSeverity.CRITICAL: 0,
    FeedbackSeverity.SIGNIFICANT: 1,
    FeedbackSeverity.MODERATE: 2,
    FeedbackSeverity.MINOR: 3,
    FeedbackSeverity.SUGGESTION: 4,
}

CANONICAL_CATEGORIES: List[str] = [category.value for category in FeedbackCategory]

DEFAULT_CATEGORY_SCORE = 70
ANALYSIS_VERSION = "1.0.0"


# ============================================================================
# Input Models
# ============================================================================

class ManuscriptMetadata(CritiqueModel):
    """Optional facts about the manuscript that sharpen the critique."""
    title: Optional[str] = None
    genre: Optional[str] = None
    target_audience: Optional[str] = None
    author_goals: List[str] = Field(default_factory=list)
    author_voice: Optional[str] = Field(
        default=None,
        description="Notes on the author's intended voice, kept intact by the critique"
    )


class AnalysisRequest(CritiqueModel):
    """
    One critique invocation. Created per call and discarded afterwards.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    book_id: str
    scope: AnalysisScope = AnalysisScope.FULL_BOOK
    chapter_id: Optional[str] = None
    selection_start: Optional[int] = None
    selection_end: Optional[int] = None
    focus_areas: List[FeedbackCategory] = Field(default_factory=list)
    genre: Optional[str] = None
    compare_to_genre: bool = False
    find_similar_works: bool = False

    @property
    def scope_key(self) -> "AnalysisScopeKey":
        return AnalysisScopeKey(
            book_id=self.book_id,
            scope=self.scope,
            chapter_id=self.chapter_id if self.scope == AnalysisScope.CHAPTER else None,
        )


class AnalysisScopeKey(CritiqueModel):
    """Identifies which analysis a new one supersedes."""
    model_config = ConfigDict(frozen=True)

    book_id: str
    scope: AnalysisScope
    chapter_id: Optional[str] = None


# ============================================================================
# Critique Models
# ============================================================================

class TextExample(CritiqueModel):
    """A quoted passage with a best-effort location hint."""
    text: str
    chapter_id: Optional[str] = None
    chapter_title: Optional[str] = None
    location: Optional[str] = None  # "Chapter 3, paragraph 5"


class FeedbackItem(CritiqueModel):
    """A strength, weakness or opportunity."""
    category: FeedbackCategory
    title: str
    description: str
    examples: List[TextExample] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    score: Optional[int] = Field(default=None, ge=0, le=100)


class IssueLocation(CritiqueModel):
    """Where an issue sits. Every field is optional and best-effort."""
    chapter_id: Optional[str] = None
    chapter_title: Optional[str] = None
    paragraph_index: Optional[int] = None
    sentence_index: Optional[int] = None
    start_offset: Optional[int] = None
    end_offset: Optional[int] = None


class SpecificIssue(CritiqueModel):
    """A concrete, located problem in the text."""
    id: str
    type: IssueType
    severity: FeedbackSeverity
    category: FeedbackCategory
    title: str
    description: str
    location: IssueLocation = Field(default_factory=IssueLocation)
    excerpt: Optional[str] = None
    suggestion: Optional[str] = None
    auto_fix_available: bool = False


class PriorityAction(CritiqueModel):
    """A ranked revision task; priority 1 is the most important."""
    priority: int = Field(..., ge=1, le=5)
    category: Optional[FeedbackCategory] = None
    action: str
    impact: ImpactLevel = ImpactLevel.MEDIUM
    effort: EffortLevel = ImpactLevel.MEDIUM
    affected_areas: List[str] = Field(default_factory=list)


class GenreExpectation(CritiqueModel):
    element: str
    expected: str
    found: str
    met: bool


class GenreFitAnalysis(CritiqueModel):
    """How well the manuscript meets its genre's conventions."""
    genre: str
    fit_score: int = Field(..., ge=0, le=100)
    expectations: List[GenreExpectation] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class SimilarWork(CritiqueModel):
    """A published comparable title."""
    title: str
    author: str
    similarity_score: int = Field(..., ge=0, le=100)
    shared_elements: List[str] = Field(default_factory=list)
    differentiators: List[str] = Field(default_factory=list)


class ScoreChanges(CritiqueModel):
    """Score movement relative to the previous analysis of the same scope."""
    overall: int
    categories: Dict[str, int] = Field(default_factory=dict)


# ============================================================================
# Output Models
# ============================================================================

class ManuscriptAnalysis(CritiqueModel):
    """
    The persisted critique. Written once and superseded, never updated.
    `scores` always holds every canonical category key.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    book_id: str
    scope: AnalysisScope
    chapter_id: Optional[str] = None

    overall_score: int = Field(..., ge=0, le=100)
    scores: Dict[str, int]

    strengths: List[FeedbackItem] = Field(default_factory=list)
    weaknesses: List[FeedbackItem] = Field(default_factory=list)
    opportunities: List[FeedbackItem] = Field(default_factory=list)
    issues: List[SpecificIssue] = Field(default_factory=list)
    executive_summary: str = ""
    priority_actions: List[PriorityAction] = Field(default_factory=list)

    genre_fit: Optional[GenreFitAnalysis] = None
    similar_works: Optional[List[SimilarWork]] = None

    word_count_analyzed: int = Field(..., ge=0)
    analysis_version: str = ANALYSIS_VERSION
    degraded: bool = Field(
        default=False,
        description="True when the model reply could not be parsed; executive_summary holds the raw reply"
    )
    score_changes: Optional[ScoreChanges] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def scope_key(self) -> AnalysisScopeKey:
        return AnalysisScopeKey(book_id=self.book_id, scope=self.scope, chapter_id=self.chapter_id)


class QuickAnalysisResult(CritiqueModel):
    """Single-aspect check."""
    score: int = Field(default=DEFAULT_CATEGORY_SCORE, ge=0, le=100)
    feedback: str = ""
    suggestions: List[str] = Field(default_factory=list)
    degraded: bool = False


class ChangedAspect(CritiqueModel):
    aspect: str
    change: int = Field(..., ge=-10, le=10)
    note: str = ""


class VersionComparison(CritiqueModel):
    """Assessment of a revision against its original."""
    improvement: int = Field(default=0, ge=-100, le=100)
    changed_aspects: List[ChangedAspect] = Field(default_factory=list)
    summary: str = ""
    degraded: bool = False


class FixSuggestion(CritiqueModel):
    """Alternative rewrites for a flagged excerpt."""
    rewrite_options: List[str] = Field(default_factory=list, max_length=3)
    explanation: str = ""
    degraded: bool = False
