"""
Request Compiler - builds the instruction payload for each critique operation.

Every compiler here is a pure function of its arguments: identical inputs give
byte-identical prompts, so the completion call is the only nondeterministic
step in a run.
"""

from typing import Dict, Iterable, List, NamedTuple, Optional, Union

from ..models import (
    CATEGORY_INFO,
    FeedbackCategory,
    FeedbackSeverity,
    IssueType,
    ManuscriptMetadata,
    SpecificIssue,
)
from ..prompts import (
    ADVISORY_SYSTEM_PROMPT,
    ANALYSIS_SCHEMA_TEMPLATE,
    ANALYSIS_SYSTEM_PROMPT,
    ANALYSIS_USER_PROMPT_TEMPLATE,
    AUTHOR_VOICE_HINT,
    FIX_SUGGESTION_PROMPT_TEMPLATE,
    FOCUS_NOTE_TEMPLATE,
    GENRE_FIT_SCHEMA_TEMPLATE,
    GENRE_HINT,
    QUICK_ANALYSIS_PROMPT_TEMPLATE,
    SIMILAR_WORKS_SCHEMA,
    VERSION_COMPARISON_PROMPT_TEMPLATE,
)

CategoryCatalog = Dict[FeedbackCategory, Dict[str, str]]


class CompiledPrompt(NamedTuple):
    """System framing and user payload for one completion call."""
    system: str
    user: str


def _category_value(category: Union[FeedbackCategory, str]) -> str:
    return category.value if isinstance(category, FeedbackCategory) else str(category)


def dedupe_focus_areas(focus_areas: Optional[Iterable[Union[FeedbackCategory, str]]]) -> List[str]:
    """Focus area values with duplicates removed, first occurrence order kept."""
    seen: List[str] = []
    for area in focus_areas or []:
        value = _category_value(area)
        if value not in seen:
            seen.append(value)
    return seen


def build_metadata_block(metadata: Optional[ManuscriptMetadata]) -> str:
    """Only the metadata fields that are present, one per line."""
    if metadata is None:
        return ""

    lines = []
    if metadata.title:
        lines.append(f"Title: {metadata.title}")
    if metadata.genre:
        lines.append(f"Genre: {metadata.genre}")
    if metadata.target_audience:
        lines.append(f"Target Audience: {metadata.target_audience}")
    if metadata.author_goals:
        lines.append(f"Author Goals: {', '.join(metadata.author_goals)}")

    if not lines:
        return ""
    return "\n## Manuscript\n\n" + "\n".join(lines) + "\n"


def build_category_list(catalog: CategoryCatalog) -> str:
    return "\n".join(
        f"- {_category_value(category)}: {info['description']}"
        for category, info in catalog.items()
    )


def build_system_prompt(metadata: Optional[ManuscriptMetadata]) -> str:
    system = ANALYSIS_SYSTEM_PROMPT
    if metadata is not None and metadata.author_voice:
        system += AUTHOR_VOICE_HINT.format(author_voice=metadata.author_voice)
    if metadata is not None and metadata.genre:
        system += GENRE_HINT.format(genre=metadata.genre)
    return system


def build_analysis_schema(
    catalog: CategoryCatalog,
    genre: Optional[str] = None,
    include_genre_fit: bool = False,
    include_similar_works: bool = False,
) -> str:
    """
    Literal JSON template the reply must follow.

    The genreFit section is included only when include_genre_fit is set and a
    genre is known; similarWorks only when include_similar_works is set.
    """
    category_values = [_category_value(category) for category in catalog]
    score_lines = ",\n".join(f'    "{value}": <0-100>' for value in category_values)

    optional_sections = ""
    if include_genre_fit and genre:
        optional_sections += GENRE_FIT_SCHEMA_TEMPLATE.format(genre=genre)
    if include_similar_works:
        optional_sections += SIMILAR_WORKS_SCHEMA

    return ANALYSIS_SCHEMA_TEMPLATE.format(
        score_lines=score_lines,
        categories="|".join(category_values),
        issue_types="|".join(issue_type.value for issue_type in IssueType),
        severities="|".join(severity.value for severity in reversed(list(FeedbackSeverity))),
        optional_sections=optional_sections,
    )


def compile_analysis_request(
    sampled_text: str,
    metadata: Optional[ManuscriptMetadata] = None,
    focus_areas: Optional[Iterable[Union[FeedbackCategory, str]]] = None,
    catalog: Optional[CategoryCatalog] = None,
    include_genre_fit: bool = False,
    include_similar_works: bool = False,
) -> CompiledPrompt:
    """
    Build the full-critique prompt.

    Args:
        sampled_text: Manuscript text, already reduced by the sampler
        metadata: Optional manuscript facts; only present fields are emitted
        focus_areas: Categories to concentrate on, in caller order
        catalog: Category -> {name, description}; defaults to all fifteen
        include_genre_fit: Ask for the genreFit section (needs metadata.genre)
        include_similar_works: Ask for the similarWorks section

    Returns:
        CompiledPrompt(system, user)
    """
    catalog = catalog if catalog is not None else CATEGORY_INFO
    focus = dedupe_focus_areas(focus_areas)
    genre = metadata.genre if metadata is not None else None

    focus_note = FOCUS_NOTE_TEMPLATE.format(focus_areas=", ".join(focus)) if focus else ""

    user = ANALYSIS_USER_PROMPT_TEMPLATE.format(
        metadata_block=build_metadata_block(metadata),
        category_list=build_category_list(catalog),
        focus_note=focus_note,
        manuscript=sampled_text,
        schema=build_analysis_schema(catalog, genre, include_genre_fit, include_similar_works),
    )
    return CompiledPrompt(system=build_system_prompt(metadata), user=user)


def compile_quick_analysis(text: str, category: FeedbackCategory) -> CompiledPrompt:
    """Single-aspect prompt; text should already be truncated."""
    info = CATEGORY_INFO[category]
    user = QUICK_ANALYSIS_PROMPT_TEMPLATE.format(
        category_name=info["name"],
        category_description=info["description"],
        text=text,
    )
    return CompiledPrompt(system=ADVISORY_SYSTEM_PROMPT, user=user)


def compile_version_comparison(original: str, revised: str) -> CompiledPrompt:
    user = VERSION_COMPARISON_PROMPT_TEMPLATE.format(original=original, revised=revised)
    return CompiledPrompt(system=ADVISORY_SYSTEM_PROMPT, user=user)


def compile_fix_suggestion(excerpt: str, issue: SpecificIssue) -> CompiledPrompt:
    user = FIX_SUGGESTION_PROMPT_TEMPLATE.format(
        issue_type=issue.type.value,
        severity=issue.severity.value,
        title=issue.title,
        description=issue.description,
        excerpt=excerpt,
    )
    return CompiledPrompt(system=ADVISORY_SYSTEM_PROMPT, user=user)
