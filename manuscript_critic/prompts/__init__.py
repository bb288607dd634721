"""
Manuscript Critic Prompts Module
System prompts and user templates for every critique operation.
"""

from .advisory import (
    ADVISORY_SYSTEM_PROMPT,
    FIX_SUGGESTION_PROMPT_TEMPLATE,
    QUICK_ANALYSIS_PROMPT_TEMPLATE,
    VERSION_COMPARISON_PROMPT_TEMPLATE,
)
from .analysis import (
    ANALYSIS_SCHEMA_TEMPLATE,
    ANALYSIS_SYSTEM_PROMPT,
    ANALYSIS_USER_PROMPT_TEMPLATE,
    AUTHOR_VOICE_HINT,
    FOCUS_NOTE_TEMPLATE,
    GENRE_FIT_SCHEMA_TEMPLATE,
    GENRE_HINT,
    SIMILAR_WORKS_SCHEMA,
)

__all__ = [
    "ANALYSIS_SYSTEM_PROMPT",
    "ANALYSIS_USER_PROMPT_TEMPLATE",
    "ANALYSIS_SCHEMA_TEMPLATE",
    "AUTHOR_VOICE_HINT",
    "GENRE_HINT",
    "FOCUS_NOTE_TEMPLATE",
    "GENRE_FIT_SCHEMA_TEMPLATE",
    "SIMILAR_WORKS_SCHEMA",
    "ADVISORY_SYSTEM_PROMPT",
    "QUICK_ANALYSIS_PROMPT_TEMPLATE",
    "VERSION_COMPARISON_PROMPT_TEMPLATE",
    "FIX_SUGGESTION_PROMPT_TEMPLATE",
]
