"""
Manuscript Critic Core Module
Sampling, prompt compilation, extraction, normalization, ranking and assembly.
"""

from .advisory import AdvisoryService
from .assembler import AnalysisAssembler, build_analysis_record, build_degraded_record, validate_request
from .errors import (
    AnalysisCancelled,
    CritiqueError,
    PersistenceError,
    ProviderError,
    ProviderTimeout,
    ProviderUnavailable,
    ValidationError,
)
from .extraction import ExtractionFailure, extract_json_object, is_failure
from .ranking import assign_issue_ids, parse_issues, parse_priority_actions, rank_issues, rank_priority_actions
from .request_compiler import CompiledPrompt, compile_analysis_request
from .sampler import count_words, sample_manuscript
from .scoring import normalize_overall_score, normalize_scores

__all__ = [
    "CritiqueError",
    "ValidationError",
    "ProviderError",
    "ProviderTimeout",
    "ProviderUnavailable",
    "AnalysisCancelled",
    "PersistenceError",
    "sample_manuscript",
    "count_words",
    "CompiledPrompt",
    "compile_analysis_request",
    "ExtractionFailure",
    "extract_json_object",
    "is_failure",
    "normalize_scores",
    "normalize_overall_score",
    "assign_issue_ids",
    "parse_issues",
    "rank_issues",
    "parse_priority_actions",
    "rank_priority_actions",
    "AnalysisAssembler",
    "AdvisoryService",
    "validate_request",
    "build_analysis_record",
    "build_degraded_record",
]
