"""
Manuscript Critic Services Module
Completion clients, the completion gateway and analysis stores.
"""

from .gateway import CompletionGateway, is_retryable_error
from .memory_store import AnalysisStore, InMemoryAnalysisStore
from .model_client import (
    CompletionClient,
    DemoCompletionClient,
    ModelResponse,
    UnifiedModelClient,
    create_completion_client,
)
from .supabase_persistence import SupabaseAnalysisStore

__all__ = [
    "ModelResponse",
    "CompletionClient",
    "UnifiedModelClient",
    "DemoCompletionClient",
    "create_completion_client",
    "CompletionGateway",
    "is_retryable_error",
    "AnalysisStore",
    "InMemoryAnalysisStore",
    "SupabaseAnalysisStore",
]
