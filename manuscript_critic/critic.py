"""
ManuscriptCritic - the caller-facing facade.

Wires the completion client, gateway, assembler, advisory operations and
analysis store from CritiqueSettings. The provider (or demo client) is chosen
once, here, at construction time.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from .config import CritiqueSettings, create_default_config_from_env
from .core.advisory import AdvisoryService
from .core.assembler import AnalysisAssembler
from .models import (
    AnalysisRequest,
    AnalysisScopeKey,
    FeedbackCategory,
    FixSuggestion,
    ManuscriptAnalysis,
    ManuscriptMetadata,
    QuickAnalysisResult,
    SpecificIssue,
    VersionComparison,
)
from .services import (
    AnalysisStore,
    CompletionClient,
    CompletionGateway,
    InMemoryAnalysisStore,
    SupabaseAnalysisStore,
    create_completion_client,
)

logger = logging.getLogger(__name__)


class ManuscriptCritic:
    """The four critique operations plus read access to stored analyses."""

    def __init__(
        self,
        settings: CritiqueSettings,
        gateway: CompletionGateway,
        store: AnalysisStore,
    ):
        self.settings = settings
        self.gateway = gateway
        self.store = store
        self.assembler = AnalysisAssembler(gateway, store, settings)
        self.advisory = AdvisoryService(gateway, settings)

    @property
    def is_demo(self) -> bool:
        return self.settings.is_demo

    async def run_analysis(
        self,
        request: AnalysisRequest,
        text: str,
        metadata: Optional[ManuscriptMetadata] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ManuscriptAnalysis:
        return await self.assembler.run_analysis(request, text, metadata=metadata, cancel_event=cancel_event)

    async def quick_analysis(self, text: str, category: FeedbackCategory) -> QuickAnalysisResult:
        return await self.advisory.quick_analysis(text, category)

    async def compare_versions(self, original: str, revised: str) -> VersionComparison:
        return await self.advisory.compare_versions(original, revised)

    async def suggest_fix(self, text: str, issue: SpecificIssue) -> FixSuggestion:
        return await self.advisory.suggest_fix(text, issue)

    async def get_latest_analysis(self, owner_id: str, scope_key: AnalysisScopeKey) -> Optional[ManuscriptAnalysis]:
        return await self.store.get_latest_analysis(owner_id, scope_key)

    async def get_history(self, owner_id: str, scope_key: AnalysisScopeKey, limit: int = 20) -> List[ManuscriptAnalysis]:
        return await self.store.list_history(owner_id, scope_key, limit=limit)


def create_store(settings: CritiqueSettings) -> AnalysisStore:
    """Supabase when configured, otherwise an in-memory store."""
    if settings.supabase_url and settings.supabase_key:
        return SupabaseAnalysisStore(settings.supabase_url, settings.supabase_key.get_secret_value())
    logger.info("[create_store] Supabase not configured, analyses are kept in memory")
    return InMemoryAnalysisStore()


def create_critic(
    settings: Optional[CritiqueSettings] = None,
    store: Optional[AnalysisStore] = None,
    client: Optional[CompletionClient] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> ManuscriptCritic:
    """
    Build a ManuscriptCritic from configuration.

    Args:
        settings: Pipeline settings; read from the environment when omitted
        store: Analysis store; chosen from settings when omitted
        client: Completion client; chosen from settings when omitted
        sleep: Backoff sleep, replaced in tests
    """
    settings = settings or create_default_config_from_env()
    client = client or create_completion_client(settings)
    gateway = CompletionGateway.from_settings(client, settings, sleep=sleep)
    return ManuscriptCritic(settings, gateway, store or create_store(settings))
