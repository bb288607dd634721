"""
Supabase Persistence Service for manuscript analyses

Every analysis is inserted as a new row in `manuscript_analyses`; the latest
row for (owner, book, scope, chapter) is the current analysis and older rows
form the history used for trend tracking.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from ..core.errors import PersistenceError
from ..models import AnalysisScopeKey, ManuscriptAnalysis

logger = logging.getLogger(__name__)

ANALYSES_TABLE = "manuscript_analyses"


class SupabaseAnalysisStore:
    """Stores ManuscriptAnalysis records in Supabase."""

    def __init__(self, supabase_url: Optional[str] = None, supabase_key: Optional[str] = None, client: Any = None):
        """
        Initialize the Supabase analysis store.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase service role key (for server-side operations)
            client: Pre-built supabase Client, mainly for tests
        """
        self.supabase_url = supabase_url or os.getenv("SUPABASE_URL")
        self.supabase_key = supabase_key or os.getenv("SUPABASE_SERVICE_KEY")
        self.client = client
        self._connected = client is not None

    async def connect(self) -> bool:
        """
        Connect to Supabase.

        Returns:
            True if connection successful, False otherwise
        """
        if self.is_connected:
            return True
        if not self.supabase_url or not self.supabase_key:
            logger.warning("[connect] SUPABASE_URL or SUPABASE_SERVICE_KEY not set")
            return False

        try:
            from supabase import Client, create_client
            self.client: Client = create_client(self.supabase_url, self.supabase_key)
            self._connected = True
            return True
        except Exception as e:
            logger.error(f"[connect] Failed to connect to Supabase: {e}")
            self._connected = False
            return False

    @property
    def is_connected(self) -> bool:
        """Check if connected to Supabase."""
        return self._connected and self.client is not None

    async def _require_client(self) -> Any:
        if not await self.connect():
            raise PersistenceError("Supabase is not configured")
        return self.client

    def _scoped_query(self, query: Any, owner_id: str, scope_key: AnalysisScopeKey) -> Any:
        query = (
            query
            .eq("user_id", owner_id)
            .eq("book_id", scope_key.book_id)
            .eq("scope", scope_key.scope.value)
        )
        if scope_key.chapter_id is None:
            return query.is_("chapter_id", "null")
        return query.eq("chapter_id", scope_key.chapter_id)

    @staticmethod
    def _to_row(owner_id: str, scope_key: AnalysisScopeKey, record: ManuscriptAnalysis) -> Dict[str, Any]:
        return {
            "id": record.id,
            "user_id": owner_id,
            "book_id": scope_key.book_id,
            "scope": scope_key.scope.value,
            "chapter_id": scope_key.chapter_id,
            "overall_score": record.overall_score,
            "analysis_version": record.analysis_version,
            "analysis": record.model_dump(mode="json", by_alias=True),
            "created_at": record.created_at.isoformat(),
        }

    async def upsert_analysis(self, owner_id: str, scope_key: AnalysisScopeKey, record: ManuscriptAnalysis) -> str:
        """
        Write one analysis as a single insert.

        Returns:
            The stored record id
        """
        client = await self._require_client()
        try:
            result = client.table(ANALYSES_TABLE).insert(self._to_row(owner_id, scope_key, record)).execute()
        except Exception as e:
            logger.error(f"[upsert_analysis] Failed to store analysis {record.id}: {e}")
            raise PersistenceError(f"Failed to store analysis: {e}") from e

        logger.info(f"[upsert_analysis] Stored analysis {record.id} for book {scope_key.book_id} ({scope_key.scope.value})")
        if result.data:
            return result.data[0].get("id", record.id)
        return record.id

    async def get_latest_analysis(self, owner_id: str, scope_key: AnalysisScopeKey) -> Optional[ManuscriptAnalysis]:
        """Most recent analysis for the scope, or None."""
        history = await self.list_history(owner_id, scope_key, limit=1)
        return history[0] if history else None

    async def list_history(self, owner_id: str, scope_key: AnalysisScopeKey, limit: int = 20) -> List[ManuscriptAnalysis]:
        """
        Analyses for the scope, newest first.

        Args:
            owner_id: Owning user
            scope_key: Book, scope and chapter
            limit: Maximum number of records

        Returns:
            List of ManuscriptAnalysis
        """
        client = await self._require_client()
        try:
            query = self._scoped_query(client.table(ANALYSES_TABLE).select("*"), owner_id, scope_key)
            result = query.order("created_at", desc=True).limit(limit).execute()
        except Exception as e:
            logger.error(f"[list_history] Failed to load analyses for book {scope_key.book_id}: {e}")
            raise PersistenceError(f"Failed to load analyses: {e}") from e

        return [ManuscriptAnalysis.model_validate(row["analysis"]) for row in result.data or []]
