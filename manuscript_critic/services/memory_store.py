"""In-process analysis store for the command line, demo mode and tests."""

import asyncio
import logging
from typing import Dict, List, Optional, Protocol, Tuple

from ..models import AnalysisScopeKey, ManuscriptAnalysis

logger = logging.getLogger(__name__)


class AnalysisStore(Protocol):
    """Persistence collaborator used by the assembler."""

    async def upsert_analysis(self, owner_id: str, scope_key: AnalysisScopeKey, record: ManuscriptAnalysis) -> str:
        ...

    async def get_latest_analysis(self, owner_id: str, scope_key: AnalysisScopeKey) -> Optional[ManuscriptAnalysis]:
        ...

    async def list_history(self, owner_id: str, scope_key: AnalysisScopeKey, limit: int = 20) -> List[ManuscriptAnalysis]:
        ...


class InMemoryAnalysisStore:
    """Append-only history per (owner, scope), kept in insertion order."""

    def __init__(self):
        self._records: Dict[Tuple[str, AnalysisScopeKey], List[ManuscriptAnalysis]] = {}
        self._lock = asyncio.Lock()

    async def upsert_analysis(self, owner_id: str, scope_key: AnalysisScopeKey, record: ManuscriptAnalysis) -> str:
        async with self._lock:
            self._records.setdefault((owner_id, scope_key), []).append(record.model_copy(deep=True))
        logger.debug(f"[upsert_analysis] Stored analysis {record.id} for book {scope_key.book_id}")
        return record.id

    async def get_latest_analysis(self, owner_id: str, scope_key: AnalysisScopeKey) -> Optional[ManuscriptAnalysis]:
        records = self._records.get((owner_id, scope_key))
        return records[-1].model_copy(deep=True) if records else None

    async def list_history(self, owner_id: str, scope_key: AnalysisScopeKey, limit: int = 20) -> List[ManuscriptAnalysis]:
        records = self._records.get((owner_id, scope_key), [])
        return [record.model_copy(deep=True) for record in reversed(records)][:limit]

    def __len__(self) -> int:
        return sum(len(records) for records in self._records.values())
