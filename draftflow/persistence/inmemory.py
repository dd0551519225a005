"""In-memory implementation of the draft repository."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from ..contracts import Draft, DraftStatus, HistoryEntry
from ..exceptions import DuplicateDraftError
from .repository import DraftRepository


class InMemoryDraftRepository(DraftRepository):
    """Store drafts and history in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Callers always receive copies.
    """

    def __init__(self) -> None:
        self._drafts: Dict[str, Draft] = {}
        self._history: List[HistoryEntry] = []
        self._history_id = 0
        self._lock = asyncio.Lock()

    def _record_history(self, entry: HistoryEntry) -> HistoryEntry:
        self._history_id += 1
        stored = entry.model_copy(update={"id": self._history_id}, deep=True)
        self._history.append(stored)
        return stored

    # ------------------------------------------------------------------
    async def create_draft(self, draft: Draft) -> Draft:
        async with self._lock:
            if draft.id in self._drafts:
                raise DuplicateDraftError(draft.id)
            self._drafts[draft.id] = draft.model_copy(deep=True)
        return draft.model_copy(deep=True)

    async def get_draft(self, draft_id: str) -> Draft | None:
        draft = self._drafts.get(draft_id)
        return draft.model_copy(deep=True) if draft else None

    async def list_drafts(self, status: Optional[DraftStatus] = None) -> list[Draft]:
        return [
            d.model_copy(deep=True)
            for d in self._drafts.values()
            if status is None or d.status == status
        ]

    async def conditional_update(
        self,
        draft_id: str,
        expected_status: DraftStatus,
        patch: Dict[str, Any],
        history: Optional[HistoryEntry] = None,
    ) -> Draft | None:
        async with self._lock:
            current = self._drafts.get(draft_id)
            if current is None or current.status != expected_status:
                return None
            updated = Draft.model_validate({**current.model_dump(), **patch, "id": draft_id})
            # history first: a failed append leaves the draft untouched
            if history is not None:
                self._record_history(history)
            self._drafts[draft_id] = updated
        return updated.model_copy(deep=True)

    async def append_history(self, entry: HistoryEntry) -> HistoryEntry:
        async with self._lock:
            stored = self._record_history(entry)
        return stored.model_copy(deep=True)

    async def list_history(self, draft_id: str) -> list[HistoryEntry]:
        return [
            e.model_copy(deep=True)
            for e in reversed(self._history)
            if e.draft_id == draft_id
        ]
