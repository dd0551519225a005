"""Repository abstraction for draft and history persistence."""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from ..contracts import Draft, DraftStatus, HistoryEntry


class DraftRepository(Protocol):
    """Protocol for draft storage backends."""

    async def create_draft(self, draft: Draft) -> Draft:
        """Persist a new draft. Raises ``DuplicateDraftError`` if the id exists."""

    async def get_draft(self, draft_id: str) -> Draft | None:
        """Retrieve a draft by id."""

    async def list_drafts(self, status: Optional[DraftStatus] = None) -> list[Draft]:
        """Return all drafts, optionally only those in ``status``."""

    async def conditional_update(
        self,
        draft_id: str,
        expected_status: DraftStatus,
        patch: Dict[str, Any],
        history: Optional[HistoryEntry] = None,
    ) -> Draft | None:
        """Apply ``patch`` only if the stored status equals ``expected_status``.

        The check and the write happen atomically. When ``history`` is given it
        is appended in the same transaction, so either both are stored or
        neither is. Returns the updated draft, or ``None`` when no row matched.
        """

    async def append_history(self, entry: HistoryEntry) -> HistoryEntry:
        """Append an audit entry and return it with its id assigned."""

    async def list_history(self, draft_id: str) -> list[HistoryEntry]:
        """Return the audit trail for a draft, newest first."""
