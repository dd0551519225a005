"""PostgreSQL implementation of the draft repository."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import asyncpg
from asyncpg.exceptions import UniqueViolationError

from ..contracts import Draft, DraftStatus, HistoryEntry
from ..exceptions import DuplicateDraftError
from .codec import decode_draft, decode_json, encode_draft, split_patch
from .repository import DraftRepository


class PostgresDraftRepository(DraftRepository):
    """Persist drafts and their history using PostgreSQL."""

    def __init__(self, dsn: str):
        self._dsn = dsn
        self._initialized = False

    async def _connect(self) -> asyncpg.Connection:
        conn = await asyncpg.connect(self._dsn)
        if not self._initialized:
            try:
                await self._ensure_schema(conn)
            except Exception:
                await conn.close()
                raise
            self._initialized = True
        return conn

    async def _ensure_schema(self, conn: asyncpg.Connection) -> None:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS drafts (
                id TEXT PRIMARY KEY,
                status TEXT NOT NULL,
                body JSONB NOT NULL
            )
            """
        )
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS draft_history (
                id SERIAL PRIMARY KEY,
                draft_id TEXT NOT NULL,
                from_status TEXT NOT NULL,
                to_status TEXT NOT NULL,
                actor_id TEXT NOT NULL,
                actor_role TEXT NOT NULL,
                comments TEXT,
                metadata JSONB,
                created_at TIMESTAMPTZ NOT NULL
            )
            """
        )
        await conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_draft_history_draft_id ON draft_history(draft_id)"
        )

    @staticmethod
    def _history_from_row(row: asyncpg.Record) -> HistoryEntry:
        return HistoryEntry(
            id=row["id"],
            draft_id=row["draft_id"],
            from_status=row["from_status"],
            to_status=row["to_status"],
            actor_id=row["actor_id"],
            actor_role=row["actor_role"],
            comments=row["comments"],
            metadata=decode_json(row["metadata"]) or {},
            created_at=row["created_at"],
        )

    # ------------------------------------------------------------------
    async def create_draft(self, draft: Draft) -> Draft:
        conn = await self._connect()
        try:
            await conn.execute(
                "INSERT INTO drafts (id, status, body) VALUES ($1, $2, $3::jsonb)",
                *encode_draft(draft),
            )
        except UniqueViolationError as exc:
            raise DuplicateDraftError(draft.id) from exc
        finally:
            await conn.close()
        return draft

    async def get_draft(self, draft_id: str) -> Draft | None:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(
                "SELECT id, status, body FROM drafts WHERE id = $1", draft_id
            )
        finally:
            await conn.close()
        if not row:
            return None
        return decode_draft(row["id"], row["status"], row["body"])

    async def list_drafts(self, status: Optional[DraftStatus] = None) -> list[Draft]:
        conn = await self._connect()
        try:
            if status is None:
                rows = await conn.fetch("SELECT id, status, body FROM drafts ORDER BY id")
            else:
                rows = await conn.fetch(
                    "SELECT id, status, body FROM drafts WHERE status = $1 ORDER BY id",
                    DraftStatus(status).value,
                )
        finally:
            await conn.close()
        return [decode_draft(r["id"], r["status"], r["body"]) for r in rows]

    @staticmethod
    async def _insert_history(conn: asyncpg.Connection, entry: HistoryEntry) -> int:
        return await conn.fetchval(
            """
            INSERT INTO draft_history
                (draft_id, from_status, to_status, actor_id, actor_role, comments, metadata, created_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7::jsonb, $8)
            RETURNING id
            """,
            entry.draft_id,
            entry.from_status.value,
            entry.to_status.value,
            entry.actor_id,
            entry.actor_role.value,
            entry.comments,
            json.dumps(entry.metadata),
            entry.created_at,
        )

    async def conditional_update(
        self,
        draft_id: str,
        expected_status: DraftStatus,
        patch: Dict[str, Any],
        history: Optional[HistoryEntry] = None,
    ) -> Draft | None:
        expected = DraftStatus(expected_status)
        status, fields = split_patch(patch)
        conn = await self._connect()
        try:
            async with conn.transaction():
                # jsonb || replaces top-level keys, which is the patch semantics we want
                row = await conn.fetchrow(
                    """
                    UPDATE drafts
                    SET status = $3, body = body || $4::jsonb
                    WHERE id = $1 AND status = $2
                    RETURNING id, status, body
                    """,
                    draft_id,
                    expected.value,
                    (status or expected).value,
                    json.dumps(fields),
                )
                if row is not None and history is not None:
                    await self._insert_history(conn, history)
        finally:
            await conn.close()
        if row is None:
            return None
        return decode_draft(row["id"], row["status"], row["body"])

    async def append_history(self, entry: HistoryEntry) -> HistoryEntry:
        conn = await self._connect()
        try:
            row_id = await self._insert_history(conn, entry)
        finally:
            await conn.close()
        return entry.model_copy(update={"id": row_id})

    async def list_history(self, draft_id: str) -> list[HistoryEntry]:
        conn = await self._connect()
        try:
            rows = await conn.fetch(
                "SELECT * FROM draft_history WHERE draft_id = $1 ORDER BY id DESC",
                draft_id,
            )
        finally:
            await conn.close()
        return [self._history_from_row(r) for r in rows]
