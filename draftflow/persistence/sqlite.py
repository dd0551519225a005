"""SQLite implementation of the draft repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from ..contracts import Draft, DraftStatus, HistoryEntry
from ..exceptions import DuplicateDraftError
from .codec import decode_draft, decode_json, encode_draft, split_patch
from .repository import DraftRepository


class SQLiteDraftRepository(DraftRepository):
    """Persist drafts and their history using SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        # autocommit; multi-statement work opens its own transaction
        self._conn = sqlite3.connect(
            self.db_path, check_same_thread=False, isolation_level=None
        )
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS drafts (
                id TEXT PRIMARY KEY,
                status TEXT NOT NULL,
                body TEXT NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS draft_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                draft_id TEXT NOT NULL,
                from_status TEXT NOT NULL,
                to_status TEXT NOT NULL,
                actor_id TEXT NOT NULL,
                actor_role TEXT NOT NULL,
                comments TEXT,
                metadata TEXT,
                created_at TEXT NOT NULL
            )
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_draft_history_draft_id ON draft_history(draft_id)"
        )

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> int:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(query, params)
            return cur.lastrowid

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(query, params)
            return cur.fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(query, params)
            return cur.fetchall()

    def _insert_draft(self, draft: Draft) -> None:
        try:
            self._execute(
                "INSERT INTO drafts (id, status, body) VALUES (?, ?, ?)",
                *encode_draft(draft),
            )
        except sqlite3.IntegrityError as exc:
            raise DuplicateDraftError(draft.id) from exc

    @staticmethod
    def _insert_history(cur: sqlite3.Cursor, entry: HistoryEntry) -> int:
        cur.execute(
            """
            INSERT INTO draft_history
                (draft_id, from_status, to_status, actor_id, actor_role, comments, metadata, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.draft_id,
                entry.from_status.value,
                entry.to_status.value,
                entry.actor_id,
                entry.actor_role.value,
                entry.comments,
                json.dumps(entry.metadata),
                entry.created_at.isoformat(),
            ),
        )
        return cur.lastrowid

    def _append_history(self, entry: HistoryEntry) -> int:
        with self._lock:
            return self._insert_history(self._conn.cursor(), entry)

    def _compare_and_set(
        self,
        draft_id: str,
        expected_status: DraftStatus,
        patch: Dict[str, Any],
        history: Optional[HistoryEntry],
    ) -> Draft | None:
        status, fields = split_patch(patch)
        with self._lock:
            cur = self._conn.cursor()
            cur.execute("BEGIN IMMEDIATE")
            try:
                cur.execute(
                    "SELECT body FROM drafts WHERE id = ? AND status = ?",
                    (draft_id, expected_status.value),
                )
                row = cur.fetchone()
                if row is None:
                    cur.execute("ROLLBACK")
                    return None
                body = {**json.loads(row["body"]), **fields}
                new_status = (status or expected_status).value
                cur.execute(
                    "UPDATE drafts SET status = ?, body = ? WHERE id = ? AND status = ?",
                    (new_status, json.dumps(body), draft_id, expected_status.value),
                )
                if cur.rowcount == 0:
                    cur.execute("ROLLBACK")
                    return None
                if history is not None:
                    self._insert_history(cur, history)
                cur.execute("COMMIT")
            except BaseException:
                if self._conn.in_transaction:
                    cur.execute("ROLLBACK")
                raise
        return decode_draft(draft_id, new_status, body)

    @staticmethod
    def _history_from_row(row: sqlite3.Row) -> HistoryEntry:
        return HistoryEntry(
            id=row["id"],
            draft_id=row["draft_id"],
            from_status=row["from_status"],
            to_status=row["to_status"],
            actor_id=row["actor_id"],
            actor_role=row["actor_role"],
            comments=row["comments"],
            metadata=decode_json(row["metadata"]) or {},
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # ------------------------------------------------------------------
    # Repository API
    async def create_draft(self, draft: Draft) -> Draft:
        await asyncio.to_thread(self._insert_draft, draft)
        return draft

    async def get_draft(self, draft_id: str) -> Draft | None:
        row = await asyncio.to_thread(
            self._fetchone,
            "SELECT id, status, body FROM drafts WHERE id = ?",
            draft_id,
        )
        if not row:
            return None
        return decode_draft(row["id"], row["status"], row["body"])

    async def list_drafts(self, status: Optional[DraftStatus] = None) -> list[Draft]:
        if status is None:
            rows = await asyncio.to_thread(
                self._fetchall, "SELECT id, status, body FROM drafts ORDER BY id"
            )
        else:
            rows = await asyncio.to_thread(
                self._fetchall,
                "SELECT id, status, body FROM drafts WHERE status = ? ORDER BY id",
                DraftStatus(status).value,
            )
        return [decode_draft(r["id"], r["status"], r["body"]) for r in rows]

    async def conditional_update(
        self,
        draft_id: str,
        expected_status: DraftStatus,
        patch: Dict[str, Any],
        history: Optional[HistoryEntry] = None,
    ) -> Draft | None:
        return await asyncio.to_thread(
            self._compare_and_set, draft_id, DraftStatus(expected_status), patch, history
        )

    async def append_history(self, entry: HistoryEntry) -> HistoryEntry:
        row_id = await asyncio.to_thread(self._append_history, entry)
        return entry.model_copy(update={"id": row_id})

    async def list_history(self, draft_id: str) -> list[HistoryEntry]:
        rows = await asyncio.to_thread(
            self._fetchall,
            "SELECT * FROM draft_history WHERE draft_id = ? ORDER BY id DESC",
            draft_id,
        )
        return [self._history_from_row(r) for r in rows]

    def close(self) -> None:
        self._conn.close()
