"""Persistence layer for drafts and their audit history."""

from __future__ import annotations

import os
from typing import Optional

from ..config import DraftflowConfig, load_config
from ..exceptions import ConfigurationError
from .inmemory import InMemoryDraftRepository
from .repository import DraftRepository
from .sqlite import SQLiteDraftRepository


def get_repository(
    database_url: Optional[str] = None, config: Optional[DraftflowConfig] = None
) -> DraftRepository:
    """Factory function to obtain a draft repository.

    The backend is selected based on ``database_url`` which can be provided
    explicitly, via environment variable ``DRAFTFLOW_DATABASE_URL`` or
    ``DATABASE_URL``, or from loaded configuration. When no database is
    configured, a fresh in-memory repository is returned.
    """

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("DRAFTFLOW_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or config.database_url
    )

    if not database_url:
        return InMemoryDraftRepository()

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        return SQLiteDraftRepository(path)
    if database_url.startswith("postgres://") or database_url.startswith(
        "postgresql://"
    ):
        from .postgres import PostgresDraftRepository

        return PostgresDraftRepository(database_url)
    raise ConfigurationError(f"Unsupported database backend: {database_url}")


__all__ = [
    "DraftRepository",
    "InMemoryDraftRepository",
    "SQLiteDraftRepository",
    "get_repository",
]
