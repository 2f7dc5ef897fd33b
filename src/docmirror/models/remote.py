from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class CommitRecord(BaseModel):
    """Single element of the GitLab ``repository/commits`` response.

    Only ``id`` is read; the remaining fields are kept for log context.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    short_id: str | None = None
    title: str | None = None
    created_at: datetime | None = None
    committed_date: datetime | None = None
    web_url: str | None = None


class LocalArchive(BaseModel):
    """A fully extracted archive directory on local storage."""

    model_config = ConfigDict(frozen=True)

    path: Path
    revision_id: str  # Resolved revision, or a generated token when unresolved
    resolved: bool
    local_hit: bool
