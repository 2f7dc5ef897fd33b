from __future__ import annotations

from docmirror.models.remote import CommitRecord, LocalArchive
from docmirror.models.snapshot import Page, PageCategory, Snapshot

__all__ = [
    # snapshot
    "Page",
    "PageCategory",
    "Snapshot",
    # remote
    "CommitRecord",
    "LocalArchive",
]
