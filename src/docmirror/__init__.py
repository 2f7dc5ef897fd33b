"""Locally cached, periodically refreshed rendered documentation."""

from __future__ import annotations

from docmirror.models import Page, PageCategory, Snapshot
from docmirror.refresher import RefreshStatus
from docmirror.service import DocMirror

__all__ = [
    "DocMirror",
    "Page",
    "PageCategory",
    "RefreshStatus",
    "Snapshot",
]
