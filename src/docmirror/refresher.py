"""Refresh orchestration: resolve, fetch or reuse, classify, publish.

One refresh is in flight at a time. Any failing step ends the attempt
without publishing; the previously published snapshot stays current and the
next staleness check starts over from the beginning.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from docmirror.errors import ErrorCode, Failure
from docmirror.models.snapshot import Snapshot

if TYPE_CHECKING:
    from docmirror.classifier import ContentClassifier
    from docmirror.fetcher import ArchiveFetcher
    from docmirror.resolver import RevisionResolver
    from docmirror.store import CacheStore

log = structlog.get_logger()


class RefreshStatus(StrEnum):
    SKIPPED = "skipped"
    PUBLISHED = "published"
    FAILED = "failed"


class RefreshOrchestrator:
    """The only writer of the cache store."""

    def __init__(
        self,
        store: CacheStore,
        resolver: RevisionResolver,
        fetcher: ArchiveFetcher,
        classifier: ContentClassifier,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._fetcher = fetcher
        self._classifier = classifier
        self._lock = asyncio.Lock()
        self.last_failure: Failure | None = None

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    async def refresh_if_needed(self, now: datetime | None = None) -> RefreshStatus:
        """Refresh when the store says the snapshot is stale; otherwise no-op."""
        now = now or datetime.now(UTC)
        if not self._store.should_refresh(now):
            return RefreshStatus.SKIPPED

        async with self._lock:
            # A concurrent caller may have published while we waited.
            if not self._store.should_refresh(now):
                log.debug("refresh_already_done")
                return RefreshStatus.SKIPPED
            return await self._refresh()

    async def force_refresh(self) -> RefreshStatus:
        """Run a refresh attempt regardless of staleness."""
        async with self._lock:
            return await self._refresh()

    async def _refresh(self) -> RefreshStatus:
        log.info("refresh_start")

        revision_id = await self._resolver.resolve_latest()
        if revision_id is None:
            if self._store.published:
                return self._fail(
                    Failure(
                        ErrorCode.REVISION_UNAVAILABLE,
                        "Latest revision could not be resolved",
                    )
                )
            # First fill only: fetch under a fresh token rather than serve nothing.
            log.warning("refresh_revision_unknown", code=ErrorCode.REVISION_UNAVAILABLE)

        archive = await self._fetcher.ensure_local_archive(revision_id)
        if isinstance(archive, Failure):
            return self._fail(archive)

        pages = await self._classifier.classify(archive.path)
        if isinstance(pages, Failure):
            return self._fail(pages, revision_id=archive.revision_id)

        snapshot = Snapshot(
            revision_id=archive.revision_id,
            rendered_at=datetime.now(UTC),
            pages=tuple(pages),
            archive_dir=str(archive.path),
        )
        self._store.publish(snapshot)
        self.last_failure = None
        log.info(
            "refresh_complete",
            revision_id=snapshot.revision_id,
            local_hit=archive.local_hit,
            **snapshot.category_counts(),
        )
        return RefreshStatus.PUBLISHED

    def _fail(self, failure: Failure, revision_id: str | None = None) -> RefreshStatus:
        self.last_failure = failure
        if failure.code == ErrorCode.NO_DOCUMENTS:
            # The archive itself is broken, not just the network.
            log.error(
                "refresh_no_documents",
                revision_id=revision_id,
                message=failure.message,
            )
        else:
            log.warning(
                "refresh_aborted",
                code=failure.code,
                message=failure.message,
                recoverable=failure.recoverable,
            )
        return RefreshStatus.FAILED
