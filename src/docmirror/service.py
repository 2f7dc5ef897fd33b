"""Long-lived documentation mirror.

``DocMirror`` is constructed explicitly and handed to consumers; there is no
module-level instance. Entering it runs the first refresh and, optionally,
starts a background task that re-checks staleness on an interval.
"""

from __future__ import annotations

import asyncio
import contextlib
from datetime import timedelta
from typing import TYPE_CHECKING

import structlog

from docmirror.classifier import ContentClassifier
from docmirror.config import Settings
from docmirror.fetcher import ArchiveFetcher, build_http_client
from docmirror.refresher import RefreshOrchestrator, RefreshStatus
from docmirror.resolver import RevisionResolver
from docmirror.store import CacheStore

if TYPE_CHECKING:
    from types import TracebackType

    import httpx

    from docmirror.models.snapshot import Snapshot

log = structlog.get_logger()


class DocMirror:
    """Public surface: ``current()``, ``get_snapshot()`` and ``refresh()``."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._owns_client = client is None
        self.http_client = client or build_http_client(self.settings)
        self.store = CacheStore(
            refresh_interval=timedelta(seconds=self.settings.cache.refresh_interval_seconds)
        )
        self.fetcher = ArchiveFetcher(self.http_client, self.settings)
        self.orchestrator = RefreshOrchestrator(
            store=self.store,
            resolver=RevisionResolver(self.http_client, self.settings),
            fetcher=self.fetcher,
            classifier=ContentClassifier(self.settings.classifier),
        )
        self._refresh_task: asyncio.Task[None] | None = None

    async def __aenter__(self) -> DocMirror:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def start(self) -> None:
        """Run the initial refresh and start the background loop if enabled."""
        status = await self.orchestrator.refresh_if_needed()
        log.info("docmirror_started", initial_refresh=status, root=str(self.fetcher.root))
        if self.settings.cache.auto_refresh and self._refresh_task is None:
            self._refresh_task = asyncio.create_task(self._refresh_loop())

    async def aclose(self) -> None:
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._refresh_task
            self._refresh_task = None
        if self._owns_client:
            await self.http_client.aclose()

    def current(self) -> Snapshot:
        """Latest published snapshot. Never blocks, never raises."""
        return self.store.current()

    async def get_snapshot(self) -> Snapshot:
        """Refresh first if stale, then return the current snapshot."""
        await self.orchestrator.refresh_if_needed()
        return self.store.current()

    async def refresh(self) -> RefreshStatus:
        """Force a refresh attempt now."""
        return await self.orchestrator.force_refresh()

    async def _refresh_loop(self) -> None:
        interval = self.settings.cache.refresh_interval_seconds
        while True:
            await asyncio.sleep(interval)
            try:
                await self.orchestrator.refresh_if_needed()
            except Exception:
                # Keep the loop alive; the next tick starts a fresh attempt.
                log.error("refresh_loop_error", exc_info=True)
