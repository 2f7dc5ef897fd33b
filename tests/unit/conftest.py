"""Unit-specific fixtures (no I/O beyond tmp_path and mocked HTTP)."""

from __future__ import annotations

from datetime import timedelta

import httpx
import pytest

from docmirror.classifier import ContentClassifier
from docmirror.config import Settings
from docmirror.fetcher import ArchiveFetcher
from docmirror.refresher import RefreshOrchestrator
from docmirror.resolver import RevisionResolver
from docmirror.store import CacheStore


@pytest.fixture()
def store() -> CacheStore:
    return CacheStore(refresh_interval=timedelta(minutes=1))


@pytest.fixture()
async def client():
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture()
def fetcher(client: httpx.AsyncClient, settings: Settings) -> ArchiveFetcher:
    return ArchiveFetcher(client, settings)


@pytest.fixture()
def orchestrator(
    store: CacheStore,
    client: httpx.AsyncClient,
    fetcher: ArchiveFetcher,
    settings: Settings,
) -> RefreshOrchestrator:
    """Orchestrator wired to real components over a respx-mockable client."""
    return RefreshOrchestrator(
        store=store,
        resolver=RevisionResolver(client, settings),
        fetcher=fetcher,
        classifier=ContentClassifier(settings.classifier),
    )
