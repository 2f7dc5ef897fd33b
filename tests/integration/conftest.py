"""Integration test fixtures.

Provides a respx-mockable HTTP client for a fully wired DocMirror, and an
environment for running ``python -m docmirror`` as a subprocess.
Shared fixtures (settings, sample_zip, commits) come from tests/conftest.py.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import httpx
import pytest

if TYPE_CHECKING:
    from pathlib import Path

# Nothing listens on the discard port, so connections fail fast.
UNREACHABLE = "http://127.0.0.1:9"


@pytest.fixture()
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Environment for the CLI: temp archive root, unreachable remote."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("DOCMIRROR__")}
    env.update(
        {
            "DOCMIRROR__CACHE__ROOT_DIR": str(tmp_path / "archives"),
            "DOCMIRROR__SOURCE__REVISION_URL": f"{UNREACHABLE}/commits",
            "DOCMIRROR__SOURCE__ARCHIVE_URL": f"{UNREACHABLE}/docs.zip",
            "DOCMIRROR__FETCHER__REQUEST_TIMEOUT_SECONDS": "2",
            "DOCMIRROR__LOGGING__FORMAT": "json",
        }
    )
    return env
