"""Fixtures shared by unit and integration tests."""

from __future__ import annotations

import io
import zipfile
from typing import TYPE_CHECKING

import pytest

from docmirror.config import Settings

if TYPE_CHECKING:
    from pathlib import Path

REVISION_URL = "https://gitlab.example.com/api/v4/projects/1/repository/commits?per_page=1"
ARCHIVE_URL = "https://gitlab.example.com/docs/-/archive/master/docs-master.zip"

SAMPLE_DOCS = {
    "docs-master/README.md": "# API Farm\n\nGeneral information.",
    "docs-master/morpher.ru/GET/declension.md": "# GET declension\n\nReturns forms.",
    "docs-master/morpher.ru/ws/3/spell.md": "# spell\n\nSpells a number.",
    "docs-master/empty.md": "   \n",
    "docs-master/assets/logo.png": "not markdown",
}


def make_zip(files: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def commits_payload(*ids: str) -> list[dict[str, str]]:
    return [
        {
            "id": commit_id,
            "short_id": commit_id[:8],
            "title": f"Commit {commit_id}",
            "created_at": "2024-01-01T12:00:00.000+00:00",
            "web_url": f"https://gitlab.example.com/docs/-/commit/{commit_id}",
        }
        for commit_id in ids
    ]


@pytest.fixture()
def archive_root(tmp_path: Path) -> Path:
    return tmp_path / "archives"


@pytest.fixture()
def settings(archive_root: Path) -> Settings:
    """Settings pointing at mock URLs and a temporary archive root."""
    return Settings(
        source={"revision_url": REVISION_URL, "archive_url": ARCHIVE_URL},
        cache={"root_dir": str(archive_root), "auto_refresh": False},
        fetcher={
            "request_timeout_seconds": 2,
            "download_timeout_seconds": 5,
            "extract_timeout_seconds": 5,
        },
    )


@pytest.fixture()
def sample_zip() -> bytes:
    return make_zip(SAMPLE_DOCS)


@pytest.fixture()
def zip_factory():
    """Build an in-memory zip archive from ``{name: content}``."""
    return make_zip


@pytest.fixture()
def commits():
    """Build a GitLab commits payload from commit ids, newest first."""
    return commits_payload
