"""Archive download and extraction into per-revision directories.

Layout under ``cache.root_dir``::

    <root_dir>/
        2024.01.01 12-00 abc123/
            data.zip
            .complete          # written only after a successful extraction
            docs-master/...

A directory counts as a local hit only when it carries the ``.complete``
marker, so an interrupted or failed fetch is never mistaken for valid
content. Directories are never garbage-collected here.
"""

from __future__ import annotations

import asyncio
import shutil
import uuid
import zipfile
import zlib
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
import structlog

from docmirror.config import CacheSettings, FetcherSettings, SourceSettings
from docmirror.errors import DocMirrorError, ErrorCode, Failure
from docmirror.models.remote import LocalArchive

if TYPE_CHECKING:
    from docmirror.config import Settings

log = structlog.get_logger()

ARCHIVE_FILE_NAME = "data.zip"
COMPLETE_MARKER = ".complete"
DIRECTORY_TIME_FORMAT = "%Y.%m.%d %H-%M"

_CHUNK_SIZE = 64 * 1024


def build_http_client(settings: Settings | None = None) -> httpx.AsyncClient:
    """Create the shared HTTP client used by the resolver and the fetcher."""
    fetcher_settings = settings.fetcher if settings else FetcherSettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(fetcher_settings.request_timeout_seconds),
        follow_redirects=True,
        headers={"User-Agent": "docmirror"},
    )


def archive_dir_name(created_at: datetime, token: str) -> str:
    return f"{created_at.strftime(DIRECTORY_TIME_FORMAT)} {token}"


def _token_of(directory: Path) -> str:
    # "<date> <time> <token>": the token is everything after the last space
    return directory.name.rpartition(" ")[2]


def is_complete(directory: Path) -> bool:
    return (directory / COMPLETE_MARKER).is_file()


def _extract(archive_path: Path, target: Path) -> None:
    with zipfile.ZipFile(archive_path) as archive:
        archive.extractall(target)


class ArchiveFetcher:
    """Local-hit lookup plus download-and-extract on a miss."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        source = settings.source if settings else SourceSettings()
        cache = settings.cache if settings else CacheSettings()
        self._client = client
        self._archive_url = source.archive_url
        self._root = Path(cache.root_dir).expanduser()
        self._settings = settings.fetcher if settings else FetcherSettings()

    @property
    def root(self) -> Path:
        return self._root

    def find_local(self, revision_id: str) -> Path | None:
        """Return the newest complete directory for ``revision_id``, if any."""
        if not self._root.is_dir():
            return None
        try:
            candidates = sorted(
                (
                    path
                    for path in self._root.iterdir()
                    if path.is_dir() and _token_of(path) == revision_id and is_complete(path)
                ),
                key=lambda path: path.name,
                reverse=True,
            )
        except OSError:
            log.warning("archive_scan_error", root=str(self._root), exc_info=True)
            return None
        return candidates[0] if candidates else None

    async def ensure_local_archive(self, revision_id: str | None) -> LocalArchive | Failure:
        """Return an extracted archive directory for ``revision_id``.

        A known revision that is already present locally is returned without
        any network access. An unknown revision (``None``) always downloads,
        under a freshly generated token so it never collides with anything.
        """
        if revision_id:
            local = await asyncio.to_thread(self.find_local, revision_id)
            if local is not None:
                log.info("archive_local_hit", revision_id=revision_id, path=str(local))
                return LocalArchive(
                    path=local, revision_id=revision_id, resolved=True, local_hit=True
                )
            log.debug("archive_local_miss", revision_id=revision_id)

        token = revision_id or uuid.uuid4().hex
        directory = self._root / archive_dir_name(datetime.now(UTC), token)
        try:
            await self._download(directory)
            await self._unpack(directory)
        except DocMirrorError as exc:
            log.error(
                "archive_fetch_failed",
                code=exc.code,
                revision_id=token,
                path=str(directory),
                error=exc.message,
            )
            shutil.rmtree(directory, ignore_errors=True)
            return Failure.from_error(exc)

        log.info("archive_fetched", revision_id=token, path=str(directory))
        return LocalArchive(
            path=directory,
            revision_id=token,
            resolved=revision_id is not None,
            local_hit=False,
        )

    async def _download(self, directory: Path) -> Path:
        target = directory / ARCHIVE_FILE_NAME
        log.debug("archive_download_start", url=self._archive_url, path=str(target))
        try:
            directory.mkdir(parents=True, exist_ok=True)
            async with asyncio.timeout(self._settings.download_timeout_seconds):
                async with self._client.stream("GET", self._archive_url) as response:
                    response.raise_for_status()
                    with target.open("wb") as fh:
                        async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                            fh.write(chunk)
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise DocMirrorError(
                ErrorCode.ARCHIVE_TIMEOUT,
                f"Download of {self._archive_url} exceeded "
                f"{self._settings.download_timeout_seconds}s",
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise DocMirrorError(
                ErrorCode.ARCHIVE_DOWNLOAD_FAILED,
                f"HTTP {exc.response.status_code} from {self._archive_url}",
            ) from exc
        except (httpx.HTTPError, OSError) as exc:
            raise DocMirrorError(
                ErrorCode.ARCHIVE_DOWNLOAD_FAILED,
                f"Failed to download {self._archive_url}: {exc}",
            ) from exc
        return target

    async def _unpack(self, directory: Path) -> None:
        archive_path = directory / ARCHIVE_FILE_NAME
        try:
            await asyncio.wait_for(
                asyncio.to_thread(_extract, archive_path, directory),
                timeout=self._settings.extract_timeout_seconds,
            )
            (directory / COMPLETE_MARKER).touch()
        except TimeoutError as exc:
            raise DocMirrorError(
                ErrorCode.ARCHIVE_TIMEOUT,
                f"Extraction of {archive_path} exceeded "
                f"{self._settings.extract_timeout_seconds}s",
            ) from exc
        except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, OSError) as exc:
            raise DocMirrorError(
                ErrorCode.ARCHIVE_EXTRACT_FAILED,
                f"Failed to extract {archive_path}: {exc}",
            ) from exc
