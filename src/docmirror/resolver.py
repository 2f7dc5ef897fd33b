"""Latest-revision lookup against the GitLab commits API."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from docmirror.config import SourceSettings
from docmirror.models.remote import CommitRecord

if TYPE_CHECKING:
    from docmirror.config import Settings

log = structlog.get_logger()

_COMMITS = TypeAdapter(list[CommitRecord])

# Revision ids become part of a directory name.
_SAFE_TOKEN = re.compile(r"^[A-Za-z0-9._-]+$")


class RevisionResolver:
    """Ask the remote for the id of its latest commit.

    Every failure (network, timeout, non-2xx status, bad JSON, empty list)
    yields ``None``. There is no retry here; the next refresh tries again.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        self._client = client
        self._url = settings.source.revision_url if settings else SourceSettings().revision_url

    async def resolve_latest(self) -> str | None:
        log.debug("revision_lookup_start", url=self._url)
        try:
            response = await self._client.get(
                self._url, headers={"Accept": "application/json"}
            )
            response.raise_for_status()
            commits = _COMMITS.validate_json(response.content)
        except httpx.HTTPStatusError as exc:
            log.warning(
                "revision_lookup_failed",
                url=self._url,
                status_code=exc.response.status_code,
            )
            return None
        except httpx.HTTPError as exc:
            log.warning("revision_lookup_failed", url=self._url, error=str(exc))
            return None
        except ValidationError:
            log.warning("revision_lookup_invalid_payload", url=self._url, exc_info=True)
            return None

        if not commits:
            log.warning("revision_lookup_empty", url=self._url)
            return None

        revision_id = commits[0].id.strip()
        if not _SAFE_TOKEN.match(revision_id):
            log.warning("revision_lookup_unsafe_id", revision_id=revision_id)
            return None

        log.debug("revision_lookup_complete", revision_id=revision_id, title=commits[0].title)
        return revision_id
