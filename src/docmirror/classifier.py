"""Render source documents and tag each page with a category.

Categories come from an ordered list of path rules evaluated first-match-wins
against the archive-relative path (always "/" separated). Anything no rule
claims is an info page.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from docmirror.config import ClassifierSettings
from docmirror.errors import ErrorCode, Failure
from docmirror.models.snapshot import Page, PageCategory
from docmirror.renderer import render_file

if TYPE_CHECKING:
    from collections.abc import Sequence

log = structlog.get_logger()


@dataclass(frozen=True)
class ClassificationRule:
    pattern: re.Pattern[str]
    category: PageCategory

    def matches(self, source_path: str) -> bool:
        return self.pattern.search(source_path) is not None


def build_rules(settings: ClassifierSettings | None = None) -> list[ClassificationRule]:
    """Rules in priority order: endpoint, then function, then info."""
    settings = settings or ClassifierSettings()
    return [
        ClassificationRule(re.compile(settings.endpoint_pattern), PageCategory.ENDPOINT),
        ClassificationRule(re.compile(settings.function_pattern), PageCategory.FUNCTION),
        ClassificationRule(re.compile(settings.info_pattern), PageCategory.INFO),
    ]


def categorize(
    source_path: str,
    rules: Sequence[ClassificationRule],
    default: PageCategory = PageCategory.INFO,
) -> PageCategory:
    for rule in rules:
        if rule.matches(source_path):
            return rule.category
    return default


def _find_documents(directory: Path, extension: str) -> list[Path]:
    return sorted(path for path in directory.rglob(f"*{extension}") if path.is_file())


class ContentClassifier:
    """Turn an extracted archive directory into a list of pages."""

    def __init__(
        self,
        settings: ClassifierSettings | None = None,
        rules: Sequence[ClassificationRule] | None = None,
    ) -> None:
        self._settings = settings or ClassifierSettings()
        self._rules = list(rules) if rules is not None else build_rules(self._settings)

    @property
    def rules(self) -> list[ClassificationRule]:
        return list(self._rules)

    async def classify(self, directory: Path) -> list[Page] | Failure:
        """Render and categorize every source document under ``directory``.

        Documents that fail to render or render to nothing are skipped. An
        empty result is returned as a ``NO_DOCUMENTS`` failure.
        """
        try:
            documents = await asyncio.to_thread(
                _find_documents, directory, self._settings.source_extension
            )
        except OSError as exc:
            log.error("classify_scan_error", path=str(directory), exc_info=True)
            return Failure(ErrorCode.NO_DOCUMENTS, f"Cannot scan {directory}: {exc}")

        pages: list[Page] = []
        for document in documents:
            html = await self._render(document)
            if html is None:
                log.debug("document_skipped", path=str(document))
                continue
            source_path = document.relative_to(directory).as_posix()
            pages.append(
                Page(
                    source_path=source_path,
                    html=html,
                    category=categorize(source_path, self._rules),
                )
            )

        log.debug(
            "classify_complete",
            path=str(directory),
            documents=len(documents),
            pages=len(pages),
        )
        if not pages:
            return Failure(
                ErrorCode.NO_DOCUMENTS,
                f"No renderable {self._settings.source_extension} documents in {directory}",
            )
        return pages

    async def _render(self, document: Path) -> str | None:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(
                    render_file, document, self._settings.markdown_extensions
                ),
                timeout=self._settings.render_timeout_seconds,
            )
        except TimeoutError:
            log.warning(
                "markdown_render_timeout",
                path=str(document),
                timeout=self._settings.render_timeout_seconds,
            )
            return None
