from __future__ import annotations

from collections import Counter
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class PageCategory(StrEnum):
    ENDPOINT = "endpoint"
    FUNCTION = "function"
    INFO = "info"


class Page(BaseModel):
    """One rendered documentation page."""

    model_config = ConfigDict(frozen=True)

    source_path: str  # Archive-relative, "/" separated
    html: str
    category: PageCategory = PageCategory.INFO

    @field_validator("html")
    @classmethod
    def validate_html(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("html must not be empty")
        return v


class Snapshot(BaseModel):
    """Immutable set of rendered pages plus the revision it was built from.

    A published Snapshot is never mutated; the next successful refresh
    replaces the reference held by the store.
    """

    model_config = ConfigDict(frozen=True)

    revision_id: str | None = None
    rendered_at: datetime | None = None
    pages: tuple[Page, ...] = ()
    archive_dir: str | None = None  # Diagnostics only

    @classmethod
    def empty(cls) -> Snapshot:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.pages

    def pages_by_category(self, category: PageCategory) -> list[Page]:
        return [page for page in self.pages if page.category == category]

    def category_counts(self) -> dict[str, int]:
        counts = Counter(page.category.value for page in self.pages)
        return {category.value: counts.get(category.value, 0) for category in PageCategory}
