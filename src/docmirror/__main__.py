"""Run one refresh and print a JSON summary of the resulting snapshot.

Usage::

    python -m docmirror [--pages]

Exits 0 when a non-empty snapshot was published, 1 otherwise.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import TYPE_CHECKING, Any

from docmirror.config import Settings
from docmirror.logging_config import configure_logging
from docmirror.service import DocMirror

if TYPE_CHECKING:
    from docmirror.models.snapshot import Snapshot


def summarize(snapshot: Snapshot, include_pages: bool = False) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "revision_id": snapshot.revision_id,
        "rendered_at": snapshot.rendered_at.isoformat() if snapshot.rendered_at else None,
        "archive_dir": snapshot.archive_dir,
        "page_count": len(snapshot.pages),
        "categories": snapshot.category_counts(),
    }
    if include_pages:
        summary["pages"] = [
            {"source_path": page.source_path, "category": page.category.value}
            for page in snapshot.pages
        ]
    return summary


async def _run(settings: Settings) -> Snapshot:
    async with DocMirror(settings) as mirror:
        return mirror.current()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="docmirror", description=__doc__.splitlines()[0])
    parser.add_argument("--pages", action="store_true", help="list every page in the output")
    args = parser.parse_args(argv)

    # Validation errors surface here, before any network access.
    settings = Settings()
    settings = settings.model_copy(
        update={"cache": settings.cache.model_copy(update={"auto_refresh": False})}
    )
    configure_logging(settings.logging)

    snapshot = asyncio.run(_run(settings))
    print(json.dumps(summarize(snapshot, include_pages=args.pages), indent=2))
    return 0 if not snapshot.is_empty else 1


if __name__ == "__main__":
    sys.exit(main())
