"""Markdown to HTML rendering.

Rendering never raises: any failure is logged and reported as ``None`` so
the classifier can drop the document.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import markdown
import structlog

log = structlog.get_logger()

DEFAULT_EXTENSIONS = ("fenced_code", "tables")


def render_markdown(text: str, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> str | None:
    """Render one markdown document. Returns ``None`` for empty output or failure."""
    try:
        html = markdown.markdown(text, extensions=list(extensions))
    except Exception:
        # Third-party extensions can raise arbitrary errors on odd input.
        log.warning("markdown_render_error", exc_info=True)
        return None
    return html if html.strip() else None


def render_file(path: Path, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> str | None:
    """Read ``path`` as UTF-8 and render it."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        log.warning("markdown_read_error", path=str(path), exc_info=True)
        return None
    return render_markdown(text, extensions)
