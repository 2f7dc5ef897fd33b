"""Published snapshot holder and staleness policy.

The store owns a single reference to the current ``Snapshot``. Publishing
replaces that reference in one assignment, so readers never need a lock and
never observe a snapshot under construction. Only the refresh orchestrator
writes to it.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import structlog

from docmirror.models.snapshot import Snapshot

log = structlog.get_logger()


class CacheStore:
    """In-memory holder of the latest published snapshot."""

    def __init__(self, refresh_interval: timedelta = timedelta(minutes=1)) -> None:
        self._refresh_interval = refresh_interval
        self._snapshot = Snapshot.empty()
        self._published = False

    @property
    def refresh_interval(self) -> timedelta:
        return self._refresh_interval

    @property
    def published(self) -> bool:
        return self._published

    def current(self) -> Snapshot:
        """Return the latest published snapshot, or an empty one."""
        return self._snapshot

    def should_refresh(self, now: datetime) -> bool:
        """Decide whether a refresh attempt is warranted. Never touches the network.

        A naive ``now`` is taken to be UTC.
        """
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        snapshot = self._snapshot
        if not self._published or snapshot.rendered_at is None:
            return True
        if snapshot.is_empty:
            return True
        # abs() so that a clock moved backwards also counts as stale
        return abs(now - snapshot.rendered_at) > self._refresh_interval

    def publish(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._published = True
        log.info(
            "snapshot_published",
            revision_id=snapshot.revision_id,
            page_count=len(snapshot.pages),
        )
