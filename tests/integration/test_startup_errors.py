"""Tests for command-line startup and degraded-remote scenarios.

Covers:
- Wrong-type config values (crash before any network access)
- Unreachable remote (empty snapshot, exit 1, JSON still printed)
"""

from __future__ import annotations

import json
import subprocess
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


def _run_and_wait(
    env: dict[str, str], *args: str, timeout: int = 30
) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "docmirror", *args],
        stdin=subprocess.DEVNULL,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=env,
    )


class TestBadConfigType:
    """Wrong-type config values crash the CLI before any refresh starts."""

    def test_crashes_on_wrong_type(self, subprocess_env: dict[str, str]) -> None:
        env = {**subprocess_env, "DOCMIRROR__CACHE__REFRESH_INTERVAL_SECONDS": "soon"}
        result = _run_and_wait(env)
        assert result.returncode != 0
        assert result.stdout == ""

    def test_crashes_on_invalid_pattern(self, subprocess_env: dict[str, str]) -> None:
        env = {**subprocess_env, "DOCMIRROR__CLASSIFIER__ENDPOINT_PATTERN": "(GET"}
        result = _run_and_wait(env)
        assert result.returncode != 0


class TestUnreachableRemote:
    def test_prints_empty_snapshot_and_exits_1(
        self, subprocess_env: dict[str, str], tmp_path: Path
    ) -> None:
        result = _run_and_wait(subprocess_env)

        assert result.returncode == 1
        summary = json.loads(result.stdout)
        assert summary["revision_id"] is None
        assert summary["page_count"] == 0
        assert summary["categories"] == {"endpoint": 0, "function": 0, "info": 0}
        # nothing usable was left behind
        archives = tmp_path / "archives"
        leftovers = list(archives.iterdir()) if archives.exists() else []
        assert not any((path / ".complete").exists() for path in leftovers)

    def test_logs_go_to_stderr(self, subprocess_env: dict[str, str]) -> None:
        result = _run_and_wait(subprocess_env)
        events = [
            json.loads(line)["event"]
            for line in result.stderr.splitlines()
            if line.startswith("{")
        ]
        assert "refresh_aborted" in events

    def test_pages_flag_lists_pages(self, subprocess_env: dict[str, str]) -> None:
        result = _run_and_wait(subprocess_env, "--pages")
        summary = json.loads(result.stdout)
        assert summary["pages"] == []
