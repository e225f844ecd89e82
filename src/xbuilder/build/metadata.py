"""Build metadata injected via -ldflags: commit id and build timestamp."""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path

from xbuilder.errors import CommandError

BUILD_TIME_FORMAT = "%Y%m%d%H%M%S"


def git_commit_id(project_path: Path) -> str:
    """HEAD commit of the repository at project_path. Raises CommandError if git fails."""
    cmd = ["git", "rev-parse", "HEAD"]
    r = subprocess.run(cmd, cwd=str(project_path), capture_output=True, text=True)
    if r.returncode != 0:
        raise CommandError(cmd, r.returncode)
    return r.stdout.strip()


def build_time(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime(BUILD_TIME_FORMAT)
