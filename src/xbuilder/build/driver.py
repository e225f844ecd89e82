"""Sequential build driver: one target at a time, generate -> compile -> [startup] -> normalize -> [package].

Any failing step raises and aborts the whole run; nothing is retried or rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from pathlib import Path

from xbuilder.build.commands import (
    build_command,
    generate_command,
    run_command,
    startup_command,
)
from xbuilder.build.metadata import build_time, git_commit_id
from xbuilder.build.package import normalize_output, pack_files
from xbuilder.build.params import BuildParam, derive_build_param
from xbuilder.config import Config
from xbuilder.targets.selector import Selection

log = logging.getLogger(__name__)


class Step(str, Enum):
    GENERATE = "generate"
    COMPILE = "compile"
    STARTUP = "startup"
    NORMALIZE = "normalize"
    PACKAGE = "package"


def steps_for(p: BuildParam) -> list[Step]:
    """Steps run for p, in order."""
    steps = [Step.GENERATE, Step.COMPILE]
    if p.config.startup_package:
        steps.append(Step.STARTUP)
    steps.append(Step.NORMALIZE)
    if not p.single_file:
        steps.append(Step.PACKAGE)
    return steps


def build_target(p: BuildParam) -> Path:
    """Run every step for one target. Returns the archive (multi-file) or the binary (single-file)."""
    release_dir = p.require_release_dir()
    release_dir.mkdir(parents=True, exist_ok=True)
    artifact = release_dir
    for step in steps_for(p):
        log.debug("%s: %s", p.target, step.value)
        if step is Step.GENERATE:
            run_command(generate_command(p))
        elif step is Step.COMPILE:
            run_command(build_command(p))
        elif step is Step.STARTUP:
            run_command(startup_command(p))
        elif step is Step.NORMALIZE:
            artifact = normalize_output(p)
        elif step is Step.PACKAGE:
            artifact = pack_files(p)
    return artifact


def build_all(
    config: Config,
    selection: Selection,
    project_path: Path,
    dist_path: Path,
    *,
    commit_id: str | None = None,
    now: datetime | None = None,
    build_one: Callable[[BuildParam], Path] = build_target,
) -> list[Path]:
    """Build every selected target in order. Returns one artifact path per target."""
    base = BuildParam.base(
        config,
        project_path,
        build_time=build_time(now),
        commit_id=git_commit_id(project_path) if commit_id is None else commit_id,
        minify=selection.minify,
    )
    print(f"Building {config.executor} for {[t.canonical for t in selection.targets]}")
    artifacts: list[Path] = []
    for target in selection.targets:
        p = derive_build_param(base, target, dist_path)
        print(f"🔨 {target} ({p.compiler})")
        artifact = build_one(p)
        print(f"  ✅ {artifact}")
        artifacts.append(artifact)
    return artifacts
