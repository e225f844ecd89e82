"""Command lines for go generate, go build, xgo, and the startup binary; run them one at a time."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from xbuilder.build.params import BuildParam
from xbuilder.config import COMPILER_GO, Config
from xbuilder.errors import CommandError

log = logging.getLogger(__name__)

DEFAULT_GO_PROXY = "https://goproxy.cn,direct"
DEFAULT_XGO_IMAGE = "admpub/xgo"
DEFAULT_STARTUP_VERSION = "0.0.1"


@dataclass(frozen=True)
class Command:
    args: list[str]
    cwd: Path
    # None inherits the current process environment unchanged.
    env: dict[str, str] | None = None


def _environ_with(extra: Mapping[str, str]) -> dict[str, str]:
    env = dict(os.environ)
    env.update(extra)
    return env


def xgo_image(config: Config) -> str:
    """Docker image for xgo; a configured image without a tag gets :<go_version>."""
    image = config.go_image
    if not image:
        return f"{DEFAULT_XGO_IMAGE}:{config.go_version}"
    last = image[image.rfind("/") :] if "/" in image else image
    if ":" not in last:
        image += f":{config.go_version}"
    return image


def generate_command(p: BuildParam) -> Command:
    return Command(["go", "generate"], p.project_path, _environ_with(p.env_vars()))


def _xgo_package(p: BuildParam) -> str:
    """Package argument relative to work_dir: ./<project> under GOPATH, . for a plain checkout."""
    if p.work_dir == p.project_path:
        return "."
    return f"./{p.config.project}"


def build_command(p: BuildParam) -> Command:
    """go build or xgo invocation for p's target."""
    tags = p.tags().render()
    ldflags = p.linker_flags().render()
    if p.compiler == COMPILER_GO:
        extra = p.env_vars()
        extra["CGO_ENABLED"] = "1" if p.config.cgo_enabled else "0"
        return Command(
            [
                "go",
                "build",
                "-tags",
                tags,
                "-ldflags",
                ldflags,
                "-o",
                str(p.require_release_dir() / p.output_name),
            ],
            p.project_path,
            _environ_with(extra),
        )
    return Command(
        [
            "xgo",
            "-go",
            p.config.go_version,
            "-goproxy",
            p.config.go_proxy or DEFAULT_GO_PROXY,
            "-image",
            xgo_image(p.config),
            "-targets",
            p.require_target().canonical,
            "-dest",
            str(p.require_release_dir()),
            "-out",
            p.executor,
            "-tags",
            tags,
            "-ldflags",
            ldflags,
            _xgo_package(p),
        ],
        p.work_dir,
    )


def parse_startup_package(spec: str) -> tuple[str, str]:
    """'path@v1.2.0' -> ('path', '1.2.0'); version defaults to 0.0.1."""
    path, _, version = spec.partition("@")
    version = version.removeprefix("v")
    return path, version or DEFAULT_STARTUP_VERSION


def startup_command(p: BuildParam) -> Command:
    """go build for the startup helper (path relative to the project), written to <release_dir>/startup[.exe]."""
    path, version = parse_startup_package(p.config.startup_package)
    return Command(
        [
            "go",
            "build",
            "-ldflags",
            p.startup_linker_flags(version).render(),
            "-o",
            str(p.require_release_dir() / f"startup{p.extension}"),
        ],
        (p.project_path / path).resolve(),
        _environ_with(p.env_vars()),
    )


def run_command(command: Command) -> None:
    """Run with inherited stdio. Raises CommandError on non-zero exit."""
    log.debug("Running %s (cwd=%s)", " ".join(command.args), command.cwd)
    r = subprocess.run(command.args, cwd=str(command.cwd), env=command.env)
    if r.returncode != 0:
        raise CommandError(command.args, r.returncode)
