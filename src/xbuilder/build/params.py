"""Per-target build parameters: compiler choice, tags, linker flags, env, output names.

A base BuildParam holds what every target shares (config, paths, commit, build time,
minify flags). derive_build_param clones it per target and applies the per-OS rules:

- darwin: no -extldflags '-static'
- windows: no netgo tag, .exe extension
- xgo cannot build the os/arch: fall back to go and add the policy's pure-source tags
"""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from xbuilder.config import COMPILER_GO, COMPILER_XGO, Config
from xbuilder.targets.registry import Target

MINIFY_FLAGS = ("-s", "-w")
STATIC_LINK_FLAGS = ("-extldflags", "'-static'")
WINDOWS_EXTENSION = ".exe"

# Always on: os/user lookup without cgo.
BASE_PURE_TAGS = ("osusergo",)
# Pure-Go net resolver, everywhere except windows.
NETGO_TAG = "netgo"


class TagSet:
    """Ordered set of build tags. Adding a tag twice keeps the first position."""

    def __init__(self, tags: Iterable[str] = ()) -> None:
        self._tags: list[str] = []
        self.add(*tags)

    def add(self, *tags: str) -> TagSet:
        for t in tags:
            if t and t not in self._tags:
                self._tags.append(t)
        return self

    def merge(self, other: Iterable[str]) -> TagSet:
        """New TagSet: self's tags, then other's tags not already present."""
        return TagSet(self._tags).add(*other)

    def to_list(self) -> list[str]:
        return list(self._tags)

    def render(self) -> str:
        """Space-separated, as passed to -tags."""
        return " ".join(self._tags)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __len__(self) -> int:
        return len(self._tags)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagSet):
            return self._tags == other._tags
        if isinstance(other, list):
            return self._tags == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"TagSet({self._tags!r})"


class LinkerFlags:
    """-ldflags value: named -X main.<NAME>=<value> definitions followed by raw flags."""

    def __init__(self, package: str = "main") -> None:
        self.package = package
        self._defines: dict[str, str] = {}
        self._flags: list[str] = []

    def define(self, name: str, value: str) -> LinkerFlags:
        """Set main.<name>; redefining a name replaces its value in place."""
        self._defines[name] = value
        return self

    def extend(self, flags: Iterable[str]) -> LinkerFlags:
        self._flags.extend(flags)
        return self

    def defines(self) -> dict[str, str]:
        return dict(self._defines)

    def render(self) -> str:
        parts = [f"-X {self.package}.{k}={v}" for k, v in self._defines.items()]
        parts.extend(self._flags)
        return " ".join(parts)


@dataclass(frozen=True)
class CompilerPolicy:
    """When `compiler` cannot build a target, use `fallback` and add pure-source tags.

    tag_substitutions maps a configured build tag to the tag that selects its
    no-cgo implementation (sqlite -> sqlitego).
    """

    compiler: str
    fallback: str
    supported_os: frozenset[str]
    supported_arch: frozenset[str]
    tag_substitutions: Mapping[str, str] = field(default_factory=dict)

    def supports(self, target: Target) -> bool:
        return target.os in self.supported_os and target.arch in self.supported_arch


COMPILER_FALLBACK_POLICY: dict[str, CompilerPolicy] = {
    COMPILER_XGO: CompilerPolicy(
        compiler=COMPILER_XGO,
        fallback=COMPILER_GO,
        supported_os=frozenset({"darwin", "linux", "windows"}),
        supported_arch=frozenset(
            {
                "386",
                "amd64",
                "arm-5",
                "arm-6",
                "arm-7",
                "arm64",
                "mips",
                "mipsle",
                "mips64",
                "mips64le",
            }
        ),
        tag_substitutions={"sqlite": "sqlitego"},
    ),
}


def choose_compiler(
    configured: str, target: Target, build_tags: Iterable[str]
) -> tuple[str, list[str]]:
    """Return (compiler, extra pure-source tags) for target under COMPILER_FALLBACK_POLICY."""
    compiler = configured or COMPILER_XGO
    policy = COMPILER_FALLBACK_POLICY.get(compiler)
    if policy is None or policy.supports(target):
        return compiler, []
    tags = set(build_tags)
    extra = [pure for tag, pure in policy.tag_substitutions.items() if tag in tags]
    return policy.fallback, extra


@dataclass(frozen=True)
class BuildParam:
    config: Config
    project_path: Path
    work_dir: Path
    build_time: str = ""
    commit_id: str = ""
    minify_flags: list[str] = field(default_factory=list)
    build_tags: list[str] = field(default_factory=list)
    target: Target | None = None
    release_dir: Path | None = None
    compiler: str = ""
    extension: str = ""
    pure_tags: list[str] = field(default_factory=list)
    ld_flags: list[str] = field(default_factory=list)
    single_file: bool = True

    @classmethod
    def base(
        cls,
        config: Config,
        project_path: Path,
        *,
        build_time: str = "",
        commit_id: str = "",
        minify: bool = False,
    ) -> BuildParam:
        """Shared parameters for a run. work_dir is project_path with the import path removed."""
        return cls(
            config=config,
            project_path=project_path,
            work_dir=work_dir_for(project_path, config.project),
            build_time=build_time,
            commit_id=commit_id,
            minify_flags=list(MINIFY_FLAGS) if minify else [],
            build_tags=list(config.build_tags),
            compiler=config.compiler or COMPILER_XGO,
            single_file=config.is_single_file(),
        )

    def clone(self, **changes: object) -> BuildParam:
        """Structurally independent copy (lists and maps are not shared) with changes applied."""
        return dataclasses.replace(copy.deepcopy(self), **changes)

    def require_target(self) -> Target:
        if self.target is None:
            msg = "BuildParam has no target; use derive_build_param"
            raise ValueError(msg)
        return self.target

    def require_release_dir(self) -> Path:
        if self.release_dir is None:
            msg = "BuildParam has no release_dir; use derive_build_param"
            raise ValueError(msg)
        return self.release_dir

    @property
    def goos(self) -> str:
        return self.require_target().os

    @property
    def goarch(self) -> str:
        return self.require_target().arch

    @property
    def executor(self) -> str:
        return self.config.executor

    @property
    def output_name(self) -> str:
        """Name the compiler writes: <executor>-<os>-<arch>."""
        return f"{self.executor}-{self.goos}-{self.goarch}"

    @property
    def final_name(self) -> str:
        """Name after normalization in multi-file mode: <executor>[.exe]."""
        return self.executor + self.extension

    def tags(self) -> TagSet:
        """Pure-source tags first, then configured build tags."""
        return TagSet(self.pure_tags).merge(self.build_tags)

    def _linker_flags(self, version: str) -> LinkerFlags:
        return (
            LinkerFlags()
            .define("BUILD_OS", self.goos)
            .define("BUILD_ARCH", self.goarch)
            .define("BUILD_TIME", self.build_time)
            .define("COMMIT", self.commit_id)
            .define("VERSION", version)
        )

    def linker_flags(self) -> LinkerFlags:
        lf = self._linker_flags(self.config.version).define("LABEL", self.config.label)
        if self.config.package:
            lf.define("PACKAGE", self.config.package)
        return lf.extend(self.minify_flags).extend(self.ld_flags)

    def startup_linker_flags(self, version: str) -> LinkerFlags:
        lf = self._linker_flags(version).define("MAIN_EXE", self.final_name)
        return lf.extend(self.minify_flags).extend(self.ld_flags)

    def env_vars(self) -> dict[str, str]:
        """GOOS/GOARCH, plus GOARM for arm-N arches."""
        target = self.require_target()
        env = {"GOOS": target.os}
        if target.arch_family == "arm":
            env["GOARCH"] = "arm"
            if target.arm_revision is not None:
                env["GOARM"] = target.arm_revision
        else:
            env["GOARCH"] = target.arch
        return env


def work_dir_for(project_path: Path, project: str) -> Path:
    """Strip the Go import path from the end of project_path ($GOPATH/src/<project> -> $GOPATH/src)."""
    parts = Path(project).parts
    if parts and project_path.parts[-len(parts) :] == parts:
        return Path(*project_path.parts[: -len(parts)])
    return project_path


def derive_build_param(base: BuildParam, target: Target, dist_path: Path) -> BuildParam:
    """Clone base for target, applying compiler fallback and per-OS overrides."""
    compiler, fallback_tags = choose_compiler(base.compiler, target, base.build_tags)
    pure = TagSet(BASE_PURE_TAGS).add(*fallback_tags)
    ld_flags: list[str] = [] if target.os == "darwin" else list(STATIC_LINK_FLAGS)
    extension = ""
    if target.os == "windows":
        extension = WINDOWS_EXTENSION
    else:
        pure.add(NETGO_TAG)
    if base.single_file:
        release_dir = dist_path
    else:
        release_dir = dist_path / f"{base.executor}_{target.os}_{target.arch}"
    return base.clone(
        target=target,
        release_dir=release_dir,
        compiler=compiler,
        extension=extension,
        pure_tags=pure.to_list(),
        ld_flags=ld_flags,
    )
