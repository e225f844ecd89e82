"""Build configuration: built-in defaults plus overrides from a YAML config file.

Config file format (builder.yaml), all keys optional:
- go_version, go_image, go_proxy: toolchain selection for xgo (image defaults to admpub/xgo:<go_version>)
- executor: output binary name
- version, label, package: injected into main.VERSION / main.LABEL / main.PACKAGE
- startup_package: path[@version] of a helper binary built next to the executor
- project: Go import path; project_path: explicit checkout dir (default $GOPATH/src/<project>)
- vendor_misc_dirs: map OS selector ('*', 'linux', '!linux') -> asset dirs for go-bindata
- build_tags, copy_files, make_dirs: lists of strings
- compiler: xgo or go; cgo_enabled: bool
- targets: extra registry entries, short name -> os/arch
"""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from xbuilder.errors import ConfigError
from xbuilder.helpers import dump_yaml, find_go_src_path, load_yaml
from xbuilder.targets.registry import Target

DEFAULT_CONFIG_FILE = "./builder.yaml"

COMPILER_XGO = "xgo"
COMPILER_GO = "go"
COMPILERS = (COMPILER_XGO, COMPILER_GO)

DEFAULT_VENDOR_MISC_DIRS: dict[str, list[str]] = {
    "*": [
        "vendor/github.com/nging-plugins/caddymanager/template/",
        "vendor/github.com/nging-plugins/collector/template/",
        "vendor/github.com/nging-plugins/collector/public/assets/",
        "vendor/github.com/nging-plugins/dbmanager/template/",
        "vendor/github.com/nging-plugins/dbmanager/public/assets/",
        "vendor/github.com/nging-plugins/ddnsmanager/template/",
        "vendor/github.com/nging-plugins/dlmanager/template/",
        "vendor/github.com/nging-plugins/frpmanager/template/",
        "vendor/github.com/nging-plugins/ftpmanager/template/",
        "vendor/github.com/nging-plugins/servermanager/template/",
        "vendor/github.com/nging-plugins/sshmanager/template/",
        "vendor/github.com/nging-plugins/webauthn/template/",
    ],
    "linux": [
        "vendor/github.com/nging-plugins/firewallmanager/template/",
    ],
    "!linux": [],
}

# Empty values in a config file leave these defaults alone.
_KEEP_DEFAULT_WHEN_EMPTY = frozenset({"go_version", "executor", "version", "label", "project"})

_STR_FIELDS = frozenset(
    {
        "go_version",
        "go_image",
        "go_proxy",
        "executor",
        "version",
        "label",
        "package",
        "startup_package",
        "project",
        "project_path",
        "compiler",
    }
)
_LIST_FIELDS = frozenset({"build_tags", "copy_files", "make_dirs"})


@dataclass(frozen=True)
class Config:
    go_version: str = "1.21.6"
    go_image: str = ""
    go_proxy: str = ""
    executor: str = "nging"
    version: str = "5.2.6"
    label: str = "stable"
    package: str = ""
    startup_package: str = ""
    project: str = "github.com/admpub/nging"
    project_path: str = ""
    vendor_misc_dirs: dict[str, list[str]] = field(
        default_factory=lambda: copy.deepcopy(DEFAULT_VENDOR_MISC_DIRS)
    )
    build_tags: list[str] = field(default_factory=lambda: ["bindata", "sqlite"])
    copy_files: list[str] = field(
        default_factory=lambda: [
            "config/ua.txt",
            "config/config.yaml.sample",
            "data/ip2region",
            "config/preupgrade.*",
        ]
    )
    make_dirs: list[str] = field(
        default_factory=lambda: ["public/upload", "config/vhosts", "data/logs"]
    )
    compiler: str = COMPILER_XGO
    cgo_enabled: bool = False
    targets: dict[str, str] = field(default_factory=dict)

    def merged(self, overrides: Mapping[str, Any]) -> Config:
        """New Config with overrides applied.

        go_version, executor, version, label and project only change when the override is
        non-empty; vendor_misc_dirs only when non-empty; targets extend the existing map;
        every other key present in overrides replaces the current value.
        """
        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if key in _KEEP_DEFAULT_WHEN_EMPTY or key == "vendor_misc_dirs":
                if value:
                    changes[key] = copy.deepcopy(value)
            elif key == "targets":
                changes[key] = {**self.targets, **value}
            elif key == "compiler":
                changes[key] = value or COMPILER_XGO
            else:
                changes[key] = copy.deepcopy(value)
        return dataclasses.replace(copy.deepcopy(self), **changes)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    def is_single_file(self) -> bool:
        """True when only the binary is shipped: nothing to copy, no dirs to create, no misc dirs."""
        if self.copy_files or self.make_dirs:
            return False
        return not any(self.vendor_misc_dirs.values())

    def resolve_project_path(self) -> Path:
        """project_path when configured, else $GOPATH/src/<project>."""
        if self.project_path:
            p = Path(self.project_path).expanduser()
            if not p.is_dir():
                msg = f"project_path is not a directory: {p}"
                raise ConfigError(msg)
            return p.resolve()
        try:
            return find_go_src_path(self.project)
        except FileNotFoundError as e:
            raise ConfigError(str(e)) from e


DEFAULT_CONFIG = Config()


def _empty_value(key: str) -> Any:
    """Value a bare 'key:' (YAML null) stands for."""
    if key in _LIST_FIELDS:
        return []
    if key in ("vendor_misc_dirs", "targets"):
        return {}
    if key == "cgo_enabled":
        return False
    return ""


def _validate(data: Any, path: Path) -> dict[str, Any]:
    """Check the config file's shape. Raises ConfigError naming the offending key."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"{path}: top level must be a mapping"
        raise ConfigError(msg)
    known = {f.name for f in dataclasses.fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        msg = f"{path}: unknown keys: {', '.join(unknown)}"
        raise ConfigError(msg)
    out: dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            value = _empty_value(key)
        if key in _STR_FIELDS:
            if not isinstance(value, str):
                msg = f"{path}: {key} must be a string, got {type(value).__name__} {value!r}; quote the value"
                raise ConfigError(msg)
            if key == "compiler" and value and value not in COMPILERS:
                msg = f"{path}: compiler must be one of {', '.join(COMPILERS)}, got {value!r}"
                raise ConfigError(msg)
        elif key in _LIST_FIELDS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                msg = f"{path}: {key} must be a list of strings"
                raise ConfigError(msg)
        elif key == "cgo_enabled":
            if not isinstance(value, bool):
                msg = f"{path}: cgo_enabled must be true or false"
                raise ConfigError(msg)
        elif key == "vendor_misc_dirs":
            if not isinstance(value, dict) or not all(
                isinstance(v, list) and all(isinstance(d, str) for d in v) for v in value.values()
            ):
                msg = f"{path}: vendor_misc_dirs must map OS names to lists of directories"
                raise ConfigError(msg)
            value = {str(k): v for k, v in value.items()}
        elif key == "targets":
            if not isinstance(value, dict) or not all(
                isinstance(v, str) and "/" in v for v in value.values()
            ):
                msg = f"{path}: targets must map names to 'os/arch' strings"
                raise ConfigError(msg)
            for name, canonical in value.items():
                try:
                    Target.parse(canonical)
                except ValueError as e:
                    msg = f"{path}: targets.{name}: {e}"
                    raise ConfigError(msg) from e
            value = {str(k): v for k, v in value.items()}
        out[key] = value
    return out


def load_config(path: Path, base: Config = DEFAULT_CONFIG) -> Config:
    """Load YAML config from path and merge it over base. Raises ConfigError on any failure."""
    try:
        data = load_yaml(path)
    except FileNotFoundError as e:
        msg = f"Config file not found: {path}"
        raise ConfigError(msg) from e
    except (OSError, yaml.YAMLError) as e:
        msg = f"Could not read config {path}: {e}"
        raise ConfigError(msg) from e
    return base.merged(_validate(data, path))


def dump_config(config: Config, path: Path) -> None:
    """Write config as YAML (used by genConfig)."""
    dump_yaml(config.to_dict(), path)
