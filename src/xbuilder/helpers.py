"""Shared helpers for xbuilder (text, YAML, checksum, Go source paths).

Used by config, targets, build, and gen modules.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any

import yaml

CHECKSUM_SUFFIX = ".sha256"
_CHUNK = 1024 * 1024

# --- Text ---


def split_csv(value: str) -> list[str]:
    """Split a comma-separated list, trimming whitespace and skipping empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


# --- YAML ---


def load_yaml(p: Path) -> Any:
    """Load a YAML document from path. Empty files load as None."""
    with p.open() as f:
        return yaml.safe_load(f)


def dump_yaml(data: Any, p: Path) -> None:
    """Write data to path as block-style YAML, keeping key order."""
    with p.open("w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


# --- Checksum ---


def sha256_file(path: Path) -> str:
    """Hex SHA-256 digest of a file, read in 1 MiB chunks."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


def make_checksum(path: Path) -> Path:
    """Write <path>.sha256 containing '<hexdigest> <basename>'. Returns the sidecar path."""
    sidecar = path.with_name(path.name + CHECKSUM_SUFFIX)
    sidecar.write_text(f"{sha256_file(path)} {path.name}")
    return sidecar


# --- Go paths ---


def gopath_entries() -> list[Path]:
    """GOPATH entries from the environment, defaulting to ~/go."""
    raw = os.environ.get("GOPATH", "")
    entries = [Path(p).expanduser() for p in raw.split(os.pathsep) if p]
    return entries or [Path.home() / "go"]


def find_go_src_path(project: str) -> Path:
    """Locate $GOPATH/src/<project>. Raises FileNotFoundError when no GOPATH entry has it."""
    candidates = [entry / "src" / project for entry in gopath_entries()]
    for c in candidates:
        if c.is_dir():
            return c.resolve()
    msg = f"Project {project} not found in GOPATH: " + ", ".join(str(c) for c in candidates)
    raise FileNotFoundError(msg)
