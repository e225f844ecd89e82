"""Normalize build output names, stage auxiliary files, tar.gz the release dir, write checksums."""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path

from xbuilder.build.params import BuildParam
from xbuilder.errors import BuildError
from xbuilder.helpers import CHECKSUM_SUFFIX, make_checksum

log = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".tar.gz"


def _first_match(release_dir: Path, pattern: str) -> Path | None:
    matches = sorted(m for m in release_dir.glob(pattern) if not m.name.endswith(CHECKSUM_SUFFIX))
    return matches[0] if matches else None


def normalize_output(p: BuildParam) -> Path:
    """Give the compiled binary its final name and write its .sha256. Returns the binary path.

    Single-file mode: <executor>-<os>-<arch> gets the platform extension appended.
    Multi-file mode: the first <executor>-<os>* file becomes <executor>[.exe].
    """
    release_dir = p.require_release_dir()
    if p.single_file:
        built = release_dir / p.output_name
        final = built.with_name(built.name + p.extension)
        if p.extension and built.is_file():
            built.rename(final)
        if not final.is_file():
            found = _first_match(release_dir, f"{p.output_name}*{p.extension}")
            if found is None:
                msg = f"Build output not found: {final}"
                raise BuildError(msg)
            found.rename(final)
    else:
        found = _first_match(release_dir, f"{p.executor}-{p.goos}*")
        if found is None:
            msg = f"Build output {p.executor}-{p.goos}* not found in {release_dir}"
            raise BuildError(msg)
        final = release_dir / p.final_name
        found.rename(final)
    make_checksum(final)
    log.debug("Normalized %s", final)
    return final


def _copy_file(src: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dest)


def stage_files(p: BuildParam) -> None:
    """Copy config.copy_files (files, dirs, or globs relative to the project) and create config.make_dirs."""
    release_dir = p.require_release_dir()
    for item in p.config.copy_files:
        if "*" in item:
            for src in sorted(p.project_path.glob(item)):
                dest = release_dir / src.relative_to(p.project_path)
                if src.is_dir():
                    shutil.copytree(src, dest, dirs_exist_ok=True)
                else:
                    _copy_file(src, dest)
            continue
        src = p.project_path / item
        if src.is_dir():
            shutil.copytree(src, release_dir / item, dirs_exist_ok=True)
            continue
        if not src.exists():
            msg = f"File to copy not found: {src}"
            raise BuildError(msg)
        _copy_file(src, release_dir / item)
    for d in p.config.make_dirs:
        (release_dir / d).mkdir(parents=True, exist_ok=True)


def make_archive(source_dir: Path) -> Path:
    """tar.gz source_dir into <source_dir>.tar.gz with members rooted at its name."""
    archive = source_dir.with_name(source_dir.name + ARCHIVE_SUFFIX)
    with tarfile.open(archive, "w:gz") as tar:
        tar.add(source_dir, arcname=source_dir.name)
    return archive


def pack_files(p: BuildParam) -> Path:
    """Stage files, archive the release dir, remove it, and checksum the archive. Returns the archive path."""
    release_dir = p.require_release_dir()
    stage_files(p)
    archive = make_archive(release_dir)
    shutil.rmtree(release_dir)
    make_checksum(archive)
    return archive
