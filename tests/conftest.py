"""Pytest fixtures for xbuilder tests."""

from pathlib import Path

import pytest

from xbuilder.config import Config


@pytest.fixture
def go_project(tmp_path: Path) -> tuple[Path, str]:
    """Temporary $GOPATH/src/<project> checkout. Returns (project_path, project)."""
    project = "github.com/example/app"
    project_path = tmp_path / "gopath" / "src" / project
    project_path.mkdir(parents=True)
    return project_path, project


@pytest.fixture
def single_file_config() -> Config:
    """Config that ships only the binary (no copy files, make dirs, or misc dirs)."""
    return Config(
        executor="app",
        project="github.com/example/app",
        vendor_misc_dirs={},
        copy_files=[],
        make_dirs=[],
    )
