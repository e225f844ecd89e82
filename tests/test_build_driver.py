"""Tests for xbuilder.build.driver (step order, fail-fast, sequential targets)."""

from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from xbuilder.build.driver import Step, build_all, build_target, steps_for
from xbuilder.build.params import BuildParam, derive_build_param
from xbuilder.config import Config
from xbuilder.errors import CommandError
from xbuilder.targets import Selection, Target


def _param(project: Path, dist: Path, target: str, config: Config) -> BuildParam:
    return derive_build_param(BuildParam.base(config, project), Target.parse(target), dist)


class TestStepsFor:
    def test_single_file(self, tmp_path: Path, single_file_config: Config) -> None:
        p = _param(tmp_path, tmp_path / "dist", "linux/amd64", single_file_config)
        assert steps_for(p) == [Step.GENERATE, Step.COMPILE, Step.NORMALIZE]

    def test_multi_file_with_startup(self, tmp_path: Path) -> None:
        config = Config(startup_package="tools/startup@v1.0.0")
        p = _param(tmp_path, tmp_path / "dist", "linux/amd64", config)
        assert steps_for(p) == [
            Step.GENERATE,
            Step.COMPILE,
            Step.STARTUP,
            Step.NORMALIZE,
            Step.PACKAGE,
        ]


class TestBuildTarget:
    def test_runs_generate_then_compile_then_normalizes(
        self, tmp_path: Path, single_file_config: Config
    ) -> None:
        dist = tmp_path / "dist"
        p = _param(tmp_path, dist, "linux/amd64", single_file_config)
        calls: list[list[str]] = []

        def fake_run(command) -> None:
            calls.append(command.args)
            if command.args[0] == "xgo":
                (dist / "app-linux-amd64").write_bytes(b"bin")

        with patch("xbuilder.build.driver.run_command", side_effect=fake_run):
            artifact = build_target(p)

        assert [c[0:2] for c in calls] == [["go", "generate"], ["xgo", "-go"]]
        assert artifact == dist / "app-linux-amd64"
        assert (dist / "app-linux-amd64.sha256").exists()

    def test_failure_stops_before_later_steps(
        self, tmp_path: Path, single_file_config: Config
    ) -> None:
        p = _param(tmp_path, tmp_path / "dist", "linux/amd64", single_file_config)
        with patch(
            "xbuilder.build.driver.run_command",
            side_effect=CommandError(["go", "generate"], 1),
        ) as m_run, patch("xbuilder.build.driver.normalize_output") as m_norm:
            with pytest.raises(CommandError):
                build_target(p)
        assert m_run.call_count == 1
        assert not m_norm.called

    def test_multi_file_packages(self, tmp_path: Path) -> None:
        config = Config(executor="app", copy_files=[], make_dirs=["data"])
        dist = tmp_path / "dist"
        p = _param(tmp_path, dist, "linux/arm-7", config)

        def fake_run(command) -> None:
            if command.args[0] == "xgo":
                (p.require_release_dir() / "app-linux-arm-7").write_bytes(b"bin")

        with patch("xbuilder.build.driver.run_command", side_effect=fake_run):
            artifact = build_target(p)

        assert artifact == dist / "app_linux_arm-7.tar.gz"
        assert artifact.exists()
        assert (dist / "app_linux_arm-7.tar.gz.sha256").exists()
        assert not (dist / "app_linux_arm-7").exists()


class TestBuildAll:
    def test_builds_each_target_in_order_with_shared_metadata(
        self, tmp_path: Path, single_file_config: Config
    ) -> None:
        seen: list[BuildParam] = []

        def build_one(p: BuildParam) -> Path:
            seen.append(p)
            return tmp_path / p.output_name

        selection = Selection(
            (Target.parse("linux/amd64"), Target.parse("windows/386"), Target.parse("linux/arm-7")),
            minify=True,
        )
        artifacts = build_all(
            single_file_config,
            selection,
            tmp_path,
            tmp_path / "dist",
            commit_id="deadbeef",
            now=datetime(2024, 1, 2, 3, 4, 5),
            build_one=build_one,
        )
        assert [p.require_target().canonical for p in seen] == [
            "linux/amd64",
            "windows/386",
            "linux/arm-7",
        ]
        assert all(p.commit_id == "deadbeef" for p in seen)
        assert all(p.build_time == "20240102030405" for p in seen)
        assert all(p.minify_flags == ["-s", "-w"] for p in seen)
        assert artifacts == [
            tmp_path / "app-linux-amd64",
            tmp_path / "app-windows-386",
            tmp_path / "app-linux-arm-7",
        ]

    def test_commit_id_from_git_when_not_given(
        self, tmp_path: Path, single_file_config: Config
    ) -> None:
        seen: list[BuildParam] = []
        with patch("xbuilder.build.driver.git_commit_id", return_value="cafe") as m_git:
            build_all(
                single_file_config,
                Selection((Target.parse("linux/amd64"),)),
                tmp_path,
                tmp_path / "dist",
                build_one=lambda p: seen.append(p) or tmp_path,
            )
        m_git.assert_called_once_with(tmp_path)
        assert seen[0].commit_id == "cafe"
        assert seen[0].minify_flags == []

    def test_stops_at_first_failing_target(
        self, tmp_path: Path, single_file_config: Config
    ) -> None:
        built: list[str] = []

        def build_one(p: BuildParam) -> Path:
            built.append(p.require_target().canonical)
            if p.goos == "windows":
                raise CommandError(["xgo"], 1)
            return tmp_path

        selection = Selection(
            (Target.parse("linux/amd64"), Target.parse("windows/386"), Target.parse("linux/arm-7"))
        )
        with pytest.raises(CommandError):
            build_all(
                single_file_config,
                selection,
                tmp_path,
                tmp_path / "dist",
                commit_id="x",
                build_one=build_one,
            )
        assert built == ["linux/amd64", "windows/386"]
