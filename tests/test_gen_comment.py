"""Tests for xbuilder.gen.comment (prefix grouping and main_<os>.go rewriting)."""

from pathlib import Path

import pytest

from xbuilder.config import Config
from xbuilder.gen.comment import (
    BINDATA_COMMAND,
    BINDATA_INSTALL,
    build_generate_command_data,
    gen_comment,
    generate_file_name,
    make_generate_command_comment,
    misc_dir_prefix,
    normalize_misc_dir,
    render_generate_file,
)


class TestNormalizeMiscDir:
    @pytest.mark.parametrize(
        ("given", "expected"),
        [
            ("template", "template/..."),
            ("template/", "template/..."),
            ("template/...", "template/..."),
        ],
    )
    def test_normalize(self, given: str, expected: str) -> None:
        assert normalize_misc_dir(given) == expected


class TestMiscDirPrefix:
    def test_vendor_dir(self) -> None:
        d = "vendor/github.com/nging-plugins/collector/template/..."
        assert misc_dir_prefix(d) == "vendor/github.com/nging-plugins/collector/"

    def test_vendor_dir_too_short(self) -> None:
        assert misc_dir_prefix("vendor/github.com/org/...") is None

    def test_parent_relative_keeps_dot_count(self) -> None:
        d = "../../../github.com/admpub/nging/template/..."
        assert misc_dir_prefix(d) == "../../../github.com/admpub/nging/"

    def test_single_parent(self) -> None:
        assert misc_dir_prefix("../github.com/a/b/public/...") == "../github.com/a/b/"

    def test_plain_dir_has_no_prefix(self) -> None:
        assert misc_dir_prefix("public/assets/...") is None


class TestBuildGenerateCommandData:
    def test_parent_relative_dir(self) -> None:
        prefixes, dirs = build_generate_command_data(
            ["../../../github.com/admpub/nging/template/..."]
        )
        assert dirs == ["../../../github.com/admpub/nging/template/..."]
        assert prefixes == ["../../../github.com/admpub/nging/"]

    def test_vendor_prefix_emitted_once(self) -> None:
        prefixes, dirs = build_generate_command_data(
            [
                "vendor/github.com/nging-plugins/collector/template/",
                "vendor/github.com/nging-plugins/collector/public/assets/",
                "vendor/github.com/nging-plugins/dbmanager/template/",
                "template/",
            ]
        )
        assert prefixes == [
            "vendor/github.com/nging-plugins/collector/",
            "vendor/github.com/nging-plugins/dbmanager/",
        ]
        assert dirs == [
            "vendor/github.com/nging-plugins/collector/template/...",
            "vendor/github.com/nging-plugins/collector/public/assets/...",
            "vendor/github.com/nging-plugins/dbmanager/template/...",
            "template/...",
        ]

    def test_input_not_mutated(self) -> None:
        given = ["template/"]
        build_generate_command_data(given)
        assert given == ["template/"]


class TestGenComment:
    def test_comment_layout(self) -> None:
        comment = gen_comment(["vendor/github.com/org/repo/template/"])
        install, command = comment.split("\n")
        assert install == BINDATA_INSTALL
        assert command.startswith(BINDATA_COMMAND)
        assert '-ignore "\\\\.(git|svn|DS_Store|less|scss|gitkeep)$"' in command
        assert command.endswith(
            ' -prefix "vendor/github.com/org/repo/" '
            "public/assets/... template/... config/i18n/... "
            "vendor/github.com/org/repo/template/..."
        )


class TestGenerateFileName:
    def test_names(self) -> None:
        assert generate_file_name("linux") == "main_linux.go"
        assert generate_file_name("!linux") == "main_nonlinux.go"


class TestRenderGenerateFile:
    def test_keeps_everything_from_import(self) -> None:
        previous = '//go:build linux\n\npackage main\n\n//go:generate old\n\nimport (\n\t"fmt"\n)\n'
        out = render_generate_file("linux", [], previous)
        assert out.startswith("//go:build linux\n\npackage main\n\n//go:generate go install")
        assert "//go:generate old" not in out
        assert out.endswith('\n\nimport (\n\t"fmt"\n)\n')

    def test_without_previous(self) -> None:
        out = render_generate_file("!linux", [])
        assert out.startswith("//go:build !linux\n")
        assert out.endswith("\n\n")


class TestMakeGenerateCommandComment:
    def test_writes_one_file_per_os_selector(self, tmp_path: Path) -> None:
        (tmp_path / "main_linux.go").write_text("package main\n\nimport _ \"embed\"\n")
        config = Config(
            vendor_misc_dirs={
                "*": ["vendor/github.com/a/common/template/"],
                "linux": ["vendor/github.com/a/firewall/template/"],
                "!linux": [],
            }
        )
        written = make_generate_command_comment(config, tmp_path)
        assert written == [tmp_path / "main_linux.go", tmp_path / "main_nonlinux.go"]

        linux = (tmp_path / "main_linux.go").read_text()
        assert "vendor/github.com/a/common/template/..." in linux
        assert "vendor/github.com/a/firewall/template/..." in linux
        assert linux.endswith('import _ "embed"\n')

        nonlinux = (tmp_path / "main_nonlinux.go").read_text()
        assert nonlinux.startswith("//go:build !linux\n")
        assert "vendor/github.com/a/common/template/..." in nonlinux
        assert "firewall" not in nonlinux

    def test_missing_previous_file_logged_not_fatal(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        config = Config(vendor_misc_dirs={"linux": []})
        with caplog.at_level("WARNING", logger="xbuilder.gen.comment"):
            written = make_generate_command_comment(config, tmp_path)
        assert written == [tmp_path / "main_linux.go"]
        assert "No previous" in caplog.text

    def test_only_wildcard_writes_nothing(self, tmp_path: Path) -> None:
        config = Config(vendor_misc_dirs={"*": ["template/"]})
        assert make_generate_command_comment(config, tmp_path) == []
