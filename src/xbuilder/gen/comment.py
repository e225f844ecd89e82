"""Write main_<os>.go files carrying the //go:generate go-bindata directives.

Each non-'*' key of vendor_misc_dirs gets one file (main_linux.go, main_nonlinux.go for
'!linux') whose build constraint is the key and whose asset dirs are the '*' dirs plus
the key's own. Everything from the first `import ` of an existing file is preserved.

Vendored asset dirs are grouped into -prefix values so go-bindata strips them:
    vendor/github.com/org/repo/template/  -> vendor/github.com/org/repo/
    ../../github.com/org/repo/template/   -> ../../github.com/org/repo/
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from xbuilder.config import Config

log = logging.getLogger(__name__)

BINDATA_INSTALL = "//go:generate go install github.com/admpub/bindata/v3/go-bindata@latest"
BINDATA_COMMAND = (
    "//go:generate go-bindata -fs -o bindata_assetfs.go"
    r' -ignore "\\.(git|svn|DS_Store|less|scss|gitkeep)$"'
    r' -minify "\\.(js|css)$"'
    " -tags bindata"
)
BASE_MISC_DIRS = ("public/assets/", "template/", "config/i18n/")

ALL_OS = "*"
RECURSIVE_SUFFIX = "/..."
PARENT_DIR = "../"


def normalize_misc_dir(d: str) -> str:
    """Ensure the dir ends with '/...' (recursive package pattern)."""
    if d.endswith(RECURSIVE_SUFFIX):
        return d
    if not d.endswith("/"):
        d += "/"
    return d + "..."


def misc_dir_prefix(d: str) -> str | None:
    """-prefix for a vendored or ../-relative dir, or None when d is neither (or too short)."""
    if d.startswith("vendor/"):
        parts = d.split("/", 4)
        if len(parts) == 5:
            return "/".join(parts[:4]) + "/"
        return None
    dots = 0
    rest = d
    while rest.startswith(PARENT_DIR):
        dots += 1
        rest = rest[len(PARENT_DIR) :]
    if not dots:
        return None
    parts = rest.split("/", 3)
    if len(parts) == 4:
        return PARENT_DIR * dots + "/".join(parts[:3]) + "/"
    return None


def build_generate_command_data(misc_dirs: Iterable[str]) -> tuple[list[str], list[str]]:
    """Return (unique prefixes in first-seen order, normalized dirs)."""
    prefixes: list[str] = []
    dirs: list[str] = []
    for d in misc_dirs:
        d = normalize_misc_dir(d)
        prefix = misc_dir_prefix(d)
        if prefix is not None and prefix not in prefixes:
            prefixes.append(prefix)
        dirs.append(d)
    return prefixes, dirs


def gen_comment(vendor_misc_dirs: Iterable[str]) -> str:
    """The two //go:generate lines for the base misc dirs plus vendor_misc_dirs."""
    prefixes, dirs = build_generate_command_data([*BASE_MISC_DIRS, *vendor_misc_dirs])
    return (
        f"{BINDATA_INSTALL}\n{BINDATA_COMMAND}"
        f' -prefix "{"|".join(prefixes)}" '
        + " ".join(dirs)
    )


def generate_file_name(os_selector: str) -> str:
    """'linux' -> main_linux.go, '!linux' -> main_nonlinux.go."""
    if os_selector.startswith("!"):
        return f"main_non{os_selector[1:]}.go"
    return f"main_{os_selector}.go"


def render_generate_file(os_selector: str, dirs: Iterable[str], previous: str = "") -> str:
    content = f"//go:build {os_selector}\n\npackage main\n\n{gen_comment(dirs)}\n\n"
    pos = previous.find("import ")
    if pos > -1:
        content += previous[pos:]
    return content


def make_generate_command_comment(config: Config, project_path: Path) -> list[Path]:
    """Rewrite main_<os>.go under project_path for each OS selector. Returns the written paths."""
    defaults = config.vendor_misc_dirs.get(ALL_OS, [])
    written: list[Path] = []
    for os_selector, dirs in config.vendor_misc_dirs.items():
        if os_selector == ALL_OS:
            continue
        path = project_path / generate_file_name(os_selector)
        print(f"[go:generate]\t:\t{path}")
        try:
            previous = path.read_text()
        except FileNotFoundError:
            log.warning("No previous %s; writing a fresh file", path)
            previous = ""
        path.write_text(render_generate_file(os_selector, [*defaults, *dirs], previous))
        written.append(path)
    return written
