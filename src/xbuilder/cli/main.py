"""Main CLI entry point: xbuilder [targets] [min|m] [--conf F] [--outputDir D] [--nomisc] [--version].

Special positional tokens (sole argument):
    genConfig   write the built-in defaults to --conf and exit
    makeGen     rewrite main_<os>.go go:generate files and exit
    version     print the tool version
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from xbuilder import __version__
from xbuilder.build.driver import build_all
from xbuilder.build.params import work_dir_for
from xbuilder.config import DEFAULT_CONFIG, DEFAULT_CONFIG_FILE, dump_config, load_config
from xbuilder.errors import BuildError
from xbuilder.gen.comment import make_generate_command_comment
from xbuilder.targets import TargetRegistry, select_targets

GEN_CONFIG = "genConfig"
MAKE_GEN = "makeGen"
VERSION = "version"


def _parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="xbuilder",
        description="Cross-compile a Go application for os/arch targets and package the results",
        epilog="Command format: xbuilder [os_arch[,os_arch...]] [min]",
    )
    ap.add_argument(
        "args",
        nargs="*",
        metavar="target",
        help="comma-separated targets (linux_amd64 or linux/amd64), then optional min|m; "
        f"or one of {GEN_CONFIG}, {MAKE_GEN}, {VERSION}",
    )
    ap.add_argument(
        "--conf",
        default=DEFAULT_CONFIG_FILE,
        help=f"Config file (default: {DEFAULT_CONFIG_FILE})",
    )
    ap.add_argument("--version", action="store_true", help="Print version and exit")
    ap.add_argument(
        "--nomisc",
        action="store_true",
        help="Do not rewrite main_<os>.go go:generate files before building",
    )
    ap.add_argument(
        "--outputDir",
        dest="output_dir",
        default="",
        help="Output directory (default: <project>/dist)",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def run(argv: list[str]) -> int:
    """Parse argv and run. Returns the process exit code."""
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    positional: list[str] = args.args
    if args.version or positional == [VERSION]:
        print(__version__)
        return 0

    conf = Path(args.conf)
    try:
        if positional == [GEN_CONFIG]:
            dump_config(DEFAULT_CONFIG, conf)
            print(f"✅ Generated config file: {conf}")
            return 0

        config = load_config(conf)
        project_path = config.resolve_project_path()
        if positional == [MAKE_GEN]:
            make_generate_command_comment(config, project_path)
            return 0

        selection = select_targets(positional, TargetRegistry.with_extra(config.targets))
        if not args.nomisc:
            make_generate_command_comment(config, project_path)

        print(f"ConfFile\t:\t{conf}")
        print(f"WorkDir\t\t:\t{work_dir_for(project_path, config.project)}")
        dist_path = Path(args.output_dir).resolve() if args.output_dir else project_path / "dist"
        dist_path.mkdir(parents=True, exist_ok=True)
        print(f"DistPath\t:\t{dist_path}")

        build_all(config, selection, project_path, dist_path)
    except (BuildError, OSError, yaml.YAMLError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    """Main CLI entry point."""
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
