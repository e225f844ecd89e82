"""Errors raised by xbuilder library code. The CLI reports them and exits 1."""

from __future__ import annotations

from collections.abc import Sequence


class BuildError(RuntimeError):
    """Base class for fatal build errors."""


class ConfigError(BuildError, ValueError):
    """Config file missing, unreadable, or of the wrong shape."""


class UnsupportedTargetError(BuildError, ValueError):
    """Requested targets resolved to nothing in the registry."""

    def __init__(self, requested: str) -> None:
        super().__init__(f"Unsupported target {requested!r}")
        self.requested = requested


class CommandError(BuildError):
    """External command exited non-zero."""

    def __init__(self, cmd: Sequence[str], returncode: int) -> None:
        super().__init__(f"{cmd[0]} exited with status {returncode}: {' '.join(cmd)}")
        self.cmd = list(cmd)
        self.returncode = returncode


class UsageError(BuildError, ValueError):
    """Bad positional arguments on the command line."""
