"""Target registry: short names (linux_amd64) -> canonical os/arch (linux/amd64).

ARM sub-revisions are encoded in the arch after a dash (linux/arm-7 -> GOARCH=arm GOARM=7).
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

DEFAULT_TARGETS: dict[str, str] = {
    "linux_386": "linux/386",
    "linux_amd64": "linux/amd64",
    "linux_arm5": "linux/arm-5",
    "linux_arm6": "linux/arm-6",
    "linux_arm7": "linux/arm-7",
    "linux_arm64": "linux/arm64",
    "darwin_amd64": "darwin/amd64",
    "darwin_arm64": "darwin/arm64",
    "windows_386": "windows/386",
    "windows_amd64": "windows/amd64",
    # freebsd/amd64 is not supported by xgo; add it via config `targets` to build with go.
}

ARCH_SEPARATOR = "-"


@dataclass(frozen=True)
class Target:
    os: str
    arch: str

    @classmethod
    def parse(cls, canonical: str) -> Target:
        """Parse 'os/arch'. Raises ValueError when either part is missing."""
        os_name, sep, arch = canonical.partition("/")
        if not sep or not os_name or not arch:
            msg = f"Invalid target {canonical!r}: expected os/arch"
            raise ValueError(msg)
        return cls(os_name, arch)

    @property
    def canonical(self) -> str:
        return f"{self.os}/{self.arch}"

    @property
    def arch_family(self) -> str:
        return self.arch.split(ARCH_SEPARATOR, 1)[0]

    @property
    def arm_revision(self) -> str | None:
        """'7' for arm-7; None when the arch carries no revision or is not in the arm family."""
        family, sep, rev = self.arch.partition(ARCH_SEPARATOR)
        if family != "arm" or not sep:
            return None
        return rev

    @property
    def is_arm(self) -> bool:
        """Any ARM arch (arm-N, arm64). These build slowest under xgo."""
        return self.arch.startswith("arm")

    def __str__(self) -> str:
        return self.canonical


class TargetRegistry:
    """Ordered name -> os/arch map with lookup in both directions."""

    def __init__(self, names: Mapping[str, str] | None = None) -> None:
        self._names: dict[str, str] = dict(DEFAULT_TARGETS if names is None else names)
        for canonical in self._names.values():
            Target.parse(canonical)

    @classmethod
    def with_extra(cls, extra: Mapping[str, str]) -> TargetRegistry:
        """Default registry extended (or overridden per name) by extra."""
        return cls({**DEFAULT_TARGETS, **extra})

    def extend(self, extra: Mapping[str, str]) -> TargetRegistry:
        return TargetRegistry({**self._names, **extra})

    def lookup(self, name: str) -> str | None:
        """Canonical os/arch for a short name or an already-canonical value; None if unknown."""
        if name in self._names:
            return self._names[name]
        for canonical in self._names.values():
            if canonical == name:
                return canonical
        return None

    def reverse(self, canonical: str) -> str | None:
        """Short name registered for a canonical os/arch, or None."""
        for name, value in self._names.items():
            if value == canonical:
                return name
        return None

    def targets(self) -> list[Target]:
        """Every registered target once, in registration order."""
        seen: set[str] = set()
        out: list[Target] = []
        for canonical in self._names.values():
            if canonical not in seen:
                seen.add(canonical)
                out.append(Target.parse(canonical))
        return out

    def names(self) -> dict[str, str]:
        return dict(self._names)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)
