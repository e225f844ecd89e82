"""Turn positional CLI arguments into the ordered list of targets to build.

Accepted forms:
    (none)              every registered target
    min | m             every registered target, minified
    <targets>           comma-separated short names or os/arch values
    <targets> min|m     same, minified
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from xbuilder.errors import UnsupportedTargetError, UsageError
from xbuilder.helpers import split_csv
from xbuilder.targets.registry import Target, TargetRegistry

log = logging.getLogger(__name__)

MINIFY_TOKENS = frozenset({"m", "min"})


@dataclass(frozen=True)
class Selection:
    targets: tuple[Target, ...]
    minify: bool = False
    requested: str = ""


def is_minify_token(arg: str) -> bool:
    return arg in MINIFY_TOKENS


def order_targets(targets: Iterable[Target]) -> list[Target]:
    """Drop repeats, then put ARM targets after all others (relative order kept)."""
    seen: set[Target] = set()
    plain: list[Target] = []
    arm: list[Target] = []
    for t in targets:
        if t in seen:
            continue
        seen.add(t)
        (arm if t.is_arm else plain).append(t)
    return plain + arm


def resolve_targets(requested: str, registry: TargetRegistry) -> list[Target]:
    """Resolve a comma-separated target list; unknown names are skipped with a warning."""
    out: list[Target] = []
    for name in split_csv(requested):
        canonical = registry.lookup(name)
        if canonical is None:
            log.warning("Skipping unknown target %r", name)
            continue
        out.append(Target.parse(canonical))
    return out


def select_targets(args: Sequence[str], registry: TargetRegistry) -> Selection:
    """Build the Selection for args. Raises UnsupportedTargetError when a requested list resolves to nothing."""
    if len(args) > 2:
        msg = f"invalid parameter: expected at most 2 positional arguments, got {len(args)}"
        raise UsageError(msg)
    if not args:
        return Selection(tuple(order_targets(registry.targets())))
    if len(args) == 1 and is_minify_token(args[0]):
        return Selection(tuple(order_targets(registry.targets())), minify=True)

    requested = args[0]
    minify = len(args) == 2 and is_minify_token(args[1])
    targets = order_targets(resolve_targets(requested, registry))
    if requested and not targets:
        raise UnsupportedTargetError(requested)
    return Selection(tuple(targets), minify=minify, requested=requested)
