"""Target registry and CLI target selection."""

from .registry import DEFAULT_TARGETS, Target, TargetRegistry
from .selector import (
    MINIFY_TOKENS,
    Selection,
    is_minify_token,
    order_targets,
    resolve_targets,
    select_targets,
)

__all__ = [
    "DEFAULT_TARGETS",
    "MINIFY_TOKENS",
    "Selection",
    "Target",
    "TargetRegistry",
    "is_minify_token",
    "order_targets",
    "resolve_targets",
    "select_targets",
]
