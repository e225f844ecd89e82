"""Per-target build parameters, compiler commands, packaging, and the sequential driver."""

from .driver import Step, build_all, build_target, steps_for
from .params import (
    COMPILER_FALLBACK_POLICY,
    BuildParam,
    CompilerPolicy,
    LinkerFlags,
    TagSet,
    choose_compiler,
    derive_build_param,
)

__all__ = [
    "COMPILER_FALLBACK_POLICY",
    "BuildParam",
    "CompilerPolicy",
    "LinkerFlags",
    "Step",
    "TagSet",
    "build_all",
    "build_target",
    "choose_compiler",
    "derive_build_param",
    "steps_for",
]
