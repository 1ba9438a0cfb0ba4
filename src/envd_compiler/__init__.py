"""Compiles declarative development environment specs into BuildKit build plans."""

from .config import CompilerConfig, SpecModel
from .errors import CompileError, ConfigError, CredentialError, OwnershipError
from .plan import BuildPlan, BuildState
from .planner import PlanCompiler

__all__ = [
    "BuildPlan",
    "BuildState",
    "CompileError",
    "CompilerConfig",
    "ConfigError",
    "CredentialError",
    "OwnershipError",
    "PlanCompiler",
    "SpecModel",
]
