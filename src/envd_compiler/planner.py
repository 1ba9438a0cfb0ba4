"""The PlanCompiler turns a SpecModel into an ordered BuildPlan."""

from __future__ import annotations

import logging
from typing import List, Optional

from .config import CompilerConfig, SpecModel
from .errors import CompileError
from .plan import BuildPlan, BuildState
from .stages import (
    BaseImageSelector,
    CommandRunner,
    CredentialInstaller,
    FileStager,
    PackageInstaller,
    SourceOverrider,
    UserProvisioner,
)

logger = logging.getLogger(__name__)


class PlanCompiler:
    """Runs the compilation stages in a fixed order.

    Each stage receives the state produced by the previous one. The account
    is sealed right after user provisioning, so no later stage can change
    uid/gid. Compilation is all-or-nothing: the first error aborts it.
    """

    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = config or CompilerConfig()
        self.stages: List = [
            BaseImageSelector(self.config),
            UserProvisioner(),
            SourceOverrider(),
            PackageInstaller(),
            CommandRunner(),
            FileStager(self.config),
            CredentialInstaller(),
        ]

    @property
    def stage_names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    def compile(self, spec: SpecModel) -> BuildPlan:
        state: Optional[BuildState] = None
        for stage in self.stages:
            try:
                state = stage.apply(spec, state)
            except CompileError as e:
                if e.stage is None:
                    e.stage = stage.name
                logger.debug("compilation failed in stage %s: %s", stage.name, e.message)
                raise
            if isinstance(stage, UserProvisioner):
                state = state.seal_account()

        logger.debug("compiled %d steps", len(state.steps))
        return state.to_plan()
