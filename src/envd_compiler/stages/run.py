"""User supplied shell commands."""

from __future__ import annotations

import logging

from ..config import SpecModel
from ..plan import BuildState, RunShell, SetEnv, ShellCommand

logger = logging.getLogger(__name__)

EXTRA_PATH = (
    "$PATH:/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"
    ":/opt/conda/bin:/usr/local/julia/bin:/opt/conda/envs/envd/bin"
)


class CommandRunner:
    """Runs each command as its own step so every command is cached separately."""

    name = "run"

    def apply(self, spec: SpecModel, state: BuildState) -> BuildState:
        if not spec.exec:
            return state
        logger.debug("compile run: %s", " ".join(spec.exec))
        state = state.then(SetEnv("PATH", EXTRA_PATH))
        for command in spec.exec:
            state = state.then(RunShell(ShellCommand.bash(command)))
        return state
