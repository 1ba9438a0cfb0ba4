"""Files copied from the local build context."""

from __future__ import annotations

from typing import Optional

from ..config import CompilerConfig, SpecModel
from ..plan import BuildState, CopyFromContext


class FileStager:
    name = "copy"

    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = config or CompilerConfig()

    def apply(self, spec: SpecModel, state: BuildState) -> BuildState:
        return state.then(*(
            CopyFromContext(
                context=self.config.build_context,
                source=item.source,
                destination=item.destination,
                owner=state.account,
            )
            for item in spec.copy_instructions
        ))
