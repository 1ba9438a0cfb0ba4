"""Custom APT source injection."""

from __future__ import annotations

import logging
import posixpath

from ..config import SpecModel
from ..plan import BuildState, MakeDir, WriteFile

logger = logging.getLogger(__name__)

APT_SOURCE_PATH = "/etc/apt/sources.list"

_LABEL = "[internal] setting apt source"


class SourceOverrider:
    name = "apt-source"

    def apply(self, spec: SpecModel, state: BuildState) -> BuildState:
        if spec.package_source_override is None:
            return state
        logger.debug("using custom APT source: %s", spec.package_source_override)
        return state.then(
            MakeDir(posixpath.dirname(APT_SOURCE_PATH), 0o755, parents=True, label=_LABEL),
            WriteFile(
                APT_SOURCE_PATH,
                0o644,
                spec.package_source_override.encode("utf-8"),
                label=_LABEL,
            ),
        )
