"""System package installation with shared APT caches."""

from __future__ import annotations

import logging

from ..cache import EnvironmentIdentity, cache_id
from ..config import SpecModel
from ..plan import BuildState, CacheMount, RunShell, ShellCommand

logger = logging.getLogger(__name__)

APT_CACHE_DIR = "/var/cache/apt"
APT_LIB_DIR = "/var/lib/apt"


def install_script(packages) -> str:
    install = " ".join(
        ["sudo apt-get install -y --no-install-recommends", *packages]
    )
    return f"sudo apt-get update && {install}"


class PackageInstaller:
    """Installs system packages in one step, caching APT downloads across builds."""

    name = "system-packages"

    def apply(self, spec: SpecModel, state: BuildState) -> BuildState:
        if not spec.system_packages:
            return state
        identity = EnvironmentIdentity.of(spec)
        mounts = tuple(
            CacheMount(target=path, cache_id=cache_id(path, identity))
            for path in (APT_CACHE_DIR, APT_LIB_DIR)
        )
        logger.debug("installing system packages: %s", " ".join(spec.system_packages))
        return state.then(
            RunShell(
                ShellCommand.bash(install_script(spec.system_packages)),
                mounts=mounts,
                label=f"apt-get install {' '.join(spec.system_packages)}",
            )
        )
