"""Base image selection."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ..config import CompilerConfig, SpecModel
from ..errors import ConfigError
from ..plan import BaseImage, BuildState, Owner

logger = logging.getLogger(__name__)

# Repository and tag prefix per language. The 'r' image ships with a
# pre-existing group 1000, see UserProvisioner.
BASE_IMAGES: Dict[str, str] = {
    "r": "r-base:4.2",
    "python": "python:3.9-ubuntu20.04",
    "julia": "julia:1.8rc1-ubuntu20.04",
}

# GPU images are built on the python image whatever the language.
ACCELERATOR_REPOSITORY = "python:3.9"


class BaseImageSelector:
    """Picks the base image and creates the initial BuildState."""

    name = "base"

    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = config or CompilerConfig()

    def _image(self, repository: str) -> str:
        return (
            f"docker.io/{self.config.docker_organization}/"
            f"{repository}-envd-{self.config.envd_version}"
        )

    def select(self, spec: SpecModel) -> BaseImage:
        lang = spec.language.name
        if spec.image:
            logger.debug("using custom base image %s", spec.image)
            return BaseImage(ref=spec.image, family="custom", custom=True)

        if spec.os not in self.config.supported_os:
            raise ConfigError(
                f"unsupported os '{spec.os}'",
                stage=self.name,
                hint=f"supported: {', '.join(self.config.supported_os)}",
            )

        if spec.accelerator.enabled:
            acc = spec.accelerator
            return BaseImage(
                ref=self._image(
                    f"{ACCELERATOR_REPOSITORY}-{spec.os}-cuda{acc.driver_version}-cudnn{acc.lib_version}"
                ),
                family="gpu",
            )

        repository = BASE_IMAGES.get(lang)
        if repository is None:
            raise ConfigError(
                f"unknown language '{lang}'",
                stage=self.name,
                hint=f"expected one of: {', '.join(sorted(BASE_IMAGES))}",
            )
        return BaseImage(ref=self._image(repository), family=lang)

    def apply(self, spec: SpecModel, state: Optional[BuildState] = None) -> BuildState:
        version = spec.language.version
        logger.debug(
            "compile base image: os=%s language=%s%s",
            spec.os,
            spec.language.name,
            f" version={version}" if version else "",
        )
        base = self.select(spec)
        return BuildState.from_base(base, Owner(spec.uid, spec.gid))
