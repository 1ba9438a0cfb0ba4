"""Environment specification and compiler configuration using Pydantic."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Language(BaseModel):
    """Language runtime of the environment."""

    model_config = ConfigDict(frozen=True)

    name: str
    """Runtime name, e.g. 'python', 'r' or 'julia'."""

    version: Optional[str] = None
    """Requested runtime version. Base images pin their own version."""


class Accelerator(BaseModel):
    """CUDA driver and cuDNN library versions for GPU base images."""

    model_config = ConfigDict(frozen=True)

    driver_version: Optional[str] = None
    lib_version: Optional[str] = None

    @model_validator(mode="after")
    def _both_or_neither(self) -> Accelerator:
        if (self.driver_version is None) != (self.lib_version is None):
            raise ValueError(
                "accelerator driver_version and lib_version must be set together"
            )
        return self

    @property
    def enabled(self) -> bool:
        return self.driver_version is not None and self.lib_version is not None


class CopyInstruction(BaseModel):
    """A file copied from the local build context into the image."""

    model_config = ConfigDict(frozen=True)

    source: str
    destination: str


class SpecModel(BaseModel):
    """Declarative description of a development environment."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    os: str = "ubuntu20.04"
    """Target operating system identifier."""

    language: Language = Field(default_factory=lambda: Language(name="python"))

    image: Optional[str] = None
    """Full base image override. Skips base selection and user provisioning."""

    accelerator: Accelerator = Field(default_factory=Accelerator)

    package_source_override: Optional[str] = None
    """Raw contents of a custom APT sources.list."""

    system_packages: Tuple[str, ...] = ()
    """System packages, installed in the given order."""

    exec: Tuple[str, ...] = ()
    """Shell commands, each run as its own step."""

    copy_instructions: Tuple[CopyInstruction, ...] = Field(default=(), alias="copy")

    public_key_path: Path = Path("~/.ssh/id_rsa.pub")
    """Local SSH public key installed as the container's authorized key."""

    uid: int = 1000
    gid: int = 1000

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> SpecModel:
        """Loads and validates a SpecModel from a YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)


class CompilerConfig(BaseModel):
    """Settings the compiler would otherwise read from process-wide state."""

    model_config = ConfigDict(frozen=True)

    docker_organization: str = "tensorchord"
    """Registry organization hosting the envd base images."""

    envd_version: str = "v0.2.0"
    """Version tag appended to base images as '-envd-<version>'."""

    supported_os: List[str] = Field(default_factory=lambda: ["ubuntu20.04"])

    build_context: str = "build-context"
    """Name of the local build context that copy steps read from."""

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> CompilerConfig:
        """Loads and validates a CompilerConfig from a YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)
