"""Compilation stages, each mapping a BuildState to the next one."""

from .base import BaseImageSelector
from .copy import FileStager
from .packages import PackageInstaller
from .run import CommandRunner
from .source import SourceOverrider
from .ssh import CredentialInstaller
from .user import UserProvisioner

__all__ = [
    "BaseImageSelector",
    "CommandRunner",
    "CredentialInstaller",
    "FileStager",
    "PackageInstaller",
    "SourceOverrider",
    "UserProvisioner",
]
