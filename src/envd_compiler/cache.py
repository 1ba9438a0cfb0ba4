"""Cache identifier derivation for persistent package directories."""

from __future__ import annotations

from dataclasses import dataclass

from .config import SpecModel


@dataclass(frozen=True)
class EnvironmentIdentity:
    """The parts of an environment that decide whether two caches may be shared."""

    os: str
    gpu: bool = False

    @classmethod
    def of(cls, spec: SpecModel) -> EnvironmentIdentity:
        return cls(os=spec.os, gpu=spec.accelerator.enabled)

    def __str__(self) -> str:
        return f"{self.os}-{'gpu' if self.gpu else 'cpu'}"


def cache_id(directory: str, identity: EnvironmentIdentity) -> str:
    """Returns a stable cache id for ``directory`` within ``identity``.

    Ids are a pure function of both inputs, so identical specs always reuse
    the same cache and distinct directories never collide.
    """
    return f"{directory.rstrip('/')}/{identity}"
