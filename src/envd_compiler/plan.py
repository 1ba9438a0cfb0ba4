"""Build plan intermediate representation.

A plan is an ordered tuple of typed steps. Stages never mutate a plan in
place: they receive a BuildState and return a new one with steps appended.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple, Union

from .errors import OwnershipError


@dataclass(frozen=True)
class Owner:
    uid: int
    gid: int

    def __str__(self) -> str:
        return f"{self.uid}:{self.gid}"


@dataclass(frozen=True)
class ShellCommand:
    """A command kept as an argument list until it is serialized."""

    argv: Tuple[str, ...]
    env: Tuple[Tuple[str, str], ...] = ()
    workdir: Optional[str] = None

    @classmethod
    def of(cls, *argv: str, env: Optional[Dict[str, str]] = None,
           workdir: Optional[str] = None) -> ShellCommand:
        return cls(argv=tuple(argv), env=tuple(sorted((env or {}).items())), workdir=workdir)

    @classmethod
    def bash(cls, script: str) -> ShellCommand:
        return cls.of("bash", "-c", script)

    def to_shell(self) -> str:
        parts = [f"{key}={shlex.quote(value)}" for key, value in self.env]
        parts.append(shlex.join(self.argv))
        command = " ".join(parts)
        if self.workdir:
            command = f"cd {shlex.quote(self.workdir)} && {command}"
        return command


@dataclass(frozen=True)
class CacheMount:
    """A persistent cache directory shared between concurrent builds."""

    target: str
    cache_id: str
    sharing: str = "shared"


@dataclass(frozen=True)
class SetBaseImage:
    ref: str
    label: Optional[str] = None
    kind: str = field(default="base", init=False)


@dataclass(frozen=True)
class WriteFile:
    path: str
    mode: int
    data: bytes
    owner: Optional[Owner] = None
    label: Optional[str] = None
    kind: str = field(default="write_file", init=False)


@dataclass(frozen=True)
class MakeDir:
    path: str
    mode: int
    parents: bool = False
    owner: Optional[Owner] = None
    label: Optional[str] = None
    kind: str = field(default="mkdir", init=False)


@dataclass(frozen=True)
class RunShell:
    command: ShellCommand
    mounts: Tuple[CacheMount, ...] = ()
    label: Optional[str] = None
    kind: str = field(default="run", init=False)


@dataclass(frozen=True)
class CopyFromContext:
    context: str
    source: str
    destination: str
    owner: Owner
    label: Optional[str] = None
    kind: str = field(default="copy", init=False)


@dataclass(frozen=True)
class SetEnv:
    key: str
    value: str
    label: Optional[str] = None
    kind: str = field(default="env", init=False)


@dataclass(frozen=True)
class SetUser:
    name: str
    label: Optional[str] = None
    kind: str = field(default="user", init=False)


Step = Union[SetBaseImage, WriteFile, MakeDir, RunShell, CopyFromContext, SetEnv, SetUser]


def step_to_dict(step: Step) -> Dict[str, Any]:
    """Returns a JSON-friendly description of a single step."""
    payload: Dict[str, Any] = {"kind": step.kind}
    if isinstance(step, SetBaseImage):
        payload["ref"] = step.ref
    elif isinstance(step, WriteFile):
        payload.update(path=step.path, mode=oct(step.mode),
                       data=step.data.decode("utf-8", errors="replace"))
    elif isinstance(step, MakeDir):
        payload.update(path=step.path, mode=oct(step.mode), parents=step.parents)
    elif isinstance(step, RunShell):
        payload["command"] = step.command.to_shell()
        payload["mounts"] = [
            {"target": m.target, "id": m.cache_id, "sharing": m.sharing}
            for m in step.mounts
        ]
    elif isinstance(step, CopyFromContext):
        payload.update(context=step.context, source=step.source,
                       destination=step.destination)
    elif isinstance(step, SetEnv):
        payload.update(key=step.key, value=step.value)
    elif isinstance(step, SetUser):
        payload["name"] = step.name
    owner = getattr(step, "owner", None)
    if owner is not None:
        payload["owner"] = str(owner)
    if step.label:
        payload["label"] = step.label
    return payload


@dataclass(frozen=True)
class BuildPlan:
    """The ordered, immutable result of a compilation."""

    steps: Tuple[Step, ...]
    account: Owner
    user: Optional[str] = None

    def __iter__(self):
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def of_kind(self, kind: str) -> Tuple[Step, ...]:
        return tuple(step for step in self.steps if step.kind == kind)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": self.user,
            "uid": self.account.uid,
            "gid": self.account.gid,
            "steps": [step_to_dict(step) for step in self.steps],
        }


@dataclass(frozen=True)
class BaseImage:
    """The selected base image and the family it belongs to."""

    ref: str
    family: str
    custom: bool = False


@dataclass(frozen=True)
class BuildState:
    """Working value threaded from stage to stage.

    The account is owned by the user provisioning stage. Once the compiler
    seals it, ``provision`` refuses to change it again.
    """

    base: BaseImage
    account: Owner
    steps: Tuple[Step, ...] = ()
    user: Optional[str] = None
    account_sealed: bool = False

    @classmethod
    def from_base(cls, base: BaseImage, account: Owner) -> BuildState:
        return cls(base=base, account=account, steps=(SetBaseImage(base.ref),))

    def then(self, *steps: Step) -> BuildState:
        return replace(self, steps=self.steps + tuple(steps))

    def provision(self, account: Owner, user: Optional[str] = None) -> BuildState:
        if self.account_sealed:
            raise OwnershipError(
                "uid/gid were already resolved by user provisioning",
                context={"account": str(self.account), "requested": str(account)},
            )
        return replace(self, account=account, user=user if user is not None else self.user)

    def seal_account(self) -> BuildState:
        return replace(self, account_sealed=True)

    def to_plan(self) -> BuildPlan:
        return BuildPlan(steps=self.steps, account=self.account, user=self.user)
