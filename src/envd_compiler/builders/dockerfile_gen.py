"""Dockerfile generation from a compiled BuildPlan."""

from __future__ import annotations

import base64
import json
import shlex
from typing import Any, Dict, List, Optional

from jinja2 import Template

from ..plan import BuildPlan, MakeDir, RunShell, SetUser, ShellCommand, Step, WriteFile

# One instruction per plan step. RUN steps are never merged so each one
# keeps its own BuildKit cache entry. Commands use the JSON exec form so
# multi-line scripts stay inside a single instruction.
DOCKERFILE_TEMPLATE = """# syntax=docker/dockerfile:1.4
{% for step in steps %}
{% if step.label %}
# {{ step.label }}
{% endif %}
{% if step.kind == "base" %}
FROM {{ step.ref }}
{% elif step.kind == "env" %}
ENV {{ step.key }}="{{ step.value }}"
{% elif step.kind == "user" %}
USER {{ step.name }}
{% elif step.kind == "run" %}
RUN {% for mount in step.mounts %}--mount=type=cache,id={{ mount.cache_id }},target={{ mount.target }},sharing={{ mount.sharing }} {% endfor %}{{ step.exec_form }}
{% elif step.kind == "copy" %}
COPY --from={{ step.context }} --chown={{ step.owner }} {{ step.source }} {{ step.destination }}
{% elif step.kind in ("mkdir", "write_file") %}
{% if step.as_root %}
USER root
{% endif %}
RUN {{ step.shell }}
{% if step.as_root %}
USER {{ step.user }}
{% endif %}
{% endif %}
{% endfor %}
"""


def exec_form(command: ShellCommand) -> str:
    """Renders a command as a Dockerfile JSON array."""
    if command.env or command.workdir:
        argv = ["/bin/sh", "-c", command.to_shell()]
    else:
        argv = list(command.argv)
    return json.dumps(argv)


def _permissions(path: str, mode: int, owner) -> str:
    command = f" && chmod {mode:o} {path}"
    if owner is not None:
        command += f" && chown {owner} {path}"
    return command


def _mkdir_shell(step: MakeDir) -> str:
    path = shlex.quote(step.path)
    return f"mkdir {'-p ' if step.parents else ''}{path}" + _permissions(path, step.mode, step.owner)


def _write_shell(step: WriteFile) -> str:
    # base64 keeps the payload byte-exact: no added newline, no quoting.
    path = shlex.quote(step.path)
    payload = base64.b64encode(step.data).decode("ascii")
    return f"echo {payload} | base64 -d > {path}" + _permissions(path, step.mode, step.owner)


def _context(step: Step, user: Optional[str]) -> Dict[str, Any]:
    ctx: Dict[str, Any] = {
        name: getattr(step, name)
        for name in step.__dataclass_fields__
    }
    if isinstance(step, RunShell):
        ctx["exec_form"] = exec_form(step.command)
    elif isinstance(step, (MakeDir, WriteFile)):
        ctx["shell"] = _mkdir_shell(step) if isinstance(step, MakeDir) else _write_shell(step)
        ctx["user"] = user
        ctx["as_root"] = user not in (None, "root")
    return ctx


class DockerfileGenerator:
    """Serializes a BuildPlan into a BuildKit Dockerfile."""

    def __init__(self, template: Optional[str] = None):
        self.template = Template(
            template or DOCKERFILE_TEMPLATE, trim_blocks=True, lstrip_blocks=True
        )

    def contexts(self, plan: BuildPlan) -> List[Dict[str, Any]]:
        """Flattens plan steps into template contexts, tracking the active user."""
        user: Optional[str] = None
        rendered = []
        for step in plan:
            rendered.append(_context(step, user))
            if isinstance(step, SetUser):
                user = step.name
        return rendered

    def generate(self, plan: BuildPlan) -> str:
        return self.template.render(steps=self.contexts(plan))
