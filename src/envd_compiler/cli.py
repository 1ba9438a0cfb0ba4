"""Developer CLI for compiling environment specs."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError

from .builders.buildkit import BuildKitBuilder
from .builders.dockerfile_gen import DockerfileGenerator
from .config import CompilerConfig, SpecModel
from .errors import CompileError
from .manifest import PlanManifest
from .planner import PlanCompiler


def _compile(spec_path: Path, config_path: Optional[Path]):
    try:
        spec = SpecModel.from_yaml(spec_path)
        config = CompilerConfig.from_yaml(config_path) if config_path else CompilerConfig()
    except ValidationError as e:
        raise click.ClickException(f"Invalid spec: {e}")
    try:
        return PlanCompiler(config).compile(spec), config
    except CompileError as e:
        raise click.ClickException(str(e))


@click.group()
@click.option("--verbose", is_flag=True, help="Show debug output.")
def cli(verbose: bool):
    """envd-compile: turns environment specs into BuildKit build plans."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option(
    "--spec",
    "spec_path",
    type=click.Path(exists=True, path_type=Path),
    default=Path("env.yaml"),
    help="Path to the environment spec YAML.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to a compiler config YAML.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["dockerfile", "json"]),
    default="dockerfile",
    help="Output format of the plan.",
)
@click.option("--output", type=click.Path(path_type=Path), help="Write to a file instead of stdout.")
def plan(spec_path: Path, config_path: Optional[Path], output_format: str, output: Optional[Path]):
    """Compiles the spec and prints the build plan."""
    build_plan, _ = _compile(spec_path, config_path)
    if output_format == "json":
        content = json.dumps(build_plan.to_dict(), indent=2)
    else:
        content = DockerfileGenerator().generate(build_plan)

    if output:
        output.write_text(content)
        click.echo(f"Plan written to: {output}")
    else:
        click.echo(content)


@cli.command()
@click.option(
    "--spec",
    "spec_path",
    type=click.Path(exists=True, path_type=Path),
    default=Path("env.yaml"),
    help="Path to the environment spec YAML.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to a compiler config YAML.",
)
@click.option(
    "--context",
    "context_path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Local build context for copy steps.",
)
@click.option("-t", "--tag", "tags", multiple=True, help="Image tag, may be repeated.")
@click.option("--push", is_flag=True, help="Push the image to its registry.")
@click.option(
    "--dist",
    type=click.Path(path_type=Path),
    default=Path("dist"),
    help="Directory for the plan manifest.",
)
def build(
    spec_path: Path,
    config_path: Optional[Path],
    context_path: Path,
    tags: Tuple[str, ...],
    push: bool,
    dist: Path,
):
    """Compiles the spec and builds the image with BuildKit."""
    build_plan, config = _compile(spec_path, config_path)
    click.echo(f"Compiled {len(build_plan)} steps.")

    manifest_path = PlanManifest(dist).save(build_plan, {"spec": str(spec_path)})
    click.echo(f"Manifest saved to: {manifest_path}")

    BuildKitBuilder().build(
        dockerfile_content=DockerfileGenerator().generate(build_plan),
        context_path=context_path,
        context_name=config.build_context,
        tags=list(tags),
        push=push,
    )
    click.echo("Build complete!")


if __name__ == "__main__":
    cli()
