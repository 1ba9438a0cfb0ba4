"""Wrapper for handing a rendered plan to BuildKit via the Docker CLI."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


class BuildKitBuilder:
    """Interfaces with 'docker buildx' to execute a generated Dockerfile."""

    def __init__(self, buildx_instance: Optional[str] = None):
        self.buildx_instance = buildx_instance

    def command(
        self,
        dockerfile_path: Path,
        context_path: Path,
        context_name: str,
        tags: Optional[List[str]] = None,
        platform: Optional[str] = None,
        push: bool = False,
        cache_to: Optional[str] = None,
        cache_from: Optional[str] = None,
    ) -> List[str]:
        cmd = ["docker", "buildx", "build"]

        if self.buildx_instance:
            cmd += ["--builder", self.buildx_instance]
        if platform:
            cmd += ["--platform", platform]

        cmd += ["-f", str(dockerfile_path)]
        # Copy steps read from a named context rather than the default one.
        cmd += ["--build-context", f"{context_name}={context_path}"]

        cmd += ["--push"] if push else ["--load"]
        for tag in tags or []:
            cmd += ["-t", tag]

        if cache_to:
            cmd += ["--cache-to", cache_to]
        if cache_from:
            cmd += ["--cache-from", cache_from]

        cmd.append(str(context_path))
        return cmd

    def build(
        self,
        dockerfile_content: str,
        context_path: Path,
        context_name: str,
        tags: Optional[List[str]] = None,
        platform: Optional[str] = None,
        push: bool = False,
        cache_to: Optional[str] = None,
        cache_from: Optional[str] = None,
    ) -> None:
        """
        Executes a BuildKit build.

        This method writes a temporary Dockerfile and calls 'docker buildx build'.
        Scheduling and caching of the steps are left to BuildKit.
        """

        with tempfile.NamedTemporaryFile(
            mode="w", delete=False, suffix=".Dockerfile"
        ) as tmp_df:
            tmp_df.write(dockerfile_content)
            tmp_df_path = Path(tmp_df.name)

        try:
            cmd = self.command(
                tmp_df_path,
                context_path,
                context_name,
                tags=tags,
                platform=platform,
                push=push,
                cache_to=cache_to,
                cache_from=cache_from,
            )
            logger.info("Executing: %s", " ".join(cmd))
            subprocess.run(cmd, check=True)

        finally:
            # Cleanup the temporary Dockerfile.
            if tmp_df_path.exists():
                tmp_df_path.unlink()
