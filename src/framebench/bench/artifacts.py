"""Build-on-demand for workload artifacts.

The runner only ever asks ``ensure_artifact(name)`` for a path to a runnable
workload module.  Whether that involves running a build command, and which
one, is configured per workload and stays in this module.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Protocol

from framebench.bench.config import WorkloadDef
from framebench.errors import BuildFailure
from framebench.workloads import bundled_path

log = logging.getLogger("framebench")


class ArtifactBuilder(Protocol):
    def ensure_artifact(self, name: str) -> Path: ...


class WorkloadBuilder:
    """Resolves (and, if configured, builds) workload modules by name.

    Resolution order:

    1. ``WorkloadDef.source`` if set
    2. ``<name>.py`` in each of *search_dirs*
    3. The bundled workload of that name
    """

    def __init__(
        self,
        workloads: list[WorkloadDef] | None = None,
        search_dirs: list[Path] | None = None,
    ) -> None:
        self.workloads = {w.name: w for w in workloads or []}
        self.search_dirs = list(search_dirs or [])

    def ensure_artifact(self, name: str) -> Path:
        """Return the path of a runnable artifact for *name*.

        Raises:
            BuildFailure: If the build command fails or no artifact exists.
        """
        workload = self.workloads.get(name)
        if workload is not None and workload.build_command:
            self._build(workload)

        artifact = self._resolve(name, workload)
        if artifact is None:
            searched = [str(d) for d in self.search_dirs] + ["bundled workloads"]
            raise BuildFailure(
                f"No workload artifact named '{name}' (searched: {', '.join(searched)})",
                benchmark=name,
            )
        log.debug("Artifact for %s: %s", name, artifact)
        return artifact

    def _resolve(self, name: str, workload: WorkloadDef | None) -> Path | None:
        if workload is not None and workload.source is not None:
            return workload.source if workload.source.is_file() else None
        for directory in self.search_dirs:
            candidate = directory / f"{name}.py"
            if candidate.is_file():
                return candidate
        return bundled_path(name)

    def _build(self, workload: WorkloadDef) -> None:
        log.info("Building %s: %s", workload.name, workload.build_command)
        start = time.monotonic()
        try:
            proc = subprocess.run(
                workload.build_command,
                shell=True,
                cwd=str(workload.cwd) if workload.cwd else None,
                env=dict(os.environ),
                capture_output=True,
                text=True,
            )
        except OSError as exc:
            raise BuildFailure(
                f"Could not start build command: {exc}", benchmark=workload.name
            ) from exc

        if proc.returncode != 0:
            raise BuildFailure(
                "Could not build workload",
                benchmark=workload.name,
                stdout=proc.stdout,
                stderr=proc.stderr,
                returncode=proc.returncode,
            )
        log.debug("Built %s in %.2fs", workload.name, time.monotonic() - start)
