"""Benchmark configuration and profile loading.

Handles:
- Loading benchmark profiles from YAML files.
- Merging CLI options with profile defaults.
- Validating the final configuration before execution.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from framebench.workloads import BUNDLED_WORKLOADS

log = logging.getLogger("framebench")


# ---------------------------------------------------------------------------
# WorkloadDef / BenchConfig
# ---------------------------------------------------------------------------


@dataclass
class WorkloadDef:
    """One benchmark: which workload to run and how long."""

    name: str
    iterations: int = 20  # timed repetitions
    frames: int = 300  # frames per repetition, identical in every mode
    build_command: str | None = None
    source: Path | None = None  # explicit workload module file
    cwd: Path | None = None  # working directory for build_command

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dict (sparse: omits unset optional fields)."""
        d: dict[str, Any] = {
            "name": self.name,
            "iterations": self.iterations,
            "frames": self.frames,
        }
        if self.build_command:
            d["build_command"] = self.build_command
        if self.source:
            d["source"] = str(self.source)
        if self.cwd:
            d["cwd"] = str(self.cwd)
        return d


#: Defaults for the bundled workloads.
DEFAULT_WORKLOADS: dict[str, dict[str, int]] = {
    "asteroids": {"iterations": 20, "frames": 500},
    "breakout": {"iterations": 50, "frames": 300},
}


def default_workloads() -> list[WorkloadDef]:
    return [WorkloadDef(name=name, **DEFAULT_WORKLOADS[name]) for name in BUNDLED_WORKLOADS]


@dataclass
class BenchConfig:
    """Resolved configuration for one harness invocation."""

    workloads: list[WorkloadDef] = field(default_factory=default_workloads)
    headless: bool = True

    # Paths
    metrics_dir: Path = field(default_factory=lambda: Path("results") / "metrics")
    output: Path = field(default_factory=lambda: Path("results") / "report.svg")
    workload_dirs: list[Path] = field(default_factory=list)

    # Hardware counters
    perf: str = "perf"
    cycles_event: str = "cycles"
    instructions_event: str = "instructions"

    @property
    def benchmark_names(self) -> list[str]:
        return [w.name for w in self.workloads]

    def select(self, names: list[str]) -> None:
        """Keep only the named workloads, in the given order.

        Unknown names get a default WorkloadDef so a workload found in
        ``workload_dirs`` can be run without a profile entry.
        """
        known = {w.name: w for w in self.workloads}
        self.workloads = [known.get(name) or WorkloadDef(name=name) for name in names]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: BenchConfig) -> list[ValidationError]:
    """Validate a benchmark configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if not config.workloads:
        errors.append(
            ValidationError(
                field="workloads",
                message="No benchmarks selected. Use --benchmark or a profile to add one.",
            )
        )

    seen: set[str] = set()
    for w in config.workloads:
        if not w.name or not w.name.strip():
            errors.append(
                ValidationError(field="workloads", message="Workload names must be non-empty.")
            )
            continue
        if "/" in w.name or "\\" in w.name:
            errors.append(
                ValidationError(
                    field=f"workloads.{w.name}",
                    message=f"Workload name '{w.name}' must not contain path separators.",
                )
            )
        if w.name in seen:
            errors.append(
                ValidationError(
                    field=f"workloads.{w.name}",
                    message=f"Workload '{w.name}' is listed more than once.",
                )
            )
        seen.add(w.name)

        if w.iterations < 1:
            errors.append(
                ValidationError(
                    field=f"workloads.{w.name}.iterations",
                    message=f"Need at least 1 iteration (got {w.iterations}).",
                )
            )
        elif w.iterations < 3:
            errors.append(
                ValidationError(
                    field=f"workloads.{w.name}.iterations",
                    message=(
                        f"Only {w.iterations} iteration(s); the report's distributions "
                        f"will be coarse."
                    ),
                    severity="warning",
                )
            )
        if w.frames < 1:
            errors.append(
                ValidationError(
                    field=f"workloads.{w.name}.frames",
                    message=f"Frames must be positive (got {w.frames}).",
                )
            )
        if w.source is not None and not w.build_command and not w.source.exists():
            errors.append(
                ValidationError(
                    field=f"workloads.{w.name}.source",
                    message=f"Workload source does not exist: {w.source}",
                )
            )

    if config.output.suffix.lower() != ".svg":
        errors.append(
            ValidationError(
                field="output",
                message=f"Report output must be an .svg file (got {config.output}).",
            )
        )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a benchmark profile from a YAML file.

    Profile format::

        metrics_dir: results/metrics
        output: results/report.svg
        perf: perf
        cycles_event: cycles
        instructions_event: instructions
        workload_dirs: [./workloads]

        workloads:
          asteroids:
            iterations: 20
            frames: 500
          mygame:
            source: ./mygame.py
            build_command: "make assets"

    Returns:
        The parsed YAML as a dict.
    """
    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text())

    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> BenchConfig:
    """Build a BenchConfig from a parsed YAML profile.

    CLI overrides take precedence over profile values.  Keys match
    BenchConfig field names, plus ``iterations`` and ``frames`` which
    apply to every workload and ``benchmarks`` which selects workloads.
    """
    cli = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    config = BenchConfig()

    workloads_data = profile_data.get("workloads")
    if workloads_data is not None:
        if not isinstance(workloads_data, dict):
            raise ValueError("Profile 'workloads' must be a mapping of name -> definition")
        config.workloads = [
            _workload_from_profile(name, data) for name, data in workloads_data.items()
        ]

    for key in ("metrics_dir", "output"):
        value = cli.get(key) or profile_data.get(key)
        if value:
            setattr(config, key, Path(value))
    for key in ("perf", "cycles_event", "instructions_event"):
        value = cli.get(key) or profile_data.get(key)
        if value:
            setattr(config, key, str(value))
    config.workload_dirs = [Path(p) for p in profile_data.get("workload_dirs", [])]
    if "headless" in cli:
        config.headless = bool(cli["headless"])

    return apply_overrides(config, cli)


def apply_overrides(config: BenchConfig, cli: dict[str, Any]) -> BenchConfig:
    """Apply the per-workload CLI overrides (selection, iterations, frames)."""
    if cli.get("benchmarks"):
        config.select(list(cli["benchmarks"]))
    if cli.get("iterations") is not None:
        for w in config.workloads:
            w.iterations = cli["iterations"]
    if cli.get("frames") is not None:
        for w in config.workloads:
            w.frames = cli["frames"]
    return config


def _workload_from_profile(name: str, data: dict[str, Any] | None) -> WorkloadDef:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Workload '{name}' must be a mapping, got {type(data).__name__}")

    defaults = DEFAULT_WORKLOADS.get(name, {})
    return WorkloadDef(
        name=name,
        iterations=int(data.get("iterations", defaults.get("iterations", 20))),
        frames=int(data.get("frames", defaults.get("frames", 300))),
        build_command=data.get("build_command"),
        source=Path(data["source"]) if data.get("source") else None,
        cwd=Path(data["cwd"]) if data.get("cwd") else None,
    )
