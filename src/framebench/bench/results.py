"""Benchmark result data structures and persistence.

Hierarchy::

    RunMetrics (one benchmark, one harness invocation)
      → iterations: list[IterationMetric]

    BenchmarkSection (what the report draws for one benchmark)
      → current: RunMetrics
      → baseline: RunMetrics | None

Files produced (one per benchmark)::

    <metrics_dir>/<benchmark>.json   — the last completed RunMetrics

The stored record is always exactly the previous run, never a history.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from framebench.errors import PersistenceFailure

log = logging.getLogger("framebench")

#: Largest count a 64-bit hardware counter can report.
U64_MAX = 2**64 - 1

#: Metric fields tracked per iteration, in report panel order.
METRIC_FIELDS = ("avg_frame_time_us", "cpu_cycles", "cpu_instructions")


# ---------------------------------------------------------------------------
# Iteration-level result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IterationMetric:
    """Counters and timing for one timed iteration."""

    cpu_cycles: int
    cpu_instructions: int
    avg_frame_time_us: float

    def __post_init__(self) -> None:
        for name in ("cpu_cycles", "cpu_instructions"):
            value = getattr(self, name)
            if not 0 <= value <= U64_MAX:
                raise ValueError(f"{name} must be in [0, 2**64 - 1], got {value}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "cpu_cycles": self.cpu_cycles,
            "cpu_instructions": self.cpu_instructions,
            "avg_frame_time_us": self.avg_frame_time_us,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IterationMetric:
        """Deserialize from a dict, checking field types strictly."""
        cycles = data["cpu_cycles"]
        instructions = data["cpu_instructions"]
        frame_time = data["avg_frame_time_us"]
        for key, value in (("cpu_cycles", cycles), ("cpu_instructions", instructions)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{key} must be an integer, got {type(value).__name__}")
        if isinstance(frame_time, bool) or not isinstance(frame_time, (int, float)):
            raise TypeError(
                f"avg_frame_time_us must be a number, got {type(frame_time).__name__}"
            )
        return cls(
            cpu_cycles=cycles,
            cpu_instructions=instructions,
            avg_frame_time_us=float(frame_time),
        )


# ---------------------------------------------------------------------------
# Run-level result
# ---------------------------------------------------------------------------


@dataclass
class RunMetrics:
    """All iterations of one benchmark in one invocation, in iteration order."""

    iterations: list[IterationMetric] = field(default_factory=list)

    def append(self, metric: IterationMetric) -> None:
        self.iterations.append(metric)

    def __len__(self) -> int:
        return len(self.iterations)

    def __iter__(self) -> Iterator[IterationMetric]:
        return iter(self.iterations)

    def values(self, metric: str) -> list[float]:
        """Sample vector for one of :data:`METRIC_FIELDS`."""
        if metric not in METRIC_FIELDS:
            raise KeyError(f"Unknown metric '{metric}'")
        return [float(getattr(it, metric)) for it in self.iterations]

    def to_dict(self) -> dict[str, Any]:
        return {"iterations": [it.to_dict() for it in self.iterations]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunMetrics:
        if not isinstance(data, dict):
            raise TypeError(f"Expected a mapping, got {type(data).__name__}")
        raw = data["iterations"]
        if not isinstance(raw, list):
            raise TypeError(f"'iterations' must be a list, got {type(raw).__name__}")
        return cls(iterations=[IterationMetric.from_dict(it) for it in raw])


@dataclass
class BenchmarkSection:
    """Current and (optional) previous metrics for one benchmark."""

    name: str
    current: RunMetrics
    baseline: RunMetrics | None = None

    @property
    def has_baseline(self) -> bool:
        return self.baseline is not None and len(self.baseline) > 0


# ---------------------------------------------------------------------------
# Metrics store
# ---------------------------------------------------------------------------


class MetricsStore:
    """One JSON record per benchmark name, holding the last completed run.

    Usage::

        store = MetricsStore(Path("results/metrics"))
        baseline = store.load("asteroids")   # None on the first run
        store.save("asteroids", current)
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        if not name or not name.strip():
            raise ValueError("Benchmark name must be non-empty")
        if "/" in name or "\\" in name or name in (".", ".."):
            raise ValueError(f"Invalid benchmark name for storage: '{name}'")
        return self.directory / f"{name}.json"

    def names(self) -> list[str]:
        """Names of all stored benchmarks, sorted."""
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))

    def load(self, name: str) -> RunMetrics | None:
        """Load the stored record for *name*, or None if there is none.

        Raises:
            PersistenceFailure: If the record cannot be read or does not
                have the expected shape.
        """
        path = self.path_for(name)
        if not path.exists():
            log.debug("No stored metrics for %s at %s", name, path)
            return None

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceFailure(
                f"Could not read {path}: {exc}", benchmark=name
            ) from exc

        try:
            metrics = RunMetrics.from_dict(json.loads(text))
        except (ValueError, KeyError, TypeError) as exc:
            raise PersistenceFailure(
                f"Malformed metrics record {path}: {exc}", benchmark=name
            ) from exc

        log.debug("Loaded %d stored iterations for %s", len(metrics), name)
        return metrics

    def save(self, name: str, metrics: RunMetrics) -> Path:
        """Write *metrics* as the record for *name*, replacing any previous one."""
        path = self.path_for(name)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(metrics.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise PersistenceFailure(
                f"Could not write {path}: {exc}", benchmark=name
            ) from exc
        log.info("Wrote %d iterations to %s", len(metrics), path)
        return path
