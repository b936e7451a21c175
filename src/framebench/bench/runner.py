"""Benchmark execution engine.

Orchestrates:
1. Configuration validation
2. Artifact resolution / build per workload
3. Timed, counted iterations (one fresh simulation per iteration)
4. Baseline load and result persistence per benchmark
5. Report rendering

Execution is strictly sequential: one benchmark at a time, one iteration
at a time, one counter session at a time.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from framebench.bench.artifacts import ArtifactBuilder, WorkloadBuilder
from framebench.bench.config import BenchConfig, WorkloadDef, validate_config
from framebench.bench.counters import CounterGroup, PerfStatCounters
from framebench.bench.results import (
    BenchmarkSection,
    IterationMetric,
    MetricsStore,
    RunMetrics,
)
from framebench.errors import BenchError, CounterFailure, ExecutionFailure
from framebench.fakerand import FakeRand
from framebench.workloads import Simulation, load_workload
from framebench.workloads.canvas import TerminalCanvas

log = logging.getLogger("framebench")


# ---------------------------------------------------------------------------
# Progress callback
# ---------------------------------------------------------------------------


@dataclass
class BenchProgress:
    """Progress info passed to the callback."""

    benchmark: str
    iteration: int  # 1-based
    total_iterations: int
    benchmarks_done: int
    benchmarks_total: int
    metric: IterationMetric | None = None


ProgressCallback = Callable[[BenchProgress], None]


# ---------------------------------------------------------------------------
# WorkloadRunner
# ---------------------------------------------------------------------------


class WorkloadRunner:
    """Runs one workload for a fixed number of counted, timed iterations.

    Usage::

        runner = WorkloadRunner(WorkloadBuilder(), PerfStatCounters())
        metrics = runner.run(WorkloadDef("asteroids", iterations=20, frames=500))
    """

    def __init__(
        self,
        builder: ArtifactBuilder,
        counters: CounterGroup,
        *,
        headless: bool = True,
        canvas: TerminalCanvas | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.builder = builder
        self.counters = counters
        self.headless = headless
        self.canvas = canvas if canvas is not None or headless else TerminalCanvas()
        self.progress = progress

    def run(self, workload: WorkloadDef, *, position: tuple[int, int] = (0, 1)) -> RunMetrics:
        """Build (if needed) and measure *workload*.

        Returns:
            RunMetrics with exactly ``workload.iterations`` entries.

        Raises:
            BuildFailure: If the artifact cannot be produced.
            ExecutionFailure: If the workload cannot be loaded or fails.
            CounterFailure: If the hardware counters fail.
        """
        name = workload.name
        if not name or not name.strip():
            raise ValueError("Workload name must be non-empty")
        if workload.iterations < 1:
            raise ValueError(f"iterations must be positive (got {workload.iterations})")
        if workload.frames < 1:
            raise ValueError(f"frames must be positive (got {workload.frames})")

        artifact = self.builder.ensure_artifact(name)
        simulation_cls = self._load(artifact, name)

        mode = "headless" if self.headless else "interactive"
        log.info(
            "Benchmarking %s: %d iterations x %d frames (%s)",
            name,
            workload.iterations,
            workload.frames,
            mode,
        )

        metrics = RunMetrics()
        try:
            for index in range(workload.iterations):
                metric = self._run_iteration(simulation_cls, workload)
                metrics.append(metric)
                if self.progress is not None:
                    self.progress(
                        BenchProgress(
                            benchmark=name,
                            iteration=index + 1,
                            total_iterations=workload.iterations,
                            benchmarks_done=position[0],
                            benchmarks_total=position[1],
                            metric=metric,
                        )
                    )
        except BenchError as exc:
            if exc.benchmark is None:
                exc.benchmark = name
            raise
        finally:
            self.counters.close()

        return metrics

    @staticmethod
    def _load(artifact: Path, name: str) -> type[Simulation]:
        try:
            return load_workload(artifact, name)
        except Exception as exc:  # noqa: BLE001
            raise ExecutionFailure(
                f"Could not load workload from {artifact}: {exc}", benchmark=name
            ) from exc

    def _run_iteration(
        self,
        simulation_cls: type[Simulation],
        workload: WorkloadDef,
    ) -> IterationMetric:
        """Execute a single timed iteration in a fresh simulation."""
        try:
            sim = simulation_cls(FakeRand(), workload.frames, headless=self.headless)
        except Exception as exc:  # noqa: BLE001
            raise ExecutionFailure(f"Workload setup failed: {exc}") from exc

        # Counter session setup and teardown stay outside the timed window.
        self.counters.enable()
        start = time.perf_counter()
        try:
            steps = self._drive(sim, workload.frames)
        except Exception as exc:  # noqa: BLE001
            raise ExecutionFailure(f"Workload failed at frame {sim.frame}: {exc}") from exc
        elapsed = time.perf_counter() - start
        self.counters.disable()

        if steps != workload.frames:
            raise ExecutionFailure(
                f"Workload ran {steps} frames instead of {workload.frames}"
            )

        reading = self.counters.read()
        self.counters.reset()

        return IterationMetric(
            cpu_cycles=reading.cycles,
            cpu_instructions=reading.instructions,
            avg_frame_time_us=elapsed * 1_000_000 / workload.frames,
        )

    def _drive(self, sim: Simulation, frames: int) -> int:
        """Advance *sim* to completion and return the number of steps taken."""
        if self.headless:
            for _ in range(frames):
                sim.update()
            return frames

        assert self.canvas is not None
        steps = 0
        while not sim.finished:
            sim.update()
            self.canvas.draw(sim)
            steps += 1
        return steps


# ---------------------------------------------------------------------------
# BenchRunner
# ---------------------------------------------------------------------------


class BenchRunner:
    """Executes a whole invocation according to a BenchConfig.

    Usage::

        config = BenchConfig(...)
        sections = BenchRunner(config).run()
    """

    def __init__(
        self,
        config: BenchConfig,
        *,
        counters: CounterGroup | None = None,
        builder: ArtifactBuilder | None = None,
        store: MetricsStore | None = None,
        canvas: TerminalCanvas | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        self.config = config
        self.counters = counters or PerfStatCounters(
            perf=config.perf,
            cycles_event=config.cycles_event,
            instructions_event=config.instructions_event,
        )
        self.builder = builder or WorkloadBuilder(config.workloads, config.workload_dirs)
        self.store = store or MetricsStore(config.metrics_dir)
        self.canvas = canvas
        self.progress: Any = progress_callback or self._default_progress

    def run(self, *, render: bool = True) -> list[BenchmarkSection]:
        """Measure every configured benchmark, persist, and render the report.

        Returns:
            One BenchmarkSection per benchmark, in configuration order.

        Raises:
            ValueError: If configuration is invalid.
            BenchError: On any fatal build/execution/counter/persistence/render
                failure.
        """
        errors = validate_config(self.config)
        fatal = [e for e in errors if e.severity == "error"]
        for w in (e for e in errors if e.severity == "warning"):
            log.warning("Config warning: %s: %s", w.field, w.message)
        if fatal:
            messages = [f"  {e.field}: {e.message}" for e in fatal]
            raise ValueError("Invalid benchmark configuration:\n" + "\n".join(messages))

        # Counters must work before anything is built or run.
        require_counters(self.counters)

        runner = WorkloadRunner(
            self.builder,
            self.counters,
            headless=self.config.headless,
            canvas=self.canvas,
            progress=self.progress,
        )

        sections: list[BenchmarkSection] = []
        total = len(self.config.workloads)
        for idx, workload in enumerate(self.config.workloads):
            current = runner.run(workload, position=(idx, total))
            baseline = self.store.load(workload.name)
            if baseline is None:
                log.info("No previous run of %s; this run becomes the baseline", workload.name)
            self.store.save(workload.name, current)
            sections.append(BenchmarkSection(workload.name, current, baseline))

        if render:
            from framebench.bench.report import render_report

            render_report(sections, self.config.output)

        return sections

    @staticmethod
    def _default_progress(progress: BenchProgress) -> None:
        """Default progress callback: log each iteration at DEBUG."""
        line = (
            f"  [{progress.benchmarks_done + 1}/{progress.benchmarks_total}] "
            f"{progress.benchmark:15s} {progress.iteration}/{progress.total_iterations}"
        )
        if progress.metric is not None:
            line += f" {progress.metric.avg_frame_time_us:10.1f}µs/frame"
        log.debug(line)


def require_counters(counters: CounterGroup) -> None:
    """Fail fast if *counters* cannot measure an empty window."""
    try:
        counters.enable()
        counters.disable()
        counters.read()
    except CounterFailure:
        counters.close()
        raise
    counters.reset()
