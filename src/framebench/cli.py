"""Command-line interface for framebench.

Subcommands:
    framebench run         Measure the benchmarks and render the report
    framebench show        Display stored (previous-run) metrics
    framebench workloads   List the bundled workloads
"""

from __future__ import annotations

from pathlib import Path

import click

from framebench import __version__
from framebench.errors import BenchError
from framebench.logging import setup_logging


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """framebench — reproducible frame-loop benchmarks with regression reports."""


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command()
@click.option(
    "-H",
    "--no-headless",
    is_flag=True,
    default=False,
    help="Draw every frame to the terminal instead of running headless.",
)
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML profile defining workloads and paths.",
)
@click.option(
    "--benchmark",
    "benchmarks",
    type=str,
    multiple=True,
    help="Benchmark to run (repeatable; default: all configured).",
)
@click.option("--iterations", type=int, default=None, help="Iterations per benchmark.")
@click.option("--frames", type=int, default=None, help="Frames per iteration.")
@click.option(
    "--metrics-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Where previous runs are stored (default: results/metrics).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Report SVG path (default: results/report.svg).",
)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Also log at DEBUG level to this file.",
)
def run(  # noqa: PLR0913
    no_headless: bool,
    profile_path: Path | None,
    benchmarks: tuple[str, ...],
    iterations: int | None,
    frames: int | None,
    metrics_dir: Path | None,
    output: Path | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Run the benchmarks, compare with the previous run, and draw the report.

    \b
    Examples:
        # All bundled workloads, headless
        framebench run

        # One benchmark, watching it in the terminal
        framebench run --benchmark breakout --no-headless --iterations 2

        # From a YAML profile
        framebench run --profile bench.yaml -o report.svg
    """
    from framebench.bench.config import (
        BenchConfig,
        apply_overrides,
        config_from_profile,
        load_profile,
    )
    from framebench.bench.display import format_run_summary
    from framebench.bench.runner import BenchRunner

    log = setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    cli_overrides: dict[str, object] = {
        "headless": not no_headless,
        "benchmarks": list(benchmarks) or None,
        "iterations": iterations,
        "frames": frames,
        "metrics_dir": metrics_dir,
        "output": output,
    }

    try:
        if profile_path:
            config = config_from_profile(load_profile(profile_path), cli_overrides=cli_overrides)
        else:
            config = BenchConfig(headless=not no_headless)
            if metrics_dir:
                config.metrics_dir = metrics_dir
            if output:
                config.output = output
            apply_overrides(config, cli_overrides)
    except (OSError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    log.info("Starting benchmarks: %s", ", ".join(config.benchmark_names))
    try:
        sections = BenchRunner(config).run()
    except (BenchError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    click.echo()
    click.echo(format_run_summary(sections))
    click.echo()
    click.echo(f"Report saved to: {config.output}")


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


@main.command("show")
@click.argument("names", nargs=-1)
@click.option(
    "--metrics-dir",
    type=click.Path(path_type=Path),
    default=Path("results") / "metrics",
    show_default=True,
)
def show(names: tuple[str, ...], metrics_dir: Path) -> None:
    """Display the stored previous-run metrics.

    NAMES selects benchmarks; by default every stored benchmark is shown.
    """
    from framebench.bench.display import format_stored_metrics
    from framebench.bench.results import MetricsStore

    store = MetricsStore(metrics_dir)
    selected = list(names) or store.names()
    if not selected:
        click.echo(f"No stored metrics in {metrics_dir}")
        return

    for name in selected:
        try:
            metrics = store.load(name)
        except (BenchError, ValueError) as exc:
            click.echo(f"Error: {exc}", err=True)
            raise SystemExit(1) from exc
        if metrics is None:
            click.echo(f"Error: No stored metrics for '{name}'", err=True)
            raise SystemExit(1)
        click.echo(format_stored_metrics(name, metrics))
        click.echo()


# ---------------------------------------------------------------------------
# workloads
# ---------------------------------------------------------------------------


@main.command("workloads")
def workloads_cmd() -> None:
    """List the bundled workloads and their default sizes."""
    from framebench.bench.config import default_workloads

    for w in default_workloads():
        click.echo(f"{w.name:12s} {w.iterations:4d} iterations x {w.frames:5d} frames")
