"""SVG comparison report: current run vs. previous run, per benchmark.

Layout::

    ┌──────────────── asteroids (20 iterations, previous: 20) ──────────────┐
    │  Frame Time          │  CPU Cycles           │  CPU Instructions      │
    ├──────────────── breakout ...                                          ┤
    ...

Each panel shades the two-tailed p-value curve of the previous distribution
(if any) and then the current one over a shared x-domain, marks both means,
and annotates the change between them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.ticker import FuncFormatter  # noqa: E402

from framebench.bench.results import BenchmarkSection, RunMetrics  # noqa: E402
from framebench.bench.stats import (  # noqa: E402
    Distribution,
    Tails,
    combined_domain,
    percent_delta,
)
from framebench.errors import RenderFailure, UndefinedStatistic  # noqa: E402
from framebench.formatting import format_frame_time, format_pct, format_si  # noqa: E402

log = logging.getLogger("framebench")

# Panel size in inches; the figure is PANEL_WIDTH * 3 by PANEL_HEIGHT * n.
PANEL_WIDTH = 4.0
PANEL_HEIGHT = 3.0
DPI = 100
CURVE_POINTS = 256

CURRENT_COLOR = "#2E86AB"  # Blue
PREVIOUS_COLOR = "#F18F01"  # Orange
REGRESSION_COLOR = "#C73E1D"  # Red
IMPROVEMENT_COLOR = "#6A994E"  # Green
NEUTRAL_COLOR = "#555555"

#: Absolute percentage change below which a delta is shown as neutral.
NEUTRAL_THRESHOLD_PCT = 2.0


@dataclass(frozen=True)
class MetricPanel:
    field: str
    title: str
    fmt: Callable[[float], str]


PANELS = (
    MetricPanel("avg_frame_time_us", "Frame Time", format_frame_time),
    MetricPanel("cpu_cycles", "CPU Cycles", format_si),
    MetricPanel("cpu_instructions", "CPU Instructions", format_si),
)


def report_size(n_benchmarks: int) -> tuple[float, float]:
    """Figure size in inches for *n_benchmarks* stacked regions."""
    return PANEL_WIDTH * len(PANELS), PANEL_HEIGHT * n_benchmarks


def delta_color(delta: float | None) -> str:
    """Neutral for small or undefined changes, red for increases, green for decreases."""
    if delta is None or abs(delta) < NEUTRAL_THRESHOLD_PCT:
        return NEUTRAL_COLOR
    return REGRESSION_COLOR if delta > 0 else IMPROVEMENT_COLOR


def render_report(sections: list[BenchmarkSection], output: Path) -> Path:
    """Draw every benchmark section into a single SVG file at *output*.

    Raises:
        RenderFailure: If there is nothing to draw or the figure cannot be
            laid out or written.
    """
    if not sections:
        raise RenderFailure("No benchmarks to report")

    output = Path(output)
    width, height = report_size(len(sections))

    with plt.rc_context({"svg.fonttype": "none", "font.size": 9}):
        fig = plt.figure(figsize=(width, height), dpi=DPI)
        try:
            subfigs = fig.subfigures(len(sections), 1, squeeze=False)[:, 0]
            for subfig, section in zip(subfigs, sections):
                _render_section(subfig, section)
            output.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(output, format="svg", facecolor="white")
        except RenderFailure:
            raise
        except (OSError, ValueError, RuntimeError) as exc:
            raise RenderFailure(f"Could not render report to {output}: {exc}") from exc
        finally:
            plt.close(fig)

    log.info("Wrote report %s", output)
    return output


def _render_section(subfig: matplotlib.figure.SubFigure, section: BenchmarkSection) -> None:
    title = f"{section.name} ({len(section.current)} iterations"
    if section.has_baseline:
        assert section.baseline is not None
        title += f", previous: {len(section.baseline)}"
    title += ")"
    subfig.suptitle(title, fontweight="bold")

    axes = subfig.subplots(1, len(PANELS))
    for ax, panel in zip(axes, PANELS):
        try:
            _render_panel(
                ax,
                panel,
                section.current,
                section.baseline if section.has_baseline else None,
            )
        except ValueError as exc:
            raise RenderFailure(
                f"Could not draw {panel.title}: {exc}", benchmark=section.name
            ) from exc


def _render_panel(
    ax: plt.Axes,
    panel: MetricPanel,
    current: RunMetrics,
    baseline: RunMetrics | None,
) -> None:
    cur = Distribution.from_samples(current.values(panel.field))
    prev = Distribution.from_samples(baseline.values(panel.field)) if baseline else None

    lo, hi = combined_domain(cur, prev)
    if lo == hi:
        # All samples equal; give the curve some room.
        pad = abs(lo) * 0.05 or 1.0
        lo, hi = lo - pad, hi + pad
    xs = np.linspace(lo, hi, CURVE_POINTS)

    ax.set_title(panel.title)
    ax.set_xlim(lo, hi)
    ax.set_ylim(0.0, 1.0)
    ax.set_ylabel("p-value")
    ax.xaxis.set_major_formatter(FuncFormatter(lambda x, _pos: panel.fmt(x)))
    ax.tick_params(axis="x", labelrotation=20)
    ax.grid(True, alpha=0.3)

    if prev is not None:
        _draw_distribution(ax, xs, prev, panel, PREVIOUS_COLOR, "previous", label_y=0.88)
    _draw_distribution(ax, xs, cur, panel, CURRENT_COLOR, "current", label_y=0.96)

    if prev is not None:
        try:
            delta: float | None = percent_delta(cur, prev)
            text = format_pct(delta)
        except UndefinedStatistic:
            delta = None
            text = "n/a"
        ax.text(
            0.98,
            0.70,
            text,
            transform=ax.transAxes,
            ha="right",
            va="top",
            fontsize=12,
            fontweight="bold",
            color=delta_color(delta),
        )


def _draw_distribution(
    ax: plt.Axes,
    xs: np.ndarray,
    dist: Distribution,
    panel: MetricPanel,
    color: str,
    label: str,
    *,
    label_y: float,
) -> None:
    ys = [dist.p_value(float(x), Tails.TWO) for x in xs]
    ax.fill_between(xs, ys, color=color, alpha=0.35, step="post", label=label)
    ax.axvline(dist.mean, color=color, linestyle="--", linewidth=1.2)
    ax.text(
        0.98,
        label_y,
        f"{label}: {panel.fmt(dist.mean)}",
        transform=ax.transAxes,
        ha="right",
        va="top",
        color=color,
    )
