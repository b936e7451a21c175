"""Terminal display formatting for benchmark results.

Produces aligned tables summarizing each benchmark's current means against
the previous run.  Same statistics as the SVG report, in text.
"""

from __future__ import annotations

from framebench.bench.report import PANELS
from framebench.bench.results import BenchmarkSection, RunMetrics
from framebench.bench.stats import Distribution, percent_delta
from framebench.errors import UndefinedStatistic
from framebench.formatting import format_pct, format_section_header, format_table


def format_run_summary(sections: list[BenchmarkSection]) -> str:
    """One row per benchmark and metric: current mean, previous mean, change."""
    rows: list[list[str]] = []
    for section in sections:
        for panel in PANELS:
            cur = Distribution.from_samples(section.current.values(panel.field))
            prev_text, delta_text = "-", "-"
            if section.has_baseline:
                assert section.baseline is not None
                prev = Distribution.from_samples(section.baseline.values(panel.field))
                prev_text = panel.fmt(prev.mean)
                try:
                    delta_text = format_pct(percent_delta(cur, prev))
                except UndefinedStatistic:
                    delta_text = "n/a"
            rows.append([section.name, panel.title, panel.fmt(cur.mean), prev_text, delta_text])

    return format_table(
        ["Benchmark", "Metric", "Current", "Previous", "Change"],
        rows,
        alignments=["l", "l", "r", "r", "r"],
    )


def format_stored_metrics(name: str, metrics: RunMetrics) -> str:
    """Show a persisted record: per-iteration values plus min/mean/max."""
    lines = [format_section_header(f"{name} ({len(metrics)} iterations)")]
    if not len(metrics):
        lines.append("  (empty record)")
        return "\n".join(lines)

    rows: list[list[str]] = []
    for index, it in enumerate(metrics, start=1):
        rows.append(
            [
                str(index),
                PANELS[0].fmt(it.avg_frame_time_us),
                PANELS[1].fmt(it.cpu_cycles),
                PANELS[2].fmt(it.cpu_instructions),
            ]
        )
    for label in ("min", "mean", "max"):
        row = [label]
        for panel in PANELS:
            dist = Distribution.from_samples(metrics.values(panel.field))
            row.append(panel.fmt(getattr(dist, label)))
        rows.append(row)

    lines.append(
        format_table(
            ["#"] + [p.title for p in PANELS],
            rows,
            alignments=["r", "r", "r", "r"],
        )
    )
    return "\n".join(lines)
