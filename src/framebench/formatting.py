"""Shared text formatting helpers for framebench.

Provides functions for formatting frame times, SI-scaled counter values,
percentage deltas, and aligned tables used by the CLI, the terminal summary
and the SVG report.
"""

from __future__ import annotations

import math

_SI_PREFIXES = ((1e12, "T"), (1e9, "G"), (1e6, "M"), (1e3, "k"))


def format_frame_time(microseconds: float, precision: int = 1) -> str:
    """Format a per-frame time given in microseconds.

    Examples: ``'842.3 µs'``, ``'12.41 ms'``.
    """
    if math.isnan(microseconds):
        return "N/A"
    if abs(microseconds) >= 10_000:
        return f"{microseconds / 1000:.2f} ms"
    return f"{microseconds:.{precision}f} µs"


def format_si(value: float, precision: int = 2) -> str:
    """Format a magnitude with an SI prefix: ``'1.23 G'``, ``'45.60 M'``, ``'512'``."""
    if math.isnan(value):
        return "N/A"
    for factor, prefix in _SI_PREFIXES:
        if abs(value) >= factor:
            return f"{value / factor:.{precision}f} {prefix}"
    if float(value).is_integer():
        return f"{int(value)}"
    return f"{value:.{precision}f}"


def format_pct(value: float, precision: int = 1) -> str:
    """Format a percentage with sign: ``'+4.2%'``, ``'-0.3%'``."""
    if math.isnan(value):
        return "N/A"
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{precision}f}%"


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    alignments: list[str] | None = None,
    indent: int = 2,
) -> str:
    """Format a list of rows as an aligned text table.

    Auto-calculates column widths from content. Right-aligns columns
    marked ``'r'`` in *alignments*.

    Args:
        headers: Column header strings.
        rows: List of rows, each a list of cell strings.
        alignments: Per-column alignment: ``'l'``, ``'r'``, or ``'c'``.
        indent: Number of leading spaces per line.

    Returns:
        The formatted table as a string.
    """
    if not headers:
        return ""

    ncols = len(headers)
    if alignments is None:
        alignments = ["l"] * ncols
    while len(alignments) < ncols:
        alignments.append("l")

    proc_rows: list[list[str]] = []
    for row in rows:
        padded = list(row) + [""] * (ncols - len(row))
        proc_rows.append(padded[:ncols])

    widths = [len(h) for h in headers]
    for row in proc_rows:
        for ci, cell in enumerate(row):
            widths[ci] = max(widths[ci], len(cell))

    prefix = " " * indent

    def _format_cell(text: str, width: int, align: str) -> str:
        if align == "r":
            return text.rjust(width)
        if align == "c":
            return text.center(width)
        return text.ljust(width)

    lines: list[str] = []
    header_line = "  ".join(
        _format_cell(headers[i], widths[i], alignments[i]) for i in range(ncols)
    )
    lines.append(prefix + header_line)
    lines.append(prefix + "  ".join("─" * w for w in widths))

    for row in proc_rows:
        row_line = "  ".join(_format_cell(row[i], widths[i], alignments[i]) for i in range(ncols))
        lines.append(prefix + row_line)

    return "\n".join(lines)


def format_section_header(title: str, width: int = 80) -> str:
    """Format a section header: ``'─── Title ──...'``."""
    prefix = "─── "
    suffix_len = width - len(prefix) - len(title) - 1
    suffix = " " + "─" * max(0, suffix_len)
    return prefix + title + suffix
