"""Terminal rendering for interactive (non-headless) runs.

Draws every sprite of a simulation onto a character grid and writes the
frame to a stream with ``click.echo``.  Drawing reads simulation state only;
it never touches the simulation's random source.
"""

from __future__ import annotations

from typing import IO

import click

from framebench.workloads.base import Simulation

_HOME_AND_CLEAR = "\x1b[H\x1b[2J"


class TerminalCanvas:
    """Character-cell view of a simulation arena."""

    def __init__(self, columns: int = 80, rows: int = 24, stream: IO[str] | None = None) -> None:
        self.columns = columns
        self.rows = rows
        self.stream = stream
        self.frames_drawn = 0

    def render(self, sim: Simulation) -> str:
        """Return the frame for *sim* as text (rows joined by newlines)."""
        grid = [[" "] * self.columns for _ in range(self.rows)]
        sx = self.columns / sim.width
        sy = self.rows / sim.height

        for sprite in sim.sprites():
            left = int((sprite.x - sprite.width / 2 + sim.width / 2) * sx)
            right = int((sprite.x + sprite.width / 2 + sim.width / 2) * sx)
            # Screen rows grow downwards, world y grows upwards.
            top = int((sim.height / 2 - sprite.y - sprite.height / 2) * sy)
            bottom = int((sim.height / 2 - sprite.y + sprite.height / 2) * sy)
            for row in range(max(top, 0), min(bottom, self.rows - 1) + 1):
                for col in range(max(left, 0), min(right, self.columns - 1) + 1):
                    grid[row][col] = sprite.glyph

        lines = ["".join(row) for row in grid]
        lines.append(sim.status())
        return "\n".join(lines)

    def draw(self, sim: Simulation) -> None:
        frame = self.render(sim)
        stream = self.stream if self.stream is not None else click.get_text_stream("stderr")
        if stream.isatty():
            frame = _HOME_AND_CLEAR + frame
        click.echo(frame, file=stream)
        self.frames_drawn += 1
