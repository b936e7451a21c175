"""Base class for frame-loop workloads.

A workload is a small game-like simulation advanced one frame at a time.
All stochastic decisions go through the ``FakeRand`` instance handed to the
constructor, so two simulations built with fresh generators do identical
work.  Rendering never consumes random bytes and never changes the frame
count.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from framebench.fakerand import FakeRand


@dataclass
class Sprite:
    """Axis-aligned box used for collisions and terminal drawing."""

    x: float
    y: float
    width: float
    height: float
    glyph: str = "#"


def collide(a: Sprite, b: Sprite) -> str | None:
    """AABB collision of *a* against *b*.

    Returns the side of *b* that *a* hit (``"left"``, ``"right"``,
    ``"top"``, ``"bottom"``) or None when they do not overlap.
    """
    a_min_x, a_max_x = a.x - a.width / 2, a.x + a.width / 2
    a_min_y, a_max_y = a.y - a.height / 2, a.y + a.height / 2
    b_min_x, b_max_x = b.x - b.width / 2, b.x + b.width / 2
    b_min_y, b_max_y = b.y - b.height / 2, b.y + b.height / 2

    if not (a_min_x < b_max_x and a_max_x > b_min_x and a_min_y < b_max_y and a_max_y > b_min_y):
        return None

    # Pick the side with the smallest penetration depth.
    overlaps = {
        "left": a_max_x - b_min_x,
        "right": b_max_x - a_min_x,
        "bottom": a_max_y - b_min_y,
        "top": b_max_y - a_min_y,
    }
    return min(overlaps, key=lambda side: overlaps[side])


class Simulation:
    """A fixed-length frame loop.

    Subclasses implement :meth:`setup`, :meth:`step` and :meth:`sprites`.
    The runner either calls :meth:`update` exactly ``frames`` times
    (headless) or until :attr:`finished` becomes true (interactive); both
    amount to the same number of steps.
    """

    name = ""
    width = 800.0
    height = 800.0

    def __init__(self, rng: FakeRand, frames: int, *, headless: bool = True) -> None:
        if frames <= 0:
            raise ValueError(f"frames must be positive (got {frames})")
        self.rng = rng
        self.frames = frames
        self.headless = headless
        self.frame = 0
        self.setup()

    @property
    def finished(self) -> bool:
        return self.frame >= self.frames

    def update(self) -> None:
        """Advance one frame."""
        if self.finished:
            raise RuntimeError(f"{self.name} already ran its {self.frames} frames")
        self.step()
        self.frame += 1

    def setup(self) -> None:
        raise NotImplementedError

    def step(self) -> None:
        raise NotImplementedError

    def sprites(self) -> Iterable[Sprite]:
        raise NotImplementedError

    def status(self) -> str:
        """One-line status shown under the interactive view."""
        return f"{self.name} frame {self.frame}/{self.frames}"
