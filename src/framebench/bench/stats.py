"""Empirical distributions for benchmark comparison.

Turns a set of iteration samples into an empirical distribution (sorted
samples, min, max, mean, CDF) and compares two of them.  Pure Python, no
external dependencies.

The two-tailed p-value here is a visualization heuristic used to shape the
shaded curve in the report, not a hypothesis test::

    p(x) = 2 * min(F(x), 1 - F(x))     clamped to [0, 1]

where F is the empirical CDF.
"""

from __future__ import annotations

import bisect
import enum
import math
from dataclasses import dataclass
from typing import Sequence

from framebench.errors import UndefinedStatistic


class Tails(enum.Enum):
    ONE = 1
    TWO = 2


# ---------------------------------------------------------------------------
# Distribution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Distribution:
    """Read-only empirical distribution over a non-empty sample vector."""

    samples: tuple[float, ...]  # sorted ascending
    min: float
    max: float
    mean: float

    @classmethod
    def from_samples(cls, values: Sequence[float]) -> Distribution:
        """Build a distribution from a non-empty sequence of numbers.

        Raises:
            ValueError: If *values* is empty.
        """
        if not values:
            raise ValueError("Cannot build a distribution from zero samples")
        ordered = tuple(sorted(float(v) for v in values))
        mean = math.fsum(ordered) / len(ordered)
        return cls(samples=ordered, min=ordered[0], max=ordered[-1], mean=mean)

    def __len__(self) -> int:
        return len(self.samples)

    def cdf(self, x: float) -> float:
        """Fraction of samples at or below *x*."""
        return bisect.bisect_right(self.samples, x) / len(self.samples)

    def p_value(self, x: float, tails: Tails = Tails.TWO) -> float:
        """One-tailed: ``F(x)``.  Two-tailed: ``2 * min(F(x), 1 - F(x))``."""
        f = self.cdf(x)
        if tails is Tails.ONE:
            return f
        return min(max(2.0 * min(f, 1.0 - f), 0.0), 1.0)


# ---------------------------------------------------------------------------
# Comparison helpers
# ---------------------------------------------------------------------------


def combined_domain(a: Distribution, b: Distribution | None = None) -> tuple[float, float]:
    """Shared x-range for plotting *a* and *b* on the same axis."""
    if b is None:
        return a.min, a.max
    return min(a.min, b.min), max(a.max, b.max)


def percent_delta(current: Distribution, baseline: Distribution) -> float:
    """Change of the mean from *baseline* to *current*, in percent.

    Raises:
        UndefinedStatistic: If the baseline mean is zero.
    """
    if baseline.mean == 0:
        raise UndefinedStatistic("Percentage change against a zero baseline mean is undefined")
    return (current.mean - baseline.mean) / baseline.mean * 100.0
