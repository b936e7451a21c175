"""Tests for framebench.bench.display — terminal summaries."""

from __future__ import annotations

import unittest

from framebench.bench.display import format_run_summary, format_stored_metrics
from framebench.bench.results import BenchmarkSection, RunMetrics

from bench_test_helpers import make_run_metrics


class TestRunSummary(unittest.TestCase):
    def test_without_baseline(self) -> None:
        text = format_run_summary([BenchmarkSection("asteroids", make_run_metrics([800.0, 820.0]))])
        lines = text.split("\n")
        self.assertIn("Benchmark", lines[0])
        self.assertIn("Change", lines[0])
        self.assertEqual(len(lines), 2 + 3)
        self.assertIn("810.0 µs", text)
        self.assertTrue(all(line.rstrip().endswith("-") for line in lines[2:]))

    def test_with_baseline(self) -> None:
        section = BenchmarkSection(
            "breakout",
            make_run_metrics([10.0, 20.0, 30.0], cycles=[10, 10, 10]),
            make_run_metrics([10.0, 10.0, 10.0], cycles=[20, 20, 20]),
        )
        text = format_run_summary([section])
        self.assertIn("+100.0%", text)
        self.assertIn("-50.0%", text)
        self.assertIn("CPU Instructions", text)

    def test_zero_baseline(self) -> None:
        section = BenchmarkSection(
            "x",
            make_run_metrics([1.0], cycles=[5]),
            make_run_metrics([1.0], cycles=[0]),
        )
        self.assertIn("n/a", format_run_summary([section]))

    def test_multiple_benchmarks(self) -> None:
        sections = [
            BenchmarkSection("a", make_run_metrics([1.0])),
            BenchmarkSection("b", make_run_metrics([2.0])),
        ]
        self.assertEqual(len(format_run_summary(sections).split("\n")), 2 + 6)


class TestStoredMetrics(unittest.TestCase):
    def test_rows(self) -> None:
        metrics = make_run_metrics(
            [800.0, 900.0], cycles=[1_000_000, 3_000_000], instructions=[500, 700]
        )
        text = format_stored_metrics("asteroids", metrics)
        self.assertIn("asteroids (2 iterations)", text)
        self.assertIn("850.0 µs", text)
        self.assertIn("2.00 M", text)
        self.assertIn("600", text)
        for label in ("min", "mean", "max"):
            self.assertIn(label, text)

    def test_empty(self) -> None:
        text = format_stored_metrics("x", RunMetrics())
        self.assertIn("(empty record)", text)


if __name__ == "__main__":
    unittest.main()
