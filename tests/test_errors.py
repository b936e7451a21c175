"""Tests for framebench.errors — diagnostics carry benchmark and phase."""

from __future__ import annotations

import unittest

from framebench.errors import (
    BenchError,
    BuildFailure,
    CounterFailure,
    ExecutionFailure,
    PersistenceFailure,
    RenderFailure,
    UndefinedStatistic,
)


class TestBenchError(unittest.TestCase):
    def test_with_benchmark(self) -> None:
        exc = ExecutionFailure("Workload failed at frame 3", benchmark="asteroids")
        self.assertEqual(str(exc), "[asteroids] execute: Workload failed at frame 3")

    def test_without_benchmark(self) -> None:
        self.assertEqual(str(CounterFailure("perf missing")), "counters: perf missing")

    def test_benchmark_can_be_set_later(self) -> None:
        exc = PersistenceFailure("bad record")
        exc.benchmark = "breakout"
        self.assertEqual(str(exc), "[breakout] persist: bad record")

    def test_phases(self) -> None:
        phases = {
            BuildFailure: "build",
            ExecutionFailure: "execute",
            CounterFailure: "counters",
            PersistenceFailure: "persist",
            RenderFailure: "render",
            UndefinedStatistic: "stats",
        }
        for cls, phase in phases.items():
            with self.subTest(cls=cls.__name__):
                exc = cls("x")
                self.assertIsInstance(exc, BenchError)
                self.assertEqual(exc.phase, phase)

    def test_undefined_statistic_is_arithmetic(self) -> None:
        self.assertIsInstance(UndefinedStatistic("x"), ArithmeticError)


class TestBuildFailure(unittest.TestCase):
    def test_output_sections(self) -> None:
        exc = BuildFailure(
            "Could not build workload",
            benchmark="mygame",
            stdout="compiling\n",
            stderr="error: missing semicolon\n",
            returncode=2,
        )
        self.assertEqual(
            str(exc),
            "[mygame] build: Could not build workload (exit 2)"
            "\n\nStdout:\ncompiling"
            "\n\nStderr:\nerror: missing semicolon",
        )

    def test_blank_output_omitted(self) -> None:
        exc = BuildFailure("No artifact", stdout="  \n")
        self.assertEqual(str(exc), "build: No artifact")


if __name__ == "__main__":
    unittest.main()
