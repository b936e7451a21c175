"""Tests for framebench.bench.artifacts — workload resolution and builds."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from framebench.bench.artifacts import WorkloadBuilder
from framebench.bench.config import WorkloadDef
from framebench.errors import BuildFailure
from framebench.workloads import bundled_path

from bench_test_helpers import write_workload


class TestResolve(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name)

    def test_bundled(self) -> None:
        path = WorkloadBuilder().ensure_artifact("asteroids")
        self.assertEqual(path, bundled_path("asteroids"))
        self.assertTrue(path.is_file())

    def test_search_dir_before_bundled(self) -> None:
        local = write_workload(self.tmp, "breakout")
        builder = WorkloadBuilder(search_dirs=[self.tmp])
        self.assertEqual(builder.ensure_artifact("breakout"), local)

    def test_explicit_source(self) -> None:
        source = write_workload(self.tmp / "src", "game")
        builder = WorkloadBuilder([WorkloadDef("mygame", source=source)])
        self.assertEqual(builder.ensure_artifact("mygame"), source)

    def test_missing(self) -> None:
        with self.assertRaises(BuildFailure) as ctx:
            WorkloadBuilder(search_dirs=[self.tmp]).ensure_artifact("nope")
        self.assertEqual(ctx.exception.benchmark, "nope")
        self.assertIn(str(self.tmp), str(ctx.exception))

    def test_missing_explicit_source(self) -> None:
        builder = WorkloadBuilder([WorkloadDef("g", source=self.tmp / "g.py")])
        with self.assertRaises(BuildFailure):
            builder.ensure_artifact("g")


class TestBuild(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name)

    def test_build_produces_artifact(self) -> None:
        source = self.tmp / "generated.py"
        wl = WorkloadDef(
            "generated",
            source=source,
            build_command="printf 'from framebench.workloads.breakout import WORKLOAD\\n' > generated.py",
            cwd=self.tmp,
        )
        self.assertEqual(WorkloadBuilder([wl]).ensure_artifact("generated"), source)
        self.assertIn("WORKLOAD", source.read_text())

    def test_build_failure_captures_output(self) -> None:
        wl = WorkloadDef("bad", build_command="echo out; echo err >&2; exit 3")
        with self.assertRaises(BuildFailure) as ctx:
            WorkloadBuilder([wl]).ensure_artifact("bad")
        exc = ctx.exception
        self.assertEqual(exc.returncode, 3)
        self.assertEqual(exc.stdout.strip(), "out")
        self.assertEqual(exc.stderr.strip(), "err")
        text = str(exc)
        self.assertIn("[bad] build:", text)
        self.assertIn("(exit 3)", text)
        self.assertIn("Stdout:\nout", text)
        self.assertIn("Stderr:\nerr", text)

    def test_build_not_started(self) -> None:
        wl = WorkloadDef("bad", build_command="make")
        with patch("subprocess.run", side_effect=OSError("no shell")):
            with self.assertRaises(BuildFailure) as ctx:
                WorkloadBuilder([wl]).ensure_artifact("bad")
        self.assertIn("no shell", str(ctx.exception))

    def test_no_build_without_command(self) -> None:
        with patch("subprocess.run") as run:
            WorkloadBuilder([WorkloadDef("asteroids")]).ensure_artifact("asteroids")
        run.assert_not_called()


if __name__ == "__main__":
    unittest.main()
