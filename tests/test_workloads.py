"""Tests for framebench.workloads — bundled simulations and the terminal canvas."""

from __future__ import annotations

import io
import sys
import tempfile
import unittest
from pathlib import Path

from framebench.fakerand import FakeRand
from framebench.workloads import (
    BUNDLED_WORKLOADS,
    Simulation,
    Sprite,
    bundled_path,
    load_workload,
)
from framebench.workloads.asteroids import Asteroids
from framebench.workloads.base import collide
from framebench.workloads.breakout import Breakout
from framebench.workloads.canvas import TerminalCanvas


def _run_headless(cls: type[Simulation], frames: int) -> Simulation:
    sim = cls(FakeRand(), frames)
    for _ in range(frames):
        sim.update()
    return sim


def _run_interactive(cls: type[Simulation], frames: int, canvas: TerminalCanvas) -> Simulation:
    sim = cls(FakeRand(), frames, headless=False)
    while not sim.finished:
        sim.update()
        canvas.draw(sim)
    return sim


class TestCollide(unittest.TestCase):
    def test_no_overlap(self) -> None:
        self.assertIsNone(collide(Sprite(0, 0, 10, 10), Sprite(20, 0, 10, 10)))

    def test_touching_is_not_overlap(self) -> None:
        self.assertIsNone(collide(Sprite(0, 0, 10, 10), Sprite(10, 0, 10, 10)))

    def test_sides(self) -> None:
        box = Sprite(0, 0, 10, 10)
        self.assertEqual(collide(Sprite(-8, 0, 10, 10), box), "left")
        self.assertEqual(collide(Sprite(8, 0, 10, 10), box), "right")
        self.assertEqual(collide(Sprite(0, -8, 10, 10), box), "bottom")
        self.assertEqual(collide(Sprite(0, 8, 10, 10), box), "top")


class TestSimulationContract(unittest.TestCase):
    def test_frames_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            Breakout(FakeRand(), 0)

    def test_update_past_end(self) -> None:
        sim = _run_headless(Breakout, 3)
        self.assertTrue(sim.finished)
        with self.assertRaises(RuntimeError):
            sim.update()

    def test_base_is_abstract(self) -> None:
        with self.assertRaises(NotImplementedError):
            Simulation(FakeRand(), 1)


class TestDeterminism(unittest.TestCase):
    def test_same_state_after_same_frames(self) -> None:
        for cls in (Asteroids, Breakout):
            with self.subTest(workload=cls.name):
                a = _run_headless(cls, 60)
                b = _run_headless(cls, 60)
                self.assertEqual(a.rng.position, b.rng.position)
                self.assertEqual(
                    [(s.x, s.y) for s in a.sprites()], [(s.x, s.y) for s in b.sprites()]
                )

    def test_modes_do_identical_work(self) -> None:
        for cls in (Asteroids, Breakout):
            with self.subTest(workload=cls.name):
                canvas = TerminalCanvas(stream=io.StringIO())
                headless = _run_headless(cls, 40)
                interactive = _run_interactive(cls, 40, canvas)
                self.assertEqual(headless.frame, interactive.frame)
                self.assertEqual(interactive.frame, 40)
                self.assertEqual(canvas.frames_drawn, 40)
                self.assertEqual(headless.rng.position, interactive.rng.position)
                self.assertEqual(headless.status(), interactive.status())

    def test_breakout_one_byte_per_frame(self) -> None:
        sim = _run_headless(Breakout, 25)
        self.assertEqual(sim.rng.position, 25)


class TestAsteroids(unittest.TestCase):
    def test_setup(self) -> None:
        sim = Asteroids(FakeRand(), 10)
        self.assertEqual(len(sim.state.asteroids), 100)
        for body in sim.state.asteroids:
            self.assertLessEqual(abs(body.sprite.x), 400.0)
            self.assertLessEqual(abs(body.sprite.y), 400.0)
        self.assertEqual((sim.state.ship.sprite.x, sim.state.ship.sprite.y), (0.0, 0.0))

    def test_asteroids_stay_in_arena(self) -> None:
        sim = _run_headless(Asteroids, 200)
        for body in sim.state.asteroids:
            self.assertLessEqual(abs(body.sprite.x), 402.0)
            self.assertLessEqual(abs(body.sprite.y), 402.0)

    def test_bullets_expire(self) -> None:
        sim = _run_headless(Asteroids, 300)
        self.assertTrue(all(b.alive_frames <= 100 for b in sim.state.bullets))


class TestBreakout(unittest.TestCase):
    def test_setup(self) -> None:
        sim = Breakout(FakeRand(), 10)
        self.assertEqual(len(sim.bricks), 20)
        self.assertEqual(len(sim.walls), 4)
        self.assertEqual(sim.score, 0)

    def test_score_matches_removed_bricks(self) -> None:
        sim = _run_headless(Breakout, 600)
        self.assertEqual(sim.score, 20 - len(sim.bricks))

    def test_paddle_clamped(self) -> None:
        sim = _run_headless(Breakout, 300)
        self.assertLessEqual(abs(sim.paddle.x), 380.0)


class TestLoading(unittest.TestCase):
    def test_bundled(self) -> None:
        for name in BUNDLED_WORKLOADS:
            path = bundled_path(name)
            assert path is not None
            cls = load_workload(path, name)
            self.assertTrue(issubclass(cls, Simulation))
            self.assertEqual(cls.name, name)

    def test_bundled_asteroids_runs_from_file(self) -> None:
        path = bundled_path("asteroids")
        assert path is not None
        cls = load_workload(path, "asteroids")
        sim = cls(FakeRand(), 5)
        for _ in range(5):
            sim.update()
        self.assertTrue(sim.finished)

    def test_dataclass_workload_file(self) -> None:
        source = (
            "from __future__ import annotations\n"
            "from dataclasses import dataclass, field\n"
            "from framebench.workloads import Simulation\n"
            "\n"
            "@dataclass\n"
            "class Ball:\n"
            "    x: float = 0.0\n"
            "    trail: list[float] = field(default_factory=list)\n"
            "\n"
            "class Bouncer(Simulation):\n"
            "    name = 'bouncer'\n"
            "    def setup(self):\n"
            "        self.ball = Ball()\n"
            "    def step(self):\n"
            "        self.ball.x += self.rng.gen_range(-1.0, 1.0)\n"
            "    def sprites(self):\n"
            "        return []\n"
            "\n"
            "WORKLOAD = Bouncer\n"
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bouncer.py"
            path.write_text(source)
            cls = load_workload(path, "bouncer")
        self.assertEqual(cls.name, "bouncer")
        self.assertEqual(cls(FakeRand(), 1).ball.trail, [])

    def test_failed_load_not_left_in_sys_modules(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.py"
            path.write_text("raise RuntimeError('broken at import')\n")
            with self.assertRaises(RuntimeError):
                load_workload(path, "bad")
        self.assertNotIn("framebench_workload_bad", sys.modules)

    def test_unknown_bundled(self) -> None:
        self.assertIsNone(bundled_path("tetris"))

    def test_no_workload_attribute(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "empty.py"
            path.write_text("x = 1\n")
            with self.assertRaises(TypeError):
                load_workload(path, "empty")


class TestTerminalCanvas(unittest.TestCase):
    def test_render_size(self) -> None:
        canvas = TerminalCanvas(columns=40, rows=12)
        lines = canvas.render(Breakout(FakeRand(), 5)).split("\n")
        self.assertEqual(len(lines), 13)
        self.assertTrue(all(len(line) == 40 for line in lines[:12]))
        self.assertEqual(lines[-1], "breakout frame 0/5  score 0")

    def test_render_draws_glyphs(self) -> None:
        frame = TerminalCanvas().render(Breakout(FakeRand(), 5))
        for glyph in ("B", "=", "o", "|"):
            self.assertIn(glyph, frame)

    def test_render_does_not_consume_randomness(self) -> None:
        sim = Asteroids(FakeRand(), 5)
        before = sim.rng.position
        TerminalCanvas().render(sim)
        self.assertEqual(sim.rng.position, before)

    def test_draw_counts_frames(self) -> None:
        stream = io.StringIO()
        canvas = TerminalCanvas(stream=stream)
        sim = Breakout(FakeRand(), 5)
        canvas.draw(sim)
        canvas.draw(sim)
        self.assertEqual(canvas.frames_drawn, 2)
        self.assertNotIn("\x1b[", stream.getvalue())


if __name__ == "__main__":
    unittest.main()
