"""Breakout: a ball bouncing between walls, a paddle and a wall of bricks.

The paddle is steered by a coin flip every frame.  The simulation uses a
fixed timestep so the frame loop does the same work regardless of how fast
it runs.
"""

from __future__ import annotations

import math
from typing import Iterable

from framebench.workloads.base import Simulation, Sprite, collide

TIMESTEP = 1.0 / 60.0
PADDLE_SPEED = 500.0
BALL_SPEED = 400.0
BOUNDS = (900.0, 600.0)
WALL_THICKNESS = 10.0
BRICK_ROWS = 4
BRICK_COLUMNS = 5
BRICK_SPACING = 20.0
BRICK_SIZE = (150.0, 30.0)


class Breakout(Simulation):
    name = "breakout"
    width, height = BOUNDS

    def setup(self) -> None:
        self.score = 0
        self.paddle = Sprite(0.0, -215.0, 120.0, 30.0, glyph="=")
        self.ball = Sprite(0.0, -50.0, 30.0, 30.0, glyph="o")
        norm = math.sqrt(0.5)
        self.velocity = [BALL_SPEED * norm, -BALL_SPEED * norm]

        bx, by = BOUNDS
        self.walls = [
            Sprite(-bx / 2, 0.0, WALL_THICKNESS, by + WALL_THICKNESS, glyph="|"),
            Sprite(bx / 2, 0.0, WALL_THICKNESS, by + WALL_THICKNESS, glyph="|"),
            Sprite(0.0, -by / 2, bx + WALL_THICKNESS, WALL_THICKNESS, glyph="-"),
            Sprite(0.0, by / 2, bx + WALL_THICKNESS, WALL_THICKNESS, glyph="-"),
        ]

        brick_w, brick_h = BRICK_SIZE
        bricks_width = BRICK_COLUMNS * (brick_w + BRICK_SPACING) - BRICK_SPACING
        offset_x = -(bricks_width - brick_w) / 2
        self.bricks: list[Sprite] = []
        for row in range(BRICK_ROWS):
            y = row * (brick_h + BRICK_SPACING) + 100.0
            for column in range(BRICK_COLUMNS):
                x = column * (brick_w + BRICK_SPACING) + offset_x
                self.bricks.append(Sprite(x, y, brick_w, brick_h, glyph="B"))

    def step(self) -> None:
        self._move_paddle()
        self._collide_ball()
        self._move_ball()

    def _move_paddle(self) -> None:
        direction = -1.0 if self.rng.gen_bool() else 1.0
        x = self.paddle.x + TIMESTEP * direction * PADDLE_SPEED
        self.paddle.x = min(max(x, -380.0), 380.0)

    def _move_ball(self) -> None:
        self.ball.x += self.velocity[0] * TIMESTEP
        self.ball.y += self.velocity[1] * TIMESTEP

    def _collide_ball(self) -> None:
        vx, vy = self.velocity
        # Solid colliders first, then scorable bricks; stop at the first hit.
        for collider in [self.paddle, *self.walls, *self.bricks]:
            side = collide(self.ball, collider)
            if side is None:
                continue
            if collider.glyph == "B":
                self.score += 1
                self.bricks.remove(collider)

            if side == "left" and vx > 0 or side == "right" and vx < 0:
                vx = -vx
            if side == "top" and vy < 0 or side == "bottom" and vy > 0:
                vy = -vy
            break
        self.velocity = [vx, vy]

    def sprites(self) -> Iterable[Sprite]:
        yield from self.walls
        yield from self.bricks
        yield self.paddle
        yield self.ball

    def status(self) -> str:
        return f"{super().status()}  score {self.score}"


WORKLOAD = Breakout
