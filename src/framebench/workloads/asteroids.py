"""Asteroids: a ship drifting randomly through a field of asteroids.

The ship turns and moves a random amount every frame and fires bullets at
random intervals.  Bullets destroy asteroids, asteroids destroy the ship,
which respawns at the origin.  Asteroids wrap around the arena edges.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable

from framebench.workloads.base import Simulation, Sprite

ARENA = 400.0
ASTEROID_COUNT = 100
BULLET_LIFETIME = 100


@dataclass
class Body:
    sprite: Sprite
    vx: float = 0.0
    vy: float = 0.0
    angle: float = 0.0
    alive_frames: int = 0
    alive: bool = True

    def advance(self) -> None:
        self.sprite.x += self.vx
        self.sprite.y += self.vy


@dataclass
class _State:
    ship: Body
    asteroids: list[Body] = field(default_factory=list)
    bullets: list[Body] = field(default_factory=list)
    ship_deaths: int = 0
    asteroids_destroyed: int = 0


class Asteroids(Simulation):
    name = "asteroids"

    def setup(self) -> None:
        rng = self.rng
        self.state = _State(ship=self._spawn_ship())
        for _ in range(ASTEROID_COUNT):
            sprite = Sprite(
                x=rng.gen_range(-ARENA, ARENA),
                y=rng.gen_range(-ARENA, ARENA),
                width=rng.gen_range(10.0, 50.0),
                height=rng.gen_range(10.0, 50.0),
                glyph="O",
            )
            self.state.asteroids.append(
                Body(sprite=sprite, vx=rng.gen_range(-2.0, 2.0), vy=rng.gen_range(-2.0, 2.0))
            )

    @staticmethod
    def _spawn_ship() -> Body:
        return Body(sprite=Sprite(0.0, 0.0, 40.0, 20.0, glyph="A"), angle=math.pi)

    def step(self) -> None:
        self._move_bodies()
        self._move_ship()
        self._age_bullets()
        self._wrap_asteroids()
        self._destroy_asteroids()
        self._destroy_ship()

    def _move_bodies(self) -> None:
        for body in self.state.asteroids:
            body.advance()
        for body in self.state.bullets:
            body.advance()

    def _move_ship(self) -> None:
        rng = self.rng
        ship = self.state.ship
        ship.angle += rng.gen_range(-math.pi / 60, math.pi / 60)
        ship.sprite.x += rng.gen_range(-3.0, 3.0)
        ship.sprite.y += rng.gen_range(-3.0, 3.0)

        # ``frame`` counts completed frames; the fire check uses this one.
        if (self.frame + 1) % rng.gen_range(1, 50) == 0:
            bullet = Body(
                sprite=Sprite(ship.sprite.x, ship.sprite.y, 5.0, 5.0, glyph="."),
                vx=rng.gen_range(-2.0, 2.0),
                vy=rng.gen_range(-2.0, 2.0),
            )
            self.state.bullets.append(bullet)

    def _age_bullets(self) -> None:
        for bullet in self.state.bullets:
            bullet.alive_frames += 1
        self.state.bullets = [b for b in self.state.bullets if b.alive_frames <= BULLET_LIFETIME]

    def _wrap_asteroids(self) -> None:
        for body in self.state.asteroids:
            s = body.sprite
            if s.x < -ARENA:
                s.x = ARENA
            elif s.x > ARENA:
                s.x = -ARENA
            if s.y < -ARENA:
                s.y = ARENA
            elif s.y > ARENA:
                s.y = -ARENA

    def _destroy_asteroids(self) -> None:
        for asteroid in self.state.asteroids:
            a = asteroid.sprite
            for bullet in self.state.bullets:
                b = bullet.sprite
                # Treat both as circles with a radius of their width.
                radius = (a.width + b.width) / 2
                if radius > math.hypot(a.x - b.x, a.y - b.y):
                    asteroid.alive = False
                    break
        before = len(self.state.asteroids)
        self.state.asteroids = [a for a in self.state.asteroids if a.alive]
        self.state.asteroids_destroyed += before - len(self.state.asteroids)

    def _destroy_ship(self) -> None:
        s = self.state.ship.sprite
        for asteroid in self.state.asteroids:
            a = asteroid.sprite
            radius = (a.width + s.width) / 2
            if radius > math.hypot(a.x - s.x, a.y - s.y):
                self.state.ship = self._spawn_ship()
                self.state.ship_deaths += 1
                return

    def sprites(self) -> Iterable[Sprite]:
        for body in self.state.asteroids:
            yield body.sprite
        for body in self.state.bullets:
            yield body.sprite
        yield self.state.ship.sprite

    def status(self) -> str:
        return (
            f"{super().status()}  asteroids {len(self.state.asteroids)}"
            f"  bullets {len(self.state.bullets)}  deaths {self.state.ship_deaths}"
        )


WORKLOAD = Asteroids
