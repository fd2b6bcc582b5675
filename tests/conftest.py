"""
Pytest fixtures for Lane Shooter tests.

NO WINDOW - the game session runs against a recording fake physics world.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field

import pytest
from pygame.math import Vector2

from lane_shooter.entities import BodyKind, Contact
from lane_shooter.exceptions import UnknownBodyError
from lane_shooter.scenes.lane_shooter import GameSession
from lane_shooter.settings import GameSettings


@dataclass
class FakeBody:
    kind: BodyKind
    position: Vector2
    velocity: Vector2
    bounce: tuple[float, float] = (0.0, 0.0)
    collide_world_bounds: bool = False


class FakePhysics:
    """Physics capability that only stores bodies and replays contacts."""

    def __init__(self):
        self.bodies: dict[int, FakeBody] = {}
        self.created: list[tuple[int, BodyKind]] = []
        self.destroyed: list[int] = []
        self._listeners = []
        self._ids = itertools.count(1)

    def create_body(
        self,
        kind,
        x,
        y,
        *,
        velocity=(0.0, 0.0),
        bounce=(0.0, 0.0),
        collide_world_bounds=False,
    ):
        body_id = next(self._ids)
        self.bodies[body_id] = FakeBody(
            kind=kind,
            position=Vector2(x, y),
            velocity=Vector2(velocity),
            bounce=bounce,
            collide_world_bounds=collide_world_bounds,
        )
        self.created.append((body_id, kind))
        return body_id

    def destroy_body(self, body_id):
        if body_id not in self.bodies:
            raise UnknownBodyError(body_id)
        del self.bodies[body_id]
        self.destroyed.append(body_id)

    def position(self, body_id):
        return Vector2(self.bodies[body_id].position)

    def velocity(self, body_id):
        return Vector2(self.bodies[body_id].velocity)

    def set_velocity(self, body_id, vx, vy):
        self.bodies[body_id].velocity = Vector2(vx, vy)

    def add_contact_listener(self, listener):
        self._listeners.append(listener)

    # helpers for tests

    def emit(self, contact: Contact):
        for listener in self._listeners:
            listener(contact)

    def move(self, body_id, x, y):
        self.bodies[body_id].position = Vector2(x, y)

    def ids_of(self, kind: BodyKind) -> list[int]:
        return [i for i, b in self.bodies.items() if b.kind == kind]


class ManualClock:
    def __init__(self, start: float = 0.0):
        self.time = start

    def now(self) -> float:
        return self.time

    def advance(self, ms: float):
        self.time += ms


@dataclass
class FixedRandom:
    """Random source whose draws always return the same value."""

    value: float
    draws: list[float] = field(default_factory=list)

    def random(self) -> float:
        self.draws.append(self.value)
        return self.value


ALWAYS = 0.0
NEVER = 0.999


@pytest.fixture
def physics() -> FakePhysics:
    return FakePhysics()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def settings() -> GameSettings:
    return GameSettings()


@pytest.fixture
def session(physics, clock, settings) -> GameSession:
    """A session whose lanes never spawn on their own."""
    return GameSession(physics, settings=settings, clock=clock, rng=FixedRandom(NEVER))


@pytest.fixture
def spawning_session(physics, clock, settings) -> GameSession:
    """A session where every eligible lane spawns."""
    return GameSession(
        physics, settings=settings, clock=clock, rng=FixedRandom(ALWAYS)
    )
