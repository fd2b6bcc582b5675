"""
Physics world used by the game session.

The session only talks to the :class:`PhysicsCapability` protocol.
:class:`ArcadePhysics` is the implementation used by the pygame front end:
axis-aligned boxes, world-bound bounce, and contact events handed to
listeners once each sub-step has finished.
"""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol

import pygame
from pygame.math import Vector2

from lane_shooter import constants
from lane_shooter.entities import BodyKind, Contact, ContactKind
from lane_shooter.exceptions import UnknownBodyError
from lane_shooter.utils import logger

ContactListener = Callable[[Contact], object]

DEFAULT_SIZES: dict[BodyKind, tuple[float, float]] = {
    BodyKind.PROJECTILE: constants.PROJECTILE_SIZE,
    BodyKind.ENEMY: constants.ENEMY_SIZE,
    BodyKind.FLOOR: constants.FLOOR_SIZE,
    BodyKind.LAUNCHER: (24, 48),
}

STATIC_KINDS = frozenset({BodyKind.FLOOR, BodyKind.LAUNCHER})


class PhysicsCapability(Protocol):
    """What the game session needs from a physics world."""

    def create_body(
        self,
        kind: BodyKind,
        x: float,
        y: float,
        *,
        velocity: tuple[float, float] = (0.0, 0.0),
        bounce: tuple[float, float] = (0.0, 0.0),
        collide_world_bounds: bool = False,
    ) -> int: ...

    def destroy_body(self, body_id: int) -> None: ...

    def position(self, body_id: int) -> Vector2: ...

    def velocity(self, body_id: int) -> Vector2: ...

    def set_velocity(self, body_id: int, vx: float, vy: float) -> None: ...

    def add_contact_listener(self, listener: ContactListener) -> None: ...


@dataclass
class Body:
    """
    A box centered on ``position``.
    """

    body_id: int
    kind: BodyKind
    position: Vector2
    size: tuple[float, float]
    velocity: Vector2 = field(default_factory=Vector2)
    bounce: Vector2 = field(default_factory=Vector2)
    collide_world_bounds: bool = False

    @property
    def half_width(self) -> float:
        return self.size[0] / 2

    @property
    def half_height(self) -> float:
        return self.size[1] / 2

    @property
    def rect(self) -> pygame.Rect:
        rect = pygame.Rect(0, 0, round(self.size[0]), round(self.size[1]))
        rect.center = (round(self.position.x), round(self.position.y))
        return rect

    def overlap(self, other: Body) -> tuple[int, int]:
        """Size of the intersection of both rects, (0, 0) when apart."""
        return self.rect.clip(other.rect).size

    def touches(self, other: Body) -> bool:
        return self.rect.colliderect(other.rect)


class ArcadePhysics:
    """
    Minimal arcade physics world.

    Dynamic bodies move with constant velocity. Projectiles bounce off
    enemies, enemies push each other apart, and overlaps with the floor are
    reported without any physical response.
    """

    def __init__(
        self,
        width: float,
        height: float,
        max_substep: float = constants.PHYSICS_MAX_SUBSTEP,
    ):
        self.width = width
        self.height = height
        self.max_substep = max_substep
        self._bodies: dict[int, Body] = {}
        self._ids = itertools.count(1)
        self._listeners: list[ContactListener] = []

    def create_body(
        self,
        kind: BodyKind,
        x: float,
        y: float,
        *,
        velocity: tuple[float, float] = (0.0, 0.0),
        bounce: tuple[float, float] = (0.0, 0.0),
        collide_world_bounds: bool = False,
        size: tuple[float, float] | None = None,
    ) -> int:
        body_id = next(self._ids)
        self._bodies[body_id] = Body(
            body_id=body_id,
            kind=kind,
            position=Vector2(x, y),
            size=size or DEFAULT_SIZES[kind],
            velocity=Vector2(velocity),
            bounce=Vector2(bounce),
            collide_world_bounds=collide_world_bounds,
        )
        return body_id

    def destroy_body(self, body_id: int) -> None:
        if self._bodies.pop(body_id, None) is None:
            raise UnknownBodyError(body_id)

    def position(self, body_id: int) -> Vector2:
        return Vector2(self._get(body_id).position)

    def velocity(self, body_id: int) -> Vector2:
        return Vector2(self._get(body_id).velocity)

    def set_velocity(self, body_id: int, vx: float, vy: float) -> None:
        self._get(body_id).velocity.update(vx, vy)

    def add_contact_listener(self, listener: ContactListener) -> None:
        self._listeners.append(listener)

    def bodies(self, kind: BodyKind | None = None) -> list[Body]:
        return [
            b for b in self._bodies.values() if kind is None or b.kind == kind
        ]

    def __contains__(self, body_id: int) -> bool:
        return body_id in self._bodies

    def __len__(self) -> int:
        return len(self._bodies)

    def step(self, dt: float) -> list[Contact]:
        """
        Advance the world by ``dt`` seconds and dispatch the contacts found.

        Long steps are split into sub-steps of at most ``max_substep``
        seconds so fast or far moving bodies cannot skip over the floor.
        Listeners run after every body has moved in a sub-step, so a
        listener destroying bodies never sees a half-updated world.
        """
        substeps = max(1, math.ceil(dt / self.max_substep))
        h = dt / substeps
        contacts: list[Contact] = []
        for _ in range(substeps):
            contacts.extend(self._substep(h))
        return contacts

    def _substep(self, dt: float) -> list[Contact]:
        for body in self._bodies.values():
            if body.kind in STATIC_KINDS:
                continue
            body.position += body.velocity * dt
            if body.collide_world_bounds:
                self._keep_in_bounds(body)

        self._separate_enemies()
        contacts = list(self._find_contacts())

        for contact in contacts:
            for listener in list(self._listeners):
                listener(contact)
        return contacts

    def _get(self, body_id: int) -> Body:
        try:
            return self._bodies[body_id]
        except KeyError:
            raise UnknownBodyError(body_id) from None

    def _keep_in_bounds(self, body: Body):
        pos, vel, bounce = body.position, body.velocity, body.bounce
        if pos.x - body.half_width < 0:
            pos.x = body.half_width
            if vel.x < 0:
                vel.x = -vel.x * bounce.x
        elif pos.x + body.half_width > self.width:
            pos.x = self.width - body.half_width
            if vel.x > 0:
                vel.x = -vel.x * bounce.x
        if pos.y - body.half_height < 0:
            pos.y = body.half_height
            if vel.y < 0:
                vel.y = -vel.y * bounce.y
        elif pos.y + body.half_height > self.height:
            pos.y = self.height - body.half_height
            if vel.y > 0:
                vel.y = -vel.y * bounce.y

    def _separate_enemies(self):
        enemies = self.bodies(BodyKind.ENEMY)
        for a, b in itertools.combinations(enemies, 2):
            dx, dy = a.overlap(b)
            if dx <= 0 or dy <= 0:
                continue
            # push both halfway apart along the shallow axis
            if dx < dy:
                sign = 1.0 if a.position.x >= b.position.x else -1.0
                a.position.x += sign * dx / 2
                b.position.x -= sign * dx / 2
            else:
                sign = 1.0 if a.position.y >= b.position.y else -1.0
                a.position.y += sign * dy / 2
                b.position.y -= sign * dy / 2

    def _find_contacts(self) -> Iterable[Contact]:
        floors = self.bodies(BodyKind.FLOOR)
        projectiles = self.bodies(BodyKind.PROJECTILE)
        enemies = self.bodies(BodyKind.ENEMY)

        for projectile in projectiles:
            for enemy in enemies:
                if projectile.touches(enemy):
                    _bounce_off(projectile, enemy)
                    yield Contact(
                        ContactKind.PROJECTILE_ENEMY,
                        projectile_id=projectile.body_id,
                        enemy_id=enemy.body_id,
                    )

        for floor in floors:
            for projectile in projectiles:
                if projectile.touches(floor):
                    yield Contact(
                        ContactKind.PROJECTILE_FLOOR,
                        projectile_id=projectile.body_id,
                    )
            for enemy in enemies:
                if enemy.touches(floor):
                    logger.debug(f"Enemy {enemy.body_id} touched the floor")
                    yield Contact(ContactKind.ENEMY_FLOOR, enemy_id=enemy.body_id)


def _bounce_off(mover: Body, obstacle: Body):
    """Push ``mover`` out of ``obstacle`` and reflect its velocity."""
    dx, dy = mover.overlap(obstacle)
    if dx < dy:
        sign = 1.0 if mover.position.x >= obstacle.position.x else -1.0
        mover.position.x += sign * dx
        if mover.velocity.x * sign < 0:
            mover.velocity.x = -mover.velocity.x * mover.bounce.x
    else:
        sign = 1.0 if mover.position.y >= obstacle.position.y else -1.0
        mover.position.y += sign * dy
        if mover.velocity.y * sign < 0:
            mover.velocity.y = -mover.velocity.y * mover.bounce.y
