"""
Lane Shooter entities
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BodyKind(str, Enum):
    """Physics groups a body can belong to."""

    PROJECTILE = "projectile"
    ENEMY = "enemy"
    FLOOR = "floor"
    LAUNCHER = "launcher"


class ContactKind(str, Enum):
    """Contacts the game reacts to."""

    PROJECTILE_FLOOR = "projectile_floor"
    PROJECTILE_ENEMY = "projectile_enemy"
    ENEMY_FLOOR = "enemy_floor"


@dataclass(frozen=True)
class Contact:
    """
    A single contact event reported by the physics world.
    """

    kind: ContactKind
    projectile_id: int | None = None
    enemy_id: int | None = None


@dataclass
class Projectile:
    """
    Projectile entity
    """

    body_id: int
    speed: float


@dataclass
class Enemy:
    """
    Enemy entity
    """

    body_id: int
    lane: int
    speed: float
