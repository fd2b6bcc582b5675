"""
Lane Shooter Scene
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

from mini_arcade_core.engine.commands import CommandQueue
from mini_arcade_core.scenes.sim_scene import BaseTickContext
from mini_arcade_core.scenes.systems.phases import SystemPhase
from mini_arcade_core.scenes.systems.system_pipeline import SystemPipeline
from pygame.math import Vector2

from lane_shooter import constants
from lane_shooter.clock import Clock, MonotonicClock
from lane_shooter.entities import (
    BodyKind,
    Contact,
    ContactKind,
    Enemy,
    Projectile,
)
from lane_shooter.physics import PhysicsCapability
from lane_shooter.settings import GameSettings
from lane_shooter.utils import logger


class GamePhase(str, Enum):
    PLAYING = "playing"
    GAME_OVER = "game_over"


def aim_heading(
    anchor: tuple[float, float], pointer: tuple[float, float]
) -> float:
    """
    Heading of the launcher arrow in degrees (0 = up, clockwise positive).

    The arrow points away from the pointer, the player pulls back to aim.
    """
    dx = pointer[0] - anchor[0]
    dy = anchor[1] - pointer[1]
    # atan2 is 0 on +x and counterclockwise, the heading is 0 on up and
    # clockwise
    return 90.0 - math.degrees(math.atan2(dy, dx)) + 180.0


def launch_velocity(
    anchor: tuple[float, float], pointer: tuple[float, float], speed: float
) -> Vector2:
    """Velocity of a shot released at ``pointer`` (screen coordinates)."""
    dx = pointer[0] - anchor[0]
    dy = anchor[1] - pointer[1]
    angle = math.atan2(dy, dx)
    return Vector2(-speed * math.cos(angle), speed * math.sin(angle))


def can_fire(now: float, last_shot_time: float, cooldown: float) -> bool:
    return now - last_shot_time > cooldown


def remaining_seconds(now: float, last_shot_time: float, cooldown: float) -> int:
    """Whole seconds shown in the countdown while firing is blocked."""
    return math.floor((cooldown - (now - last_shot_time)) / 1000) + 1


def normalize_velocity(velocity: Vector2, target: float) -> Vector2:
    """
    Rescale ``velocity`` to length ``target`` keeping its direction.

    A zero vector has no direction, it is sent straight up.
    """
    speed = velocity.length()
    if speed == 0:
        return Vector2(0.0, -target)
    return velocity * (target / speed)


def lane_index(x: float, lane_width: float, lane_count: int) -> int:
    lane = math.floor(x / lane_width)
    return max(0, min(lane_count - 1, lane))


def enemy_speed(score: int, min_speed: float, max_speed: float) -> float:
    return min(max_speed, max(min_speed, score / 10))


def topmost_enemy_by_lane(
    positions: Iterable[tuple[float, float]], settings: GameSettings
) -> list[float]:
    """Smallest enemy y per lane, the play-area height when a lane is empty."""
    lanes = settings.lanes
    topmost = [float(settings.window.height)] * lanes.count
    for x, y in positions:
        lane = lane_index(x, lanes.width, lanes.count)
        topmost[lane] = min(topmost[lane], y)
    return topmost


def lane_is_eligible(
    now: float, last_spawn: float, topmost_y: float, settings: GameSettings
) -> bool:
    return (
        now - last_spawn >= settings.lanes.spawn_cooldown_ms
        and topmost_y > settings.lanes.min_topmost_y
    )


@dataclass
class SessionState:
    """
    Mutable state of one run. Replaced as a whole on restart.
    """

    lane_last_spawn: list[float]
    lane_topmost_y: list[float]
    score: int = 0
    last_shot_time: float = 0.0
    is_aiming: bool = False
    is_over: bool = False
    projectiles: dict[int, Projectile] = field(default_factory=dict)
    enemies: dict[int, Enemy] = field(default_factory=dict)
    floor_id: int | None = None
    launcher_id: int | None = None

    @classmethod
    def fresh(cls, settings: GameSettings) -> SessionState:
        lanes = settings.lanes.count
        return cls(
            lane_last_spawn=[0.0] * lanes,
            lane_topmost_y=[float(settings.window.height)] * lanes,
        )

    @property
    def phase(self) -> GamePhase:
        return GamePhase.GAME_OVER if self.is_over else GamePhase.PLAYING


@dataclass
class InputFrame:
    """
    Pointer and keyboard state sampled for one frame.
    """

    pointer: tuple[float, float] = (0.0, 0.0)
    pointer_down: bool = False
    launcher_pressed: bool = False
    restart_pressed: bool = False


@dataclass(frozen=True)
class RenderState:
    """What the front end needs to draw after a tick."""

    phase: GamePhase
    score: int
    score_text: str
    info_text: str
    heading: float


@dataclass
class LaneShooterTickContext(BaseTickContext[SessionState, InputFrame]):
    """
    Lane Shooter Tick Context

    ``world`` is the session state, ``now`` the tick time in milliseconds.
    """

    now: float = 0.0
    settings: GameSettings = field(default_factory=GameSettings)
    physics: PhysicsCapability | None = None
    rng: random.Random | None = None
    heading: float = 0.0
    score_text: str = ""
    info_text: str = ""


class WhilePlaying:
    """Systems mixing this in are skipped once the game is over."""

    def enabled(self, ctx: LaneShooterTickContext) -> bool:
        return not ctx.world.is_over


@dataclass
class AimSystem(WhilePlaying):
    """
    Points the launcher arrow away from the pointer while dragging.
    """

    name: str = "lane_shooter_aim"
    phase: int = SystemPhase.INPUT
    order: int = 10

    def step(self, ctx: LaneShooterTickContext):
        if not ctx.world.is_aiming:
            return
        ctx.heading = aim_heading(
            ctx.settings.launcher.position, ctx.input_frame.pointer
        )


@dataclass
class FireSystem(WhilePlaying):
    """
    Fires a projectile when an aim drag is released below the floor line.
    Releasing while on cooldown cancels the aim.
    """

    name: str = "lane_shooter_fire"
    phase: int = SystemPhase.CONTROL
    order: int = 20

    def step(self, ctx: LaneShooterTickContext):
        state = ctx.world
        if ctx.input_frame.pointer_down:
            return

        if state.is_aiming:
            cooldown = ctx.settings.shots.cooldown_ms
            if can_fire(ctx.now, state.last_shot_time, cooldown):
                self._release(ctx, *ctx.input_frame.pointer)
            else:
                logger.debug("Shot ignored, still cooling down")
        state.is_aiming = False

    def _release(self, ctx: LaneShooterTickContext, x: float, y: float):
        launcher = ctx.settings.launcher
        speed = ctx.settings.shots.speed
        if y <= launcher.floor_y:
            logger.debug(f"Aim aborted, released above the floor at y={y}")
            return

        velocity = launch_velocity(launcher.position, (x, y), speed)
        body_id = ctx.physics.create_body(
            BodyKind.PROJECTILE,
            launcher.x,
            launcher.y,
            velocity=(velocity.x, velocity.y),
            bounce=(1.0, 1.0),
            collide_world_bounds=True,
        )
        ctx.world.projectiles[body_id] = Projectile(body_id=body_id, speed=speed)
        ctx.world.last_shot_time = ctx.now
        logger.debug(f"Shot {body_id} fired with velocity {tuple(velocity)}")


@dataclass
class VelocityNormalizeSystem(WhilePlaying):
    """
    Pins every projectile to its speed. Bounces can lose energy.
    """

    name: str = "lane_shooter_velocity"
    order: int = 30

    def step(self, ctx: LaneShooterTickContext):
        for projectile in ctx.world.projectiles.values():
            velocity = normalize_velocity(
                ctx.physics.velocity(projectile.body_id), projectile.speed
            )
            ctx.physics.set_velocity(projectile.body_id, velocity.x, velocity.y)


@dataclass
class LaneOccupancySystem(WhilePlaying):
    name: str = "lane_shooter_lane_occupancy"
    order: int = 40

    def step(self, ctx: LaneShooterTickContext):
        positions = (
            tuple(ctx.physics.position(enemy.body_id))
            for enemy in ctx.world.enemies.values()
        )
        ctx.world.lane_topmost_y = topmost_enemy_by_lane(positions, ctx.settings)


@dataclass
class EnemySpawnSystem(WhilePlaying):
    """
    Gives every eligible lane one chance per tick to spawn an enemy.

    A lane is eligible once its spawn cooldown has passed and no enemy is
    still close to the spawn row.
    """

    name: str = "lane_shooter_enemy_spawn"
    order: int = 41

    def step(self, ctx: LaneShooterTickContext):
        state = ctx.world
        lanes = ctx.settings.lanes
        for lane in range(lanes.count):
            if not lane_is_eligible(
                ctx.now,
                state.lane_last_spawn[lane],
                state.lane_topmost_y[lane],
                ctx.settings,
            ):
                continue
            if ctx.rng.random() < lanes.spawn_chance:
                self._spawn(ctx, lane)
                state.lane_last_spawn[lane] = ctx.now

    def _spawn(self, ctx: LaneShooterTickContext, lane: int) -> int:
        lanes = ctx.settings.lanes
        enemies = ctx.settings.enemies
        speed = enemy_speed(ctx.world.score, enemies.min_speed, enemies.max_speed)
        body_id = ctx.physics.create_body(
            BodyKind.ENEMY,
            (lane + 0.5) * lanes.width,
            lanes.spawn_y,
            velocity=(0.0, speed),
            collide_world_bounds=True,
        )
        ctx.world.enemies[body_id] = Enemy(body_id=body_id, lane=lane, speed=speed)
        logger.debug(f"Enemy {body_id} spawned in lane {lane} at speed {speed}")
        return body_id


@dataclass
class DisplaySystem:
    """
    Builds the score and info lines. Runs in every phase of the game.
    """

    name: str = "lane_shooter_display"
    phase: int = SystemPhase.PRESENTATION
    order: int = 100

    def step(self, ctx: LaneShooterTickContext):
        state = ctx.world
        if state.is_over:
            ctx.score_text = "Game over! Press [r] to restart."
            ctx.info_text = f"You scored {state.score} points."
            return

        ctx.score_text = f"Score: {state.score}"
        cooldown = ctx.settings.shots.cooldown_ms
        if not can_fire(ctx.now, state.last_shot_time, cooldown):
            seconds = remaining_seconds(ctx.now, state.last_shot_time, cooldown)
            plural = "" if seconds == 1 else "s"
            ctx.info_text = f"Cooldown until next shot: {seconds} second{plural}."
        elif state.is_aiming:
            ctx.info_text = "Drag to aim and release below the line to shoot!"
        else:
            ctx.info_text = "Hold the mouse down on the arrow."


class CollisionResolver:
    """
    Applies contact events to the session state.

    Each contact is applied at most once: contacts naming entities that are
    already gone, or arriving after game over, are ignored.
    """

    def __init__(self):
        self._handlers: dict[
            ContactKind,
            Callable[[Contact, SessionState, PhysicsCapability, GameSettings], bool],
        ] = {
            ContactKind.PROJECTILE_FLOOR: self._projectile_floor,
            ContactKind.PROJECTILE_ENEMY: self._projectile_enemy,
            ContactKind.ENEMY_FLOOR: self._enemy_floor,
        }

    def resolve(
        self,
        contact: Contact,
        state: SessionState,
        physics: PhysicsCapability,
        settings: GameSettings,
    ) -> bool:
        """
        Apply ``contact``.

        :return: Whether the contact changed anything.
        """
        if state.is_over:
            return False
        return self._handlers[contact.kind](contact, state, physics, settings)

    def _projectile_floor(self, contact, state, physics, settings) -> bool:
        projectile = state.projectiles.pop(contact.projectile_id, None)
        if projectile is None:
            return False
        physics.destroy_body(projectile.body_id)
        logger.debug(f"Shot {projectile.body_id} left through the floor")
        return True

    def _projectile_enemy(self, contact, state, physics, settings) -> bool:
        if contact.projectile_id not in state.projectiles:
            return False
        enemy = state.enemies.pop(contact.enemy_id, None)
        if enemy is None:
            return False
        physics.destroy_body(enemy.body_id)
        state.score += settings.enemies.reward
        logger.debug(f"Enemy {enemy.body_id} destroyed, score {state.score}")
        return True

    def _enemy_floor(self, contact, state, physics, settings) -> bool:
        if contact.enemy_id not in state.enemies:
            return False

        body_ids = [
            *state.projectiles,
            *state.enemies,
            state.floor_id,
            state.launcher_id,
        ]
        for body_id in body_ids:
            if body_id is not None:
                physics.destroy_body(body_id)
        state.projectiles.clear()
        state.enemies.clear()
        state.floor_id = None
        state.launcher_id = None
        state.is_aiming = False
        state.is_over = True
        logger.info(f"Game over, final score {state.score}")
        return True


class GameSession:
    """
    One game, from the first tick to any number of restarts.

    Usage:
        session = GameSession(physics)
        while running:
            session.tick(clock.now(), input_frame)
            physics.step(dt)  # contacts reach handle_contact
            render = session.render()
    """

    def __init__(
        self,
        physics: PhysicsCapability,
        settings: GameSettings | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or GameSettings()
        self.physics = physics
        self.clock = clock or MonotonicClock()
        self.rng = rng or random.Random()
        self.display = DisplaySystem()
        self.systems: SystemPipeline[LaneShooterTickContext] = SystemPipeline()
        self.systems.extend(
            [
                AimSystem(),
                FireSystem(),
                VelocityNormalizeSystem(),
                LaneOccupancySystem(),
                EnemySpawnSystem(),
                self.display,
            ]
        )
        self.resolver = CollisionResolver()
        self.heading = 0.0

        self._in_tick = False
        self._pending: list[Contact] = []
        self._last_tick: float | None = None

        self.state = self._start()
        physics.add_contact_listener(self.handle_contact)
        logger.info(
            f"Game started with {self.settings.lanes.count} lanes "
            f"of {self.settings.lanes.width}px"
        )

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    def _start(self) -> SessionState:
        state = SessionState.fresh(self.settings)
        launcher = self.settings.launcher
        state.floor_id = self.physics.create_body(
            BodyKind.FLOOR, constants.FLOOR_POS[0], launcher.floor_y
        )
        state.launcher_id = self.physics.create_body(
            BodyKind.LAUNCHER, launcher.x, launcher.y
        )
        self.heading = 0.0
        return state

    def restart(self) -> bool:
        """
        Start over after a game over. Does nothing while playing.
        """
        if not self.state.is_over:
            return False
        self.state = self._start()
        self._pending.clear()
        logger.info("Game restarted")
        return True

    def press_launcher(self):
        """The pointer went down on the launcher: an aim drag starts."""
        if not self.state.is_over:
            self.state.is_aiming = True

    def handle_contact(self, contact: Contact) -> bool:
        """
        Contact listener for the physics world.

        Contacts reported while a tick is running are held back and applied
        right after it.
        """
        if self._in_tick:
            self._pending.append(contact)
            return False
        return self.resolver.resolve(
            contact, self.state, self.physics, self.settings
        )

    def _get_tick_context(
        self, now: float, input_frame: InputFrame
    ) -> LaneShooterTickContext:
        dt = 0.0 if self._last_tick is None else (now - self._last_tick) / 1000
        return LaneShooterTickContext(
            input_frame=input_frame,
            dt=max(dt, 0.0),
            world=self.state,
            commands=CommandQueue(),
            now=now,
            settings=self.settings,
            physics=self.physics,
            rng=self.rng,
            heading=self.heading,
        )

    def _render_state(self, ctx: LaneShooterTickContext) -> RenderState:
        return RenderState(
            phase=self.state.phase,
            score=self.state.score,
            score_text=ctx.score_text,
            info_text=ctx.info_text,
            heading=self.heading,
        )

    def tick(
        self, now: float | None = None, input_frame: InputFrame | None = None
    ) -> RenderState:
        """
        Run one frame of the game and report what to draw.

        Contacts held back during the frame are applied before the texts
        are built, so the result always matches the final state.
        """
        now = self.clock.now() if now is None else now
        frame = input_frame or InputFrame()

        if self.state.is_over and frame.restart_pressed:
            self.restart()
        elif frame.launcher_pressed:
            self.press_launcher()

        ctx = self._get_tick_context(now, frame)
        self._in_tick = True
        try:
            self.systems.step(ctx)
        finally:
            self._in_tick = False
        self._last_tick = now
        self.heading = ctx.heading

        pending, self._pending = self._pending, []
        applied = [self.handle_contact(contact) for contact in pending]
        if any(applied):
            self.display.step(ctx)

        return self._render_state(ctx)

    def render(self, now: float | None = None) -> RenderState:
        """
        Report what to draw without advancing the game, e.g. after the
        physics world dispatched contacts between two ticks.
        """
        now = self.clock.now() if now is None else now
        ctx = self._get_tick_context(now, InputFrame())
        self.display.step(ctx)
        return self._render_state(ctx)
