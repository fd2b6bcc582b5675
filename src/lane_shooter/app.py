"""
Pygame front end for Lane Shooter.
"""

from __future__ import annotations

import argparse
import random
from typing import Sequence

import pygame
from pygame.math import Vector2

from lane_shooter import constants
from lane_shooter.entities import BodyKind
from lane_shooter.exceptions import SettingsError
from lane_shooter.physics import ArcadePhysics
from lane_shooter.scenes.lane_shooter import GameSession, InputFrame, RenderState
from lane_shooter.settings import GameSettings
from lane_shooter.utils import LOG_LEVELS, configure_logging, logger, set_screen

BACKGROUND_COLOR = (30, 30, 30)
TEXT_COLOR = (255, 255, 255)
FLOOR_COLOR = (120, 120, 120)
LAUNCHER_COLOR = (230, 200, 60)
PROJECTILE_COLOR = (240, 240, 240)
ENEMY_COLOR = (200, 60, 60)


class LaneShooter:
    """
    Owns the window, one physics world and one game session.
    """

    _carry_on = True

    def __init__(self, settings: GameSettings, seed: int | None = None):
        self.settings = settings
        pygame.init()
        self._screen = set_screen(
            "Lane Shooter", settings.window.width, settings.window.height
        )
        self._font = pygame.font.Font(None, 22)
        self._clock = pygame.time.Clock()

        self.physics = ArcadePhysics(settings.window.width, settings.window.height)
        self.session = GameSession(
            self.physics, settings=settings, rng=random.Random(seed)
        )

    def _launcher_rect(self) -> pygame.Rect | None:
        launcher_id = self.session.state.launcher_id
        for body in self.physics.bodies(BodyKind.LAUNCHER):
            if body.body_id == launcher_id:
                return body.rect
        return None

    def handle_events(self) -> InputFrame:
        launcher_pressed = False
        restart_pressed = False
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logger.debug("Quitting the game")
                self._carry_on = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self._carry_on = False
            elif event.type == pygame.KEYUP and event.key == pygame.K_r:
                restart_pressed = True
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                rect = self._launcher_rect()
                if rect is not None and rect.collidepoint(event.pos):
                    launcher_pressed = True

        return InputFrame(
            pointer=pygame.mouse.get_pos(),
            pointer_down=pygame.mouse.get_pressed()[0],
            launcher_pressed=launcher_pressed,
            restart_pressed=restart_pressed,
        )

    def draw_stuff(self, render: RenderState):
        self._screen.fill(BACKGROUND_COLOR)

        for body in self.physics.bodies(BodyKind.FLOOR):
            pygame.draw.rect(self._screen, FLOOR_COLOR, body.rect)
        for body in self.physics.bodies(BodyKind.ENEMY):
            pygame.draw.rect(self._screen, ENEMY_COLOR, body.rect)
        for body in self.physics.bodies(BodyKind.PROJECTILE):
            pygame.draw.circle(
                self._screen, PROJECTILE_COLOR, body.rect.center, body.half_width
            )
        for body in self.physics.bodies(BodyKind.LAUNCHER):
            tip = Vector2(0, -body.half_height).rotate(render.heading)
            pygame.draw.line(
                self._screen,
                LAUNCHER_COLOR,
                body.position - tip,
                body.position + tip,
                4,
            )
            pygame.draw.circle(self._screen, LAUNCHER_COLOR, body.position + tip, 6)

        score = self._font.render(render.score_text, True, TEXT_COLOR)
        info = self._font.render(render.info_text, True, TEXT_COLOR)
        self._screen.blit(score, constants.SCORE_TEXT_POS)
        self._screen.blit(info, constants.INFO_TEXT_POS)
        pygame.display.flip()

    def run(self):
        logger.info("Starting Lane Shooter...")
        logger.info(self.settings.to_dict())
        while self._carry_on:
            dt = frame_time(self._clock.tick(self.settings.window.fps))
            self.session.tick(input_frame=self.handle_events())
            # contacts are dispatched here, between two ticks
            self.physics.step(dt)
            self.draw_stuff(self.session.render())
        pygame.quit()


def frame_time(elapsed_ms: float) -> float:
    """
    Seconds to simulate for a frame. Capped so a stall (window drag,
    breakpoint) does not move everything at once.
    """
    return min(elapsed_ms / 1000.0, constants.MAX_FRAME_TIME)


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lane-shooter",
        description="Aim, shoot and keep the enemies off the floor.",
    )
    parser.add_argument("--fps", type=positive_int, default=constants.FPS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--lanes",
        type=positive_int,
        default=None,
        help="number of spawn lanes; lanes always span the window",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def build_settings(args: argparse.Namespace) -> GameSettings:
    data: dict[str, dict] = {"window": {"fps": args.fps}}
    if args.lanes is not None:
        width = constants.WINDOW_SIZE[0]
        data["lanes"] = {"count": args.lanes, "width": width / args.lanes}
    return GameSettings.from_dict(data)


def run(argv: Sequence[str] | None = None):
    """
    Main entry point for Lane Shooter.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = build_settings(args)
    except SettingsError as exc:
        parser.error(str(exc))
    configure_logging(args.log_level)
    LaneShooter(settings, seed=args.seed).run()


if __name__ == "__main__":
    run()
