"""
Lane Shooter utils
"""

from __future__ import annotations

import logging

import pygame

logger = logging.getLogger("lane_shooter")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """
    Configure the package logger.

    :param level: Logging level, either a number or a level name.
    :type level: int | str

    :raises ValueError: If ``level`` is not a known level name.

    :return: The package logger.
    :rtype: logging.Logger
    """
    if isinstance(level, str):
        name = level.upper()
        if name not in LOG_LEVELS:
            raise ValueError(
                f"unknown log level {level!r}, expected one of {', '.join(LOG_LEVELS)}"
            )
        level = logging.getLevelName(name)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.setLevel(level)
    return logger


def set_screen(caption: str, width: int, height: int) -> pygame.Surface:
    """
    Set the screen

    :param caption: Caption of the screen
    :type caption: str

    :param width: Width of the screen
    :type width: int

    :param height: Height of the screen
    :type height: int

    :return: pygame.Surface
    """
    screen = pygame.display.set_mode((width, height))
    pygame.display.set_caption(caption)

    return screen
