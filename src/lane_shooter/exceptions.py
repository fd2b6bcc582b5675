"""
Lane Shooter exceptions
"""

from __future__ import annotations


class LaneShooterError(Exception):
    """Base class for every error raised by the package."""


class SettingsError(LaneShooterError, ValueError):
    """Raised when game settings are inconsistent."""


class UnknownBodyError(LaneShooterError, KeyError):
    """Raised when the physics world is asked about a body it does not own."""

    def __init__(self, body_id: int):
        super().__init__(body_id)
        self.body_id = body_id

    def __str__(self) -> str:
        return f"unknown body id {self.body_id}"
