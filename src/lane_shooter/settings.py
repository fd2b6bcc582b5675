"""
Game settings.

Defaults come from :mod:`lane_shooter.constants`. Settings are grouped in
sections and can be built from a nested dictionary, e.g. one parsed from the
command line::

    GameSettings.from_dict({"lanes": {"count": 8}, "shots": {"speed": 200}})
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from lane_shooter import constants
from lane_shooter.exceptions import SettingsError


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class WindowSettings(_Section):
    width: int = Field(default=constants.WINDOW_SIZE[0], gt=0)
    height: int = Field(default=constants.WINDOW_SIZE[1], gt=0)
    fps: int = Field(default=constants.FPS, gt=0)


class LauncherSettings(_Section):
    """Launcher anchor and the floor line a release must be below."""

    x: float = constants.LAUNCHER_POS[0]
    y: float = constants.LAUNCHER_POS[1]
    floor_y: float = constants.FLOOR_POS[1]

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


class ShotSettings(_Section):
    speed: float = Field(default=constants.PROJECTILE_SPEED, gt=0)
    cooldown_ms: float = Field(default=constants.SHOT_COOLDOWN_MS, ge=0)


class LaneSettings(_Section):
    count: int = Field(default=constants.LANE_COUNT, gt=0)
    width: float = Field(default=constants.LANE_WIDTH, gt=0)
    spawn_cooldown_ms: float = Field(default=constants.SPAWN_COOLDOWN_MS, ge=0)
    spawn_chance: float = Field(
        default=constants.SPAWN_CHANCE_PER_TICK,
        ge=0.0,
        le=1.0,
        description="Chance per tick that an eligible lane spawns an enemy",
    )
    spawn_y: float = constants.SPAWN_Y
    min_topmost_y: float = Field(
        default=constants.MIN_TOPMOST_SPAWN_Y,
        description="A lane stays closed while an enemy is above this line",
    )


class EnemySettings(_Section):
    min_speed: float = Field(default=constants.ENEMY_MIN_SPEED, ge=0)
    max_speed: float = Field(default=constants.ENEMY_MAX_SPEED, ge=0)
    reward: int = constants.ENEMY_REWARD

    @model_validator(mode="after")
    def check_speed_range(self) -> EnemySettings:
        if self.min_speed > self.max_speed:
            raise ValueError(
                f"min_speed {self.min_speed} is greater than "
                f"max_speed {self.max_speed}"
            )
        return self


class GameSettings(_Section):
    """
    Tunable values for one game session.
    """

    window: WindowSettings = Field(default_factory=WindowSettings)
    launcher: LauncherSettings = Field(default_factory=LauncherSettings)
    shots: ShotSettings = Field(default_factory=ShotSettings)
    lanes: LaneSettings = Field(default_factory=LaneSettings)
    enemies: EnemySettings = Field(default_factory=EnemySettings)

    @classmethod
    def from_dict(cls, data: dict[str, dict[str, Any]]) -> GameSettings:
        """
        Build settings from a nested dictionary, section by section.
        Missing sections and keys keep their defaults.

        :raises SettingsError: On unknown sections/keys or invalid values.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise SettingsError(str(exc)) from exc

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return self.model_dump()
