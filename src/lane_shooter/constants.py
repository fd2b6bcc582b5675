"""
Constants for the game.
"""

from __future__ import annotations

FPS = 60
WINDOW_SIZE = (800, 600)

# Launcher arrow and floor line
LAUNCHER_POS = (400, 500)
FLOOR_POS = (400, 515)
FLOOR_SIZE = (800, 10)

SCORE_TEXT_POS = (16, 536)
INFO_TEXT_POS = (16, 568)

# Shots (times are in milliseconds)
PROJECTILE_SPEED = 150.0
PROJECTILE_SIZE = (16, 16)
SHOT_COOLDOWN_MS = 3000

# Lanes
LANE_COUNT = 10
LANE_WIDTH = 80
SPAWN_COOLDOWN_MS = 1000
SPAWN_CHANCE_PER_TICK = 0.0005
SPAWN_Y = 15
MIN_TOPMOST_SPAWN_Y = 40

# Enemies
ENEMY_SIZE = (32, 32)
ENEMY_MIN_SPEED = 10.0
ENEMY_MAX_SPEED = 50.0
ENEMY_REWARD = 10

# Physics (seconds)
PHYSICS_MAX_SUBSTEP = 1 / 60
MAX_FRAME_TIME = 0.25
