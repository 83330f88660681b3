# arena_server/utils/helpers.py
"""Utility functions and helpers."""

import math
import random
from typing import Tuple

from arena_server.config.settings import ARENA_HEIGHT, ARENA_MARGIN, ARENA_WIDTH, RESPAWN_AREA
from arena_server.models.entities import Position


def calculate_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Calculate distance between two points."""
    return math.hypot(x2 - x1, y2 - y1)


def distance_between(a: Position, b: Position) -> float:
    return calculate_distance(a.x, a.y, b.x, b.y)


def step_towards(angle: float, speed: float) -> Tuple[float, float]:
    """Displacement of one step of `speed` along `angle`."""
    return math.cos(angle) * speed, math.sin(angle) * speed


def clamp_to_arena(x: float, y: float) -> Tuple[float, float]:
    """Clamp position to arena boundaries."""
    return (
        max(0.0, min(x, ARENA_WIDTH)),
        max(0.0, min(y, ARENA_HEIGHT)),
    )


def is_out_of_bounds(position: Position, margin: float = ARENA_MARGIN) -> bool:
    """True once a point has left the arena plus `margin` on any side."""
    return (
        position.x < -margin
        or position.x > ARENA_WIDTH + margin
        or position.y < -margin
        or position.y > ARENA_HEIGHT + margin
    )


def random_respawn_position(rng: random.Random) -> Position:
    """Pick a random point inside the central respawn area."""
    x, y, width, height = RESPAWN_AREA
    return Position(x + rng.random() * width, y + rng.random() * height)
