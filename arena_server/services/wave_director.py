# arena_server/services/wave_director.py
"""Wave composition and enemy spawning."""

import random
import uuid
from dataclasses import dataclass
from typing import List, Optional

from arena_server.config.settings import (
    ARENA_HEIGHT,
    ARENA_WIDTH,
    DIVERSITY_MIN_WAVE,
    ENEMY_DEFAULT_RADIUS,
    ENEMY_TYPES,
    SPAWN_OFFSET,
    WAVE_BASE_COUNT,
    WAVE_BASE_DAMAGE,
    WAVE_BASE_EXP,
    WAVE_BASE_HEALTH,
    WAVE_BASE_SPEED,
    WAVE_COUNT_PER_WAVE,
    WAVE_DAMAGE_PER_WAVE,
    WAVE_EXP_PER_WAVE,
    WAVE_HEALTH_PER_WAVE,
    WAVE_SPEED_PER_WAVE,
)
from arena_server.models.entities import Enemy, Position, Session


@dataclass
class WaveStats:
    """Base stats every enemy of a wave is scaled from."""

    wave: int
    count: int
    health: float
    damage: float
    speed: float
    exp: float


def enemy_count(wave: int) -> int:
    return WAVE_BASE_COUNT + WAVE_COUNT_PER_WAVE * wave


def wave_stats(wave: int) -> WaveStats:
    return WaveStats(
        wave=wave,
        count=enemy_count(wave),
        health=WAVE_BASE_HEALTH + WAVE_HEALTH_PER_WAVE * wave,
        damage=WAVE_BASE_DAMAGE + WAVE_DAMAGE_PER_WAVE * wave,
        speed=WAVE_BASE_SPEED + WAVE_SPEED_PER_WAVE * wave,
        exp=WAVE_BASE_EXP + WAVE_EXP_PER_WAVE * wave,
    )


def select_enemy_type(wave: int, roll: float) -> Optional[tuple]:
    """Return the ENEMY_TYPES row a roll lands on, or None for a basic enemy.

    Rows are checked in declaration order; the first whose minimum wave is
    reached and whose threshold exceeds the roll wins.
    """
    if wave < DIVERSITY_MIN_WAVE:
        return None

    for row in ENEMY_TYPES:
        _, min_wave, threshold = row[:3]
        if wave >= min_wave and roll < threshold:
            return row
    return None


class WaveDirector:
    """Builds and spawns the enemies of each wave."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def spawn_position(self) -> Position:
        """Uniform point just outside one of the four arena edges."""
        side = self.rng.randrange(4)
        if side == 0:  # top
            return Position(self.rng.random() * ARENA_WIDTH, -SPAWN_OFFSET)
        if side == 1:  # right
            return Position(ARENA_WIDTH + SPAWN_OFFSET, self.rng.random() * ARENA_HEIGHT)
        if side == 2:  # bottom
            return Position(self.rng.random() * ARENA_WIDTH, ARENA_HEIGHT + SPAWN_OFFSET)
        return Position(-SPAWN_OFFSET, self.rng.random() * ARENA_HEIGHT)  # left

    def build_enemy(self, stats: WaveStats) -> Enemy:
        position = self.spawn_position()
        row = None
        if stats.wave >= DIVERSITY_MIN_WAVE:
            row = select_enemy_type(stats.wave, self.rng.random())

        if row is None:
            enemy_type, health_mult, damage_mult, speed_mult, exp_mult = "basic", 1, 1, 1, 1
            radius = ENEMY_DEFAULT_RADIUS
        else:
            enemy_type, _, _, health_mult, damage_mult, speed_mult, exp_mult, radius = row

        health = stats.health * health_mult
        return Enemy(
            id=uuid.uuid4().hex,
            type=enemy_type,
            position=position,
            radius=radius,
            health=health,
            maxHealth=health,
            damage=stats.damage * damage_mult,
            speed=stats.speed * speed_mult,
            expValue=stats.exp * exp_mult,
        )

    def build_wave(self, wave: int) -> List[Enemy]:
        stats = wave_stats(wave)
        return [self.build_enemy(stats) for _ in range(stats.count)]

    def spawn_wave(self, session: Session, wave: int) -> List[Enemy]:
        """Add wave `wave`'s enemies to the session and return the new batch."""
        enemies = self.build_wave(wave)
        session.enemies.extend(enemies)
        return enemies
