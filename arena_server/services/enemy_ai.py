# arena_server/services/enemy_ai.py
"""Greedy per-tick enemy targeting and movement."""

import math
import random
from typing import Iterable, Optional, Tuple

from arena_server.config.settings import ARENA_HEIGHT, ARENA_WIDTH, ENEMY_JITTER
from arena_server.models.entities import Enemy, Player
from arena_server.utils.helpers import distance_between, step_towards


class EnemyAI:
    """Moves each enemy one step toward the nearest living player.

    Memoryless: the target is re-chosen every tick and there is no
    path-finding or avoidance. With nobody alive, enemies drift to the
    arena center.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def choose_target(
        self, enemy: Enemy, players: Iterable[Player]
    ) -> Tuple[Optional[Player], float]:
        """Return the nearest living player and the distance to it."""
        closest = None
        min_distance = math.inf
        alive = []

        for player in players:
            if not player.alive:
                continue
            alive.append(player)
            distance = distance_between(player.position, enemy.position)
            if distance < min_distance:
                min_distance = distance
                closest = player

        if closest is None and alive:
            closest = self.rng.choice(alive)
            min_distance = distance_between(closest.position, enemy.position)

        return closest, min_distance

    def jitter(self) -> float:
        return (self.rng.random() - 0.5) * ENEMY_JITTER

    def move(self, enemy: Enemy, players: Iterable[Player]) -> Tuple[Optional[Player], float]:
        """Advance one enemy and return its target with the pre-move distance."""
        target, distance = self.choose_target(enemy, players)

        if target is not None:
            dx = target.position.x - enemy.position.x
            dy = target.position.y - enemy.position.y
            angle = math.atan2(dy, dx)
            enemy.position.x += (math.cos(angle) + self.jitter()) * enemy.speed
            enemy.position.y += (math.sin(angle) + self.jitter()) * enemy.speed
        else:
            angle = math.atan2(
                ARENA_HEIGHT / 2 - enemy.position.y, ARENA_WIDTH / 2 - enemy.position.x
            )
            dx, dy = step_towards(angle, enemy.speed)
            enemy.position.x += dx
            enemy.position.y += dy

        return target, distance
