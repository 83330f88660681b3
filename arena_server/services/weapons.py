# arena_server/services/weapons.py
"""Projectile fan-out for a player's fire action."""

import math
import uuid
from typing import List

from arena_server.config.settings import (
    DUAL_GUN_OFFSET,
    PROJECTILE_SPEED,
    PROJECTILE_TTL,
    SHOTGUN_PELLETS,
    SHOTGUN_SIDE_DAMAGE,
    SHOTGUN_SPREAD,
)
from arena_server.models.entities import Player, Position, Projectile


def _projectile(player: Player, position: Position, angle: float, damage: float) -> Projectile:
    return Projectile(
        id=uuid.uuid4().hex,
        ownerId=player.id,
        position=position,
        angle=angle,
        speed=PROJECTILE_SPEED,
        damage=damage,
        timeToLive=PROJECTILE_TTL,
    )


def fire(player: Player, angle: float) -> List[Projectile]:
    """Build the projectiles one shot of `player`'s weapon produces."""
    if player.weaponType == "dual":
        perpendicular = angle + math.pi / 2
        ox = math.cos(perpendicular) * DUAL_GUN_OFFSET
        oy = math.sin(perpendicular) * DUAL_GUN_OFFSET
        x, y = player.position.x, player.position.y
        return [
            _projectile(player, Position(x + ox, y + oy), angle, player.damage),
            _projectile(player, Position(x - ox, y - oy), angle, player.damage),
        ]

    if player.weaponType == "shotgun":
        half = SHOTGUN_PELLETS // 2
        projectiles = []
        for i in range(-half, half + 1):
            # Center pellet deals full damage
            damage = player.damage if i == 0 else player.damage * SHOTGUN_SIDE_DAMAGE
            projectiles.append(
                _projectile(
                    player,
                    player.position.copy(),
                    angle + i * SHOTGUN_SPREAD / 2,
                    damage,
                )
            )
        return projectiles

    return [_projectile(player, player.position.copy(), angle, player.damage)]
