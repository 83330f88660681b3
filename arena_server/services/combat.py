# arena_server/services/combat.py
"""Collision detection and damage between projectiles, enemies and players."""

from typing import Dict, Optional

from loguru import logger

from arena_server.config.settings import HIT_FORGIVENESS, PLAYER_RADIUS, PROJECTILE_RADIUS
from arena_server.models.entities import Enemy, Player, Projectile, Session
from arena_server.models.events import Broadcaster
from arena_server.utils.helpers import distance_between


def projectile_hits(projectile: Projectile, enemy: Enemy) -> bool:
    """Hit test with a small forgiveness band around the enemy."""
    distance = distance_between(projectile.position, enemy.position)
    return distance < enemy.radius + PROJECTILE_RADIUS + HIT_FORGIVENESS


def contact_range(enemy: Enemy) -> float:
    return PLAYER_RADIUS + enemy.radius


class CombatResolver:
    """Applies damage and emits the resulting events to the session room."""

    def __init__(self, players: Dict[str, Player], broadcaster: Broadcaster):
        self.players = players
        self.broadcaster = broadcaster

    def resolve_projectile(self, session: Session, projectile: Projectile) -> bool:
        """Resolve one projectile against the session's enemies.

        Only the first overlapping enemy in list order is damaged. Returns
        True when the projectile hit something and must be removed.
        """
        for index, enemy in enumerate(session.enemies):
            if not projectile_hits(projectile, enemy):
                continue

            enemy.health -= projectile.damage
            if enemy.health <= 0:
                del session.enemies[index]
                self._award_experience(session, projectile.ownerId, enemy)
                self.broadcaster.to_room(session.id, "enemyDestroyed", enemy.id)
            else:
                self.broadcaster.to_room(
                    session.id,
                    "enemyDamaged",
                    {"id": enemy.id, "health": enemy.health, "maxHealth": enemy.maxHealth},
                )
            return True

        return False

    def _award_experience(self, session: Session, owner_id: str, enemy: Enemy):
        owner = self.players.get(owner_id)
        if owner is None:
            return

        owner.experience += enemy.expValue
        self.broadcaster.to_room(
            session.id, "playerXp", {"id": owner.id, "experience": owner.experience}
        )

    def resolve_contact(
        self, session: Session, enemy: Enemy, target: Optional[Player], distance: float
    ) -> bool:
        """Damage `target` if `enemy` touches it. Contact damage applies every tick.

        `playerDied` is sent only on the tick health crosses zero.
        """
        if target is None or distance >= contact_range(enemy):
            return False

        was_alive = target.alive
        target.health -= enemy.damage
        self.broadcaster.to_room(
            session.id,
            "playerDamaged",
            {"id": target.id, "health": target.health, "maxHealth": target.maxHealth},
        )

        if was_alive and not target.alive:
            logger.info(f"Player {target.id} died in session {session.id}")
            self.broadcaster.to_room(session.id, "playerDied", target.id)

        return True
