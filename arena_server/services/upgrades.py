# arena_server/services/upgrades.py
"""Experience-funded player upgrades."""

from typing import Callable, Dict, Optional

from arena_server.config.settings import UPGRADE_COSTS
from arena_server.models.entities import Player


def _add_max_health(player: Player, amount: float):
    player.maxHealth += amount
    player.health = min(player.health + amount, player.maxHealth)


def _speed(player: Player):
    player.speed += 0.5


def _damage(player: Player):
    player.damage += 2


def _fire_rate(player: Player):
    player.fireRate += 0.5


def _health(player: Player):
    _add_max_health(player, 10)


def _evolve(player: Player):
    player.type = "advanced"
    player.damage += 5
    _add_max_health(player, 20)


def _dual_guns(player: Player):
    player.weaponType = "dual"
    player.damage += 3


def _shotgun(player: Player):
    player.weaponType = "shotgun"
    player.damage += 1


UPGRADES: Dict[str, Callable[[Player], None]] = {
    "speed": _speed,
    "damage": _damage,
    "fireRate": _fire_rate,
    "health": _health,
    "evolve": _evolve,
    "dualGuns": _dual_guns,
    "shotgun": _shotgun,
}

# Extra preconditions beyond having enough experience
REQUIREMENTS: Dict[str, Callable[[Player], bool]] = {
    "evolve": lambda player: player.type == "basic",
}


def apply_upgrade(player: Player, upgrade: str) -> Optional[dict]:
    """Apply `upgrade` if affordable and allowed.

    Returns the player's updated stats, or None when nothing changed.
    """
    effect = UPGRADES.get(upgrade)
    if effect is None:
        return None

    cost = UPGRADE_COSTS[upgrade]
    if player.experience < cost:
        return None

    requirement = REQUIREMENTS.get(upgrade)
    if requirement is not None and not requirement(player):
        return None

    effect(player)
    player.experience -= cost
    return {**player.stats(), "upgradeApplied": upgrade}
