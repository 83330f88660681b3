# arena_server/models/entities.py
"""Game entity models and data classes."""

from dataclasses import dataclass, field, asdict
from typing import Any, List, Optional

from arena_server.config.settings import (
    ENEMY_DEFAULT_RADIUS,
    PLAYER_BASE_DAMAGE,
    PLAYER_BASE_FIRE_RATE,
    PLAYER_BASE_HEALTH,
    PLAYER_BASE_SPEED,
    PLAYER_START_X,
    PLAYER_START_Y,
)


@dataclass
class Position:
    x: float
    y: float

    def copy(self) -> "Position":
        return Position(self.x, self.y)


@dataclass
class Player:
    """Represents a connected player."""

    id: str
    name: str
    position: Position = field(
        default_factory=lambda: Position(PLAYER_START_X, PLAYER_START_Y)
    )
    angle: float = 0.0
    health: float = PLAYER_BASE_HEALTH
    maxHealth: float = PLAYER_BASE_HEALTH
    experience: float = 0
    level: int = 1
    speed: float = PLAYER_BASE_SPEED
    damage: float = PLAYER_BASE_DAMAGE
    fireRate: float = PLAYER_BASE_FIRE_RATE
    type: str = "basic"  # basic | advanced
    weaponType: str = "normal"  # normal | dual | shotgun
    party: Optional[str] = None
    game: Optional[str] = None

    @property
    def alive(self) -> bool:
        return self.health > 0

    def to_dict(self) -> dict:
        return asdict(self)

    def stats(self) -> dict:
        """Snapshot of the upgradeable stats sent after an upgrade."""
        return {
            "id": self.id,
            "type": self.type,
            "weaponType": self.weaponType,
            "health": self.health,
            "maxHealth": self.maxHealth,
            "experience": self.experience,
            "level": self.level,
            "speed": self.speed,
            "damage": self.damage,
            "fireRate": self.fireRate,
        }


@dataclass
class Enemy:
    """Represents a hostile spawned by a wave."""

    id: str
    type: str  # basic | advanced | fast | tank | boss
    position: Position
    health: float
    maxHealth: float
    damage: float
    speed: float
    expValue: float
    radius: float = ENEMY_DEFAULT_RADIUS

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Projectile:
    """Represents a bullet fired by a player."""

    id: str
    ownerId: str
    position: Position
    angle: float
    speed: float
    damage: float
    timeToLive: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Party:
    """Pre-game grouping of up to MAX_PARTY_SIZE players."""

    id: str
    leader: str
    members: List[str] = field(default_factory=list)
    status: str = "waiting"  # waiting | playing
    game: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Session:
    """One running match owned by a party."""

    id: str
    partyId: Optional[str]
    players: List[str] = field(default_factory=list)
    wave: int = 1
    enemies: List[Enemy] = field(default_factory=list)
    projectiles: List[Projectile] = field(default_factory=list)
    status: str = "active"  # active | ended
    startTime: float = 0.0
    game_over_timer: Any = field(default=None, repr=False)
    cleanup_timer: Any = field(default=None, repr=False)
    ticker: Any = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self.status == "active"
