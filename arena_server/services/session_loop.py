# arena_server/services/session_loop.py
"""Fixed-rate simulation loop for running sessions."""

import random
from typing import Callable, Dict, List, Optional

from loguru import logger

from arena_server.config.settings import DEFEAT_GRACE_SECONDS, TICK_INTERVAL
from arena_server.models.entities import Player, Projectile, Session
from arena_server.models.events import Broadcaster
from arena_server.services.combat import CombatResolver
from arena_server.services.enemy_ai import EnemyAI
from arena_server.services.wave_director import WaveDirector
from arena_server.utils.helpers import is_out_of_bounds, random_respawn_position, step_towards
from arena_server.utils.scheduler import Scheduler


class SessionLoop:
    """Advances sessions one tick at a time.

    A tick runs, in order: projectile update, enemy update, the defeat
    check and the wave completion check. Sessions are looked up by id on
    every tick so a session removed between ticks is simply skipped.
    """

    def __init__(
        self,
        sessions: Dict[str, Session],
        players: Dict[str, Player],
        broadcaster: Broadcaster,
        scheduler: Scheduler,
        on_defeat: Callable[[str], None],
        rng: Optional[random.Random] = None,
    ):
        self.sessions = sessions
        self.players = players
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.on_defeat = on_defeat
        self.rng = rng or random.Random()

        self.combat = CombatResolver(players, broadcaster)
        self.enemy_ai = EnemyAI(self.rng)
        self.wave_director = WaveDirector(self.rng)

    def start(self, session: Session):
        """Schedule ticks for `session` until it stops being active."""
        session_id = session.id
        session.ticker = self.scheduler.start_ticker(
            TICK_INTERVAL, lambda: self.tick(session_id)
        )

    def tick(self, session_id: str) -> bool:
        """Run one simulation step. Returns False once the session should stop ticking."""
        session = self.sessions.get(session_id)
        if session is None or not session.active:
            return False

        self.update_projectiles(session)
        self.update_enemies(session)
        self.check_game_state(session)

        if not session.enemies:
            self.advance_wave(session)

        return session.active

    def roster(self, session: Session) -> List[Player]:
        return [self.players[pid] for pid in session.players if pid in self.players]

    # Projectiles
    def update_projectiles(self, session: Session):
        survivors = []
        for projectile in session.projectiles:
            try:
                if self._advance_projectile(session, projectile):
                    survivors.append(projectile)
            except Exception:
                logger.exception(f"Projectile {projectile.id} failed in session {session.id}")
        session.projectiles = survivors

    def _advance_projectile(self, session: Session, projectile: Projectile) -> bool:
        dx, dy = step_towards(projectile.angle, projectile.speed)
        projectile.position.x += dx
        projectile.position.y += dy
        projectile.timeToLive -= 1

        if self.combat.resolve_projectile(session, projectile):
            return False

        return projectile.timeToLive > 0 and not is_out_of_bounds(projectile.position)

    # Enemies
    def update_enemies(self, session: Session):
        players = self.roster(session)

        for enemy in list(session.enemies):
            try:
                target, distance = self.enemy_ai.move(enemy, players)
                self.combat.resolve_contact(session, enemy, target, distance)
            except Exception:
                logger.exception(f"Enemy {enemy.id} failed in session {session.id}")

        self.broadcaster.to_room(
            session.id, "enemiesUpdate", [enemy.to_dict() for enemy in session.enemies]
        )

    # Game state
    def check_game_state(self, session: Session):
        """Arm the one-shot defeat timer once every player is down.

        The timer is not disarmed if someone is revived during the grace
        period; it only goes away when the session ends some other way.
        """
        if not session.players or session.game_over_timer is not None:
            return

        if any(player.alive for player in self.roster(session)):
            return

        session_id = session.id
        logger.info(f"All players down in session {session_id}, defeat in {DEFEAT_GRACE_SECONDS}s")
        session.game_over_timer = self.scheduler.call_later(
            DEFEAT_GRACE_SECONDS, lambda: self.on_defeat(session_id)
        )

    def advance_wave(self, session: Session):
        session.wave += 1
        logger.info(f"Session {session.id} advancing to wave {session.wave}")

        self.respawn_dead_players(session)
        self.broadcaster.to_room(session.id, "newWave", session.wave)
        self.spawn_wave(session)

    def spawn_wave(self, session: Session):
        enemies = self.wave_director.spawn_wave(session, session.wave)
        self.broadcaster.to_room(
            session.id, "enemiesSpawned", [enemy.to_dict() for enemy in enemies]
        )

    def respawn_dead_players(self, session: Session):
        for player in self.roster(session):
            if player.alive:
                continue

            player.health = player.maxHealth
            player.position = random_respawn_position(self.rng)
            self.broadcaster.to_room(
                session.id,
                "playerRespawned",
                {
                    "id": player.id,
                    "position": {"x": player.position.x, "y": player.position.y},
                    "health": player.health,
                    "maxHealth": player.maxHealth,
                },
            )
