# arena_server/services/game_service.py
"""Registry of players, parties and sessions, and every lifecycle transition between them."""

import random
import time
import uuid
from typing import Dict, List, Optional

from loguru import logger

from arena_server.config.settings import MAX_PARTY_SIZE, SESSION_CLEANUP_SECONDS
from arena_server.models.entities import Party, Player, Session
from arena_server.models.events import Broadcaster
from arena_server.services.session_loop import SessionLoop
from arena_server.services.upgrades import apply_upgrade
from arena_server.services.weapons import fire
from arena_server.utils.helpers import clamp_to_arena, random_respawn_position
from arena_server.utils.scheduler import Scheduler


class GameService:
    """Owns all shared game state.

    Every mutation happens synchronously on the caller's thread; handlers
    and the session ticker are interleaved by the event loop, never run
    concurrently. Actions naming a player, party or session that no longer
    exists are ignored.
    """

    def __init__(
        self,
        broadcaster: Broadcaster,
        scheduler: Scheduler,
        rng: Optional[random.Random] = None,
    ):
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.rng = rng or random.Random()

        self.players: Dict[str, Player] = {}
        self.parties: Dict[str, Party] = {}
        self.sessions: Dict[str, Session] = {}

        self.loop = SessionLoop(
            self.sessions,
            self.players,
            broadcaster,
            scheduler,
            on_defeat=lambda session_id: self.end_game(session_id, "defeat"),
            rng=self.rng,
        )

    # Players
    def create_player(self, player_id: Optional[str] = None) -> Player:
        """Create a new player with default stats."""
        player_id = player_id or uuid.uuid4().hex
        player = Player(id=player_id, name=f"Player-{player_id[:4]}")
        self.players[player_id] = player
        return player

    def remove_player(self, player_id: str):
        """Remove a player, leaving any party and session first."""
        player = self.players.get(player_id)
        if player is None:
            return

        if player.party:
            self.leave_party(player_id)
        if player.game:
            self.leave_game(player_id)

        del self.players[player_id]

    def update_player(self, player_id: str, x: float, y: float, angle: float):
        """Update player position and facing, relayed to the rest of the session."""
        player = self.players.get(player_id)
        if player is None or not player.game:
            return

        player.position.x, player.position.y = clamp_to_arena(x, y)
        player.angle = angle
        self.broadcaster.to_room(
            player.game,
            "playerMove",
            {
                "id": player_id,
                "position": {"x": player.position.x, "y": player.position.y},
                "angle": player.angle,
            },
            exclude=player_id,
        )

    def shoot(self, player_id: str, angle: float) -> List:
        """Fire the player's weapon into their session."""
        player = self.players.get(player_id)
        if player is None or not player.game or not player.alive:
            return []

        session = self.sessions.get(player.game)
        if session is None or not session.active:
            return []

        projectiles = fire(player, angle)
        session.projectiles.extend(projectiles)
        for projectile in projectiles:
            self.broadcaster.to_room(session.id, "newProjectile", projectile.to_dict())
        return projectiles

    def upgrade_player(self, player_id: str, upgrade: str) -> Optional[dict]:
        player = self.players.get(player_id)
        if player is None:
            return None

        update = apply_upgrade(player, upgrade)
        if update is None:
            logger.debug(f"Upgrade {upgrade} rejected for player {player_id}")
            return None

        self.broadcaster.to_player(player_id, "playerUpdate", update)
        if player.game:
            self.broadcaster.to_room(player.game, "playerUpdated", update, exclude=player_id)

        logger.info(f"Player {player_id} upgraded: {upgrade}")
        return update

    def get_party_member_details(self, player_ids: List[str]) -> List[dict]:
        details = []
        for player_id in player_ids:
            player = self.players.get(player_id)
            if player is None:
                details.append({"id": player_id, "name": f"Unknown-{player_id[:4]}"})
            else:
                details.append({"id": player.id, "name": player.name})
        return details

    # Parties
    def get_party_list(self) -> List[dict]:
        """Parties still accepting members."""
        return [
            {"id": party.id, "players": len(party.members), "maxPlayers": MAX_PARTY_SIZE}
            for party in self.parties.values()
            if party.status == "waiting"
        ]

    def broadcast_party_list(self):
        self.broadcaster.to_all("partyList", self.get_party_list())

    def _party_error(self, player_id: str, message: str):
        logger.debug(f"Party error for {player_id}: {message}")
        self.broadcaster.to_player(player_id, "partyError", {"message": message})

    def create_party(self, player_id: str, name: Optional[str] = None) -> Optional[Party]:
        player = self.players.get(player_id)
        if player is None:
            return None

        if name:
            player.name = name
        if player.party:
            self.leave_party(player_id)

        party = Party(id=uuid.uuid4().hex, leader=player_id, members=[player_id])
        self.parties[party.id] = party
        player.party = party.id
        self.broadcaster.join(player_id, party.id)

        logger.info(f"Player {player_id} created party {party.id}")
        self.broadcaster.to_player(player_id, "partyCreated", party.to_dict())
        self.broadcast_party_list()
        return party

    def join_party(
        self, player_id: str, party_id: str, player_name: Optional[str] = None
    ) -> Optional[Party]:
        player = self.players.get(player_id)
        if player is None:
            return None

        if player_name:
            player.name = player_name

        party = self.parties.get(party_id)
        if party is None:
            self._party_error(player_id, "Party does not exist")
            return None
        if player_id in party.members:
            self.broadcaster.to_player(player_id, "partyJoined", party.to_dict())
            return party
        if len(party.members) >= MAX_PARTY_SIZE:
            self._party_error(player_id, "Party is full")
            return None
        if party.status != "waiting":
            self._party_error(player_id, "Party already started a game")
            return None

        if player.party:
            self.leave_party(player_id)

        party.members.append(player_id)
        player.party = party_id
        self.broadcaster.join(player_id, party_id)

        logger.info(f"Player {player_id} joined party {party_id}")
        self.broadcaster.to_player(player_id, "partyJoined", party.to_dict())
        self.broadcaster.to_room(party_id, "partyUpdate", party.to_dict())
        self.broadcast_party_list()
        return party

    def leave_party(self, player_id: str):
        player = self.players.get(player_id)
        if player is None or not player.party:
            return

        party_id = player.party
        player.party = None
        party = self.parties.get(party_id)
        if party is None:
            return

        if player_id in party.members:
            party.members.remove(player_id)
        self.broadcaster.leave(player_id, party_id)

        if not party.members:
            del self.parties[party_id]
            logger.info(f"Party {party_id} disbanded")
        else:
            if party.leader == player_id:
                party.leader = party.members[0]
            self.broadcaster.to_room(party_id, "partyUpdate", party.to_dict())

        self.broadcast_party_list()

    # Sessions
    def start_game(self, player_id: str) -> Optional[Session]:
        """Leader-only: turn the player's party into a running session."""
        player = self.players.get(player_id)
        if player is None:
            return None

        party = self.parties.get(player.party) if player.party else None
        if party is None:
            self.broadcaster.to_player(player_id, "gameError", {"message": "You are not in a party"})
            return None
        if party.leader != player_id:
            self.broadcaster.to_player(
                player_id, "gameError", {"message": "Only party leader can start the game"}
            )
            return None
        if party.status != "waiting":
            self.broadcaster.to_player(player_id, "gameError", {"message": "Game already in progress"})
            return None

        return self._start_session(party)

    def _start_session(self, party: Party) -> Session:
        session = Session(
            id=uuid.uuid4().hex,
            partyId=party.id,
            players=list(party.members),
            startTime=time.time(),
        )
        self.sessions[session.id] = session
        party.status = "playing"
        party.game = session.id

        roster = []
        for member_id in session.players:
            member = self.players.get(member_id)
            if member is None:
                continue
            member.game = session.id
            member.position = random_respawn_position(self.rng)
            member.health = member.maxHealth
            member.experience = 0
            self.broadcaster.join(member_id, session.id)
            roster.append(member.to_dict())

        logger.info(f"Party {party.id} started session {session.id} with {len(roster)} players")
        self.broadcaster.to_room(
            session.id, "gameStarted", {"id": session.id, "wave": session.wave, "players": roster}
        )
        self.broadcast_party_list()

        self.loop.spawn_wave(session)
        self.loop.start(session)
        return session

    def _release_party(self, session: Session):
        party = self.parties.get(session.partyId) if session.partyId else None
        if party is not None and party.game == session.id:
            party.status = "waiting"
            party.game = None

    def _stop_session(self, session: Session):
        session.status = "ended"
        for attr in ("game_over_timer", "ticker"):
            handle = getattr(session, attr)
            if handle is not None:
                handle.cancel()
                setattr(session, attr, None)

    def leave_game(self, player_id: str):
        player = self.players.get(player_id)
        if player is None or not player.game:
            return

        session_id = player.game
        player.game = None
        session = self.sessions.get(session_id)
        if session is None:
            return

        if player_id in session.players:
            session.players.remove(player_id)
        self.broadcaster.leave(player_id, session_id)
        self.broadcaster.to_room(session_id, "playerLeft", player_id)

        if not session.players:
            logger.info(f"Session {session_id} abandoned")
            self._stop_session(session)
            if session.cleanup_timer is not None:
                session.cleanup_timer.cancel()
            del self.sessions[session_id]
            self._release_party(session)
            self.broadcast_party_list()

    def end_game(self, session_id: str, result: str):
        """Finish a session, return its party to the lobby and schedule removal."""
        session = self.sessions.get(session_id)
        if session is None or not session.active:
            return

        self._stop_session(session)
        logger.info(f"Session {session_id} ended: {result} at wave {session.wave}")
        self.broadcaster.to_room(session_id, "gameOver", {"result": result, "wave": session.wave})

        self._release_party(session)
        for player_id in session.players:
            player = self.players.get(player_id)
            if player is not None and player.game == session_id:
                player.game = None
                player.health = player.maxHealth
            self.broadcaster.leave(player_id, session_id)

        session.cleanup_timer = self.scheduler.call_later(
            SESSION_CLEANUP_SECONDS, lambda: self._remove_session(session_id, session)
        )
        self.broadcast_party_list()

    def _remove_session(self, session_id: str, session: Session):
        if self.sessions.get(session_id) is session:
            del self.sessions[session_id]

    # Getter methods for game state
    def get_stats(self) -> dict:
        return {
            "totalPlayers": len(self.players),
            "totalParties": len(self.parties),
            "totalSessions": len(self.sessions),
            "activeSessions": sum(1 for s in self.sessions.values() if s.active),
            "totalEnemies": sum(len(s.enemies) for s in self.sessions.values()),
            "totalProjectiles": sum(len(s.projectiles) for s in self.sessions.values()),
        }
