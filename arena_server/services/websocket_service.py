# arena_server/services/websocket_service.py
"""WebSocket connection management and message handling."""

import asyncio
import json
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket, WebSocketDisconnect
from loguru import logger
from pydantic import ValidationError

from arena_server.config.settings import get_game_config
from arena_server.models.events import OutboundMessage
from arena_server.models.messages import (
    CreatePartyPayload,
    Envelope,
    JoinPartyPayload,
    MemberDetailsPayload,
    PlayerShootPayload,
    PlayerUpdatePayload,
    UpgradePayload,
)
from arena_server.services.game_service import GameService


class Connection:
    """One client socket plus the queue its writer task drains in order."""

    def __init__(self, player_id: str, websocket: WebSocket):
        self.player_id = player_id
        self.websocket = websocket
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.writer: Optional[asyncio.Task] = None
        self.closed = False

    def send(self, message: OutboundMessage):
        if not self.closed:
            self.outbox.put_nowait(message.to_dict())

    async def run_writer(self):
        while True:
            message = await self.outbox.get()
            if message is None:
                return
            try:
                await self.websocket.send_json(message)
            except Exception as e:
                logger.warning(f"Send to player {self.player_id} failed: {e}")
                self.closed = True
                return

    def start(self):
        self.writer = asyncio.create_task(self.run_writer())

    async def close(self):
        self.closed = True
        self.outbox.put_nowait(None)
        if self.writer is not None:
            await self.writer


class ConnectionManager:
    """Tracks live connections and their rooms; implements the game Broadcaster."""

    def __init__(self):
        self.connections: Dict[str, Connection] = {}
        self.rooms: Dict[str, Set[str]] = {}

    def add(self, connection: Connection):
        self.connections[connection.player_id] = connection

    def remove(self, player_id: str) -> Optional[Connection]:
        for members in self.rooms.values():
            members.discard(player_id)
        self.rooms = {room: members for room, members in self.rooms.items() if members}
        return self.connections.pop(player_id, None)

    def join(self, player_id: str, room: str):
        self.rooms.setdefault(room, set()).add(player_id)

    def leave(self, player_id: str, room: str):
        members = self.rooms.get(room)
        if members is None:
            return
        members.discard(player_id)
        if not members:
            del self.rooms[room]

    def to_player(self, player_id: str, event: str, data: Any = None):
        connection = self.connections.get(player_id)
        if connection is not None:
            connection.send(OutboundMessage(event, data))

    def to_room(self, room: str, event: str, data: Any = None, exclude: Optional[str] = None):
        message = OutboundMessage(event, data)
        for player_id in list(self.rooms.get(room, ())):
            if player_id == exclude:
                continue
            connection = self.connections.get(player_id)
            if connection is not None:
                connection.send(message)

    def to_all(self, event: str, data: Any = None):
        message = OutboundMessage(event, data)
        for connection in list(self.connections.values()):
            connection.send(message)

    def reply(self, player_id: str, event: str, data: Any, request_id: Optional[str]):
        connection = self.connections.get(player_id)
        if connection is not None:
            connection.send(OutboundMessage(event, data, requestId=request_id))


class WebSocketService:
    """Routes client messages to the game service."""

    def __init__(self, game_service: GameService, connections: ConnectionManager):
        self.game_service = game_service
        self.connections = connections
        self.handlers = {
            "playerUpdate": self._handle_player_update,
            "playerShoot": self._handle_player_shoot,
            "createParty": self._handle_create_party,
            "joinParty": self._handle_join_party,
            "leaveParty": self._handle_leave_party,
            "startGame": self._handle_start_game,
            "upgradePlayer": self._handle_upgrade_player,
            "requestPartyList": self._handle_request_party_list,
            "getPartyMemberDetails": self._handle_member_details,
        }

    async def handle_connection(self, websocket: WebSocket):
        """Handle a new WebSocket connection."""
        await websocket.accept()

        player = self.game_service.create_player()
        connection = Connection(player.id, websocket)
        self.connections.add(connection)
        connection.start()
        logger.info(f"Player connected: {player.id} from {websocket.client}")

        try:
            self._send_initial_state(player.id)
            await self._handle_client_messages(websocket, player.id)
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.error(f"WebSocket error for player {player.id}: {e}")
        finally:
            await self._handle_disconnect(player.id)

    def _send_initial_state(self, player_id: str):
        """Send initial state to a newly connected player."""
        player = self.game_service.players[player_id]
        self.connections.to_player(
            player_id, "playerInit", {**player.to_dict(), "config": get_game_config()}
        )
        self.connections.to_player(player_id, "partyList", self.game_service.get_party_list())

    async def _handle_client_messages(self, websocket: WebSocket, player_id: str):
        """Handle incoming messages from a client."""
        while True:
            text = await websocket.receive_text()
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                logger.debug(f"Dropping non-JSON frame from {player_id}")
                continue
            self.process_message(player_id, data)

    def process_message(self, player_id: str, data: Any):
        """Validate and dispatch one client message; bad input is dropped."""
        try:
            envelope = Envelope.model_validate(data)
            handler = self.handlers.get(envelope.type)
            if handler is None:
                logger.debug(f"Unknown message type from {player_id}: {envelope.type}")
                return
            handler(player_id, envelope)
        except ValidationError as e:
            logger.debug(f"Invalid message from {player_id}: {e.errors()}")
        except Exception:
            logger.exception(f"Handler for message from {player_id} failed")

    def _handle_player_update(self, player_id: str, envelope: Envelope):
        payload = PlayerUpdatePayload.model_validate(envelope.data)
        self.game_service.update_player(
            player_id, payload.position.x, payload.position.y, payload.angle
        )

    def _handle_player_shoot(self, player_id: str, envelope: Envelope):
        payload = PlayerShootPayload.model_validate(envelope.data)
        self.game_service.shoot(player_id, payload.angle)

    def _handle_create_party(self, player_id: str, envelope: Envelope):
        data = envelope.data
        if isinstance(data, str):
            data = {"name": data}
        payload = CreatePartyPayload.model_validate(data or {})
        self.game_service.create_party(player_id, payload.name)

    def _handle_join_party(self, player_id: str, envelope: Envelope):
        data = envelope.data
        if isinstance(data, str):
            data = {"partyId": data}
        payload = JoinPartyPayload.model_validate(data)
        self.game_service.join_party(player_id, payload.partyId, payload.playerName)

    def _handle_leave_party(self, player_id: str, envelope: Envelope):
        self.game_service.leave_party(player_id)

    def _handle_start_game(self, player_id: str, envelope: Envelope):
        self.game_service.start_game(player_id)

    def _handle_upgrade_player(self, player_id: str, envelope: Envelope):
        data = envelope.data
        if isinstance(data, str):
            data = {"type": data}
        payload = UpgradePayload.model_validate(data)
        self.game_service.upgrade_player(player_id, payload.type)

    def _handle_request_party_list(self, player_id: str, envelope: Envelope):
        self.connections.to_player(player_id, "partyList", self.game_service.get_party_list())

    def _handle_member_details(self, player_id: str, envelope: Envelope):
        if envelope.requestId is None:
            return
        data = envelope.data
        if isinstance(data, list):
            data = {"ids": data}
        payload = MemberDetailsPayload.model_validate(data)
        details = self.game_service.get_party_member_details(payload.ids)
        self.connections.reply(player_id, "getPartyMemberDetails", details, envelope.requestId)

    async def _handle_disconnect(self, player_id: str):
        """Handle client disconnection."""
        logger.info(f"Player disconnected: {player_id}")
        self.game_service.remove_player(player_id)
        connection = self.connections.remove(player_id)
        if connection is not None:
            await connection.close()
