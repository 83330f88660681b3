# arena_server/models/events.py
"""Outbound event envelope and the fan-out interface game services emit through."""

from dataclasses import dataclass
from typing import Any, Optional, Protocol


@dataclass
class OutboundMessage:
    """A single server-to-client message."""

    type: str
    data: Any = None
    requestId: Optional[str] = None

    def to_dict(self) -> dict:
        message = {"type": self.type, "data": self.data}
        if self.requestId is not None:
            message["requestId"] = self.requestId
        return message


class Broadcaster(Protocol):
    """Room-based fan-out used by the game services.

    Rooms are named by party or session id. Emitting never blocks: the
    transport is expected to queue messages and deliver them in order.
    """

    def join(self, player_id: str, room: str) -> None: ...

    def leave(self, player_id: str, room: str) -> None: ...

    def to_player(self, player_id: str, event: str, data: Any = None) -> None: ...

    def to_room(
        self, room: str, event: str, data: Any = None, exclude: Optional[str] = None
    ) -> None: ...

    def to_all(self, event: str, data: Any = None) -> None: ...
