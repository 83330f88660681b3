"""Shared fixtures: a recording broadcaster, a manual clock and a seeded game service."""

import random
from typing import Any, Callable, List, Optional

import pytest

from arena_server.models.entities import Enemy, Player, Position, Projectile, Session
from arena_server.services.game_service import GameService


class ManualHandle:
    def __init__(self, callback: Callable, due: float = 0.0, interval: Optional[float] = None):
        self.callback = callback
        self.due = due
        self.interval = interval
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler: time only moves when `advance` is called."""

    def __init__(self):
        self.now = 0.0
        self.timers: List[ManualHandle] = []
        self.tickers: List[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(callback, due=self.now + delay)
        self.timers.append(handle)
        return handle

    def start_ticker(self, interval: float, callback: Callable[[], bool]) -> ManualHandle:
        handle = ManualHandle(callback, interval=interval)
        self.tickers.append(handle)
        return handle

    def pending(self) -> List[ManualHandle]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every timer that becomes due."""
        self.now += seconds
        due = sorted(
            (t for t in self.timers if not t.cancelled and t.due <= self.now),
            key=lambda t: t.due,
        )
        for handle in due:
            self.timers.remove(handle)
            if not handle.cancelled:
                handle.callback()

    def tick(self, count: int = 1) -> None:
        """Invoke every live ticker `count` times."""
        for _ in range(count):
            for handle in list(self.tickers):
                if handle.cancelled:
                    continue
                if handle.callback() is False:
                    handle.cancel()


class RecordingBroadcaster:
    """Broadcaster that remembers every emission instead of sending it."""

    def __init__(self):
        self.messages: List[dict] = []
        self.rooms = {}

    def join(self, player_id: str, room: str):
        self.rooms.setdefault(room, set()).add(player_id)

    def leave(self, player_id: str, room: str):
        self.rooms.get(room, set()).discard(player_id)

    def to_player(self, player_id: str, event: str, data: Any = None):
        self.messages.append({"scope": "player", "target": player_id, "type": event, "data": data})

    def to_room(self, room: str, event: str, data: Any = None, exclude: Optional[str] = None):
        self.messages.append(
            {"scope": "room", "target": room, "type": event, "data": data, "exclude": exclude}
        )

    def to_all(self, event: str, data: Any = None):
        self.messages.append({"scope": "all", "target": None, "type": event, "data": data})

    def of_type(self, event: str) -> List[dict]:
        return [m for m in self.messages if m["type"] == event]

    def data(self, event: str) -> List[Any]:
        return [m["data"] for m in self.of_type(event)]

    def clear(self):
        self.messages.clear()


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def service(broadcaster, scheduler, rng):
    return GameService(broadcaster, scheduler, rng=rng)


@pytest.fixture
def running_session(service, broadcaster):
    """A started two-player session with its first wave spawned."""
    leader = service.create_player("leader-1")
    member = service.create_player("member-1")
    party = service.create_party(leader.id)
    service.join_party(member.id, party.id)
    session = service.start_game(leader.id)
    broadcaster.clear()
    return session


def make_enemy(x=0.0, y=0.0, health=50, radius=20, damage=5, speed=1, exp=6, enemy_id="e1"):
    return Enemy(
        id=enemy_id,
        type="basic",
        position=Position(x, y),
        radius=radius,
        health=health,
        maxHealth=health,
        damage=damage,
        speed=speed,
        expValue=exp,
    )


def make_projectile(x=0.0, y=0.0, angle=0.0, speed=10, damage=10, ttl=100, owner="p1", pid="b1"):
    return Projectile(
        id=pid,
        ownerId=owner,
        position=Position(x, y),
        angle=angle,
        speed=speed,
        damage=damage,
        timeToLive=ttl,
    )


def make_player(player_id="p1", x=0.0, y=0.0, health=100):
    player = Player(id=player_id, name=f"Player-{player_id[:4]}")
    player.position = Position(x, y)
    player.health = health
    return player


def make_session(session_id="s1", players=None):
    return Session(id=session_id, partyId=None, players=list(players or []))
