"""Tests for the player/party/session registry."""

import pytest


@pytest.fixture
def leader(service):
    return service.create_player("leader-1")


@pytest.fixture
def party(service, leader):
    return service.create_party(leader.id, "Alice")


def errors(broadcaster, event, player_id):
    return [
        m["data"]["message"]
        for m in broadcaster.of_type(event)
        if m["target"] == player_id
    ]


class TestPlayers:
    def test_create_player_defaults(self, service):
        player = service.create_player("abcdef")

        assert player.name == "Player-abcd"
        assert (player.position.x, player.position.y) == (800, 450)
        assert player.health == player.maxHealth == 100
        assert (player.speed, player.damage, player.fireRate) == (5, 10, 5)
        assert player.type == "basic"
        assert player.weaponType == "normal"

    def test_member_details(self, service, leader):
        details = service.get_party_member_details([leader.id, "zzzz9999"])
        assert details == [
            {"id": leader.id, "name": leader.name},
            {"id": "zzzz9999", "name": "Unknown-zzzz"},
        ]


class TestParties:
    def test_create_party(self, service, broadcaster, leader, party):
        assert leader.name == "Alice"
        assert leader.party == party.id
        assert party.members == [leader.id]
        assert broadcaster.data("partyCreated") == [party.to_dict()]
        assert broadcaster.data("partyList")[-1] == [
            {"id": party.id, "players": 1, "maxPlayers": 4}
        ]

    def test_join_missing_party(self, service, broadcaster):
        player = service.create_player("p2")
        assert service.join_party(player.id, "nope") is None
        assert errors(broadcaster, "partyError", player.id) == ["Party does not exist"]

    def test_join_full_party(self, service, broadcaster, party):
        for i in range(3):
            service.join_party(service.create_player(f"m{i}").id, party.id)
        late = service.create_player("late")

        assert service.join_party(late.id, party.id) is None
        assert len(party.members) == 4
        assert errors(broadcaster, "partyError", late.id) == ["Party is full"]

    def test_join_started_party(self, service, broadcaster, leader, party):
        service.start_game(leader.id)
        late = service.create_player("late")

        assert service.join_party(late.id, party.id) is None
        assert errors(broadcaster, "partyError", late.id) == ["Party already started a game"]

    def test_join_switches_party(self, service, broadcaster, party):
        other_leader = service.create_player("other")
        other = service.create_party(other_leader.id)
        member = service.create_player("member")
        service.join_party(member.id, other.id)

        service.join_party(member.id, party.id, "Bob")

        assert member.party == party.id
        assert member.name == "Bob"
        assert member.id not in other.members
        assert broadcaster.data("partyUpdate")[-1]["members"] == ["leader-1", "member"]

    def test_rejoin_same_party_is_idempotent(self, service, broadcaster, party):
        member = service.create_player("member")
        service.join_party(member.id, party.id)
        service.join_party(member.id, party.id)

        assert party.members.count(member.id) == 1
        assert len(broadcaster.of_type("partyJoined")) == 2

    def test_leader_leaving_promotes_next_member(self, service, leader, party):
        member = service.create_player("member")
        service.join_party(member.id, party.id)

        service.leave_party(leader.id)

        assert party.leader == member.id
        assert leader.party is None

    def test_last_member_leaving_disbands(self, service, leader, party):
        service.leave_party(leader.id)
        assert party.id not in service.parties
        assert service.get_party_list() == []


class TestStartGame:
    def test_requires_party(self, service, broadcaster, leader):
        assert service.start_game(leader.id) is None
        assert errors(broadcaster, "gameError", leader.id) == ["You are not in a party"]

    def test_requires_leader(self, service, broadcaster, party):
        member = service.create_player("member")
        service.join_party(member.id, party.id)

        assert service.start_game(member.id) is None
        assert errors(broadcaster, "gameError", member.id) == ["Only party leader can start the game"]
        assert service.sessions == {}

    def test_cannot_start_twice(self, service, broadcaster, leader, party):
        service.start_game(leader.id)
        assert service.start_game(leader.id) is None
        assert errors(broadcaster, "gameError", leader.id) == ["Game already in progress"]
        assert len(service.sessions) == 1

    def test_start_game(self, service, broadcaster, scheduler, leader, party):
        leader.experience = 40
        leader.health = 12

        session = service.start_game(leader.id)

        assert party.status == "playing"
        assert party.game == session.id
        assert leader.game == session.id
        assert leader.health == leader.maxHealth
        assert leader.experience == 0
        assert 400 <= leader.position.x <= 1200
        assert session.wave == 1
        assert len(scheduler.tickers) == 1

        started = broadcaster.data("gameStarted")[0]
        assert started["id"] == session.id
        assert started["wave"] == 1
        assert [p["id"] for p in started["players"]] == [leader.id]

        spawned = broadcaster.data("enemiesSpawned")[0]
        assert len(spawned) == 7
        assert {e["type"] for e in spawned} == {"basic"}
        assert spawned[0]["health"] == 25
        assert service.get_party_list() == []


class TestInSessionActions:
    def test_update_clamps_and_relays(self, service, broadcaster, running_session):
        player_id = running_session.players[0]

        service.update_player(player_id, -50, 2000, 1.5)

        player = service.players[player_id]
        assert (player.position.x, player.position.y) == (0, 900)
        (move,) = broadcaster.of_type("playerMove")
        assert move["exclude"] == player_id
        assert move["data"]["angle"] == 1.5

    def test_update_ignored_outside_session(self, service, broadcaster, leader):
        service.update_player(leader.id, 10, 10, 0)
        assert (leader.position.x, leader.position.y) == (800, 450)
        assert broadcaster.of_type("playerMove") == []

    def test_shoot_adds_projectiles(self, service, broadcaster, running_session):
        player = service.players[running_session.players[0]]
        player.weaponType = "shotgun"

        fired = service.shoot(player.id, 0.0)

        assert len(fired) == 5
        assert running_session.projectiles == fired
        assert len(broadcaster.of_type("newProjectile")) == 5

    def test_dead_players_cannot_shoot(self, service, running_session):
        player = service.players[running_session.players[0]]
        player.health = 0
        assert service.shoot(player.id, 0.0) == []

    def test_upgrade_broadcasts(self, service, broadcaster, running_session):
        player = service.players[running_session.players[0]]
        player.experience = 10

        service.upgrade_player(player.id, "damage")

        (own,) = broadcaster.of_type("playerUpdate")
        (others,) = broadcaster.of_type("playerUpdated")
        assert own["target"] == player.id
        assert own["data"]["damage"] == 12
        assert others["exclude"] == player.id

    def test_failed_upgrade_is_silent(self, service, broadcaster, running_session):
        player_id = running_session.players[0]
        assert service.upgrade_player(player_id, "dualGuns") is None
        assert broadcaster.messages == []


class TestLeavingAndDisconnect:
    def test_leave_game_notifies_room(self, service, broadcaster, running_session):
        leaving = running_session.players[0]

        service.leave_game(leaving)

        assert leaving not in running_session.players
        assert broadcaster.data("playerLeft") == [leaving]
        assert running_session.id in service.sessions

    def test_last_player_leaving_ends_session(self, service, scheduler, running_session):
        party = service.parties[running_session.partyId]
        for player_id in list(running_session.players):
            service.leave_game(player_id)

        assert running_session.id not in service.sessions
        assert running_session.status == "ended"
        assert party.status == "waiting"
        assert all(handle.cancelled for handle in scheduler.tickers)

    def test_disconnect_cleans_everything(self, service, running_session):
        for player_id in list(running_session.players):
            service.remove_player(player_id)

        assert service.players == {}
        assert service.parties == {}
        assert service.sessions == {}

    def test_kill_by_departed_player_still_counts(self, service, broadcaster, running_session):
        shooter_id = running_session.players[0]
        enemy = running_session.enemies[0]
        enemy.health = 1
        service.shoot(shooter_id, 0.0)
        bullet = running_session.projectiles[0]
        bullet.position.x, bullet.position.y = enemy.position.x, enemy.position.y
        service.remove_player(shooter_id)

        service.loop.update_projectiles(running_session)

        assert enemy not in running_session.enemies
        assert broadcaster.data("playerXp") == []
