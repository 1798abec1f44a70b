"""Tests for the BattleManager registry."""

import threading
from datetime import timedelta

import pytest

from friemon.core.battle import ActionType, BattleState, PlayerAction
from friemon.core.errors import (
    ExpiredError,
    InvalidStateError,
    NotFoundError,
    UnavailableError,
    ValidationFailedError,
)
from friemon.core.manager import BattleManager
from friemon.core.settings import GameSettings
from tests.conftest import ScriptedRandom, make_character


@pytest.fixture
def manager(clock):
    return BattleManager(clock=clock, challenge_ttl=timedelta(seconds=300))


def _attack(move_id=2) -> PlayerAction:
    return PlayerAction(action_type=ActionType.ATTACK, move_id=move_id)


def _start_battle(manager, settings=None):
    """Challenge, accept, fill both one-member teams and start."""
    manager.create_challenge("alice", "bob", "general", settings=settings or GameSettings(team_size=1))
    battle = manager.accept_challenge("bob")
    manager.add_character_to_team("alice", make_character(name="Stark", character_id=101))
    manager.add_character_to_team("bob", make_character(name="Eisen", character_id=102, speed=75))
    return manager.start_battle(battle.id)


class TestChallenges:
    """Tests for the challenge lifecycle."""

    def test_create_challenge(self, manager, clock):
        challenge = manager.create_challenge("alice", "bob", "general", challenger_elo=1200)
        assert challenge.challenger_id == "alice"
        assert challenge.challenged_id == "bob"
        assert challenge.created_at == clock.now
        assert challenge.expires_at == clock.now + timedelta(seconds=300)
        assert challenge.challenger_elo == 1200
        assert manager.pending_challenges_count == 1
        assert manager.get_challenge("bob").id == challenge.id

    def test_cannot_challenge_self(self, manager):
        with pytest.raises(ValidationFailedError):
            manager.create_challenge("alice", "alice", "general")

    def test_duplicate_challenge(self, manager):
        manager.create_challenge("alice", "bob", "general")
        with pytest.raises(ValidationFailedError):
            manager.create_challenge("alice", "bob", "general")

    def test_new_challenger_replaces_pending_challenge(self, manager):
        first = manager.create_challenge("alice", "bob", "general")
        second = manager.create_challenge("carol", "bob", "other")
        assert second.id != first.id
        assert manager.pending_challenges_count == 1
        current = manager.get_challenge("bob")
        assert current.challenger_id == "carol"
        assert current.channel_id == "other"
        battle = manager.accept_challenge("bob")
        assert battle.player1.id == "carol"
        assert manager.get_player_battle("alice") is None

    def test_expired_challenge_can_be_replaced(self, manager, clock):
        manager.create_challenge("alice", "bob", "general")
        clock.advance(301)
        challenge = manager.create_challenge("carol", "bob", "general")
        assert challenge.challenger_id == "carol"

    def test_busy_players_cannot_be_challenged(self, manager):
        _start_battle(manager)
        with pytest.raises(UnavailableError):
            manager.create_challenge("carol", "alice", "general")
        with pytest.raises(UnavailableError):
            manager.create_challenge("bob", "carol", "general")
        assert manager.pending_challenges_count == 0
        assert manager.get_challenge("alice") is None
        assert manager.get_challenge("carol") is None

    def test_accept_creates_battle_in_team_selection(self, manager):
        manager.create_challenge("alice", "bob", "general", challenger_elo=1100)
        battle = manager.accept_challenge("bob", challenged_elo=900)
        assert battle.state == BattleState.TEAM_SELECTION
        assert battle.player1.id == "alice"
        assert battle.player2.id == "bob"
        assert battle.player1.elo_rating == 1100
        assert battle.player2.elo_rating == 900
        assert manager.pending_challenges_count == 0
        assert manager.get_player_battle("alice").id == battle.id
        assert manager.get_player_battle("bob").id == battle.id
        assert manager.get_channel_battle("general").id == battle.id
        # Team selection is not yet an active battle
        assert manager.active_battles_count == 0

    def test_accept_carries_settings(self, manager):
        manager.create_challenge("alice", "bob", "general", settings=GameSettings(max_turns=5))
        battle = manager.accept_challenge("bob")
        assert battle.settings.max_turns == 5

    def test_accept_missing(self, manager):
        with pytest.raises(NotFoundError):
            manager.accept_challenge("bob")

    def test_accept_expired(self, manager, clock):
        manager.create_challenge("alice", "bob", "general")
        clock.advance(301)
        with pytest.raises(ExpiredError):
            manager.accept_challenge("bob")
        assert manager.get_challenge("bob") is None

    def test_accept_when_challenger_got_busy(self, manager):
        manager.create_challenge("alice", "bob", "general")
        manager.create_challenge("carol", "alice", "other")
        manager.accept_challenge("alice")
        with pytest.raises(UnavailableError):
            manager.accept_challenge("bob")
        assert manager.get_challenge("bob") is None

    def test_accept_at_expiry_instant(self, manager, clock):
        manager.create_challenge("alice", "bob", "general")
        clock.advance(300)
        battle = manager.accept_challenge("bob")
        assert battle.state == BattleState.TEAM_SELECTION

    def test_decline(self, manager):
        manager.create_challenge("alice", "bob", "general")
        declined = manager.decline_challenge("bob")
        assert declined.challenger_id == "alice"
        assert manager.pending_challenges_count == 0
        with pytest.raises(NotFoundError):
            manager.decline_challenge("bob")

    def test_cleanup_expired_challenges(self, manager, clock):
        manager.create_challenge("alice", "bob", "general")
        clock.advance(100)
        manager.create_challenge("carol", "dave", "general")
        clock.advance(250)
        assert manager.cleanup_expired_challenges() == 1
        assert manager.get_challenge("bob") is None
        assert manager.get_challenge("dave") is not None


class TestBattleFlow:
    """Tests for routing battle commands through the manager."""

    def test_team_building_and_start(self, manager):
        battle = _start_battle(manager)
        assert battle.state == BattleState.IN_PROGRESS
        assert len(battle.player1.team) == 1
        assert manager.active_battles_count == 1

    def test_add_character_without_battle(self, manager):
        with pytest.raises(NotFoundError):
            manager.add_character_to_team("nobody", make_character())

    def test_start_unknown_battle(self, manager):
        with pytest.raises(NotFoundError):
            manager.start_battle("missing")

    def test_start_with_incomplete_teams(self, manager):
        manager.create_challenge("alice", "bob", "general", settings=GameSettings(team_size=1))
        battle = manager.accept_challenge("bob")
        with pytest.raises(InvalidStateError):
            manager.start_battle(battle.id)

    def test_submit_and_process(self, manager):
        battle = _start_battle(manager)
        assert manager.submit_action("alice", _attack()) is False
        assert manager.submit_action("bob", _attack()) is True
        lines = manager.process_battle_turn(battle.id, ScriptedRandom())
        assert lines[0] == "--- Turn 1 ---"
        snapshot = manager.get_battle(battle.id)
        assert snapshot.current_turn == 2
        assert snapshot.player2.team[0].stats.current_hp == 146

    def test_finished_battle_is_unindexed(self, manager):
        battle = _start_battle(manager)
        manager.submit_action("alice", PlayerAction(action_type=ActionType.FORFEIT))
        manager.process_battle_turn(battle.id)
        assert manager.get_player_battle("alice") is None
        assert manager.get_channel_battle("general") is None
        assert manager.get_battle(battle.id).winner_id == "bob"
        assert manager.active_battles_count == 0
        # Both players are free again
        manager.create_challenge("alice", "bob", "general")

    def test_cancel_battle(self, manager):
        manager.create_challenge("alice", "bob", "general")
        battle = manager.accept_challenge("bob")
        cancelled = manager.cancel_battle("alice", "changed my mind")
        assert cancelled.state == BattleState.CANCELLED
        assert manager.get_player_battle("bob") is None
        assert manager.get_battle(battle.id).state == BattleState.CANCELLED

    def test_cannot_cancel_running_battle(self, manager):
        _start_battle(manager)
        with pytest.raises(InvalidStateError):
            manager.cancel_battle("alice")

    def test_end_battle(self, manager):
        battle = _start_battle(manager)
        manager.end_battle(battle.id)
        assert manager.get_battle(battle.id) is None
        assert manager.get_player_battle("alice") is None
        with pytest.raises(NotFoundError):
            manager.end_battle(battle.id)

    def test_snapshot_is_independent(self, manager):
        battle = _start_battle(manager)
        snapshot = manager.get_battle_snapshot(battle.id)
        snapshot.player1.team[0].stats.current_hp = 1
        snapshot.battle_log.append("tampered")
        fresh = manager.get_battle_snapshot(battle.id)
        assert fresh.player1.team[0].stats.current_hp == 170
        assert "tampered" not in fresh.battle_log

    def test_snapshot_missing(self, manager):
        with pytest.raises(NotFoundError):
            manager.get_battle_snapshot("missing")

    def test_failed_call_leaves_manager_usable(self, manager):
        battle = _start_battle(manager)
        with pytest.raises(ValidationFailedError):
            manager.submit_action("alice", _attack(999))
        assert manager.submit_action("alice", _attack()) is False
        assert manager.get_battle(battle.id).state == BattleState.IN_PROGRESS


class TestHousekeeping:
    def test_cleanup_finished_battles(self, manager, clock):
        battle = _start_battle(manager)
        manager.submit_action("alice", PlayerAction(action_type=ActionType.FORFEIT))
        manager.process_battle_turn(battle.id)

        assert manager.cleanup_finished_battles(timedelta(minutes=10)) == 0
        clock.advance(600)
        assert manager.cleanup_finished_battles(timedelta(minutes=10)) == 0
        clock.advance(1)
        assert manager.cleanup_finished_battles(timedelta(minutes=10)) == 1
        assert manager.get_battle(battle.id) is None

    def test_cleanup_keeps_live_battles(self, manager, clock):
        _start_battle(manager)
        clock.advance(10_000)
        assert manager.cleanup_finished_battles(timedelta(seconds=1)) == 0
        assert manager.active_battles_count == 1


class TestConcurrency:
    def test_parallel_challenges(self, manager):
        """Only one of many identical racing challenges is registered."""
        results = []
        lock = threading.Lock()

        def challenge():
            try:
                manager.create_challenge("alice", "target", "general")
                outcome = "ok"
            except (UnavailableError, ValidationFailedError):
                outcome = "rejected"
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=challenge) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("ok") == 1
        assert manager.pending_challenges_count == 1
