"""Registry of pending challenges and live battles.

All public methods take one coarse lock, so a manager can be shared
between threads. Nothing here blocks while holding it.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable

from pydantic import BaseModel, Field

from friemon.core.battle import Battle, BattlePlayer, BattleState, PlayerAction, PlayerId
from friemon.core.characters import Character
from friemon.core.elo import DEFAULT_ELO
from friemon.core.errors import (
    ExpiredError,
    NotFoundError,
    UnavailableError,
    ValidationFailedError,
)
from friemon.core.settings import GameSettings
from friemon.utils.config import config
from friemon.utils.helpers import get_now

logger = logging.getLogger(__name__)


class Challenge(BaseModel):
    """A pending invitation to battle, keyed by the challenged player."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    challenger_id: PlayerId
    challenged_id: PlayerId
    channel_id: PlayerId
    created_at: datetime
    expires_at: datetime
    settings: GameSettings = Field(default_factory=GameSettings)
    challenger_elo: int = DEFAULT_ELO

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class BattleManager:
    """Tracks challenges and battles, and routes player commands to them.

    ``clock`` returns the current time; tests pass a fixed one.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        challenge_ttl: timedelta | None = None,
    ):
        self._lock = threading.Lock()
        self._clock = clock or get_now
        self.challenge_ttl = challenge_ttl or timedelta(seconds=config.challenge_ttl_seconds)

        self._battles: dict[str, Battle] = {}
        self._player_battles: dict[PlayerId, str] = {}
        self._channel_battles: dict[PlayerId, str] = {}
        self._challenges: dict[PlayerId, Challenge] = {}  # challenged id -> challenge

    # -- Internal helpers (caller holds the lock) --------------------------

    def _battle_for_player(self, player_id: PlayerId) -> Battle:
        battle_id = self._player_battles.get(player_id)
        battle = self._battles.get(battle_id) if battle_id else None
        if battle is None:
            raise NotFoundError("Player is not in a battle", {"player_id": player_id})
        return battle

    def _require_battle(self, battle_id: str) -> Battle:
        battle = self._battles.get(battle_id)
        if battle is None:
            raise NotFoundError("Battle not found", {"battle_id": battle_id})
        return battle

    def _unindex(self, battle: Battle) -> None:
        for player in battle.players:
            if self._player_battles.get(player.id) == battle.id:
                del self._player_battles[player.id]
        if self._channel_battles.get(battle.channel_id) == battle.id:
            del self._channel_battles[battle.channel_id]

    # -- Challenges -------------------------------------------------------

    def create_challenge(
        self,
        challenger_id: PlayerId,
        challenged_id: PlayerId,
        channel_id: PlayerId,
        settings: GameSettings | None = None,
        challenger_elo: int | None = None,
    ) -> Challenge:
        """Register a challenge from ``challenger_id`` to ``challenged_id``."""
        if challenger_id == challenged_id:
            raise ValidationFailedError("You cannot challenge yourself")

        with self._lock:
            now = self._clock()
            if challenger_id in self._player_battles:
                raise UnavailableError("You are already in a battle", {"player_id": challenger_id})
            if challenged_id in self._player_battles:
                raise UnavailableError("That player is already in a battle", {"player_id": challenged_id})

            existing = self._challenges.get(challenged_id)
            if existing is not None and not existing.is_expired(now):
                if existing.challenger_id == challenger_id:
                    raise ValidationFailedError("You already have a pending challenge to this player")
                logger.debug("Challenge %s to %s replaced", existing.id, challenged_id)

            challenge = Challenge(
                challenger_id=challenger_id,
                challenged_id=challenged_id,
                channel_id=channel_id,
                created_at=now,
                expires_at=now + self.challenge_ttl,
                settings=settings.model_copy(deep=True) if settings else GameSettings(),
                challenger_elo=DEFAULT_ELO if challenger_elo is None else challenger_elo,
            )
            self._challenges[challenged_id] = challenge
            logger.debug("Challenge %s: %s -> %s", challenge.id, challenger_id, challenged_id)
            return challenge.model_copy(deep=True)

    def accept_challenge(self, challenged_id: PlayerId, challenged_elo: int | None = None) -> Battle:
        """Turn the pending challenge into a battle in team selection."""
        with self._lock:
            now = self._clock()
            challenge = self._challenges.get(challenged_id)
            if challenge is None:
                raise NotFoundError("No pending challenge found", {"player_id": challenged_id})
            if challenge.is_expired(now):
                del self._challenges[challenged_id]
                raise ExpiredError("Challenge has expired", {"challenge_id": challenge.id})
            if challenge.challenger_id in self._player_battles:
                del self._challenges[challenged_id]
                raise UnavailableError("Challenger is already in another battle")
            if challenged_id in self._player_battles:
                raise UnavailableError("You are already in a battle", {"player_id": challenged_id})

            battle = Battle(
                channel_id=challenge.channel_id,
                player1=BattlePlayer(id=challenge.challenger_id, elo_rating=challenge.challenger_elo),
                player2=BattlePlayer(
                    id=challenged_id,
                    elo_rating=DEFAULT_ELO if challenged_elo is None else challenged_elo,
                ),
                settings=challenge.settings.model_copy(deep=True),
                created_at=now,
            )
            battle.join(challenge.challenger_id)
            battle.join(challenged_id)

            self._battles[battle.id] = battle
            self._player_battles[challenge.challenger_id] = battle.id
            self._player_battles[challenged_id] = battle.id
            self._channel_battles[battle.channel_id] = battle.id
            del self._challenges[challenged_id]

            logger.debug("Battle %s created from challenge %s", battle.id, challenge.id)
            return battle.model_copy(deep=True)

    def decline_challenge(self, challenged_id: PlayerId) -> Challenge:
        with self._lock:
            challenge = self._challenges.pop(challenged_id, None)
            if challenge is None:
                raise NotFoundError("No pending challenge found", {"player_id": challenged_id})
            logger.debug("Challenge %s declined", challenge.id)
            return challenge

    def get_challenge(self, challenged_id: PlayerId) -> Challenge | None:
        with self._lock:
            challenge = self._challenges.get(challenged_id)
            return challenge.model_copy(deep=True) if challenge else None

    # -- Battle commands --------------------------------------------------

    def add_character_to_team(self, player_id: PlayerId, character: Character) -> bool:
        """Add a character to the player's team. True once both teams are full."""
        with self._lock:
            battle = self._battle_for_player(player_id)
            return battle.add_character(player_id, character)

    def start_battle(self, battle_id: str) -> Battle:
        with self._lock:
            battle = self._require_battle(battle_id)
            battle.start(self._clock())
            logger.debug("Battle %s started", battle.id)
            return battle.model_copy(deep=True)

    def submit_action(self, player_id: PlayerId, action: PlayerAction) -> bool:
        """Record an action. Returns True when the turn is ready to process."""
        with self._lock:
            battle = self._battle_for_player(player_id)
            battle.add_action(player_id, action)
            return battle.ready_to_process()

    def process_battle_turn(self, battle_id: str, rng: Any = None) -> list[str]:
        """Resolve the current turn. Returns the new log lines."""
        with self._lock:
            battle = self._require_battle(battle_id)
            lines = battle.process_turn(rng, self._clock())
            if battle.state.is_terminal:
                self._unindex(battle)
                logger.debug("Battle %s finished, winner %s", battle.id, battle.winner_id)
            return lines

    def cancel_battle(self, player_id: PlayerId, reason: str = "") -> Battle:
        """Cancel the player's battle while it is still being set up."""
        with self._lock:
            battle = self._battle_for_player(player_id)
            battle.cancel(reason, self._clock())
            self._unindex(battle)
            logger.debug("Battle %s cancelled", battle.id)
            return battle.model_copy(deep=True)

    def end_battle(self, battle_id: str) -> None:
        """Drop a battle and every index pointing at it."""
        with self._lock:
            battle = self._battles.pop(battle_id, None)
            if battle is None:
                raise NotFoundError("Battle not found", {"battle_id": battle_id})
            self._unindex(battle)
            logger.debug("Battle %s removed", battle_id)

    # -- Queries ----------------------------------------------------------

    def get_battle(self, battle_id: str) -> Battle | None:
        with self._lock:
            battle = self._battles.get(battle_id)
            return battle.model_copy(deep=True) if battle else None

    def get_player_battle(self, player_id: PlayerId) -> Battle | None:
        with self._lock:
            battle_id = self._player_battles.get(player_id)
            battle = self._battles.get(battle_id) if battle_id else None
            return battle.model_copy(deep=True) if battle else None

    def get_channel_battle(self, channel_id: PlayerId) -> Battle | None:
        with self._lock:
            battle_id = self._channel_battles.get(channel_id)
            battle = self._battles.get(battle_id) if battle_id else None
            return battle.model_copy(deep=True) if battle else None

    def get_battle_snapshot(self, battle_id: str) -> Battle:
        """Deep copy of a battle, safe to read outside the lock."""
        with self._lock:
            return self._require_battle(battle_id).model_copy(deep=True)

    def is_player_busy(self, player_id: PlayerId) -> bool:
        with self._lock:
            return player_id in self._player_battles

    # -- Housekeeping -----------------------------------------------------

    def cleanup_expired_challenges(self) -> int:
        """Remove expired challenges. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, c in self._challenges.items() if c.is_expired(now)]
            for key in expired:
                del self._challenges[key]
            if expired:
                logger.debug("Removed %d expired challenges", len(expired))
            return len(expired)

    def cleanup_finished_battles(self, max_age: timedelta | None = None) -> int:
        """Remove terminal battles that ended more than ``max_age`` ago."""
        if max_age is None:
            max_age = timedelta(seconds=config.finished_battle_max_age_seconds)
        with self._lock:
            now = self._clock()
            stale = [
                battle for battle in self._battles.values()
                if battle.state.is_terminal
                and battle.finished_at is not None
                and now - battle.finished_at > max_age
            ]
            for battle in stale:
                del self._battles[battle.id]
                self._unindex(battle)
            if stale:
                logger.debug("Removed %d finished battles", len(stale))
            return len(stale)

    @property
    def active_battles_count(self) -> int:
        """Battles currently in progress. Team selection does not count."""
        with self._lock:
            return sum(1 for b in self._battles.values() if b.state == BattleState.IN_PROGRESS)

    @property
    def pending_challenges_count(self) -> int:
        with self._lock:
            return len(self._challenges)
