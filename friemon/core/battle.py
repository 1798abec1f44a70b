"""Turn-based battle state machine.

Handles the lifecycle of a single match:
    waiting for players -> team selection -> in progress -> finished

Turn resolution lives in ``BattleEngine`` so the ``Battle`` model stays a
plain state container that the manager can copy and hand out.
"""

from __future__ import annotations

import random
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field

from friemon.core.characters import Character
from friemon.core.combatant import Combatant
from friemon.core.damage import calculate_damage, confusion_damage
from friemon.core.elo import DEFAULT_ELO, calculate_elo
from friemon.core.errors import (
    AlreadySubmittedError,
    FriemonError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from friemon.core.moves import (
    STRUGGLE,
    Charge,
    Disable,
    Drain,
    Effect,
    FixedDamage,
    Flinch,
    Heal,
    InflictStatus,
    ModifyStat,
    Move,
    MoveCategory,
    MoveTarget,
    Protect,
    Recharge,
    Recoil,
    SelfDestruct,
    StageStat,
    StatusCondition,
    Trap,
    get_move,
)
from friemon.core.settings import GameSettings
from friemon.utils.helpers import get_now, percent

PlayerId = Union[int, str]

# Switching always goes before any move; forfeits are resolved before anything.
SWITCH_PRIORITY = 7
SPREAD_POWER_MULTIPLIER = 0.75
CONFUSION_SELF_HIT_CHANCE = 0.33
PARALYSIS_SKIP_CHANCE = 0.25


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BattleState(str, Enum):
    """Lifecycle state of a battle."""

    WAITING_FOR_PLAYERS = "waiting_for_players"
    TEAM_SELECTION = "team_selection"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return _STATE_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (BattleState.FINISHED, BattleState.CANCELLED)


_STATE_LABELS: dict[BattleState, str] = {
    BattleState.WAITING_FOR_PLAYERS: "Waiting for Players",
    BattleState.TEAM_SELECTION: "Team Selection",
    BattleState.IN_PROGRESS: "In Progress",
    BattleState.FINISHED: "Finished",
    BattleState.CANCELLED: "Cancelled",
}


class ActionType(str, Enum):
    """Types of actions a player can take each turn."""

    ATTACK = "attack"
    SWITCH = "switch"
    SKIP = "skip"
    FORFEIT = "forfeit"


_STAT_NAMES: dict[StageStat, str] = {
    StageStat.ATK: "Attack",
    StageStat.DEF: "Defense",
    StageStat.SP_ATK: "Sp. Atk",
    StageStat.SP_DEF: "Sp. Def",
    StageStat.SPEED: "Speed",
    StageStat.ACCURACY: "accuracy",
    StageStat.EVASION: "evasiveness",
}

_STATUS_INFLICTED: dict[StatusCondition, str] = {
    StatusCondition.POISON: "was poisoned",
    StatusCondition.BURN: "was burned",
    StatusCondition.PARALYZE: "was paralyzed",
    StatusCondition.SLEEP: "fell asleep",
    StatusCondition.FREEZE: "was frozen solid",
    StatusCondition.CONFUSE: "became confused",
}

_STATUS_EXPIRED: dict[StatusCondition, str] = {
    StatusCondition.SLEEP: "woke up",
    StatusCondition.FREEZE: "thawed out",
    StatusCondition.CONFUSE: "is no longer confused",
}


# ---------------------------------------------------------------------------
# Supporting models
# ---------------------------------------------------------------------------

class PlayerAction(BaseModel):
    """An action submitted by a player for one turn."""

    action_type: ActionType
    move_id: int | None = None
    switch_to: int | None = None  # Index into the player's team
    player_id: PlayerId | None = None  # Filled in on submission


class BattlePlayer(BaseModel):
    """One side of a battle."""

    id: PlayerId
    name: str = ""
    joined: bool = False
    team: list[Combatant] = Field(default_factory=list)
    active_index: int = 0
    action: PlayerAction | None = None
    elo_rating: int = DEFAULT_ELO

    @property
    def display_name(self) -> str:
        return self.name or str(self.id)

    @property
    def active(self) -> Combatant | None:
        """The combatant currently out, or None if it has fainted."""
        if 0 <= self.active_index < len(self.team):
            member = self.team[self.active_index]
            if not member.fainted:
                return member
        return None

    @property
    def has_alive_members(self) -> bool:
        return any(not c.fainted for c in self.team)

    @property
    def alive_count(self) -> int:
        return sum(1 for c in self.team if not c.fainted)

    def next_alive_index(self) -> int | None:
        """Return the index of the next non-fainted team member, or None."""
        for i, c in enumerate(self.team):
            if i != self.active_index and not c.fainted:
                return i
        return None

    def team_hp_percent(self) -> float:
        """Remaining HP across the whole team as a percentage."""
        current = sum(c.stats.current_hp for c in self.team)
        total = sum(c.stats.max_hp for c in self.team)
        return percent(current, total)


# ---------------------------------------------------------------------------
# Main battle state
# ---------------------------------------------------------------------------

class Battle(BaseModel):
    """The complete state of a battle between two players."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    channel_id: PlayerId
    thread_id: PlayerId | None = None

    player1: BattlePlayer
    player2: BattlePlayer

    state: BattleState = BattleState.WAITING_FOR_PLAYERS
    current_turn: int = 1
    turn_order: list[PlayerId] = Field(default_factory=list)
    settings: GameSettings = Field(default_factory=GameSettings)

    created_at: datetime = Field(default_factory=get_now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    winner_id: PlayerId | None = None
    elo_changes: dict[str, int] = Field(default_factory=dict)  # str(player id) -> delta
    battle_log: list[str] = Field(default_factory=list)

    # -- Players ----------------------------------------------------------

    @property
    def players(self) -> tuple[BattlePlayer, BattlePlayer]:
        return self.player1, self.player2

    @property
    def is_draw(self) -> bool:
        return self.state == BattleState.FINISHED and self.winner_id is None

    def get_player(self, player_id: PlayerId) -> BattlePlayer | None:
        if self.player1.id == player_id:
            return self.player1
        if self.player2.id == player_id:
            return self.player2
        return None

    def get_opponent(self, player_id: PlayerId) -> BattlePlayer | None:
        if self.player1.id == player_id:
            return self.player2
        if self.player2.id == player_id:
            return self.player1
        return None

    def is_player_in_battle(self, player_id: PlayerId) -> bool:
        return self.get_player(player_id) is not None

    def _require_player(self, player_id: PlayerId) -> BattlePlayer:
        player = self.get_player(player_id)
        if player is None:
            raise NotFoundError("Player not in battle", {"player_id": player_id, "battle_id": self.id})
        return player

    def add_to_log(self, message: str) -> None:
        self.battle_log.append(message)

    # -- Setup ------------------------------------------------------------

    def join(self, player_id: PlayerId) -> None:
        """Mark a player as present. Moves to team selection once both are in."""
        if self.state != BattleState.WAITING_FOR_PLAYERS:
            raise InvalidStateError("Battle is not waiting for players", {"state": self.state.value})
        self._require_player(player_id).joined = True
        if self.player1.joined and self.player2.joined:
            self.state = BattleState.TEAM_SELECTION

    def add_character(self, player_id: PlayerId, character: Character) -> bool:
        """Add a copy of ``character`` to a player's team.

        Returns True once both teams are complete and the battle can start.
        """
        if self.state != BattleState.TEAM_SELECTION:
            raise InvalidStateError("Battle is not in team selection", {"state": self.state.value})
        player = self._require_player(player_id)

        if len(player.team) >= self.settings.team_size:
            raise ValidationFailedError("Team is already full", {"team_size": self.settings.team_size})
        if not self.settings.allow_duplicates and any(
            c.character.character_id == character.character_id for c in player.team
        ):
            raise ValidationFailedError("Character is already in the team", {"character": character.name})
        if character.level > self.settings.level_cap:
            raise ValidationFailedError(
                "Character exceeds the level cap",
                {"level": character.level, "level_cap": self.settings.level_cap},
            )

        player.team.append(Combatant.from_character(character.model_copy(deep=True)))
        return self.can_start()

    def can_start(self) -> bool:
        return (
            self.state == BattleState.TEAM_SELECTION
            and len(self.player1.team) == self.settings.team_size
            and len(self.player2.team) == self.settings.team_size
        )

    def start(self, now: datetime | None = None) -> None:
        if not self.can_start():
            raise InvalidStateError("Battle cannot start: invalid state or incomplete teams")
        self.state = BattleState.IN_PROGRESS
        self.started_at = now or get_now()
        self.add_to_log(
            f"Battle between {self.player1.display_name} and {self.player2.display_name} has begun!"
        )
        for player in self.players:
            player.active_index = 0
            self.add_to_log(f"{player.display_name} sent out {player.team[0].name}!")

    def cancel(self, reason: str = "", now: datetime | None = None) -> None:
        """Call off a battle that has not started yet."""
        if self.state not in (BattleState.WAITING_FOR_PLAYERS, BattleState.TEAM_SELECTION):
            raise InvalidStateError("Only a battle that has not started can be cancelled",
                                    {"state": self.state.value})
        self.state = BattleState.CANCELLED
        self.finished_at = now or get_now()
        self.add_to_log(f"Battle cancelled{': ' + reason if reason else '.'}")

    # -- Turns ------------------------------------------------------------

    def add_action(self, player_id: PlayerId, action: PlayerAction) -> None:
        """Validate and record a player's action for the current turn."""
        if self.state != BattleState.IN_PROGRESS:
            raise InvalidStateError("Battle is not in progress", {"state": self.state.value})
        player = self._require_player(player_id)
        if player.action is not None:
            raise AlreadySubmittedError("Action already submitted for this turn", {"player_id": player_id})

        if action.action_type == ActionType.ATTACK:
            self._validate_attack(player, action)
        elif action.action_type == ActionType.SWITCH:
            self._validate_switch(player, action)

        player.action = action.model_copy(update={"player_id": player.id})

    def _validate_attack(self, player: BattlePlayer, action: PlayerAction) -> None:
        active = player.active
        if active is None:
            raise ValidationFailedError("No active character or character is fainted")
        if active.stats.charging:
            return  # The charged move fires regardless of the choice

        if action.move_id is None or get_move(action.move_id) is None:
            raise ValidationFailedError("Move not found", {"move_id": action.move_id})
        if not active.knows_move(action.move_id):
            raise ValidationFailedError("Character doesn't know this move", {"move_id": action.move_id})
        if active.stats.disabled_move_id == action.move_id:
            raise ValidationFailedError("Move is disabled", {"move_id": action.move_id})
        if not active.stats.has_pp(action.move_id) and not active.stats.out_of_pp():
            raise ValidationFailedError("No PP left for this move", {"move_id": action.move_id})

    def _validate_switch(self, player: BattlePlayer, action: PlayerAction) -> None:
        index = action.switch_to
        if index is None or not 0 <= index < len(player.team):
            raise ValidationFailedError("Invalid switch target index", {"switch_to": index})
        if player.team[index].fainted:
            raise ValidationFailedError("Cannot switch to fainted character", {"switch_to": index})
        if index == player.active_index:
            raise ValidationFailedError("Character is already active", {"switch_to": index})
        active = player.active
        if active is not None and active.stats.trapped:
            raise ValidationFailedError(f"{active.name} is trapped and cannot switch out")

    def ready_to_process(self) -> bool:
        """Both sides have acted, or someone forfeited."""
        if self.state != BattleState.IN_PROGRESS:
            return False
        actions = [p.action for p in self.players]
        if any(a is not None and a.action_type == ActionType.FORFEIT for a in actions):
            return True
        return all(a is not None for a in actions)

    def calculate_turn_order(self, rng: Any = None) -> list[PlayerId]:
        """Order the players as the next turn would act them.

        Pending action priority first, then effective speed, then a random
        tiebreak drawn from ``rng``.
        """
        rng = rng or random
        keyed = [(BattleEngine._order_key(self, player, rng), player.id) for player in self.players]
        keyed.sort(key=lambda k: k[0], reverse=True)
        self.turn_order = [player_id for _, player_id in keyed]
        return self.turn_order

    def process_turn(self, rng: Any = None, now: datetime | None = None) -> list[str]:
        """Resolve the current turn. Returns the narration lines it produced."""
        if self.state != BattleState.IN_PROGRESS:
            raise InvalidStateError("Battle is not in progress", {"state": self.state.value})
        if not self.ready_to_process():
            raise InvalidStateError("Waiting for both players to submit actions")
        return BattleEngine.resolve_turn(self, rng or random, now or get_now())

    def summary(self) -> str:
        lines = [
            f"Battle ID: {self.id[:8]}",
            f"Turn: {self.current_turn}/{self.settings.max_turns}",
            f"State: {self.state.label}",
        ]
        for n, player in enumerate(self.players, start=1):
            active = player.active
            if active is not None:
                lines.append(
                    f"Player {n}: {active.name} (HP: {active.stats.current_hp}/{active.stats.max_hp})"
                )
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Turn resolution engine
# ---------------------------------------------------------------------------

class BattleEngine:
    """Resolves one turn of a battle.

    Stateless -- takes a Battle, mutates it, and appends narration to its log.
    """

    @staticmethod
    def resolve_turn(battle: Battle, rng: Any, now: datetime) -> list[str]:
        start = len(battle.battle_log)
        battle.add_to_log(f"--- Turn {battle.current_turn} ---")

        forfeits = [
            p for p in battle.players
            if p.action is not None and p.action.action_type == ActionType.FORFEIT
        ]
        if forfeits:
            for player in forfeits:
                battle.add_to_log(f"{player.display_name} forfeited the battle!")
            if len(forfeits) == 2:
                BattleEngine._finish(battle, None, now)
            else:
                opponent = battle.get_opponent(forfeits[0].id)
                BattleEngine._finish(battle, opponent.id if opponent else None, now)
            BattleEngine._clear_actions(battle)
            return battle.battle_log[start:]

        for player, action, acting_index in BattleEngine._sort_actions(battle, rng):
            if battle.state != BattleState.IN_PROGRESS:
                break
            # The member that chose this action fainted and was replaced
            if action.action_type == ActionType.ATTACK and player.active_index != acting_index:
                continue
            if player.active is None:
                continue

            try:
                BattleEngine._execute_action(battle, player, action, rng)
            except FriemonError as e:
                battle.add_to_log(f"Error executing action: {e.message}")
                continue

            BattleEngine._replace_fainted(battle)
            BattleEngine._check_battle_end(battle, now)

        if battle.state == BattleState.IN_PROGRESS:
            BattleEngine._end_of_turn(battle, rng)
            BattleEngine._replace_fainted(battle)
            BattleEngine._check_battle_end(battle, now)

        if battle.state == BattleState.IN_PROGRESS:
            if battle.current_turn >= battle.settings.max_turns:
                BattleEngine._end_by_turn_limit(battle, now)
            else:
                battle.current_turn += 1

        BattleEngine._clear_actions(battle)
        return battle.battle_log[start:]

    # -- Ordering ---------------------------------------------------------

    @staticmethod
    def _action_priority(player: BattlePlayer, action: PlayerAction) -> int:
        if action.action_type == ActionType.SWITCH:
            return SWITCH_PRIORITY
        if action.action_type != ActionType.ATTACK:
            return 0
        active = player.active
        if active is not None and active.stats.charging:
            charged = get_move(active.stats.charging_move_id)
            return charged.priority if charged else 0
        move = get_move(action.move_id) if action.move_id is not None else None
        return move.priority if move else 0

    @staticmethod
    def _order_key(battle: Battle, player: BattlePlayer, rng: Any) -> tuple[int, float, float]:
        active = player.active
        speed = active.effective_speed(battle.settings.stat_stages_enabled) if active else 0.0
        priority = BattleEngine._action_priority(player, player.action) if player.action else 0
        return priority, speed, rng.random()

    @staticmethod
    def _sort_actions(battle: Battle, rng: Any) -> list[tuple[BattlePlayer, PlayerAction, int]]:
        """Sort by priority, then effective speed, then a random tiebreak."""
        keyed = []
        for player in battle.players:
            if player.action is None:
                continue
            keyed.append((BattleEngine._order_key(battle, player, rng), (player, player.action, player.active_index)))

        keyed.sort(key=lambda k: k[0], reverse=True)
        ordered = [entry for _, entry in keyed]
        battle.turn_order = [player.id for player, _, _ in ordered]
        return ordered

    # -- Actions ----------------------------------------------------------

    @staticmethod
    def _execute_action(battle: Battle, player: BattlePlayer, action: PlayerAction, rng: Any) -> None:
        if action.action_type == ActionType.SKIP:
            battle.add_to_log(f"{player.display_name} skipped their turn.")
        elif action.action_type == ActionType.SWITCH:
            BattleEngine._execute_switch(battle, player, action)
        elif action.action_type == ActionType.ATTACK:
            BattleEngine._execute_attack(battle, player, action, rng)
        else:
            raise ValidationFailedError("Unknown action type", {"action_type": action.action_type})

    @staticmethod
    def _execute_switch(battle: Battle, player: BattlePlayer, action: PlayerAction) -> None:
        index = action.switch_to
        if index is None or not 0 <= index < len(player.team):
            raise ValidationFailedError("Invalid switch target")
        incoming = player.team[index]
        if incoming.fainted:
            raise ValidationFailedError("Cannot switch to fainted character")
        if index == player.active_index:
            raise ValidationFailedError("Character is already active")

        outgoing = player.active
        if outgoing is not None:
            outgoing.stats.clear_volatile()
            battle.add_to_log(f"{player.display_name} recalled {outgoing.name}!")
        player.active_index = index
        battle.add_to_log(f"{player.display_name} sent out {incoming.name}!")

    @staticmethod
    def _can_act(battle: Battle, attacker: Combatant, rng: Any) -> bool:
        """Check everything that can stop a combatant from moving this turn."""
        stats = attacker.stats
        name = attacker.name

        if stats.must_recharge:
            stats.must_recharge = False
            battle.add_to_log(f"{name} must recharge!")
            return False
        if stats.has_status(StatusCondition.SLEEP):
            battle.add_to_log(f"{name} is fast asleep!")
            return False
        if stats.has_status(StatusCondition.FREEZE):
            battle.add_to_log(f"{name} is frozen solid!")
            return False
        if stats.has_status(StatusCondition.PARALYZE) and rng.random() < PARALYSIS_SKIP_CHANCE:
            battle.add_to_log(f"{name} is paralyzed and can't move!")
            return False
        if stats.flinched:
            battle.add_to_log(f"{name} flinched and couldn't move!")
            return False
        if stats.charging and stats.charge_turns > 0:
            battle.add_to_log(f"{name} is still charging!")
            return False

        if stats.has_status(StatusCondition.CONFUSE) and not stats.confusion_resisted:
            if rng.random() < CONFUSION_SELF_HIT_CHANCE:
                stats.charging_move_id = None
                stats.charge_turns = 0
                dealt = stats.take_damage(confusion_damage(attacker))
                battle.add_to_log(f"{name} hurt itself in confusion for {dealt} damage!")
                if attacker.fainted:
                    battle.add_to_log(f"{name} fainted!")
                return False
            stats.confusion_resisted = True
            battle.add_to_log(f"{name} snapped out of confusion for this turn!")
        return True

    @staticmethod
    def _choose_move(battle: Battle, attacker: Combatant, action: PlayerAction) -> Move | None:
        """Resolve which move fires, spending PP. None means the turn is lost."""
        stats = attacker.stats

        if stats.charging:
            move = get_move(stats.charging_move_id)
            stats.charging_move_id = None
            stats.charge_turns = 0
            if move is None:
                raise ValidationFailedError("Charged move not found")
            return move

        move_id = action.move_id
        if move_id is None or not attacker.knows_move(move_id):
            raise ValidationFailedError("Character doesn't know this move", {"move_id": move_id})
        move = get_move(move_id)
        if move is None:
            raise ValidationFailedError("Move not found", {"move_id": move_id})

        if stats.disabled_move_id == move_id:
            battle.add_to_log(f"{attacker.name}'s {move.name} is disabled!")
            return None
        if stats.use_pp(move_id):
            return move
        if stats.out_of_pp():
            battle.add_to_log(f"{attacker.name} has no moves left!")
            return STRUGGLE
        raise ValidationFailedError("No PP left for this move", {"move_id": move_id})

    @staticmethod
    def _resolve_targets(
        battle: Battle, player: BattlePlayer, attacker: Combatant, move: Move
    ) -> list[Combatant]:
        if move.target in (MoveTarget.USER, MoveTarget.SINGLE_ALLY):
            return [attacker]
        if move.target == MoveTarget.ALL_ALLIES:
            return [c for c in player.team if not c.fainted]

        opponent = battle.get_opponent(player.id)
        if opponent is None:
            raise InvalidStateError("Opponent not found", {"player_id": player.id})
        if move.target == MoveTarget.ALL_FOES:
            return [c for c in opponent.team if not c.fainted]
        return [opponent.active] if opponent.active is not None else []

    @staticmethod
    def _execute_attack(battle: Battle, player: BattlePlayer, action: PlayerAction, rng: Any) -> None:
        attacker = player.active
        if attacker is None:
            raise ValidationFailedError("No active character or character is fainted")

        if not BattleEngine._can_act(battle, attacker, rng):
            return
        releasing = attacker.stats.charging
        move = BattleEngine._choose_move(battle, attacker, action)
        if move is None:
            return

        battle.add_to_log(f"{attacker.name} used {move.name}!")
        attacker.stats.last_move_id = move.id

        if not releasing and move.charge_turns > 0:
            attacker.stats.charging_move_id = move.id
            attacker.stats.charge_turns = move.charge_turns
            battle.add_to_log(f"{attacker.name} is charging power!")
            return

        targets = BattleEngine._resolve_targets(battle, player, attacker, move)
        if not targets:
            battle.add_to_log("But there was no target!")
        else:
            power = move.power
            if move.target == MoveTarget.ALL_FOES and len(targets) > 1:
                power = int(move.power * SPREAD_POWER_MULTIPLIER)
            for target in targets:
                if attacker.fainted:
                    break
                BattleEngine._use_move_on(battle, attacker, target, move, power, rng)

        if move.find_effect(SelfDestruct) is not None and not attacker.fainted:
            attacker.stats.take_damage(attacker.stats.current_hp)
            battle.add_to_log(f"{attacker.name} fainted!")

    @staticmethod
    def _use_move_on(
        battle: Battle,
        attacker: Combatant,
        target: Combatant,
        move: Move,
        power: int,
        rng: Any,
    ) -> None:
        settings = battle.settings
        is_self = target is attacker

        if not is_self and target.stats.protected and move.affected_by_protect:
            battle.add_to_log(f"{target.name} protected itself!")
            return

        result = calculate_damage(attacker, target, move, settings, rng, power=power)
        if result.accuracy_roll is not None:
            battle.add_to_log(f"Accuracy roll: {result.accuracy_roll} (needed {result.accuracy_threshold} or less)")
        if not result.hit:
            battle.add_to_log(f"{attacker.name}'s attack missed!")
            return
        if move.category != MoveCategory.STATUS and result.effectiveness == 0:
            battle.add_to_log(f"It doesn't affect {target.name}...")
            return

        dealt = 0
        if result.damage > 0:
            dealt = target.stats.take_damage(result.damage)
            battle.add_to_log(f"{target.name} took {dealt} damage!")
            if result.critical:
                battle.add_to_log("A critical hit!")
            if result.effectiveness_text:
                battle.add_to_log(result.effectiveness_text)
            if result.details:
                battle.add_to_log(f"Calculation: {result.details}")

        BattleEngine._apply_effects(battle, attacker, target, move, move.effects, rng)
        if move.secondary_effects and not target.fainted:
            if rng.randint(1, 100) <= move.secondary_chance:
                BattleEngine._apply_effects(battle, attacker, target, move, move.secondary_effects, rng)

        if not is_self and target.fainted:
            battle.add_to_log(f"{target.name} fainted!")

        BattleEngine._apply_recoil_and_drain(battle, attacker, move, dealt)

    # -- Effects ----------------------------------------------------------

    @staticmethod
    def _roll(chance: int, rng: Any) -> bool:
        return chance >= 100 or rng.randint(1, 100) <= chance

    @staticmethod
    def _apply_effects(
        battle: Battle,
        attacker: Combatant,
        target: Combatant,
        move: Move,
        effects: list[Effect],
        rng: Any,
    ) -> None:
        for effect in effects:
            BattleEngine._apply_effect(battle, attacker, target, move, effect, rng)

    @staticmethod
    def _apply_effect(
        battle: Battle,
        attacker: Combatant,
        target: Combatant,
        move: Move,
        effect: Effect,
        rng: Any,
    ) -> None:
        settings = battle.settings

        if isinstance(effect, InflictStatus):
            recipient = attacker if effect.on_self else target
            if not settings.status_effects_enabled or recipient.fainted:
                return
            if not BattleEngine._roll(effect.chance, rng):
                return
            if effect.replace:
                recipient.stats.clear_major_status()
            duration = effect.duration
            if duration is None:
                if effect.status == StatusCondition.SLEEP:
                    duration = rng.randint(1, 3)
                elif effect.status == StatusCondition.CONFUSE:
                    duration = rng.randint(1, 4)
                else:
                    duration = 0
            if recipient.stats.add_status(effect.status, duration):
                battle.add_to_log(f"{recipient.name} {_STATUS_INFLICTED[effect.status]}!")
            else:
                battle.add_to_log(f"{recipient.name} is already affected by a status condition!")

        elif isinstance(effect, ModifyStat):
            recipient = attacker if effect.on_self else target
            if not settings.stat_stages_enabled or recipient.fainted:
                return
            if not BattleEngine._roll(effect.chance, rng):
                return
            for stat, delta in effect.changes.items():
                applied = recipient.stats.modify_stage(stat, delta)
                stat_name = _STAT_NAMES[stat]
                if applied > 0:
                    battle.add_to_log(f"{recipient.name}'s {stat_name} rose!")
                elif applied < 0:
                    battle.add_to_log(f"{recipient.name}'s {stat_name} fell!")
                elif delta > 0:
                    battle.add_to_log(f"{recipient.name}'s {stat_name} won't go higher!")
                else:
                    battle.add_to_log(f"{recipient.name}'s {stat_name} won't go lower!")

        elif isinstance(effect, Flinch):
            if target is not attacker and not target.fainted and BattleEngine._roll(effect.chance, rng):
                target.stats.flinched = True

        elif isinstance(effect, Heal):
            recipient = target if move.targets_user_side else attacker
            amount = recipient.stats.max_hp * effect.percent // 100 + effect.fixed
            healed = recipient.stats.heal(amount)
            if healed > 0:
                battle.add_to_log(f"{recipient.name} restored {healed} HP!")
            else:
                battle.add_to_log(f"{recipient.name}'s HP is already full!")

        elif isinstance(effect, Protect):
            attacker.stats.protected_turns = effect.turns
            battle.add_to_log(f"{attacker.name} protected itself!")

        elif isinstance(effect, Recharge):
            attacker.stats.must_recharge = True

        elif isinstance(effect, Trap):
            if target is not attacker and not target.fainted:
                target.stats.trapped_turns = max(target.stats.trapped_turns, effect.turns)
                battle.add_to_log(f"{target.name} can no longer escape!")

        elif isinstance(effect, Disable):
            last = target.stats.last_move_id
            disabled = get_move(last) if last is not None else None
            if disabled is None or target.fainted or not target.knows_move(disabled.id):
                battle.add_to_log("But it failed!")
                return
            target.stats.disabled_move_id = disabled.id
            target.stats.disabled_turns = effect.turns
            battle.add_to_log(f"{target.name}'s {disabled.name} was disabled!")

        # Recoil and Drain are applied after all other effects; FixedDamage
        # is handled by the damage calculator; Charge and SelfDestruct by
        # _execute_attack.
        elif isinstance(effect, (Recoil, Drain, FixedDamage, Charge, SelfDestruct)):
            return

    @staticmethod
    def _apply_recoil_and_drain(battle: Battle, attacker: Combatant, move: Move, dealt: int) -> None:
        if dealt <= 0 or attacker.fainted:
            return
        for effect in move.effects:
            if isinstance(effect, Recoil):
                recoil = attacker.stats.take_damage(dealt * effect.percent // 100)
                if recoil > 0:
                    battle.add_to_log(f"{attacker.name} took {recoil} recoil damage!")
                    if attacker.fainted:
                        battle.add_to_log(f"{attacker.name} fainted!")
                        return
            elif isinstance(effect, Drain):
                healed = attacker.stats.heal(dealt * effect.percent // 100)
                if healed > 0:
                    battle.add_to_log(f"{attacker.name} restored {healed} HP!")

    # -- End of turn ------------------------------------------------------

    @staticmethod
    def _end_of_turn(battle: Battle, rng: Any) -> None:
        """Status damage, then per-combatant housekeeping."""
        for player in battle.players:
            active = player.active
            if active is None:
                continue
            stats = active.stats

            if stats.has_status(StatusCondition.POISON):
                dmg = stats.take_damage(max(1, stats.max_hp // 8))
                battle.add_to_log(f"{active.name} took {dmg} poison damage!")
            if stats.has_status(StatusCondition.BURN):
                dmg = stats.take_damage(max(1, stats.max_hp // 16))
                battle.add_to_log(f"{active.name} took {dmg} burn damage!")
            if active.fainted:
                battle.add_to_log(f"{active.name} fainted!")
                continue

            for status in stats.process_turn_end(rng):
                message = _STATUS_EXPIRED.get(status)
                if message:
                    battle.add_to_log(f"{active.name} {message}!")
                else:
                    battle.add_to_log(f"{active.name}'s {status.value} wore off.")

    @staticmethod
    def _replace_fainted(battle: Battle) -> None:
        """Send out the next living member for any side whose active fainted."""
        for player in battle.players:
            if player.active is not None:
                continue
            next_idx = player.next_alive_index()
            if next_idx is None:
                continue
            player.active_index = next_idx
            battle.add_to_log(f"{player.display_name} sent out {player.team[next_idx].name}!")

    @staticmethod
    def _check_battle_end(battle: Battle, now: datetime) -> bool:
        p1_out = not battle.player1.has_alive_members
        p2_out = not battle.player2.has_alive_members
        if p1_out and p2_out:
            battle.add_to_log("Both teams are out of usable characters! It's a draw!")
            BattleEngine._finish(battle, None, now)
        elif p1_out:
            BattleEngine._finish(battle, battle.player2.id, now)
        elif p2_out:
            BattleEngine._finish(battle, battle.player1.id, now)
        return battle.state != BattleState.IN_PROGRESS

    @staticmethod
    def _end_by_turn_limit(battle: Battle, now: datetime) -> None:
        p1_hp = battle.player1.team_hp_percent()
        p2_hp = battle.player2.team_hp_percent()
        battle.add_to_log(f"The turn limit of {battle.settings.max_turns} has been reached!")
        if p1_hp > p2_hp:
            battle.add_to_log(
                f"{battle.player1.display_name} wins by HP percentage! ({p1_hp:.1f}% vs {p2_hp:.1f}%)"
            )
            BattleEngine._finish(battle, battle.player1.id, now, announce=False)
        elif p2_hp > p1_hp:
            battle.add_to_log(
                f"{battle.player2.display_name} wins by HP percentage! ({p2_hp:.1f}% vs {p1_hp:.1f}%)"
            )
            BattleEngine._finish(battle, battle.player2.id, now, announce=False)
        else:
            battle.add_to_log("Battle ended in a draw due to turn limit!")
            BattleEngine._finish(battle, None, now, announce=False)

    @staticmethod
    def _finish(battle: Battle, winner_id: PlayerId | None, now: datetime, announce: bool = True) -> None:
        battle.state = BattleState.FINISHED
        battle.winner_id = winner_id
        battle.finished_at = now

        winner = battle.get_player(winner_id) if winner_id is not None else None
        if announce and winner is not None:
            battle.add_to_log(f"{winner.display_name} wins the battle!")
        battle.add_to_log(f"Battle lasted {battle.current_turn} turns")

        if battle.settings.elo_enabled:
            p1, p2 = battle.player1, battle.player2
            if winner_id is None:
                result = 0.5
            elif winner_id == p1.id:
                result = 1.0
            else:
                result = 0.0
            new1, new2 = calculate_elo(p1.elo_rating, p2.elo_rating, battle.settings.elo_k_factor, result)
            battle.elo_changes = {
                str(p1.id): new1 - p1.elo_rating,
                str(p2.id): new2 - p2.elo_rating,
            }

    @staticmethod
    def _clear_actions(battle: Battle) -> None:
        for player in battle.players:
            player.action = None
