"""
Plays a full battle between two random teams through the BattleManager.
Handy for eyeballing narration and balance changes.
"""

import random

import typer
from rich.console import Console
from rich.table import Table

from friemon.core.battle import ActionType, BattleState, PlayerAction
from friemon.core.characters import ROSTER, Character
from friemon.core.elo import compute_rank
from friemon.core.errors import FriemonError
from friemon.core.manager import BattleManager
from friemon.core.settings import GameSettings

app = typer.Typer()
console = Console()


def _pick_action(battle, player_id, rng: random.Random) -> PlayerAction:
    player = battle.get_player(player_id)
    active = player.active
    usable = [m.id for m in active.moves if active.stats.has_pp(m.id)]
    if active.stats.charging or not usable:
        return PlayerAction(action_type=ActionType.ATTACK, move_id=active.character.moves[0])
    return PlayerAction(action_type=ActionType.ATTACK, move_id=rng.choice(usable))


@app.command()
def simulate(
    seed: int = typer.Option(None, help="Seed for a reproducible battle"),
    level: int = 50,
    team_size: int = 3,
    max_turns: int = 25,
    show_calc: bool = False,
):
    """
    Simulate a battle between two random teams.
    """
    rng = random.Random(seed)
    settings = GameSettings(
        team_size=team_size,
        max_turns=max_turns,
        show_damage_calculation=show_calc,
    )
    manager = BattleManager()

    manager.create_challenge("frieren", "fern", "sim-channel", settings=settings)
    battle = manager.accept_challenge("fern")

    roster_ids = list(ROSTER)
    for player_id in ("frieren", "fern"):
        for character_id in rng.sample(roster_ids, team_size):
            manager.add_character_to_team(player_id, Character.from_base(character_id, level=level, owner_id=player_id))

    battle = manager.start_battle(battle.id)
    for line in battle.battle_log:
        console.print(line)

    while battle.state == BattleState.IN_PROGRESS:
        for player_id in ("frieren", "fern"):
            try:
                manager.submit_action(player_id, _pick_action(battle, player_id, rng))
            except FriemonError as e:
                console.print(f"[red]{player_id}: {e}[/red]")
                manager.submit_action(player_id, PlayerAction(action_type=ActionType.SKIP))
        for line in manager.process_battle_turn(battle.id, rng):
            style = "bold cyan" if line.startswith("---") else None
            console.print(line, style=style)
        battle = manager.get_battle(battle.id)

    table = Table(title="Result")
    table.add_column("Player")
    table.add_column("Team HP", justify="right")
    table.add_column("ELO change", justify="right")
    table.add_column("Rank")
    for player in battle.players:
        delta = battle.elo_changes.get(str(player.id), 0)
        table.add_row(
            player.display_name,
            f"{player.team_hp_percent():.1f}%",
            f"{delta:+d}",
            compute_rank(player.elo_rating + delta),
        )
    console.print(table)
    console.print(f"Winner: {battle.winner_id or 'draw'}")


if __name__ == "__main__":
    app()
