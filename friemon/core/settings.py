"""Per-battle rule settings."""

from pydantic import BaseModel, Field


class GameSettings(BaseModel):
    """Rules for one battle. Snapshotted into a challenge and its battle."""

    # Turns
    max_turns: int = Field(default=25, ge=1)
    turn_time_limit: int = 60  # Seconds; enforced by the caller's scheduler

    # Mechanics
    critical_hits_enabled: bool = True
    status_effects_enabled: bool = True
    type_effectiveness_enabled: bool = True
    stat_stages_enabled: bool = True

    # Teams
    team_size: int = Field(default=3, ge=1, le=6)
    allow_duplicates: bool = False
    level_cap: int = Field(default=100, ge=1, le=100)

    # Rating
    elo_enabled: bool = True
    elo_k_factor: int = 32

    # Narration
    show_damage_calculation: bool = False
    show_accuracy_rolls: bool = False
