"""ELO rating helpers."""

DEFAULT_ELO = 1000
K_FACTOR = 32


def expected_score(rating: int, opponent_rating: int) -> float:
    return 1.0 / (1.0 + 10 ** ((opponent_rating - rating) / 400))


def calculate_elo(
    player1_rating: int,
    player2_rating: int,
    k_factor: int = K_FACTOR,
    result: float = 1.0,
) -> tuple[int, int]:
    """Return both players' new ratings after a match.

    ``result`` is 1.0 for a player 1 win, 0.5 for a draw, 0.0 for a
    player 2 win. Changes are truncated toward zero.
    """
    expected1 = expected_score(player1_rating, player2_rating)
    expected2 = expected_score(player2_rating, player1_rating)

    new1 = player1_rating + int(k_factor * (result - expected1))
    new2 = player2_rating + int(k_factor * ((1.0 - result) - expected2))
    return new1, new2


def calculate_elo_change(winner_elo: int, loser_elo: int, k_factor: int = K_FACTOR) -> tuple[int, int]:
    """Calculate rating deltas after a decisive battle.

    Returns (winner_delta, loser_delta).
    """
    new_winner, new_loser = calculate_elo(winner_elo, loser_elo, k_factor, 1.0)
    return new_winner - winner_elo, new_loser - loser_elo


RANKS = [
    (2000, "Master"),
    (1800, "Diamond"),
    (1600, "Platinum"),
    (1400, "Gold"),
    (1200, "Silver"),
    (1000, "Bronze"),
]


def compute_rank(elo: int) -> str:
    """Derive a rank label from an ELO rating."""
    for threshold, label in RANKS:
        if elo >= threshold:
            return label
    return "Novice"
