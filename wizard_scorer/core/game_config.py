"""
Rule constants for a game of Wizard.
"""

# Player count limits
MIN_PLAYERS = 3
MAX_PLAYERS = 6

# The 60-card deck divided by the number of players
ROUNDS_BY_PLAYER_COUNT = {
    3: 20,
    4: 15,
    5: 12,
    6: 10,
}
DEFAULT_TOTAL_ROUNDS = 15

# Scoring
CORRECT_BID_BONUS = 20
POINTS_PER_TRICK = 10
POINTS_PER_MISSED_TRICK = 10


def is_valid_player_count(player_count: int) -> bool:
    """Check if a game can be played with this many players."""
    return MIN_PLAYERS <= player_count <= MAX_PLAYERS


def calculate_total_rounds(player_count: int) -> int:
    """
    Get the number of rounds in a game for the given player count.

    Unsupported counts fall back to DEFAULT_TOTAL_ROUNDS; callers reject them
    with is_valid_player_count() before a game is created.
    """
    return ROUNDS_BY_PLAYER_COUNT.get(player_count, DEFAULT_TOTAL_ROUNDS)


def cards_for_round(round_number: int) -> int:
    """Round N deals N cards to every player."""
    return round_number
