"""
Scoring and turn-order rules for Wizard.

Everything here is a pure function of its arguments; the round service calls
into these while persisting results.
"""
from typing import Dict, Iterable, List, Optional, Sequence

from wizard_scorer.core.game_config import (
    CORRECT_BID_BONUS, POINTS_PER_TRICK, POINTS_PER_MISSED_TRICK
)


def calculate_score(bid: int, tricks_taken: int) -> int:
    """
    Score one player's round.

    A correct bid earns 20 points plus 10 per trick (a correct zero bid
    scores exactly 20). A missed bid loses 10 points per trick of difference,
    with no floor.
    """
    if bid == tricks_taken:
        return CORRECT_BID_BONUS + POINTS_PER_TRICK * tricks_taken
    return -POINTS_PER_MISSED_TRICK * abs(bid - tricks_taken)


def dealer_seat(round_number: int, player_count: int) -> int:
    """Seat of the dealer; rotates one seat per round and wraps."""
    return ((round_number - 1) % player_count) + 1


def first_bidder_seat(round_number: int, player_count: int) -> int:
    """Seat immediately after the dealer, who bids and leads first."""
    return (round_number % player_count) + 1


def remaining_tricks(cards_this_round: int, bids: Iterable[int]) -> int:
    """
    Tricks left unclaimed by the bids so far.

    Advisory only: total bids are allowed to differ from the cards dealt.
    """
    return cards_this_round - sum(bids)


def bidding_order(seating: Dict[int, int], round_number: int) -> List[int]:
    """
    Player ids in bidding order for a round, starting at the first bidder.

    `seating` maps seat position to player id and must cover every seat.
    """
    player_count = len(seating)
    start = first_bidder_seat(round_number, player_count)
    return [
        seating[((start - 1 + offset) % player_count) + 1]
        for offset in range(player_count)
    ]


def standings_key(total_score: int, seat_position: Optional[int], player_id: int):
    """Sort key for standings: highest score first, ties go to the lower seat."""
    seat = seat_position if seat_position is not None else float("inf")
    return (-total_score, seat, player_id)


def rank_standings(entries: Sequence) -> List:
    """
    Order game players for final positions.

    Accepts anything with total_score, seat_position and player_id
    attributes. Equal scores are broken by seat position, then player id.
    """
    return sorted(
        entries,
        key=lambda gp: standings_key(gp.total_score, gp.seat_position, gp.player_id)
    )
