from typing import Dict, Iterable, List, Optional

from wizard_scorer.core.exceptions import (
    InvalidPlayerCount, InvalidSeat, SeatsNotAssigned, InvalidRound,
    InvalidRoundState, InvalidBid, TrickCountMismatch, TrumpSuitLocked,
    InvalidStatusTransition, PlayerNotFound
)
from wizard_scorer.core.game_config import (
    MIN_PLAYERS, MAX_PLAYERS, is_valid_player_count, cards_for_round
)
from wizard_scorer.models.game import Game, GameStatus
from wizard_scorer.models.game_player import GamePlayer
from wizard_scorer.models.game_round import Round, RoundStatus


class GameValidator:
    """Validates game setup, seating and round inputs before they are applied."""

    def validate_player_ids(self, player_ids: List[int]) -> None:
        if len(set(player_ids)) != len(player_ids):
            raise InvalidPlayerCount("A player can only join a game once")
        if not is_valid_player_count(len(player_ids)):
            raise InvalidPlayerCount(
                f"Wizard needs {MIN_PLAYERS} to {MAX_PLAYERS} players, got {len(player_ids)}"
            )

    def validate_transition(self, game: Game, status: GameStatus) -> None:
        if not game.can_transition_to(status):
            raise InvalidStatusTransition(
                f"Game {game.id} cannot move from {game.status} to {status.value}"
            )

    def validate_seat(self, game: Game, seat_position: int) -> None:
        """Seats can only change before play starts."""
        if game.status not in (GameStatus.SETUP.value, GameStatus.SEAT_ARRANGEMENT.value):
            raise InvalidSeat(f"Seats are fixed once game {game.id} has started")
        if not 1 <= seat_position <= game.player_count:
            raise InvalidSeat(
                f"Seat {seat_position} is invalid for a {game.player_count}-player game"
            )

    def validate_seating(self, game: Game, seating: Dict[int, int],
                         game_player_ids: Iterable[int]) -> None:
        """Check a full seating plan is a permutation of 1..player_count."""
        game_player_ids = set(game_player_ids)
        for player_id in seating:
            if player_id not in game_player_ids:
                raise PlayerNotFound(f"Player {player_id} is not in game {game.id}")
        for seat in seating.values():
            self.validate_seat(game, seat)
        if set(seating) != game_player_ids:
            raise SeatsNotAssigned(f"Every player in game {game.id} needs a seat")
        if sorted(seating.values()) != list(range(1, game.player_count + 1)):
            raise InvalidSeat("Each seat can only hold one player")

    def validate_seats_assigned(self, game: Game, game_players: List[GamePlayer]) -> None:
        seats = sorted(gp.seat_position for gp in game_players if gp.seat_position is not None)
        if seats != list(range(1, game.player_count + 1)):
            raise SeatsNotAssigned(
                f"All players in game {game.id} must be seated before the first round"
            )

    def validate_round_creation(self, game: Game, round_number: int,
                                cards_per_player: int) -> None:
        if game.status == GameStatus.COMPLETED.value:
            raise InvalidRound(f"Game {game.id} is already completed")
        if cards_per_player != cards_for_round(round_number):
            raise InvalidRound(
                f"Round {round_number} deals {cards_for_round(round_number)} cards, "
                f"not {cards_per_player}"
            )
        if not 1 <= round_number <= game.total_rounds:
            raise InvalidRound(
                f"Round {round_number} is outside 1..{game.total_rounds} for game {game.id}"
            )
        if round_number != game.current_round:
            raise InvalidRound(
                f"Game {game.id} is on round {game.current_round}, cannot create round {round_number}"
            )

    def validate_bidding_open(self, round_: Round) -> None:
        if round_.status == RoundStatus.COMPLETED.value:
            raise InvalidRoundState(
                f"Round {round_.id} is completed; correct it by completing it again"
            )

    def validate_completable(self, round_: Round) -> None:
        if round_.status == RoundStatus.BIDDING.value:
            raise InvalidRoundState(f"Bids for round {round_.id} have not been submitted")

    def validate_trump_suit(self, round_: Round, trump_suit: Optional[str]) -> None:
        if trump_suit and round_.trump_suit and round_.trump_suit != trump_suit:
            raise TrumpSuitLocked(
                f"Trump for round {round_.id} is already {round_.trump_suit}"
            )

    def validate_counts(self, round_: Round, counts: Dict[int, int],
                        game_player_ids: Iterable[int], label: str = "Bid") -> None:
        """Every count must belong to a game player and lie in 0..cards dealt."""
        game_player_ids = set(game_player_ids)
        for player_id, count in counts.items():
            if player_id not in game_player_ids:
                raise PlayerNotFound(f"Player {player_id} is not in game {round_.game_id}")
            if not 0 <= count <= round_.cards_per_player:
                raise InvalidBid(
                    f"{label} of {count} for player {player_id} is outside "
                    f"0..{round_.cards_per_player}"
                )

    def validate_tricks(self, round_: Round, tricks_taken: Dict[int, int],
                        game_player_ids: Iterable[int]) -> None:
        """Unlike bids, tricks taken must account for every card dealt."""
        self.validate_counts(round_, tricks_taken, game_player_ids, label="Tricks taken")
        total = sum(tricks_taken.values())
        if total != round_.cards_per_player:
            raise TrickCountMismatch(
                f"Tricks taken add up to {total} but round {round_.round_number} "
                f"dealt {round_.cards_per_player}"
            )
