"""
Round lifecycle for a game of Wizard.

A round moves BIDDING -> PLAYING -> COMPLETED. Completing a round scores
every bid, recomputes each player's running total from all stored bids and
either advances the game to the next round or finishes it. Each operation is
committed as a single transaction.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import and_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wizard_scorer.core.exceptions import (
    GameNotFound, RoundNotFound, PersistenceError, InvalidRound, InvalidRoundState
)
from wizard_scorer.models.bid import Bid
from wizard_scorer.models.game import Game, GameStatus
from wizard_scorer.models.game_player import GamePlayer
from wizard_scorer.models.game_round import Round, RoundStatus
from wizard_scorer.services.scoring import (
    calculate_score, dealer_seat, first_bidder_seat, rank_standings, remaining_tricks
)
from wizard_scorer.services.validators import GameValidator

logger = logging.getLogger(__name__)


class RoundService:
    def __init__(self):
        self.validator = GameValidator()

    def create_round(self, db: Session, game_id: int, round_number: int,
                     cards_per_player: int) -> Round:
        game = db.query(Game).filter(Game.id == game_id).with_for_update().first()
        if not game:
            raise GameNotFound(f"Game {game_id} not found")

        self.validator.validate_round_creation(game, round_number, cards_per_player)

        existing = db.query(Round).filter(
            and_(Round.game_id == game_id, Round.round_number == round_number)
        ).first()
        if existing:
            raise InvalidRound(f"Round {round_number} already exists for game {game_id}")

        if round_number == 1:
            self.validator.validate_seats_assigned(game, self._game_players(db, game_id))
            self.validator.validate_transition(game, GameStatus.IN_PROGRESS)

        round_ = Round(
            game_id=game_id,
            round_number=round_number,
            cards_per_player=cards_per_player,
            status=RoundStatus.BIDDING.value
        )
        try:
            db.add(round_)
            if round_number == 1:
                game.status = GameStatus.IN_PROGRESS.value
                game.started_at = datetime.now(timezone.utc)
            db.commit()
        except SQLAlchemyError as e:
            self._fail(db, f"Failed to create round {round_number} for game {game_id}", e)
        db.refresh(round_)

        logger.info(f"Round {round_number} ({cards_per_player} cards) created for game {game_id}")
        return round_

    def submit_bids(self, db: Session, round_id: int, bids: Dict[int, int],
                    trump_suit: Optional[str] = None) -> Round:
        """Record every player's bid and move the round into play."""
        round_ = self._get_round_for_update(db, round_id)
        player_ids = self._game_player_ids(db, round_.game_id)

        self.validator.validate_bidding_open(round_)
        self.validator.validate_counts(round_, bids, player_ids)
        self.validator.validate_trump_suit(round_, trump_suit)

        try:
            for player_id in player_ids:
                self._upsert_bid(db, round_, player_id, bids.get(player_id, 0))
            if trump_suit and not round_.trump_suit:
                round_.trump_suit = trump_suit
            round_.status = RoundStatus.PLAYING.value
            db.commit()
        except SQLAlchemyError as e:
            self._fail(db, f"Failed to submit bids for round {round_id}", e)
        db.refresh(round_)

        logger.info(
            f"Bids submitted for round {round_.round_number} of game {round_.game_id}"
            f" (trump: {round_.trump_suit or 'none'})"
        )
        return round_

    def place_bid(self, db: Session, round_id: int, player_id: int, bid_amount: int) -> Bid:
        """Record a single player's bid while the round is still in bidding."""
        round_ = self._get_round_for_update(db, round_id)
        if round_.status != RoundStatus.BIDDING.value:
            raise InvalidRoundState(f"Round {round_id} is no longer taking bids")
        self.validator.validate_counts(
            round_, {player_id: bid_amount}, self._game_player_ids(db, round_.game_id)
        )

        try:
            bid = self._upsert_bid(db, round_, player_id, bid_amount)
            db.commit()
        except SQLAlchemyError as e:
            self._fail(db, f"Failed to place bid for player {player_id} in round {round_id}", e)
        db.refresh(bid)
        return bid

    def complete_round(self, db: Session, round_id: int, bids: Dict[int, int],
                       tricks_taken: Dict[int, int]) -> dict:
        """
        Score a round and roll the game forward.

        Also used to correct an already completed round: the same inputs
        overwrite the stored bids and every total is recomputed from scratch.
        """
        round_ = self._get_round_for_update(db, round_id)
        game = db.query(Game).filter(Game.id == round_.game_id).with_for_update().first()
        if not game:
            raise GameNotFound(f"Game {round_.game_id} not found")

        player_ids = self._game_player_ids(db, game.id)
        self.validator.validate_completable(round_)
        self.validator.validate_counts(round_, bids, player_ids)
        self.validator.validate_tricks(round_, tricks_taken, player_ids)

        stored = {bid.player_id: bid.bid_amount for bid in round_.bids}
        scores = {}
        try:
            for player_id in player_ids:
                bid_amount = bids.get(player_id, stored.get(player_id, 0))
                tricks = tricks_taken.get(player_id, 0)
                scores[player_id] = calculate_score(bid_amount, tricks)
                self._upsert_bid(db, round_, player_id, bid_amount, tricks, scores[player_id])

            was_completed = round_.status == RoundStatus.COMPLETED.value
            round_.status = RoundStatus.COMPLETED.value
            db.flush()

            self.recompute_standings(db, game)
            if game.is_final_round(round_.round_number) or game.status == GameStatus.COMPLETED.value:
                game.current_round = game.total_rounds
                self._finish_game(db, game)
            else:
                game.current_round = max(game.current_round, round_.round_number + 1)
            db.commit()
        except SQLAlchemyError as e:
            self._fail(db, f"Failed to complete round {round_id}", e)

        logger.info(
            f"Round {round_.round_number} of game {game.id} "
            f"{'corrected' if was_completed else 'completed'}: {scores}"
        )
        return {
            "success": True,
            "round_id": round_.id,
            "game_id": game.id,
            "scores": scores,
            "game_status": game.status,
            "current_round": game.current_round
        }

    def recompute_standings(self, db: Session, game: Game) -> Dict[int, int]:
        """Set every player's total to the sum of their scores over all rounds."""
        totals = dict(
            db.query(Bid.player_id, func.coalesce(func.sum(Bid.score), 0))
            .join(Round, Bid.round_id == Round.id)
            .filter(Round.game_id == game.id)
            .group_by(Bid.player_id)
            .all()
        )
        for game_player in self._game_players(db, game.id):
            game_player.total_score = totals.get(game_player.player_id, 0)
        db.flush()
        return totals

    def get_round(self, db: Session, round_id: int) -> dict:
        round_ = db.query(Round).filter(Round.id == round_id).first()
        if not round_:
            raise RoundNotFound(f"Round {round_id} not found")

        player_count = db.query(Game.player_count).filter(Game.id == round_.game_id).scalar()
        return round_state(round_, player_count)

    def get_remaining_tricks(self, db: Session, round_id: int, bids: List[int]) -> dict:
        round_ = db.query(Round).filter(Round.id == round_id).first()
        if not round_:
            raise RoundNotFound(f"Round {round_id} not found")

        return {
            "round_id": round_.id,
            "cards_per_player": round_.cards_per_player,
            "total_bids": sum(bids),
            "remaining_tricks": remaining_tricks(round_.cards_per_player, bids)
        }

    def _finish_game(self, db: Session, game: Game) -> None:
        """Assign final positions and mark the game completed."""
        ranked = rank_standings(self._game_players(db, game.id))
        for position, game_player in enumerate(ranked, 1):
            game_player.position = position

        self.validator.validate_transition(game, GameStatus.COMPLETED)
        if game.status != GameStatus.COMPLETED.value:
            game.status = GameStatus.COMPLETED.value
            game.ended_at = datetime.now(timezone.utc)
            logger.info(
                f"Game {game.id} finished, winner player {ranked[0].player_id} "
                f"with {ranked[0].total_score} points"
            )

    def _upsert_bid(self, db: Session, round_: Round, player_id: int, bid_amount: int,
                    tricks_taken: Optional[int] = None, score: Optional[int] = None) -> Bid:
        bid = db.query(Bid).filter(
            and_(Bid.round_id == round_.id, Bid.player_id == player_id)
        ).first()
        if not bid:
            bid = Bid(round_id=round_.id, player_id=player_id)
            db.add(bid)
        bid.bid_amount = bid_amount
        bid.tricks_taken = tricks_taken
        bid.score = score
        return bid

    def _get_round_for_update(self, db: Session, round_id: int) -> Round:
        round_ = db.query(Round).filter(Round.id == round_id).with_for_update().first()
        if not round_:
            raise RoundNotFound(f"Round {round_id} not found")
        return round_

    def _game_players(self, db: Session, game_id: int) -> List[GamePlayer]:
        return db.query(GamePlayer).filter(GamePlayer.game_id == game_id).all()

    def _game_player_ids(self, db: Session, game_id: int) -> List[int]:
        return [
            player_id for player_id, in db.query(GamePlayer.player_id).filter(
                GamePlayer.game_id == game_id
            ).order_by(GamePlayer.seat_position, GamePlayer.player_id).all()
        ]

    def _fail(self, db: Session, message: str, error: SQLAlchemyError) -> None:
        logger.error(f"{message}: {error}")
        db.rollback()
        raise PersistenceError(message) from error


def bid_state(bid: Bid) -> dict:
    return {
        "player_id": bid.player_id,
        "player_name": bid.player.name if bid.player else None,
        "bid_amount": bid.bid_amount,
        "tricks_taken": bid.tricks_taken,
        "score": bid.score
    }


def round_state(round_: Round, player_count: int) -> dict:
    """Read model of a round with its bids and turn order."""
    bids = sorted(round_.bids, key=lambda b: b.player_id)
    return {
        "id": round_.id,
        "game_id": round_.game_id,
        "round_number": round_.round_number,
        "cards_per_player": round_.cards_per_player,
        "trump_suit": round_.trump_suit,
        "status": round_.status,
        "dealer_seat": dealer_seat(round_.round_number, player_count),
        "first_bidder_seat": first_bidder_seat(round_.round_number, player_count),
        "remaining_tricks": remaining_tricks(round_.cards_per_player, [b.bid_amount for b in bids]),
        "bids": [bid_state(bid) for bid in bids]
    }


round_service_obj = RoundService()
