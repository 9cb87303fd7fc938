import logging
from typing import Dict, List

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from wizard_scorer.core.exceptions import (
    GameNotFound, PlayerNotFound, PersistenceError
)
from wizard_scorer.core.game_config import calculate_total_rounds
from wizard_scorer.models.bid import Bid
from wizard_scorer.models.game import Game, GameStatus
from wizard_scorer.models.game_player import GamePlayer
from wizard_scorer.models.game_round import Round
from wizard_scorer.models.player import Player
from wizard_scorer.services.round_service import round_state
from wizard_scorer.services.scoring import (
    bidding_order, dealer_seat, first_bidder_seat, standings_key
)
from wizard_scorer.services.validators import GameValidator

logger = logging.getLogger(__name__)


def seat_order(game_player: GamePlayer):
    # Unseated players last
    return (game_player.seat_position is None, game_player.seat_position or 0, game_player.player_id)


class GameService:
    def __init__(self):
        self.validator = GameValidator()

    def create_game(self, db: Session, player_ids: List[int]) -> dict:
        self.validator.validate_player_ids(player_ids)

        found = {
            player_id for player_id, in db.query(Player.id).filter(Player.id.in_(player_ids)).all()
        }
        missing = [player_id for player_id in player_ids if player_id not in found]
        if missing:
            raise PlayerNotFound(f"Player with ID {missing[0]} not found")

        player_count = len(player_ids)
        game = Game(
            status=GameStatus.SETUP.value,
            player_count=player_count,
            total_rounds=calculate_total_rounds(player_count),
            current_round=1
        )
        try:
            db.add(game)
            db.flush()

            for player_id in player_ids:
                db.add(GamePlayer(game_id=game.id, player_id=player_id, total_score=0))
            db.commit()
        except SQLAlchemyError as e:
            self._fail(db, "Failed to create game", e)

        logger.info(
            f"Game {game.id} created for {player_count} players "
            f"({game.total_rounds} rounds)"
        )
        return self.get_game_state(db, game.id)

    def list_games(self, db: Session) -> List[dict]:
        """Newest games first, each with its players and their standings."""
        games = db.query(Game).options(
            joinedload(Game.game_players).joinedload(GamePlayer.player)
        ).order_by(Game.created_at.desc(), Game.id.desc()).all()

        entries = []
        for game in games:
            entry = self._game_header(game)
            entry["players"] = [
                self._player_state(gp) for gp in sorted(game.game_players, key=seat_order)
            ]
            entries.append(entry)
        return entries

    def assign_seat(self, db: Session, game_id: int, player_id: int, seat_position: int) -> dict:
        """
        Put one player in a seat.

        Whoever already sits there is unseated. Moves the game into seat
        arrangement if it was still in setup.
        """
        game = self._get_game_for_update(db, game_id)
        self.validator.validate_seat(game, seat_position)

        game_player = db.query(GamePlayer).filter(
            and_(GamePlayer.game_id == game_id, GamePlayer.player_id == player_id)
        ).first()
        if not game_player:
            raise PlayerNotFound(f"Player {player_id} is not in game {game_id}")

        try:
            occupant = db.query(GamePlayer).filter(
                and_(
                    GamePlayer.game_id == game_id,
                    GamePlayer.seat_position == seat_position,
                    GamePlayer.player_id != player_id
                )
            ).first()
            if occupant:
                occupant.seat_position = None
                db.flush()

            game_player.seat_position = seat_position
            self._begin_seat_arrangement(game)
            db.commit()
        except SQLAlchemyError as e:
            self._fail(db, f"Failed to seat player {player_id} in game {game_id}", e)

        logger.info(f"Player {player_id} seated at {seat_position} in game {game_id}")
        return self.get_game_state(db, game_id)

    def arrange_seats(self, db: Session, game_id: int, seating: Dict[int, int]) -> dict:
        """Seat every player at once; `seating` maps player id to seat."""
        game = self._get_game_for_update(db, game_id)
        game_players = self._game_players(db, game_id)
        self.validator.validate_seating(game, seating, [gp.player_id for gp in game_players])

        try:
            for game_player in game_players:
                game_player.seat_position = None
            db.flush()

            for game_player in game_players:
                game_player.seat_position = seating[game_player.player_id]
            self._begin_seat_arrangement(game)
            db.commit()
        except SQLAlchemyError as e:
            self._fail(db, f"Failed to arrange seats for game {game_id}", e)

        logger.info(f"Seats arranged for game {game_id}: {seating}")
        return self.get_game_state(db, game_id)

    def get_game_state(self, db: Session, game_id: int) -> dict:
        """
        Read model of a game for rendering.

        Returns:
        - Players with seat, running total and final position
        - Rounds in order, each with its bids and bidders
        - Turn order for the current round once everyone is seated
        """
        game = db.query(Game).options(
            joinedload(Game.rounds).joinedload(Round.bids).joinedload(Bid.player)
        ).filter(Game.id == game_id).first()
        if not game:
            raise GameNotFound(f"Game {game_id} not found")

        game_players = self._game_players(db, game_id)
        seating = {
            gp.seat_position: gp.player_id
            for gp in game_players if gp.seat_position is not None
        }

        state = self._game_header(game)
        state.update({
            "players": [self._player_state(gp) for gp in game_players],
            "rounds": [round_state(round_, game.player_count) for round_ in game.rounds],
            "dealer_seat": None,
            "first_bidder_seat": None,
            "bidding_order": []
        })

        if len(seating) == game.player_count and game.status != GameStatus.COMPLETED.value:
            state["dealer_seat"] = dealer_seat(game.current_round, game.player_count)
            state["first_bidder_seat"] = first_bidder_seat(game.current_round, game.player_count)
            state["bidding_order"] = bidding_order(seating, game.current_round)

        return state

    def get_game_summary(self, db: Session, game_id: int) -> dict:
        """Final standings with per-player bidding statistics."""
        game = db.query(Game).filter(Game.id == game_id).first()
        if not game:
            raise GameNotFound(f"Game {game_id} not found")

        scored_bids = db.query(Bid).join(Round, Bid.round_id == Round.id).filter(
            Round.game_id == game_id,
            Bid.score.isnot(None)
        ).all()

        by_player = {}
        for bid in scored_bids:
            by_player.setdefault(bid.player_id, []).append(bid)

        players = []
        for gp in sorted(
            self._game_players(db, game_id),
            key=lambda gp: (gp.position or float("inf"),)
            + standings_key(gp.total_score, gp.seat_position, gp.player_id)
        ):
            bids = by_player.get(gp.player_id, [])
            correct = sum(1 for bid in bids if bid.is_correct)
            scores = [bid.score for bid in bids]
            players.append({
                "player_id": gp.player_id,
                "name": gp.player.name,
                "position": gp.position,
                "total_score": gp.total_score,
                "correct_bids": correct,
                "total_bids": len(bids),
                "accuracy_rate": round(correct / len(bids) * 100) if bids else 0,
                "highest_round": max(scores) if scores else None,
                "lowest_round": min(scores) if scores else None
            })

        duration_minutes = None
        if game.started_at and game.ended_at:
            duration_minutes = round((game.ended_at - game.started_at).total_seconds() / 60)

        return {
            "game_id": game.id,
            "status": game.status,
            "total_rounds": game.total_rounds,
            "rounds_played": len({bid.round_id for bid in scored_bids}),
            "duration_minutes": duration_minutes,
            "players": players
        }

    def _begin_seat_arrangement(self, game: Game) -> None:
        if game.status == GameStatus.SETUP.value:
            self.validator.validate_transition(game, GameStatus.SEAT_ARRANGEMENT)
            game.status = GameStatus.SEAT_ARRANGEMENT.value

    def _game_header(self, game: Game) -> dict:
        return {
            "id": game.id,
            "status": game.status,
            "player_count": game.player_count,
            "total_rounds": game.total_rounds,
            "current_round": game.current_round,
            "created_at": game.created_at,
            "started_at": game.started_at,
            "ended_at": game.ended_at
        }

    def _player_state(self, game_player: GamePlayer) -> dict:
        return {
            "player_id": game_player.player_id,
            "name": game_player.player.name,
            "seat_position": game_player.seat_position,
            "total_score": game_player.total_score,
            "position": game_player.position
        }

    def _get_game_for_update(self, db: Session, game_id: int) -> Game:
        game = db.query(Game).filter(Game.id == game_id).with_for_update().first()
        if not game:
            raise GameNotFound(f"Game {game_id} not found")
        return game

    def _game_players(self, db: Session, game_id: int) -> List[GamePlayer]:
        game_players = db.query(GamePlayer).options(
            joinedload(GamePlayer.player)
        ).filter(GamePlayer.game_id == game_id).all()
        return sorted(game_players, key=seat_order)

    def _fail(self, db: Session, message: str, error: SQLAlchemyError) -> None:
        logger.error(f"{message}: {error}")
        db.rollback()
        raise PersistenceError(message) from error


game_service_obj = GameService()
