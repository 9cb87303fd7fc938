import logging
from typing import List

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wizard_scorer.core.exceptions import PlayerNotFound, PlayerNameTaken, PersistenceError
from wizard_scorer.models.game import Game, GameStatus
from wizard_scorer.models.game_player import GamePlayer
from wizard_scorer.models.player import Player

logger = logging.getLogger(__name__)


class PlayerService:

    def create_player(self, db: Session, name: str) -> Player:
        """Create a new player."""
        # Check if name already exists
        existing = db.query(Player).filter(Player.name == name).first()
        if existing:
            return existing  # Return existing player instead of error

        player = Player(name=name)
        try:
            db.add(player)
            db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to create player '{name}': {e}")
            db.rollback()
            raise PersistenceError(f"Failed to create player '{name}'") from e
        db.refresh(player)

        logger.info(f"Created player {player.id} with name '{name}'")
        return player

    def list_players(self, db: Session) -> List[Player]:
        return db.query(Player).order_by(Player.name.asc()).all()

    def rename_player(self, db: Session, player_id: int, name: str) -> Player:
        player = self._get_player(db, player_id)

        taken = db.query(Player).filter(
            and_(Player.name == name, Player.id != player_id)
        ).first()
        if taken:
            raise PlayerNameTaken(f"Name '{name}' is already used by player {taken.id}")

        old_name = player.name
        player.name = name
        try:
            db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to rename player {player_id}: {e}")
            db.rollback()
            raise PersistenceError(f"Failed to rename player {player_id}") from e
        db.refresh(player)

        logger.info(f"Renamed player {player_id} from '{old_name}' to '{name}'")
        return player

    def get_player_stats(self, db: Session, player_id: int) -> dict:
        """Get statistics for a player across completed games."""
        player = self._get_player(db, player_id)
        return self._stats_for(db, player)

    def get_leaderboard(self, db: Session, sort_by: str = "wins", limit: int = 10) -> List[dict]:
        """Rank players with at least one completed game by wins or average score."""
        if sort_by == "wins":
            key = lambda entry: (-entry["wins"], -entry["average_score"], entry["player_id"])
        elif sort_by == "average_score":
            key = lambda entry: (-entry["average_score"], -entry["wins"], entry["player_id"])
        else:
            raise ValueError(f"Unknown leaderboard type: {sort_by}")

        entries = [
            stats for stats in (self._stats_for(db, player) for player in self.list_players(db))
            if stats["total_games"] > 0
        ]
        leaderboard = sorted(entries, key=key)[:limit]

        # Add rank to results
        for i, entry in enumerate(leaderboard, 1):
            entry["rank"] = i

        return leaderboard

    def _stats_for(self, db: Session, player: Player) -> dict:
        completed = db.query(GamePlayer).join(Game).filter(
            and_(
                GamePlayer.player_id == player.id,
                Game.status == GameStatus.COMPLETED.value
            )
        ).all()

        total_games = len(completed)
        wins = sum(1 for gp in completed if gp.position == 1)
        win_rate = (wins / total_games * 100) if total_games > 0 else 0.0
        average_score = (
            sum(gp.total_score for gp in completed) / total_games if total_games > 0 else 0.0
        )

        return {
            "player_id": player.id,
            "name": player.name,
            "total_games": total_games,
            "wins": wins,
            "win_rate": round(win_rate, 2),
            "average_score": round(average_score, 2),
            "best_score": max((gp.total_score for gp in completed), default=None)
        }

    def _get_player(self, db: Session, player_id: int) -> Player:
        player = db.query(Player).filter(Player.id == player_id).first()
        if not player:
            raise PlayerNotFound(f"Player {player_id} not found")
        return player


player_service_obj = PlayerService()
