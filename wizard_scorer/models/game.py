from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from wizard_scorer.core.database import Base


class GameStatus(str, Enum):
    SETUP = "SETUP"
    SEAT_ARRANGEMENT = "SEAT_ARRANGEMENT"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


# Forward-only walk through the game phases
GAME_STATUS_TRANSITIONS = {
    GameStatus.SETUP: {GameStatus.SEAT_ARRANGEMENT},
    GameStatus.SEAT_ARRANGEMENT: {GameStatus.IN_PROGRESS},
    GameStatus.IN_PROGRESS: {GameStatus.COMPLETED},
    GameStatus.COMPLETED: set(),
}


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    status = Column(String(20), nullable=False, default=GameStatus.SETUP.value, index=True)
    player_count = Column(Integer, nullable=False)
    total_rounds = Column(Integer, nullable=False)
    current_round = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    started_at = Column(DateTime(timezone=True))
    ended_at = Column(DateTime(timezone=True))

    game_players = relationship(
        "GamePlayer", back_populates="game", cascade="all, delete-orphan"
    )
    rounds = relationship(
        "Round", back_populates="game", cascade="all, delete-orphan",
        order_by="Round.round_number"
    )

    def can_transition_to(self, status: GameStatus) -> bool:
        """Check if the game may move from its current status to `status`."""
        current = GameStatus(self.status)
        return status == current or status in GAME_STATUS_TRANSITIONS[current]

    def is_final_round(self, round_number: int) -> bool:
        return round_number >= self.total_rounds
