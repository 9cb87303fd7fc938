from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from wizard_scorer.core.database import Base


class GamePlayer(Base):
    __tablename__ = "game_players"

    game_id = Column(Integer, ForeignKey("games.id"), primary_key=True)
    player_id = Column(Integer, ForeignKey("players.id"), primary_key=True)
    total_score = Column(Integer, nullable=False, default=0)  # sum of round scores
    seat_position = Column(Integer)  # 1..player_count, set during seat arrangement
    position = Column(Integer)  # final rank, set when the game completes

    # Relationships
    game = relationship("Game", back_populates="game_players")
    player = relationship("Player", back_populates="game_players")

    __table_args__ = (
        UniqueConstraint('game_id', 'seat_position', name='unique_game_seat'),
    )
