from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from wizard_scorer.core.database import Base


class RoundStatus(str, Enum):
    BIDDING = "BIDDING"
    PLAYING = "PLAYING"
    COMPLETED = "COMPLETED"


class TrumpSuit(str, Enum):
    HEARTS = "Hearts"
    DIAMONDS = "Diamonds"
    CLUBS = "Clubs"
    SPADES = "Spades"


class Round(Base):
    __tablename__ = "rounds"

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False, index=True)
    round_number = Column(Integer, nullable=False)
    cards_per_player = Column(Integer, nullable=False)
    trump_suit = Column(String(10))
    status = Column(String(20), nullable=False, default=RoundStatus.BIDDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    game = relationship("Game", back_populates="rounds")
    bids = relationship("Bid", back_populates="round", cascade="all, delete-orphan")

    # Constraints
    __table_args__ = (
        UniqueConstraint('game_id', 'round_number', name='unique_game_round'),
        CheckConstraint('round_number >= 1', name='valid_round_number'),
        CheckConstraint('cards_per_player = round_number', name='cards_match_round'),
    )
