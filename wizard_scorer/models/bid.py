from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from wizard_scorer.core.database import Base


class Bid(Base):
    __tablename__ = "bids"

    id = Column(Integer, primary_key=True, index=True)
    round_id = Column(Integer, ForeignKey("rounds.id"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    bid_amount = Column(Integer, nullable=False)
    tricks_taken = Column(Integer)  # unset until the round completes
    score = Column(Integer)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    round = relationship("Round", back_populates="bids")
    player = relationship("Player", back_populates="bids")

    # Constraints
    __table_args__ = (
        UniqueConstraint('round_id', 'player_id', name='unique_round_player_bid'),
        # Note: upper bounds are validated at application level against cards_per_player
        CheckConstraint('bid_amount >= 0', name='valid_bid_min'),
        CheckConstraint('tricks_taken IS NULL OR tricks_taken >= 0', name='valid_tricks_min'),
    )

    @property
    def is_correct(self) -> bool:
        return self.tricks_taken is not None and self.bid_amount == self.tricks_taken
