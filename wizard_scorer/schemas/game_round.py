from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from wizard_scorer.models.game import GameStatus
from wizard_scorer.models.game_round import RoundStatus, TrumpSuit


class RoundCreate(BaseModel):
    game_id: int = Field(..., description="ID of the game the round belongs to")
    round_number: int = Field(..., ge=1, description="1-based round number")
    cards_per_player: int = Field(..., ge=1, description="Cards dealt to each player; equals the round number")


class BidsSubmit(BaseModel):
    bids: Dict[int, int] = Field(..., description="Bid amount keyed by player ID; missing players bid 0")
    trump_suit: Optional[TrumpSuit] = Field(None, description="Trump for the round, fixed once set")


class RoundComplete(BaseModel):
    bids: Dict[int, int] = Field(
        default_factory=dict,
        description="Bid amount keyed by player ID; missing players keep their submitted bid"
    )
    tricks_taken: Dict[int, int] = Field(
        ..., description="Tricks won keyed by player ID; must add up to the cards dealt"
    )


class BidCreate(BaseModel):
    round_id: int
    player_id: int
    bid_amount: int = Field(..., ge=0)


class BidResponse(BaseModel):
    id: int
    round_id: int
    player_id: int
    bid_amount: int
    tricks_taken: Optional[int] = None
    score: Optional[int] = None

    class Config:
        from_attributes = True


class BidState(BaseModel):
    player_id: int
    player_name: Optional[str]
    bid_amount: int
    tricks_taken: Optional[int]
    score: Optional[int]


class RoundResponse(BaseModel):
    id: int
    game_id: int
    round_number: int
    cards_per_player: int
    trump_suit: Optional[TrumpSuit] = None
    status: RoundStatus

    class Config:
        from_attributes = True


class RoundState(RoundResponse):
    dealer_seat: int
    first_bidder_seat: int
    remaining_tricks: int
    bids: List[BidState]


class RoundCompleteResponse(BaseModel):
    success: bool
    round_id: int
    game_id: int
    scores: Dict[int, int]
    game_status: GameStatus
    current_round: int


class RemainingTricks(BaseModel):
    round_id: int
    cards_per_player: int
    total_bids: int
    remaining_tricks: int = Field(..., description="Advisory only; bids need not match the cards dealt")
