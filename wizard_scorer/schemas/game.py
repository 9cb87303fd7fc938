from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

from wizard_scorer.core.game_config import MIN_PLAYERS, MAX_PLAYERS
from wizard_scorer.models.game import GameStatus
from wizard_scorer.schemas.game_round import RoundState


class GameCreate(BaseModel):
    player_ids: List[int] = Field(
        ...,
        description=f"IDs of the {MIN_PLAYERS} to {MAX_PLAYERS} players taking part"
    )


class SeatAssignment(BaseModel):
    player_id: int = Field(..., description="ID of the player being seated")
    seat_position: int = Field(..., ge=1, description="1-based seat, validated against the player count")


class SeatArrangement(BaseModel):
    seats: Dict[int, int] = Field(..., description="Seat position for every player, keyed by player ID")


class GameSummaryHeader(BaseModel):
    id: int
    status: GameStatus
    player_count: int
    total_rounds: int
    current_round: int
    created_at: Optional[datetime]
    started_at: Optional[datetime]
    ended_at: Optional[datetime]


class GamePlayerState(BaseModel):
    player_id: int
    name: str
    seat_position: Optional[int]
    total_score: int
    position: Optional[int]


class GameListEntry(GameSummaryHeader):
    players: List[GamePlayerState]


class GameState(GameListEntry):
    rounds: List[RoundState]
    dealer_seat: Optional[int] = None
    first_bidder_seat: Optional[int] = None
    bidding_order: List[int] = []


class PlayerGameSummary(BaseModel):
    player_id: int
    name: str
    position: Optional[int]
    total_score: int
    correct_bids: int
    total_bids: int
    accuracy_rate: int = Field(..., description="Correct bids as a rounded percentage")
    highest_round: Optional[int]
    lowest_round: Optional[int]


class GameSummary(BaseModel):
    game_id: int
    status: GameStatus
    total_rounds: int
    rounds_played: int
    duration_minutes: Optional[int]
    players: List[PlayerGameSummary]
