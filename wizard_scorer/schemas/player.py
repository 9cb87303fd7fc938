from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class PlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description="Unique display name")


class PlayerUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description="New display name")


class PlayerResponse(BaseModel):
    id: int
    name: str
    created_at: datetime

    class Config:
        from_attributes = True


class PlayerStats(BaseModel):
    player_id: int
    name: str
    total_games: int = Field(..., description="Completed games played")
    wins: int = Field(..., description="Games finished in first position")
    win_rate: float
    average_score: float
    best_score: Optional[int] = None


class LeaderboardEntry(PlayerStats):
    rank: int
