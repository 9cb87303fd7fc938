"""
Leaderboard API endpoints.
"""
from enum import Enum
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from wizard_scorer.api.deps import get_db
from wizard_scorer.schemas import player as player_schemas
from wizard_scorer.services.player_service import player_service_obj


class SortBy(str, Enum):
    WINS = "wins"
    AVERAGE_SCORE = "average_score"


router = APIRouter(
    prefix="/leaderboard",
    tags=["leaderboard"]
)


@router.get("", response_model=List[player_schemas.LeaderboardEntry])
def get_leaderboard(
        sort_by: SortBy = Query(SortBy.WINS, description="Ranking criteria"),
        limit: int = Query(10, ge=1, le=100, description="Number of players to return"),
        db: Session = Depends(get_db)
):
    """
    Get the leaderboard of players with at least one completed game.

    Ranking options:
    - wins: Most games finished in first position
    - average_score: Highest average final score
    """
    try:
        return player_service_obj.get_leaderboard(
            db,
            sort_by=sort_by.value,
            limit=limit
        )
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get leaderboard: {str(e)}"
        )
