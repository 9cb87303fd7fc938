"""
Player-related API endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from wizard_scorer.api.deps import get_db
from wizard_scorer.core.exceptions import WizardException
from wizard_scorer.schemas import player as player_schemas
from wizard_scorer.services.player_service import player_service_obj

router = APIRouter(
    prefix="/players",
    tags=["players"],
    responses={404: {"description": "Player not found"}}
)


@router.post("", response_model=player_schemas.PlayerResponse)
def create_player(
        player: player_schemas.PlayerCreate,
        db: Session = Depends(get_db)
):
    """
    Create a new player.

    Names must be unique. If the name already exists,
    returns the existing player instead of creating a duplicate.
    """
    try:
        return player_service_obj.create_player(db, player.name)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to create player")


@router.get("", response_model=List[player_schemas.PlayerResponse])
def list_players(db: Session = Depends(get_db)):
    """List all players by name."""
    try:
        return player_service_obj.list_players(db)
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to fetch players")


@router.patch("/{player_id}", response_model=player_schemas.PlayerResponse)
def rename_player(
        player_id: int,
        player: player_schemas.PlayerUpdate,
        db: Session = Depends(get_db)
):
    """Change a player's display name."""
    try:
        return player_service_obj.rename_player(db, player_id, player.name)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to update player")


@router.get("/{player_id}/stats", response_model=player_schemas.PlayerStats)
def get_player_stats(
        player_id: int,
        db: Session = Depends(get_db)
):
    """
    Get statistics for a player over completed games.

    Returns:
    - Total games played
    - Wins (games finished first)
    - Win rate percentage
    - Average and best final score
    """
    try:
        return player_service_obj.get_player_stats(db, player_id)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to get player stats")
