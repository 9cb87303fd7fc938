"""
Game-related API endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from wizard_scorer.api.deps import get_db
from wizard_scorer.core.exceptions import WizardException
from wizard_scorer.schemas import game as game_schemas
from wizard_scorer.services.game_service import game_service_obj

router = APIRouter(
    prefix="/games",
    tags=["games"],
    responses={404: {"description": "Game not found"}}
)


@router.post("", response_model=game_schemas.GameState)
def create_game(
        game: game_schemas.GameCreate,
        db: Session = Depends(get_db)
):
    """
    Create a new game for 3 to 6 players.

    The number of rounds follows from the player count (3: 20, 4: 15,
    5: 12, 6: 10). The game starts in 'SETUP' until seats are arranged.
    """
    try:
        return game_service_obj.create_game(db, game.player_ids)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to create game")


@router.get("", response_model=List[game_schemas.GameListEntry])
def list_games(db: Session = Depends(get_db)):
    """List all games, newest first."""
    try:
        return game_service_obj.list_games(db)
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to fetch games")


@router.patch("/{game_id}/seats", response_model=game_schemas.GameState)
def assign_seat(
        game_id: int,
        seat: game_schemas.SeatAssignment,
        db: Session = Depends(get_db)
):
    """
    Seat one player.

    A player already in that seat is unseated. Seats are fixed once the
    first round has been created.
    """
    try:
        return game_service_obj.assign_seat(db, game_id, seat.player_id, seat.seat_position)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to update seat position")


@router.put("/{game_id}/seats", response_model=game_schemas.GameState)
def arrange_seats(
        game_id: int,
        arrangement: game_schemas.SeatArrangement,
        db: Session = Depends(get_db)
):
    """Seat every player at once; seats must cover 1..player count exactly."""
    try:
        return game_service_obj.arrange_seats(db, game_id, arrangement.seats)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to arrange seats")


@router.get("/{game_id}", response_model=game_schemas.GameState)
def get_game_state(
        game_id: int,
        db: Session = Depends(get_db)
):
    """
    Get the current state of a game.

    Returns:
    - Game status and current round
    - Players with seat, running total and final position
    - Rounds in order with every bid
    - Dealer, first bidder and bidding order for the current round
    """
    try:
        return game_service_obj.get_game_state(db, game_id)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to get game state")


@router.get("/{game_id}/summary", response_model=game_schemas.GameSummary)
def get_game_summary(
        game_id: int,
        db: Session = Depends(get_db)
):
    """
    Get final standings and bidding statistics.

    Returns per player:
    - Final position and total score
    - Correct bids and accuracy rate
    - Highest and lowest single-round score
    """
    try:
        return game_service_obj.get_game_summary(db, game_id)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to get game summary")
