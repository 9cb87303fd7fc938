"""
Round lifecycle API endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from wizard_scorer.api.deps import get_db
from wizard_scorer.core.exceptions import WizardException
from wizard_scorer.schemas import game_round as round_schemas
from wizard_scorer.services.round_service import round_service_obj

router = APIRouter(
    prefix="/rounds",
    tags=["rounds"],
    responses={404: {"description": "Round not found"}}
)


@router.post("", response_model=round_schemas.RoundResponse)
def create_round(
        round_in: round_schemas.RoundCreate,
        db: Session = Depends(get_db)
):
    """
    Start the next round of a game.

    The round opens for bidding with no trump suit. Creating round 1
    requires every player to be seated and puts the game in progress.
    """
    try:
        return round_service_obj.create_round(
            db, round_in.game_id, round_in.round_number, round_in.cards_per_player
        )
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to create round")


@router.get("/{round_id}", response_model=round_schemas.RoundState)
def get_round(
        round_id: int,
        db: Session = Depends(get_db)
):
    """Get a round with its bids, dealer and first bidder."""
    try:
        return round_service_obj.get_round(db, round_id)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to fetch round")


@router.post("/{round_id}/bids", response_model=round_schemas.RoundResponse)
def submit_bids(
        round_id: int,
        submission: round_schemas.BidsSubmit,
        db: Session = Depends(get_db)
):
    """
    Record every player's bid and start play.

    Total bids do not need to match the cards dealt. The trump suit, if
    given, is fixed for the rest of the round.
    """
    try:
        trump_suit = submission.trump_suit.value if submission.trump_suit else None
        return round_service_obj.submit_bids(db, round_id, submission.bids, trump_suit)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to submit bids")


@router.post("/{round_id}/complete", response_model=round_schemas.RoundCompleteResponse)
def complete_round(
        round_id: int,
        result: round_schemas.RoundComplete,
        db: Session = Depends(get_db)
):
    """
    Score a round, or correct one that was already completed.

    Tricks taken must add up to the cards dealt. Running totals are
    recomputed from every round; after the last round final positions
    are assigned and the game is completed.
    """
    try:
        return round_service_obj.complete_round(db, round_id, result.bids, result.tricks_taken)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to update round")


@router.get("/{round_id}/remaining-tricks", response_model=round_schemas.RemainingTricks)
def get_remaining_tricks(
        round_id: int,
        bids: List[int] = Query([], description="Bids entered so far"),
        db: Session = Depends(get_db)
):
    """Tricks not yet claimed by the bids entered so far. Advisory only."""
    try:
        return round_service_obj.get_remaining_tricks(db, round_id, bids)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to compute remaining tricks")
