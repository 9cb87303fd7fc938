"""
Single bid entry endpoint.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from wizard_scorer.api.deps import get_db
from wizard_scorer.core.exceptions import WizardException
from wizard_scorer.schemas import game_round as round_schemas
from wizard_scorer.services.round_service import round_service_obj

router = APIRouter(
    prefix="/bids",
    tags=["bids"]
)


@router.post("", response_model=round_schemas.BidResponse)
def place_bid(
        bid: round_schemas.BidCreate,
        db: Session = Depends(get_db)
):
    """
    Record or overwrite one player's bid while the round is in bidding.
    """
    try:
        return round_service_obj.place_bid(db, bid.round_id, bid.player_id, bid.bid_amount)
    except WizardException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to create bid")
