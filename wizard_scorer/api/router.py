"""
Router registration for the Wizard scorer API.
"""
from fastapi import FastAPI

from wizard_scorer.api import bids, games, leaderboard, players, rounds


def include_routers(app: FastAPI) -> None:
    """Include all API routers with the FastAPI application."""
    app.include_router(players.router, prefix="/api/v1", tags=["players"])
    app.include_router(games.router, prefix="/api/v1", tags=["games"])
    app.include_router(rounds.router, prefix="/api/v1", tags=["rounds"])
    app.include_router(bids.router, prefix="/api/v1", tags=["bids"])
    app.include_router(leaderboard.router, prefix="/api/v1", tags=["leaderboard"])
