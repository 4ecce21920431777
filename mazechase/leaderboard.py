"""Leaderboard endpoints backed by the score history table."""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from . import config
from .storage import ScoreSchema, ScoreStore, StorageUnavailable

logger = logging.getLogger(__name__)

leaderboard_router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


class ScoreSubmission(BaseModel):
    player_name: str
    score: int


class ScoreCreated(BaseModel):
    message: str
    score: ScoreSchema


def get_store(request: Request) -> ScoreStore:
    return request.app.state.store


@leaderboard_router.get("", response_model=List[ScoreSchema])
async def top_scores(
    limit: int = Query(config.LEADERBOARD_LIMIT, ge=1, le=100),
    store: ScoreStore = Depends(get_store),
) -> List[ScoreSchema]:
    """Best scores, highest first and most recent first on equal score."""

    try:
        return await store.top_scores(limit)
    except StorageUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.error("Error fetching leaderboard: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to fetch leaderboard data") from exc


@leaderboard_router.post("", response_model=ScoreCreated, status_code=status.HTTP_201_CREATED)
async def submit_score(submission: ScoreSubmission, store: ScoreStore = Depends(get_store)) -> ScoreCreated:
    if not submission.player_name.strip():
        raise HTTPException(status_code=400, detail="Player name and score are required")
    try:
        saved = await store.persist_record(submission.player_name, submission.score)
    except StorageUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.error("Error saving score: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to save score") from exc
    return ScoreCreated(message="Score saved successfully", score=saved)


@leaderboard_router.get("/player/{player_name}", response_model=List[ScoreSchema])
async def player_scores(
    player_name: str,
    limit: int = Query(config.LEADERBOARD_LIMIT, ge=1, le=100),
    store: ScoreStore = Depends(get_store),
) -> List[ScoreSchema]:
    try:
        return await store.player_scores(player_name, limit)
    except StorageUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.error("Error fetching player scores: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to fetch player scores") from exc


__all__ = ["leaderboard_router"]
