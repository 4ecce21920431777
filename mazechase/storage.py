"""Historical score persistence.

Scores are written once per named player when a match ends. The simulation
never waits on the database: :class:`ScoreRecorder` schedules each write on
the running event loop and only logs the outcome.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict
from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import Column, Index
from sqlalchemy.types import DateTime, Integer, String

from . import config

logger = logging.getLogger(__name__)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


class StorageUnavailable(RuntimeError):
    """Raised when no score database has been configured."""


class Base(DeclarativeBase):
    pass


class ScoreRecord(Base):
    __tablename__ = "scores"
    id = Column(Integer, primary_key=True, autoincrement=True)
    player_name = Column(String, nullable=False)
    score = Column(Integer, nullable=False)
    date = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (Index("ix_scores_score_date", "score", "date"),)


class ScoreSchema(BaseModel):
    player_name: str
    score: int
    date: datetime

    model_config = ConfigDict(from_attributes=True)


class ScoreStore:
    """Async access to the ``scores`` table."""

    def __init__(self, database_url: Optional[str] = None) -> None:
        self.database_url = database_url
        self._engine: Optional[AsyncEngine] = None
        self._session: Optional[async_sessionmaker[AsyncSession]] = None
        if database_url:
            self._engine = create_async_engine(url=database_url, echo=False)
            self._session = async_sessionmaker(bind=self._engine, class_=AsyncSession, expire_on_commit=False)

    @property
    def configured(self) -> bool:
        return self._session is not None

    def _sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        if self._session is None:
            raise StorageUnavailable("Score database is not configured")
        return self._session

    async def create_schema(self) -> None:
        if self._engine is None:
            raise StorageUnavailable("Score database is not configured")
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    async def persist_record(self, display_name: str, score: int) -> ScoreSchema:
        name = display_name.strip()
        if not name:
            raise ValueError("Player name is required")
        record = ScoreRecord(player_name=name, score=max(0, int(score)), date=datetime.now())
        async with self._sessionmaker()() as session:
            session.add(record)
            await session.commit()
            return ScoreSchema.model_validate(record)

    async def top_scores(self, limit: int = config.LEADERBOARD_LIMIT) -> List[ScoreSchema]:
        stmt = select(ScoreRecord).order_by(desc(ScoreRecord.score), desc(ScoreRecord.date)).limit(limit)
        return await self._fetch(stmt)

    async def player_scores(self, player_name: str, limit: int = config.LEADERBOARD_LIMIT) -> List[ScoreSchema]:
        stmt = (
            select(ScoreRecord)
            .where(func.lower(ScoreRecord.player_name).contains(player_name.lower(), autoescape=True))
            .order_by(desc(ScoreRecord.score), desc(ScoreRecord.date))
            .limit(limit)
        )
        return await self._fetch(stmt)

    async def _fetch(self, stmt) -> List[ScoreSchema]:
        async with self._sessionmaker()() as session:
            result = await session.execute(stmt)
            return [ScoreSchema.model_validate(row) for row in result.scalars().all()]


class ScoreRecorder:
    """Fire-and-forget writer used by the engine when a match ends."""

    def __init__(self, store: ScoreStore) -> None:
        self._store = store
        self._pending: Set[asyncio.Task[None]] = set()

    def submit(self, display_name: str, score: int) -> None:
        task = asyncio.get_running_loop().create_task(self._persist(display_name, score))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for writes that are still in flight."""

        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _persist(self, display_name: str, score: int) -> None:
        try:
            await self._store.persist_record(display_name, score)
        except StorageUnavailable:
            logger.warning("Database not configured, skipping score save for %s", display_name)
        except (SQLAlchemyError, OSError, ValueError) as exc:
            logger.error("Failed to save score for %s: %s", display_name, exc)
        else:
            logger.info("Saved score %s for %s", score, display_name)


__all__ = [
    "ScoreRecord",
    "ScoreRecorder",
    "ScoreSchema",
    "ScoreStore",
    "StorageUnavailable",
]
