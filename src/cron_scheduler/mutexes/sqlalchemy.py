import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, String, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from cron_scheduler.mutexes.protocol import Mutex

logger = logging.getLogger(__name__)

Base = declarative_base()


class MutexModel(Base):
    __tablename__ = 'schedule_mutexes'

    name = Column(String, primary_key=True)
    owner = Column(String, nullable=False)
    acquired_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)


class SqlAlchemyMutex(Mutex):
    """
    Mutex backed by a shared database table.

    Every scheduler host pointing at the same database sees the same locks, which
    makes this backend suitable for single-server scheduling. A lock that is not
    released within `expires_after` (a crashed host, a failed run) is taken over
    by the next acquire. The table is created on first use.
    """

    def __init__(self, db_url: str, owner: Optional[str] = None, expires_after: timedelta = timedelta(hours=24)):
        self.engine = create_async_engine(db_url)
        self.async_session = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        self.owner: str = owner or f"mtx_{uuid.uuid4().hex[:8]}"
        self.expires_after: timedelta = expires_after
        self._tables_created: bool = False

    async def create_tables(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._tables_created = True

    async def _ensure_tables(self) -> None:
        if not self._tables_created:
            await self.create_tables()

    async def acquire(self, name: str) -> bool:
        await self._ensure_tables()
        now = datetime.now(timezone.utc)
        async with self.async_session() as session:
            expired = await session.execute(
                delete(MutexModel).where(MutexModel.name == name, MutexModel.expires_at <= now)
            )
            if expired.rowcount:
                logger.warning("Lock '%s' expired without being released, taking it over", name)
            session.add(MutexModel(
                name=name,
                owner=self.owner,
                acquired_at=now,
                expires_at=now + self.expires_after
            ))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.debug("Lock '%s' is held by another owner", name)
                return False
            return True

    async def release(self, name: str) -> None:
        await self._ensure_tables()
        async with self.async_session() as session:
            await session.execute(
                delete(MutexModel).where(MutexModel.name == name, MutexModel.owner == self.owner)
            )
            await session.commit()

    async def dispose(self) -> None:
        await self.engine.dispose()
