"""
Link and visit storage strategies using Strategy Pattern.

The service layer only talks to the abstract interfaces; the SQLAlchemy
implementations work with any async driver (aiosqlite, asyncpg).

Each operation opens its own session from the injected session factory,
so two reads for the same request can run concurrently.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Dict, List, Optional
import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from shortlink_app.exceptions import DuplicateCodeError, LinkNotFoundError
from shortlink_app.models import Link, Visit
from shortlink_app.schemas.analytics import DailyVisitCount
from shortlink_app.utils.time import utcnow


logger = logging.getLogger(__name__)


class LinkStoreStrategy(ABC):
    """
    Persistence contract for Link rows.

    Short codes and aliases are unique; deleting a link removes its visits.
    """

    @abstractmethod
    async def create(
        self,
        original_url: str,
        short_code: str,
        alias: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> Link:
        """
        Insert a new link.

        Raises:
            DuplicateCodeError: short code or alias already exists
        """
        pass

    @abstractmethod
    async def find_by_code(self, short_code: str) -> Link:
        """
        Raises:
            LinkNotFoundError: no link with this short code
        """
        pass

    @abstractmethod
    async def delete_by_code(self, short_code: str) -> None:
        """
        Delete a link and, transitively, its visits.

        Raises:
            LinkNotFoundError: no link with this short code
        """
        pass

    @abstractmethod
    async def increment_click_count(self, short_code: str) -> None:
        """Atomically add 1 to click_count"""
        pass

    @abstractmethod
    async def delete_expired(self) -> int:
        """Delete every link whose expires_at is in the past. Returns the count."""
        pass


class VisitStoreStrategy(ABC):
    """Persistence contract for Visit rows (append-only)."""

    @abstractmethod
    async def create(self, link_id: int, visitor_ip: str) -> Visit:
        pass

    @abstractmethod
    async def find_recent(self, link_id: int, limit: int = 5) -> List[Visit]:
        """Most recent visits, newest first"""
        pass

    @abstractmethod
    async def find_in_range(self, link_id: int, start: datetime, end: datetime) -> List[Visit]:
        """Visits with start <= visited_at <= end, newest first"""
        pass

    @abstractmethod
    async def count_per_day(self, link_id: int, days: int = 7) -> List[DailyVisitCount]:
        """Zero-filled daily counts for the trailing `days` UTC days, oldest first"""
        pass


class SQLAlchemyLinkStore(LinkStoreStrategy):
    """Link store backed by SQLAlchemy's asyncio extension."""

    def __init__(self, session_factory: async_sessionmaker):
        """
        Args:
            session_factory: async_sessionmaker producing AsyncSession objects
        """
        self.session_factory = session_factory

    async def create(
        self,
        original_url: str,
        short_code: str,
        alias: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> Link:
        link = Link(
            original_url=original_url,
            short_code=short_code,
            alias=alias,
            expires_at=expires_at,
            click_count=0,
        )
        async with self.session_factory() as session:
            session.add(link)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateCodeError(short_code) from e
            await session.refresh(link)
        return link

    async def find_by_code(self, short_code: str) -> Link:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Link).where(Link.short_code == short_code)
            )
            link = result.scalar_one_or_none()

        if link is None:
            raise LinkNotFoundError(short_code)
        return link

    async def delete_by_code(self, short_code: str) -> None:
        async with self.session_factory() as session:
            result = await session.execute(
                delete(Link).where(Link.short_code == short_code)
            )
            await session.commit()

        if result.rowcount == 0:
            raise LinkNotFoundError(short_code)

    async def increment_click_count(self, short_code: str) -> None:
        # Single UPDATE, so concurrent redirects cannot lose increments
        async with self.session_factory() as session:
            await session.execute(
                update(Link)
                .where(Link.short_code == short_code)
                .values(click_count=Link.click_count + 1)
            )
            await session.commit()

    async def delete_expired(self) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                delete(Link).where(
                    Link.expires_at.is_not(None),
                    Link.expires_at < utcnow(),
                )
            )
            await session.commit()
        return result.rowcount or 0


class SQLAlchemyVisitStore(VisitStoreStrategy):
    """Visit store backed by SQLAlchemy's asyncio extension."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def create(self, link_id: int, visitor_ip: str) -> Visit:
        visit = Visit(link_id=link_id, visitor_ip=visitor_ip, visited_at=utcnow())
        async with self.session_factory() as session:
            session.add(visit)
            await session.commit()
            await session.refresh(visit)
        return visit

    async def find_recent(self, link_id: int, limit: int = 5) -> List[Visit]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Visit)
                .where(Visit.link_id == link_id)
                .order_by(Visit.visited_at.desc(), Visit.id.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    async def find_in_range(self, link_id: int, start: datetime, end: datetime) -> List[Visit]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Visit)
                .where(
                    Visit.link_id == link_id,
                    Visit.visited_at >= start,
                    Visit.visited_at <= end,
                )
                .order_by(Visit.visited_at.desc(), Visit.id.desc())
            )
            return list(result.scalars().all())

    async def count_per_day(self, link_id: int, days: int = 7) -> List[DailyVisitCount]:
        """
        Daily visit histogram.

        Process:
        1. Window = UTC midnight (days - 1) days ago .. now
        2. Zero-fill every date in the window
        3. Overlay the counts of visits found in the window
        """
        if days < 1:
            return []

        end = utcnow()
        start = datetime.combine(end.date() - timedelta(days=days - 1), datetime.min.time())

        counts: Dict[str, int] = {}
        for offset in range(days):
            counts[(start.date() + timedelta(days=offset)).isoformat()] = 0

        for visit in await self.find_in_range(link_id, start, end):
            day = visit.visited_at.date().isoformat()
            if day in counts:
                counts[day] += 1

        return [
            DailyVisitCount(date=day, count=count)
            for day, count in sorted(counts.items())
        ]
