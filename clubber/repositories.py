"""Thin async repositories over the SQLModel tables."""

import uuid
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clubber.models import Match, PlaylistEntry, User


class MatchRepository:
    """Storage collaborator for match searches (full read, then filter in memory)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> List[Match]:
        result = await self.session.execute(select(Match))
        return list(result.scalars().all())

    async def get(self, match_id: uuid.UUID) -> Optional[Match]:
        return await self.session.get(Match, match_id)

    async def add(self, match: Match) -> Match:
        self.session.add(match)
        await self.session.flush()
        return match

    async def delete(self, match: Match) -> None:
        await self.session.execute(delete(PlaylistEntry).where(PlaylistEntry.match_id == match.id))
        await self.session.delete(match)

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Match))
        return result.scalar_one()


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def add(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        return user


class PlaylistRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, user_id: uuid.UUID, match_id: uuid.UUID) -> Optional[PlaylistEntry]:
        return await self.session.get(PlaylistEntry, (user_id, match_id))

    async def list_matches_for_user(self, user_id: uuid.UUID) -> List[Match]:
        """User's matches in the order they were added."""
        result = await self.session.execute(
            select(Match)
            .join(PlaylistEntry, PlaylistEntry.match_id == Match.id)
            .where(PlaylistEntry.user_id == user_id)
            .order_by(PlaylistEntry.date_added)
        )
        return list(result.scalars().all())

    async def add(self, entry: PlaylistEntry) -> PlaylistEntry:
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def remove(self, entry: PlaylistEntry) -> None:
        await self.session.delete(entry)
