"""Match queries (search/paginate) and admin writes that emit live events."""

import logging
import uuid
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from clubber.errors import NotFoundError
from clubber.models import Match, MatchStatus
from clubber.notifications import (
    MATCH_CREATED,
    MATCH_DELETED,
    MATCH_STATUS_CHANGED,
    MatchEvent,
    NotificationHub,
)
from clubber.repositories import MatchRepository
from clubber.schemas import MatchCreate, MatchRead, MatchUpdate
from clubber.search import MAX_PAGE_SIZE, PageResult, SearchCriteria, execute
from clubber.services.stream_urls import StreamUrlService

logger = logging.getLogger(__name__)


class MatchService:
    def __init__(self, session: AsyncSession, hub: NotificationHub, stream_urls: StreamUrlService):
        self.session = session
        self.matches = MatchRepository(session)
        self.hub = hub
        self.stream_urls = stream_urls

    def _to_read(self, match: Match) -> MatchRead:
        return MatchRead.from_match(match, stream_url=self.stream_urls.resolve(match))

    async def search(self, criteria: SearchCriteria) -> PageResult[MatchRead]:
        """Run the paginator over the full stored collection."""
        all_matches = await self.matches.list_all()
        page = execute(all_matches, criteria)
        logger.debug(
            f"Match search: term={criteria.term!r} status={criteria.status} "
            f"page={page.page} size={page.page_size} total={page.total_count}"
        )
        return page.map(self._to_read)

    async def list_live(self, sort_by: str = "date", sort_descending: bool = False) -> List[MatchRead]:
        criteria = SearchCriteria(
            page=1,
            page_size=MAX_PAGE_SIZE,
            status=MatchStatus.LIVE,
            sort_by=sort_by,
            sort_descending=sort_descending,
        )
        return (await self.search(criteria)).items

    async def _get_or_raise(self, match_id: uuid.UUID) -> Match:
        match = await self.matches.get(match_id)
        if match is None:
            raise NotFoundError(f"Match with id {match_id} not found.", title="Match not found")
        return match

    async def get(self, match_id: uuid.UUID) -> MatchRead:
        return self._to_read(await self._get_or_raise(match_id))

    async def create(self, data: MatchCreate) -> MatchRead:
        match = Match(**data.model_dump())
        if not match.stream_url:
            match.stream_url = self.stream_urls.generate(match)
        await self.matches.add(match)
        await self.session.commit()
        logger.info(f"Match created: {match.id} '{match.title}' status={match.status.value}")

        await self.hub.broadcast(MatchEvent(
            type=MATCH_CREATED,
            match_id=match.id,
            status=match.status.value,
            title=match.title,
        ))
        return self._to_read(match)

    async def update(self, match_id: uuid.UUID, data: MatchUpdate) -> MatchRead:
        match = await self._get_or_raise(match_id)
        previous_status = MatchStatus(match.status)

        changes = data.model_dump(exclude_unset=True)
        for key, value in changes.items():
            if value is not None:
                setattr(match, key, value)

        status_changed = MatchStatus(match.status) != previous_status
        if "stream_url" not in changes and (status_changed or not match.stream_url):
            match.stream_url = self.stream_urls.generate(match)

        self.session.add(match)
        await self.session.commit()
        logger.info(f"Match updated: {match.id} fields={sorted(changes)}")

        if status_changed:
            await self.hub.broadcast(MatchEvent(
                type=MATCH_STATUS_CHANGED,
                match_id=match.id,
                status=MatchStatus(match.status).value,
                previous_status=previous_status.value,
                title=match.title,
            ))
        return self._to_read(match)

    async def delete(self, match_id: uuid.UUID) -> None:
        match = await self._get_or_raise(match_id)
        await self.matches.delete(match)
        await self.session.commit()
        logger.info(f"Match deleted: {match_id}")

        await self.hub.broadcast(MatchEvent(type=MATCH_DELETED, match_id=match_id))
