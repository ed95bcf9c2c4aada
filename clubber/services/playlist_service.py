"""Per-user playlist of saved matches."""

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clubber.models import PlaylistEntry, utcnow
from clubber.repositories import MatchRepository, PlaylistRepository
from clubber.schemas import MatchRead, PlaylistActionResult, PlaylistRead
from clubber.search import PageResult, paginate
from clubber.services.stream_urls import StreamUrlService

logger = logging.getLogger(__name__)


class PlaylistService:
    def __init__(self, session: AsyncSession, stream_urls: StreamUrlService):
        self.session = session
        self.matches = MatchRepository(session)
        self.playlists = PlaylistRepository(session)
        self.stream_urls = stream_urls

    async def _current(self, user_id: uuid.UUID) -> PlaylistRead:
        matches = await self.playlists.list_matches_for_user(user_id)
        return PlaylistRead(
            matches=[MatchRead.from_match(m, stream_url=self.stream_urls.resolve(m)) for m in matches]
        )

    async def get_page(self, user_id: uuid.UUID, page: int, page_size: int) -> PageResult[MatchRead]:
        playlist = await self._current(user_id)
        return paginate(playlist.matches, page, page_size)

    async def add(self, user_id: uuid.UUID, match_id: uuid.UUID) -> PlaylistActionResult:
        match = await self.matches.get(match_id)
        if match is None:
            return PlaylistActionResult(succeeded=False, message="Match not found.")

        if await self.playlists.find(user_id, match_id) is not None:
            return PlaylistActionResult(
                succeeded=True,
                message="Match already in playlist.",
                playlist=await self._current(user_id),
            )

        try:
            await self.playlists.add(
                PlaylistEntry(user_id=user_id, match_id=match_id, date_added=utcnow())
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Playlist add failed for user={user_id} match={match_id}: {e}")
            return PlaylistActionResult(
                succeeded=False,
                message="Failed to save update to the playlist in the database.",
            )

        logger.info(f"Playlist: user={user_id} added match={match_id}")
        return PlaylistActionResult(
            succeeded=True,
            message="Match added to playlist successfully.",
            playlist=await self._current(user_id),
        )

    async def remove(self, user_id: uuid.UUID, match_id: uuid.UUID) -> PlaylistActionResult:
        entry = await self.playlists.find(user_id, match_id)
        if entry is None:
            return PlaylistActionResult(succeeded=False, message="Match not found in the playlist.")

        await self.playlists.remove(entry)
        await self.session.commit()

        logger.info(f"Playlist: user={user_id} removed match={match_id}")
        return PlaylistActionResult(
            succeeded=True,
            message="Match removed from playlist successfully.",
            playlist=await self._current(user_id),
        )
