"""Current user's playlist."""

import uuid

from fastapi import APIRouter, Depends, Query

from clubber.dependencies import get_playlist_service
from clubber.errors import ClubberError
from clubber.schemas import MatchRead, PageEnvelope, PlaylistActionResult
from clubber.search import DEFAULT_PAGE_SIZE
from clubber.security import get_current_user_id
from clubber.services.playlist_service import PlaylistService
from clubber.telemetry import record_search

router = APIRouter(prefix="/api/v1/playlist", tags=["playlist"])


@router.get("", response_model=PageEnvelope[MatchRead])
async def get_playlist(
    page: int = Query(default=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, alias="pageSize"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: PlaylistService = Depends(get_playlist_service),
):
    result = await service.get_page(user_id, page, page_size)
    record_search("playlist", len(result.items))
    return PageEnvelope[MatchRead].from_result(result)


@router.post("/{match_id}", response_model=PlaylistActionResult)
async def add_match_to_playlist(
    match_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: PlaylistService = Depends(get_playlist_service),
):
    result = await service.add(user_id, match_id)
    if not result.succeeded:
        raise ClubberError(result.message, title="Add match to playlist failed")
    return result


@router.delete("/{match_id}", response_model=PlaylistActionResult)
async def remove_match_from_playlist(
    match_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: PlaylistService = Depends(get_playlist_service),
):
    result = await service.remove(user_id, match_id)
    if not result.succeeded:
        raise ClubberError(result.message, title="Remove match from playlist failed")
    return result
