"""Match listing/search API and admin writes."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from clubber.dependencies import get_match_service
from clubber.schemas import MatchCreate, MatchRead, MatchUpdate, PageEnvelope
from clubber.search import DEFAULT_PAGE_SIZE, SearchCriteria
from clubber.security import get_current_user_id, verify_api_key
from clubber.services.match_service import MatchService
from clubber.telemetry import record_search

router = APIRouter(prefix="/api/v1/matches", tags=["matches"])


@router.get("", response_model=PageEnvelope[MatchRead])
async def list_matches(
    competition: Optional[str] = Query(default=None, description="Case-insensitive text in title or competition"),
    status: Optional[str] = Query(default=None, description="Upcoming|Live|OnDemand|Canceled (unknown = no filter)"),
    page: int = Query(default=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, alias="pageSize"),
    sort_by: Optional[str] = Query(default="date", alias="sortBy"),
    sort_descending: bool = Query(default=False, alias="sortDescending"),
    _user_id: uuid.UUID = Depends(get_current_user_id),
    service: MatchService = Depends(get_match_service),
):
    """
    Paginated match search.

    Out-of-range page/pageSize are clamped (page >= 1, 1 <= pageSize <= 100),
    never rejected.
    """
    criteria = SearchCriteria.from_query(
        competition=competition,
        status=status,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_descending=sort_descending,
    )
    result = await service.search(criteria)
    record_search("matches", len(result.items))
    return PageEnvelope[MatchRead].from_result(result)


@router.get("/live", response_model=List[MatchRead])
async def list_live_matches(
    sort_by: Optional[str] = Query(default="date", alias="sortBy"),
    sort_descending: bool = Query(default=False, alias="sortDescending"),
    _user_id: uuid.UUID = Depends(get_current_user_id),
    service: MatchService = Depends(get_match_service),
):
    """All live matches as a bare list."""
    items = await service.list_live(sort_by or "date", sort_descending)
    record_search("live", len(items))
    return items


@router.get("/{match_id}", response_model=MatchRead)
async def get_match(
    match_id: uuid.UUID,
    _user_id: uuid.UUID = Depends(get_current_user_id),
    service: MatchService = Depends(get_match_service),
):
    return await service.get(match_id)


@router.post("", response_model=MatchRead, status_code=201, dependencies=[Depends(verify_api_key)])
async def create_match(data: MatchCreate, service: MatchService = Depends(get_match_service)):
    return await service.create(data)


@router.put("/{match_id}", response_model=MatchRead, dependencies=[Depends(verify_api_key)])
async def update_match(
    match_id: uuid.UUID,
    data: MatchUpdate,
    service: MatchService = Depends(get_match_service),
):
    """Partial update. A status change is pushed to every open event stream."""
    return await service.update(match_id, data)


@router.delete("/{match_id}", status_code=204, dependencies=[Depends(verify_api_key)])
async def delete_match(match_id: uuid.UUID, service: MatchService = Depends(get_match_service)):
    await service.delete(match_id)
    return Response(status_code=204)
