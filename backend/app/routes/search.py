"""Search route: ranked food matches for one locale."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from server import FoodIndexServer

from ..config import DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT, MAX_SEARCH_QUERY_LENGTH
from ..services.index_service import get_index_server

router = APIRouter(prefix="/api/locales", tags=["search"])


class MatchOut(BaseModel):
    food_id: str
    description: str
    score: float
    matched_tokens: List[str]


class SearchResponse(BaseModel):
    locale_id: str
    query: str
    version: Optional[int] = None
    index_available: bool
    matches: List[MatchOut]


@router.get("/{locale_id}/search", response_model=SearchResponse)
def search(
    locale_id: str,
    q: str = Query("", description="Free-text food description"),
    limit: int = DEFAULT_SEARCH_LIMIT,
    server: FoodIndexServer = Depends(get_index_server),
):
    """
    Search the current index of a locale. index_available=false means the
    locale has no published index yet (distinct from zero matches).
    """
    if len(q.strip()) > MAX_SEARCH_QUERY_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Search query too long (max {MAX_SEARCH_QUERY_LENGTH} characters).",
        )
    if limit < 1 or limit > MAX_SEARCH_LIMIT:
        raise HTTPException(status_code=400, detail=f"limit must be between 1 and {MAX_SEARCH_LIMIT}.")
    results = server.search(locale_id, q.strip(), limit)
    return SearchResponse(
        locale_id=locale_id,
        query=q.strip(),
        version=results.version,
        index_available=results.index_available,
        matches=[
            MatchOut(
                food_id=m.food_id,
                description=m.description,
                score=m.score,
                matched_tokens=list(m.matched_tokens),
            )
            for m in results.matches
        ],
    )
