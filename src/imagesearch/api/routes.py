"""API route definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from imagesearch.api.middleware import require_search_token
from imagesearch.api.schemas import ErrorResponse, HealthResponse, SearchResponse

if TYPE_CHECKING:
    from imagesearch.index.models import Index

router = APIRouter(prefix="/api/v1", dependencies=[Depends(require_search_token)])

NO_INDEX_DETAIL = "No local index found. Run with 'build' command first."
NO_MATCH_DETAIL = "No images found matching that topic."


def _get_index(request: Request) -> Index | None:
    index: Index | None = request.app.state.index
    return index


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
    summary="Search for images by topic",
)
async def search(request: Request, topic: str = Query(min_length=1)) -> SearchResponse | JSONResponse:
    """Return the images indexed under a topic, best match first."""
    index = _get_index(request)
    if index is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": NO_INDEX_DETAIL},
        )

    term = topic.lower()
    items = index.lookup(term)
    if items is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": NO_MATCH_DETAIL},
        )

    return SearchResponse(topic=term, count=len(items), images=items)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    index = _get_index(request)
    return HealthResponse(
        status="ok",
        index_loaded=index is not None,
        terms=len(index) if index is not None else 0,
    )
