"""Pydantic response schemas for the imagesearch query API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from imagesearch.index.models import IndexItem


class SearchResponse(BaseModel):
    """Ranked images for one topic."""

    topic: str = Field(description="The lowercased topic that was looked up")
    count: int
    images: list[IndexItem] = Field(description="Images ordered by score, highest first")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    index_loaded: bool
    terms: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
