"""Middleware: optional static token guarding the search endpoints."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

if TYPE_CHECKING:
    from imagesearch.config import Settings

SEARCH_TOKEN_DETAIL = "This index requires a search token: send 'Authorization: Bearer <IMAGESEARCH_SEARCH_TOKEN>'"

_search_token_scheme = HTTPBearer(
    auto_error=False,
    scheme_name="SearchToken",
    description="Static token set with IMAGESEARCH_SEARCH_TOKEN; omit when the server runs without one.",
)


def _token_matches(presented: str, expected: str) -> bool:
    return secrets.compare_digest(presented.encode(), expected.encode())


async def require_search_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_search_token_scheme)],
) -> None:
    """Reject queries that do not carry the configured search token.

    A server started without IMAGESEARCH_SEARCH_TOKEN answers every query, since the
    index only holds public image URLs and their labels.
    """
    settings: Settings = request.app.state.settings
    expected = settings.search_token
    if expected is None:
        return

    if credentials is not None and _token_matches(credentials.credentials, expected):
        return

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=SEARCH_TOKEN_DETAIL,
        headers={"WWW-Authenticate": 'Bearer realm="imagesearch"'},
    )
