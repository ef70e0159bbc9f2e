"""Tests for the imagesearch query API."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI, status

from imagesearch.api.middleware import SEARCH_TOKEN_DETAIL
from imagesearch.config import Settings
from imagesearch.index.models import Index
from imagesearch.index.store import IndexStore
from imagesearch.main import create_app, load_index_state


def _write_index(path: Path) -> None:
    index = Index()
    index.add("dog", "https://example.com/a.jpg", 0.9)
    index.add("dog", "https://example.com/b.jpg", 0.95)
    index.add("Cat", "https://example.com/a.jpg", 0.5)
    IndexStore(path).save(index.finalize())


def _init_app_state(app: FastAPI, tmp_path: Path, *, with_index: bool = True, **overrides: object) -> None:
    """Manually initialize app state (ASGITransport does not trigger lifespan)."""
    index_path = tmp_path / "index.json"
    if with_index:
        _write_index(index_path)
    settings = Settings(index_path=str(index_path), **overrides)  # type: ignore[arg-type]
    load_index_state(app, settings)


async def _make_client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac


@pytest.fixture()
def app(tmp_path: Path) -> FastAPI:
    """Create a fresh app instance backed by a small index."""
    application = create_app()
    _init_app_state(application, tmp_path)
    return application


@pytest.fixture()
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    """Async HTTP client for testing the app."""
    async for ac in _make_client(app):
        yield ac


class TestHealthEndpoint:
    async def test_health_reports_loaded_index(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/health")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok", "index_loaded": True, "terms": 2}

    async def test_health_without_index(self, tmp_path: Path) -> None:
        app = create_app()
        _init_app_state(app, tmp_path, with_index=False)
        async for ac in _make_client(app):
            response = await ac.get("/api/v1/health")
            assert response.status_code == status.HTTP_200_OK
            assert response.json()["index_loaded"] is False
            assert response.json()["terms"] == 0


class TestSearchEndpoint:
    async def test_returns_ranked_images(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/search", params={"topic": "dog"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "topic": "dog",
            "count": 2,
            "images": [
                {"image": "https://example.com/b.jpg", "score": 0.95},
                {"image": "https://example.com/a.jpg", "score": 0.9},
            ],
        }

    async def test_topic_is_lowercased(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/search", params={"topic": "DOG"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["topic"] == "dog"

    async def test_capitalized_label_is_not_found(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/search", params={"topic": "Cat"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_unknown_topic_returns_404(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/search", params={"topic": "giraffe"})
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "No images found matching that topic."

    async def test_missing_topic_is_rejected(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/search")
        assert response.status_code == 422

    async def test_no_index_returns_503(self, tmp_path: Path) -> None:
        app = create_app()
        _init_app_state(app, tmp_path, with_index=False)
        async for ac in _make_client(app):
            response = await ac.get("/api/v1/search", params={"topic": "dog"})
            assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
            assert "build" in response.json()["detail"]

    async def test_malformed_index_returns_503(self, tmp_path: Path) -> None:
        (tmp_path / "index.json").write_text("not json", encoding="utf-8")
        app = create_app()
        _init_app_state(app, tmp_path, with_index=False)
        async for ac in _make_client(app):
            response = await ac.get("/api/v1/search", params={"topic": "dog"})
            assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE


class TestAuthentication:
    async def test_no_auth_required_by_default(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/health")
        assert response.status_code == status.HTTP_200_OK

    async def test_auth_required_when_token_set(self, tmp_path: Path) -> None:
        app = create_app()
        _init_app_state(app, tmp_path, search_token="test-secret-token")
        async for ac in _make_client(app):
            response = await ac.get("/api/v1/search", params={"topic": "dog"})
            assert response.status_code in (
                status.HTTP_401_UNAUTHORIZED,
                status.HTTP_403_FORBIDDEN,
            )

    async def test_auth_passes_with_correct_token(self, tmp_path: Path) -> None:
        app = create_app()
        _init_app_state(app, tmp_path, search_token="test-secret-token")
        async for ac in _make_client(app):
            response = await ac.get(
                "/api/v1/search",
                params={"topic": "dog"},
                headers={"Authorization": "Bearer test-secret-token"},
            )
            assert response.status_code == status.HTTP_200_OK

    async def test_auth_fails_with_wrong_token(self, tmp_path: Path) -> None:
        app = create_app()
        _init_app_state(app, tmp_path, search_token="test-secret-token")
        async for ac in _make_client(app):
            response = await ac.get(
                "/api/v1/health",
                headers={"Authorization": "Bearer wrong-token"},
            )
            assert response.status_code in (
                status.HTTP_401_UNAUTHORIZED,
                status.HTTP_403_FORBIDDEN,
            )

    async def test_rejection_explains_how_to_authenticate(self, tmp_path: Path) -> None:
        app = create_app()
        _init_app_state(app, tmp_path, search_token="test-secret-token")
        async for ac in _make_client(app):
            response = await ac.get("/api/v1/search", params={"topic": "dog"})
            assert response.status_code == status.HTTP_401_UNAUTHORIZED
            assert response.json()["detail"] == SEARCH_TOKEN_DETAIL
            assert response.headers["WWW-Authenticate"] == 'Bearer realm="imagesearch"'
