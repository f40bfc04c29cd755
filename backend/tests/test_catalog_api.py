"""API endpoint tests for the catalog browsing endpoints.

This module provides tests for the /api/catalog endpoints in the FastAPI
application, covering:
    - Querying with keyword, source, type, sort and paging parameters,
    - Grouping the catalog by category,
    - Lazy loading of the feeds on first use and explicit refresh,
    - Mapping feed failures to 502 responses.

The repository and feed loader are injected using dependency overrides and
monkeypatching so no network access is needed.

See Also:
    - backend/eecatalog/api/catalog.py for API implementation,
    - backend/eecatalog/db/repository.py for the repository protocol.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
from fastapi import testclient

from eecatalog import main
from eecatalog.api import catalog as api_catalog
from eecatalog.db import models as db_models
from eecatalog.db import repository
from eecatalog.services import catalog_feeds

if TYPE_CHECKING:
    import pytest

    from eecatalog.core import config


def _records() -> list[db_models.CatalogRecord]:
    return [
        db_models.CatalogRecord(
            id="COPERNICUS/S2_SR",
            title="Sentinel-2 SR",
            provider="ESA",
            type="image_collection",
            source="official",
            tags=["optical"],
            category="COPERNICUS",
        ),
        db_models.CatalogRecord(
            id="LANDSAT/LC08/C02/T1_L2",
            title="Landsat 8 L2",
            provider="USGS",
            type="image_collection",
            source="official",
            tags=["landsat"],
            category="LANDSAT",
        ),
        db_models.CatalogRecord(
            id="users/demo/custom_asset",
            title="Community Demo",
            provider="community",
            type="image",
            source="community",
            tags=["demo"],
            category="users",
        ),
    ]


def _client(repo: repository.CatalogRepositoryProtocol) -> testclient.TestClient:
    app = main.create_app()
    app.dependency_overrides[api_catalog._get_repo] = lambda: repo
    return testclient.TestClient(app)


def _loaded_repo() -> repository.InMemoryCatalogRepository:
    repo = repository.InMemoryCatalogRepository()
    repo.replace(_records())
    return repo


def test_list_catalog_filters_and_sorts() -> None:
    """Query parameters reach the query engine."""
    client = _client(_loaded_repo())
    response = client.get(
        "/api/catalog",
        params={
            "keyword": "s",
            "source": "official",
            "type": "image_collection",
            "sort_by": "title",
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert body["page"] == 1
    assert body["page_size"] == 25
    assert [item["title"] for item in body["items"]] == [
        "Landsat 8 L2",
        "Sentinel-2 SR",
    ]


def test_list_catalog_paginates() -> None:
    client = _client(_loaded_repo())
    response = client.get(
        "/api/catalog",
        params={"sort_by": "id", "limit": 1, "page": 2},
    )
    body = response.json()
    assert body["total"] == 3
    assert [item["id"] for item in body["items"]] == ["LANDSAT/LC08/C02/T1_L2"]


def test_list_catalog_rejects_unknown_source() -> None:
    client = _client(_loaded_repo())
    response = client.get("/api/catalog", params={"source": "private"})
    assert response.status_code == 422


def test_list_categories() -> None:
    client = _client(_loaded_repo())
    response = client.get("/api/catalog/categories")
    assert response.status_code == 200
    body = response.json()
    assert sorted(body) == ["COPERNICUS", "LANDSAT", "users"]
    assert body["users"][0]["source"] == "community"


def test_catalog_loads_feeds_on_first_request(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """An empty repository is filled from the feeds exactly once."""
    calls: list[str] = []

    async def fake_fetch(
        settings: config.Settings,
        client: httpx.AsyncClient | None = None,
    ) -> list[db_models.CatalogRecord]:
        calls.append(settings.official_catalog_url)
        return _records()

    monkeypatch.setattr(catalog_feeds, "fetch_catalogs", fake_fetch)
    repo = repository.InMemoryCatalogRepository()
    client = _client(repo)

    assert client.get("/api/catalog").json()["total"] == 3
    assert client.get("/api/catalog/categories").status_code == 200
    assert len(calls) == 1
    assert repo.loaded


def test_refresh_catalog_replaces_records(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_fetch(
        settings: config.Settings,
        client: httpx.AsyncClient | None = None,
    ) -> list[db_models.CatalogRecord]:
        return _records()[:1]

    monkeypatch.setattr(catalog_feeds, "fetch_catalogs", fake_fetch)
    repo = _loaded_repo()
    client = _client(repo)

    response = client.post("/api/catalog/refresh")
    assert response.status_code == 200
    assert response.json() == {"count": 1}
    assert [record.id for record in repo.all()] == ["COPERNICUS/S2_SR"]


def test_feed_failure_returns_502(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_fetch(
        settings: config.Settings,
        client: httpx.AsyncClient | None = None,
    ) -> list[db_models.CatalogRecord]:
        raise json.JSONDecodeError("Expecting value", "<html>", 0)

    monkeypatch.setattr(catalog_feeds, "fetch_catalogs", fake_fetch)
    repo = repository.InMemoryCatalogRepository()
    client = _client(repo)

    response = client.get("/api/catalog")
    assert response.status_code == 502
    assert "Catalog feed unavailable" in response.json()["detail"]
    assert not repo.loaded
