"""Dataset catalog browsing API endpoints.

This module provides REST API endpoints the map client uses to browse the
merged official and community Earth Engine catalogs: a filtered, sorted,
paginated listing, a grouping by top-level category, and a reload of both
feeds. The feeds are loaded on the first request that needs them.

Example:
    Search official image collections:
        >>> response = client.get(
        ...     "/api/catalog",
        ...     params={"keyword": "sentinel", "source": "official"},
        ... )
        >>> response.json()["total"]
        12

    Group the whole catalog by category:
        >>> response = client.get("/api/catalog/categories")
        >>> sorted(response.json())[:2]
        ['AHN', 'ASTER']
"""

from __future__ import annotations

import dataclasses
from typing import Any

import fastapi
import httpx

from eecatalog.core import config
from eecatalog.db import models as db_models
from eecatalog.db import repository
from eecatalog.services import catalog_feeds, catalog_query

router = fastapi.APIRouter(prefix="/api/catalog", tags=["catalog"])


def _get_repo() -> repository.CatalogRepositoryProtocol:
    """Resolve the catalog repository dependency."""
    return repository.get_catalog_repository()


async def _load(
    repo: repository.CatalogRepositoryProtocol,
    settings: config.Settings,
) -> list[db_models.CatalogRecord]:
    """Fetch both feeds into the repository.

    Raises:
        HTTPException: If a feed cannot be downloaded or decoded (502).
    """
    try:
        records = await catalog_feeds.fetch_catalogs(settings)
    except (httpx.HTTPError, ValueError) as exc:
        raise fastapi.HTTPException(
            status_code=502,
            detail=f"Catalog feed unavailable: {exc}",
        ) from exc

    return repo.replace(records)


async def _records(
    repo: repository.CatalogRepositoryProtocol,
    settings: config.Settings,
) -> list[db_models.CatalogRecord]:
    if not repo.loaded:
        return await _load(repo, settings)
    return repo.all()


@router.get("")
async def list_catalog(
    keyword: str | None = None,
    source: db_models.SourceFilter = "all",
    type: str = "all",  # noqa: A002
    sort_by: db_models.SortKey = "title",
    sort_dir: db_models.SortDirection = "asc",
    limit: int = db_models.DEFAULT_PAGE_SIZE,
    page: int = 1,
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
    repo: repository.CatalogRepositoryProtocol = fastapi.Depends(_get_repo),  # noqa: B008
) -> dict[str, Any]:
    """Query the catalog.

    Args:
        keyword: Case-insensitive substring matched against id, title,
            provider, type, snippet and tags.
        source: "official", "community" or "all".
        type: Dataset type to keep (case-insensitive), or "all".
        sort_by: "title" or "id".
        sort_dir: "asc" or "desc".
        limit: Page size, raised to 1 when lower.
        page: 1-based page number, raised to 1 when lower.
        settings: Application settings (injected via FastAPI Depends).
        repo: Catalog repository (injected via FastAPI Depends).

    Returns:
        Dictionary with the page ``items``, the filtered ``total``, and the
        effective ``page`` and ``page_size``.

    Raises:
        HTTPException: If the feeds have to be loaded and fail (502).
    """
    records = await _records(repo, settings)
    result = catalog_query.query_catalog(
        records,
        db_models.CatalogQuery(
            keyword=keyword,
            source=source,
            type=type,
            sort_by=sort_by,
            sort_dir=sort_dir,
            limit=limit,
            page=page,
        ),
    )
    return dataclasses.asdict(result)


@router.get("/categories")
async def list_categories(
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
    repo: repository.CatalogRepositoryProtocol = fastapi.Depends(_get_repo),  # noqa: B008
) -> dict[str, list[dict[str, Any]]]:
    """Group the catalog by top-level category.

    Returns:
        Mapping from category name to its records in catalog order.
    """
    records = await _records(repo, settings)
    groups = catalog_query.group_catalog_by_category(records)
    return {
        category: [dataclasses.asdict(record) for record in members]
        for category, members in groups.items()
    }


@router.post("/refresh")
async def refresh_catalog(
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
    repo: repository.CatalogRepositoryProtocol = fastapi.Depends(_get_repo),  # noqa: B008
) -> dict[str, int]:
    """Reload both feeds, replacing the stored catalog.

    Returns:
        Dictionary with the number of records now in the catalog.

    Raises:
        HTTPException: If either feed fails (502); the previous catalog is
            kept.
    """
    records = await _load(repo, settings)
    return {"count": len(records)}
