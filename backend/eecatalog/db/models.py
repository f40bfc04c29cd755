"""Data models for dataset catalog records and catalog queries.

This module defines the core data structures used throughout the application
to represent Earth Engine datasets discovered from the official and community
catalog feeds. A CatalogRecord is the unified descriptor both feeds are
normalized into; CatalogQuery and CatalogQueryResult describe one page of a
filtered, sorted view over those records.

Example:
    Creating a CatalogRecord for an official dataset:
        >>> from eecatalog.db.models import CatalogRecord
        >>> record = CatalogRecord(
        ...     id="COPERNICUS/S2_SR",
        ...     title="Sentinel-2 SR",
        ...     provider="ESA",
        ...     type="image_collection",
        ...     source="official",
        ...     tags=["optical"],
        ...     snippet="Sentinel-2 surface reflectance",
        ...     category="COPERNICUS",
        ... )

    Querying the second page of official datasets sorted by id:
        >>> query = CatalogQuery(source="official", sort_by="id", page=2)
"""

from __future__ import annotations

import dataclasses
from typing import Literal

Source = Literal["official", "community"]
SourceFilter = Literal["all", "official", "community"]
SortKey = Literal["title", "id"]
SortDirection = Literal["asc", "desc"]

DEFAULT_CATEGORY = "Other"
DEFAULT_PAGE_SIZE = 25
SNIPPET_LENGTH = 240


def infer_category(dataset_id: str) -> str:
    """Return the first ``/``-delimited segment of a dataset id.

    Args:
        dataset_id: Canonical dataset path such as "LANDSAT/LC08/C02/T1_L2".

    Returns:
        The top-level path segment, or "Other" when it is blank.
    """
    return dataset_id.split("/")[0].strip() or DEFAULT_CATEGORY


@dataclasses.dataclass
class CatalogRecord:
    """A dataset the map client can discover, from either catalog feed.

    Attributes:
        id: Canonical dataset path (never blank).
        title: Display title, falls back to the id.
        provider: Data provider, None when unknown.
        type: Free-form dataset type such as "image_collection".
        source: Feed the record came from ("official" or "community").
        tags: Keywords in feed order, duplicates kept.
        snippet: Description truncated to 240 characters.
        category: Top-level segment of the id, or "Other".
    """

    id: str
    title: str
    source: Source
    provider: str | None = None
    type: str | None = None
    tags: list[str] = dataclasses.field(default_factory=list)
    snippet: str | None = None
    category: str | None = None


@dataclasses.dataclass
class CatalogQuery:
    """Filter, sort and paging options for a catalog view.

    Attributes:
        keyword: Case-insensitive substring filter, None or blank matches all.
        source: Keep only records from this feed, or "all".
        type: Keep only records whose type equals this (ignoring case),
            or "all".
        sort_by: Record field to sort on.
        sort_dir: Sort direction.
        limit: Page size, values below 1 are treated as 1.
        page: 1-based page number, values below 1 are treated as 1.
    """

    keyword: str | None = None
    source: SourceFilter = "all"
    type: str = "all"
    sort_by: SortKey = "title"
    sort_dir: SortDirection = "asc"
    limit: int = DEFAULT_PAGE_SIZE
    page: int = 1


@dataclasses.dataclass
class CatalogQueryResult:
    """One page of a catalog query.

    Attributes:
        items: Records on the requested page.
        total: Number of records matching the filters, across all pages.
        page: Page number that was served.
        page_size: Effective page size.
    """

    items: list[CatalogRecord]
    total: int
    page: int
    page_size: int
