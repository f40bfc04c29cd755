"""Keyword filtering, sorting, paging and grouping over catalog records.

All functions are pure: they never mutate the input list and always return
new lists. Comparisons ignore case. Sorting is stable, so records whose sort
keys differ only in case keep their input order in either direction.

Example:
    Second page of official image collections, sorted by id:
        >>> from eecatalog.db.models import CatalogQuery
        >>> result = query_catalog(
        ...     records,
        ...     CatalogQuery(
        ...         source="official",
        ...         type="image_collection",
        ...         sort_by="id",
        ...         limit=10,
        ...         page=2,
        ...     ),
        ... )
        >>> result.total, len(result.items)
        (42, 10)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from eecatalog.db import models as db_models

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


def _searchable_text(record: db_models.CatalogRecord) -> Iterable[str]:
    yield record.id
    yield record.title
    yield record.provider or ""
    yield record.type or ""
    yield record.snippet or ""
    yield from record.tags


def filter_catalog(
    records: Sequence[db_models.CatalogRecord],
    keyword: str,
) -> list[db_models.CatalogRecord]:
    """Keep records where any searchable field contains ``keyword``.

    The id, title, provider, type, snippet and every tag are searched,
    ignoring case.

    Args:
        records: Records to filter.
        keyword: Substring to look for. Blank keywords match every record.

    Returns:
        Matching records in input order.
    """
    needle = keyword.strip().lower()
    if not needle:
        return list(records)

    return [
        record
        for record in records
        if any(needle in text.lower() for text in _searchable_text(record))
    ]


def query_catalog(
    records: Sequence[db_models.CatalogRecord],
    query: db_models.CatalogQuery,
) -> db_models.CatalogQueryResult:
    """Filter, sort and page catalog records.

    Args:
        records: Records to query.
        query: Filter, sort and paging options. ``limit`` and ``page``
            below 1 are raised to 1.

    Returns:
        The requested page plus the number of records matching the filters
        before paging. A page past the end is empty, not an error.
    """
    page_size = max(1, query.limit)
    page = max(1, query.page)
    type_filter = query.type.lower()

    filtered = filter_catalog(records, query.keyword or "")
    if query.source != "all":
        filtered = [record for record in filtered if record.source == query.source]
    if type_filter != "all":
        filtered = [
            record
            for record in filtered
            if (record.type or "").lower() == type_filter
        ]

    ordered = sorted(
        filtered,
        key=lambda record: getattr(record, query.sort_by).lower(),
        reverse=query.sort_dir == "desc",
    )

    start = (page - 1) * page_size
    return db_models.CatalogQueryResult(
        items=ordered[start : start + page_size],
        total=len(ordered),
        page=page,
        page_size=page_size,
    )


def group_catalog_by_category(
    records: Iterable[db_models.CatalogRecord],
) -> dict[str, list[db_models.CatalogRecord]]:
    """Partition records by category, keeping their relative order.

    Args:
        records: Records to group. A record without a category is grouped
            under the top-level segment of its id.

    Returns:
        Mapping from category name to its records, categories in order of
        first appearance.
    """
    groups: dict[str, list[db_models.CatalogRecord]] = {}
    for record in records:
        key = record.category or db_models.infer_category(record.id)
        groups.setdefault(key, []).append(record)
    return groups
