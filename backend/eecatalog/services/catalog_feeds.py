"""Catalog feed loading and normalization.

This module downloads the official Earth Engine catalog and the community
dataset catalog, decodes them with the lenient JSON decoder, and normalizes
both differently-shaped listings into CatalogRecord objects.

Both feeds are fetched concurrently on one httpx.AsyncClient. The merged
result always lists official records first, then community records, each in
feed order, whichever download finishes first. Records without a usable id
are dropped silently; any network or decode failure aborts the whole load.

Example:
    Load the catalog using configured feed URLs:
        >>> from eecatalog.core.config import get_settings
        >>> from eecatalog.services.catalog_feeds import fetch_catalogs
        >>> records = await fetch_catalogs(get_settings())
        >>> records[0].source
        'official'

    Normalize an already decoded feed:
        >>> normalize_feed([{"id": "USGS/SRTMGL1_003"}], "official")
        [CatalogRecord(id='USGS/SRTMGL1_003', title='USGS/SRTMGL1_003', ...)]
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from eecatalog.db import models as db_models
from eecatalog.utils import json_helpers

if TYPE_CHECKING:
    from eecatalog.core import config

logger = logging.getLogger(__name__)

ID_KEYS: dict[db_models.Source, tuple[str, ...]] = {
    "official": ("id", "asset_id"),
    "community": ("id", "asset_id", "dataset_id"),
}
COMMUNITY_PROVIDER = "community"


def _first_present(record: dict[str, Any], keys: tuple[str, ...]) -> Any:
    """Return the first value among ``keys`` that is not None."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _to_text(value: Any) -> str:
    """Render a decoded JSON scalar as JSON writes it (true, null, 1)."""
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _optional_str(value: Any) -> str | None:
    return _to_text(value) if value else None


def normalize_record(
    record: dict[str, Any],
    source: db_models.Source,
) -> db_models.CatalogRecord | None:
    """Convert one raw feed entry into a CatalogRecord.

    Args:
        record: Loosely-typed dataset description from a feed.
        source: Feed the entry came from. Decides which keys hold the id
            and whether a missing provider defaults to "community".

    Returns:
        The normalized record, or None when the id is missing or blank.
    """
    raw_id = _first_present(record, ID_KEYS[source])
    dataset_id = "" if raw_id is None else _to_text(raw_id).strip()
    if not dataset_id:
        return None

    title = _first_present(record, ("title", "name"))
    provider = _optional_str(record.get("provider"))
    if provider is None and source == "community":
        provider = COMMUNITY_PROVIDER

    description = record.get("description")
    snippet = (
        _to_text(description)[: db_models.SNIPPET_LENGTH] if description else None
    )

    return db_models.CatalogRecord(
        id=dataset_id,
        title=_to_text(title) if title is not None else dataset_id,
        source=source,
        provider=provider,
        type=_optional_str(record.get("type")),
        tags=[_to_text(tag) for tag in _as_list(record.get("tags"))],
        snippet=snippet,
        category=db_models.infer_category(dataset_id),
    )


def normalize_feed(
    document: Any,
    source: db_models.Source,
) -> list[db_models.CatalogRecord]:
    """Normalize a decoded feed document, keeping feed order.

    Args:
        document: Decoded feed. Anything other than a list yields no records.
        source: Feed the document came from.

    Returns:
        Normalized records; entries that are not objects or have no id
        are skipped.
    """
    records: list[db_models.CatalogRecord] = []
    entries = _as_list(document)
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        record = normalize_record(entry, source)
        if record is not None:
            records.append(record)

    dropped = len(entries) - len(records)
    if dropped:
        logger.debug("Dropped %d %s catalog entries without an id", dropped, source)
    return records


def merge_feeds(
    official_text: str,
    community_text: str,
) -> list[db_models.CatalogRecord]:
    """Decode and normalize both feed texts into one record list.

    Args:
        official_text: Raw text of the official catalog feed.
        community_text: Raw text of the community catalog feed.

    Returns:
        Official records followed by community records.

    Raises:
        json.JSONDecodeError: If either feed is malformed after the lenient
            retry.
    """
    official = normalize_feed(json_helpers.lenient_loads(official_text), "official")
    community = normalize_feed(
        json_helpers.lenient_loads(community_text), "community"
    )
    return official + community


async def _fetch_text(client: httpx.AsyncClient, url: str) -> str:
    response = await client.get(url)
    response.raise_for_status()
    return response.text


async def fetch_catalogs(
    settings: config.Settings,
    client: httpx.AsyncClient | None = None,
) -> list[db_models.CatalogRecord]:
    """Download both catalog feeds concurrently and merge them.

    Args:
        settings: Application settings holding the feed URLs and timeout.
        client: Optional HTTP client to reuse. When omitted a client is
            created for this call and closed afterwards.

    Returns:
        Official records followed by community records.

    Raises:
        httpx.HTTPError: If either download fails or returns a non-2xx
            status.
        json.JSONDecodeError: If either feed is malformed after the lenient
            retry.
    """
    if client is None:
        async with httpx.AsyncClient(
            timeout=settings.http_timeout_seconds,
            follow_redirects=True,
        ) as owned_client:
            return await fetch_catalogs(settings, owned_client)

    logger.info(
        "Fetching catalog feeds: %s, %s",
        settings.official_catalog_url,
        settings.community_catalog_url,
    )
    official_text, community_text = await asyncio.gather(
        _fetch_text(client, settings.official_catalog_url),
        _fetch_text(client, settings.community_catalog_url),
    )
    records = merge_feeds(official_text, community_text)
    logger.info("Loaded %d catalog records", len(records))
    return records
