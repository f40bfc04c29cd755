"""Repository holding the merged dataset catalog in memory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from eecatalog.db import models as db_models


class CatalogRepositoryProtocol(Protocol):
    """Protocol interface for storing and retrieving catalog records.

    Implementations keep the merged official + community record list in
    feed order. Duplicate ids coming from different feeds are both kept.
    """

    @property
    def loaded(self) -> bool: ...

    def replace(
        self,
        records: Iterable[db_models.CatalogRecord],
    ) -> list[db_models.CatalogRecord]: ...

    def all(self) -> list[db_models.CatalogRecord]: ...


class InMemoryCatalogRepository(CatalogRepositoryProtocol):
    """Process-local catalog store.

    Records are lost when the process exits and are reloaded from the feeds
    on the next start.
    """

    def __init__(self) -> None:
        """Initialize an empty, not yet loaded repository."""
        self._records: list[db_models.CatalogRecord] = []
        self._loaded = False

    @property
    def loaded(self) -> bool:
        """Whether the feeds have been loaded at least once."""
        return self._loaded

    def replace(
        self,
        records: Iterable[db_models.CatalogRecord],
    ) -> list[db_models.CatalogRecord]:
        """Swap the stored catalog for a freshly loaded one.

        Args:
            records: Normalized records, official records first.

        Returns:
            The stored records.
        """
        self._records = list(records)
        self._loaded = True
        return self._records

    def all(self) -> list[db_models.CatalogRecord]:
        """Get all stored records in feed order.

        Returns:
            A copy of the stored record list.
        """
        return list(self._records)


_repository = InMemoryCatalogRepository()


def get_catalog_repository() -> CatalogRepositoryProtocol:
    """Return the process-wide catalog repository."""
    return _repository
