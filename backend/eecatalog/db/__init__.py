"""Catalog data models and repository abstractions.

This package consolidates the catalog record dataclasses and the repository
holding the merged official + community catalog. It provides a stable import
location for repository dependency injection throughout the application.

Example:
    Use in a service or FastAPI dependency:
        >>> from eecatalog.db import repository
        >>> repo = repository.get_catalog_repository()
"""
