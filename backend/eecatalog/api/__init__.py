"""API router subpackage for the Earth Engine catalog service.

This package organizes REST endpoints for the map client, including catalog
browsing, the analysis endpoint proxy, and credential status. Each module
exposes its own APIRouter for composition in the application's main FastAPI
instance.

Submodules:
    - catalog: Endpoints for searching, paging and grouping catalog datasets.
    - endpoint: Endpoints forwarding tile, inspect, export and time-series
      requests to the configured analysis endpoint.
    - auth: Endpoint reporting service account configuration.

Routers are grouped by major feature domain to promote clarity and
independent testing.
"""
