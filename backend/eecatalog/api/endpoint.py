"""Analysis endpoint proxy API endpoints.

This module forwards tile, inspect, export and time-series requests from
the map client to the configured analysis endpoint through one long-lived
EndpointClient per endpoint and token pair, so the capabilities learned by
a tile request gate the analysis requests that follow it.

Errors are mapped onto HTTP statuses:
    - endpoint not configured: 503
    - feature not advertised by the endpoint: 409
    - endpoint failure or response without a tile URL: 502

Example:
    Render a dataset:
        >>> response = client.post(
        ...     "/api/endpoint/tile",
        ...     json={"asset_id": "USGS/SRTMGL1_003"},
        ... )
        >>> response.json()
        {'tile_url': 'https://earthengine.googleapis.com/.../{z}/{x}/{y}'}

    Inspect a pixel once the endpoint advertised inspect support:
        >>> response = client.post(
        ...     "/api/endpoint/inspect",
        ...     json={"assetId": "USGS/SRTMGL1_003", "lon": 15.9, "lat": 45.8},
        ... )
"""

from __future__ import annotations

from typing import Any

import fastapi
import httpx

from eecatalog.core import config
from eecatalog.services import endpoint_client, endpoint_payloads

router = fastapi.APIRouter(prefix="/api/endpoint", tags=["endpoint"])


_clients: dict[
    tuple[str, str | None, float | None], endpoint_client.EndpointClient
] = {}


def get_endpoint_client(
    endpoint: str,
    token: str | None = None,
    timeout: float | None = None,
) -> endpoint_client.EndpointClient:
    """Return the process-wide client for an endpoint and token pair."""
    key = (endpoint, token, timeout)
    client = _clients.get(key)
    if client is None:
        client = endpoint_client.EndpointClient(endpoint, token, timeout=timeout)
        _clients[key] = client
    return client


async def close_endpoint_clients() -> None:
    """Close and forget every client created by get_endpoint_client."""
    clients = list(_clients.values())
    _clients.clear()
    for client in clients:
        await client.aclose()


def _get_client(
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
) -> endpoint_client.EndpointClient:
    """Resolve the endpoint client dependency.

    Raises:
        HTTPException: If no endpoint is configured (503).
    """
    try:
        return get_endpoint_client(
            settings.tile_endpoint or "",
            settings.tile_endpoint_token,
            settings.http_timeout_seconds,
        )
    except endpoint_client.EndpointNotConfiguredError as exc:
        raise fastapi.HTTPException(status_code=503, detail=str(exc)) from exc


def _to_http_exception(exc: Exception) -> fastapi.HTTPException:
    """Translate an endpoint failure into an HTTP error response."""
    if isinstance(exc, endpoint_client.UnsupportedFeatureError):
        return fastapi.HTTPException(status_code=409, detail=str(exc))
    return fastapi.HTTPException(status_code=502, detail=str(exc))


@router.post("/tile")
async def get_tile(
    payload: endpoint_payloads.TilePayload,
    client: endpoint_client.EndpointClient = fastapi.Depends(_get_client),  # noqa: B008
) -> dict[str, str]:
    """Render a dataset and return its XYZ tile URL template.

    Args:
        payload: Tile request body with snake_case fields.
        client: Endpoint client (injected via FastAPI Depends).

    Returns:
        Dictionary with ``tile_url``.

    Raises:
        HTTPException: If the endpoint fails or returns no tile URL (502).
    """
    try:
        tile_url = await client.get_tile_url(payload)
    except (endpoint_client.EndpointError, httpx.HTTPError) as exc:
        raise _to_http_exception(exc) from exc

    return {"tile_url": tile_url}


@router.post("/inspect", response_model=None)
async def inspect_pixel(
    payload: endpoint_payloads.InspectPayload,
    client: endpoint_client.EndpointClient = fastapi.Depends(_get_client),  # noqa: B008
) -> Any:
    """Forward a pixel inspection request and return the endpoint's JSON verbatim."""
    try:
        return await client.inspect_pixel(payload)
    except (endpoint_client.EndpointError, httpx.HTTPError) as exc:
        raise _to_http_exception(exc) from exc


@router.post("/export", response_model=None)
async def request_export(
    payload: endpoint_payloads.ExportPayload,
    client: endpoint_client.EndpointClient = fastapi.Depends(_get_client),  # noqa: B008
) -> Any:
    """Forward an export request and return the endpoint's JSON verbatim."""
    try:
        return await client.request_export(payload)
    except (endpoint_client.EndpointError, httpx.HTTPError) as exc:
        raise _to_http_exception(exc) from exc


@router.post("/timeseries", response_model=None)
async def request_time_series(
    payload: endpoint_payloads.TimeSeriesPayload,
    client: endpoint_client.EndpointClient = fastapi.Depends(_get_client),  # noqa: B008
) -> Any:
    """Forward a time-series request and return the endpoint's JSON verbatim."""
    try:
        return await client.request_time_series(payload)
    except (endpoint_client.EndpointError, httpx.HTTPError) as exc:
        raise _to_http_exception(exc) from exc


@router.get("/capabilities")
async def get_capabilities(
    client: endpoint_client.EndpointClient = fastapi.Depends(_get_client),  # noqa: B008
) -> dict[str, Any]:
    """Report what the endpoint advertised on its last tile response.

    Returns:
        ``{"state": "unknown"}`` before the first successful tile request,
        otherwise ``{"state": "known"}`` plus the three capability flags.
    """
    state = client.capability_state
    if isinstance(state, endpoint_client.CapabilitiesUnknown):
        return {"state": "unknown"}
    return {
        "state": "known",
        "inspect": state.flags.inspect,
        "export": state.flags.export,
        "time_series": state.flags.time_series,
    }
