"""API endpoint tests for the analysis endpoint proxy.

This module verifies the /api/endpoint routes:
    - Tile requests return the parsed tile URL,
    - Capabilities are reported as unknown, then known after a tile call,
    - Unsupported features map to 409 without reaching the endpoint,
    - Endpoint failures map to 502 and a missing endpoint to 503,
    - Analysis answers are returned verbatim, whatever their JSON type,
    - Non-JSON answers map to 502,
    - One client is shared per endpoint and token pair and closed on
      shutdown.

The endpoint client is injected with a dependency override whose HTTP
client runs on httpx.MockTransport.

See Also:
    - backend/eecatalog/api/endpoint.py for API implementation.
"""

from __future__ import annotations

from typing import Any

import httpx
import pytest
from fastapi import testclient

from eecatalog import main
from eecatalog.api import endpoint as api_endpoint
from eecatalog.core import config
from eecatalog.services import endpoint_client

TILE = "https://tiles.example/{z}/{x}/{y}"


def _make_client(
    routes: dict[str, httpx.Response],
    seen: list[str],
) -> testclient.TestClient:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        canned = routes[request.url.path]
        return httpx.Response(canned.status_code, content=canned.content)

    ee_client = endpoint_client.EndpointClient(
        "https://example.com/tile",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    app = main.create_app()
    app.dependency_overrides[api_endpoint._get_client] = lambda: ee_client
    return testclient.TestClient(app)


def _tile(capabilities: dict[str, Any]) -> httpx.Response:
    return httpx.Response(200, json={"tileUrl": TILE, "capabilities": capabilities})


def test_tile_and_capabilities_flow() -> None:
    seen: list[str] = []
    client = _make_client(
        {
            "/tile": _tile({"inspect": True}),
            "/tile/inspect": httpx.Response(200, json={"B1": 12}),
        },
        seen,
    )

    assert client.get("/api/endpoint/capabilities").json() == {"state": "unknown"}

    response = client.post("/api/endpoint/tile", json={"asset_id": "A/B"})
    assert response.status_code == 200
    assert response.json() == {"tile_url": TILE}

    assert client.get("/api/endpoint/capabilities").json() == {
        "state": "known",
        "inspect": True,
        "export": False,
        "time_series": False,
    }

    response = client.post(
        "/api/endpoint/inspect",
        json={"assetId": "A/B", "lon": 15.9, "lat": 45.8},
    )
    assert response.status_code == 200
    assert response.json() == {"B1": 12}

    response = client.post(
        "/api/endpoint/export",
        json={"assetId": "A/B", "description": "run"},
    )
    assert response.status_code == 409
    assert "export" in response.json()["detail"]
    assert seen == ["/tile", "/tile/inspect"]


def test_time_series_forwarded_before_capabilities_known() -> None:
    seen: list[str] = []
    client = _make_client(
        {"/tile/timeseries": httpx.Response(200, json={"series": []})},
        seen,
    )
    response = client.post(
        "/api/endpoint/timeseries",
        json={
            "assetId": "A/B",
            "startDate": "2020-01-01",
            "endDate": "2020-12-31",
            "frequency": "week",
            "reducer": "mean",
        },
    )
    assert response.status_code == 200
    assert response.json() == {"series": []}
    assert seen == ["/tile/timeseries"]


def test_endpoint_error_returns_502() -> None:
    client = _make_client({"/tile": httpx.Response(500, text="quota")}, [])
    response = client.post("/api/endpoint/tile", json={"asset_id": "A/B"})
    assert response.status_code == 502
    assert response.json()["detail"] == "Endpoint error (500): quota"


def test_missing_tile_url_returns_502() -> None:
    client = _make_client({"/tile": httpx.Response(200, json={"ok": True})}, [])
    response = client.post("/api/endpoint/tile", json={})
    assert response.status_code == 502
    assert "missing tileUrl" in response.json()["detail"]


def test_unconfigured_endpoint_returns_503() -> None:
    app = main.create_app()
    app.dependency_overrides[config.get_settings] = lambda: config.Settings(
        tile_endpoint=None
    )
    client = testclient.TestClient(app)
    response = client.post("/api/endpoint/tile", json={"asset_id": "A/B"})
    assert response.status_code == 503
    assert "not configured" in response.json()["detail"]


def test_invalid_payload_rejected() -> None:
    client = _make_client({}, [])
    response = client.post(
        "/api/endpoint/timeseries",
        json={"assetId": "A/B", "frequency": "hourly"},
    )
    assert response.status_code == 422


def test_analysis_answer_returned_verbatim_when_not_an_object() -> None:
    client = _make_client(
        {"/tile/inspect": httpx.Response(200, json=[{"B1": 1}, {"B1": 2}])},
        [],
    )
    response = client.post(
        "/api/endpoint/inspect",
        json={"assetId": "A/B", "lon": 15.9, "lat": 45.8},
    )
    assert response.status_code == 200
    assert response.json() == [{"B1": 1}, {"B1": 2}]


def test_analysis_null_answer_returned_verbatim() -> None:
    client = _make_client(
        {"/tile/export": httpx.Response(200, content=b"null")},
        [],
    )
    response = client.post(
        "/api/endpoint/export",
        json={"assetId": "A/B", "description": "run"},
    )
    assert response.status_code == 200
    assert response.json() is None


def test_non_json_answer_returns_502() -> None:
    client = _make_client(
        {"/tile/inspect": httpx.Response(200, text="<html>ok</html>")},
        [],
    )
    response = client.post(
        "/api/endpoint/inspect",
        json={"assetId": "A/B", "lon": 15.9, "lat": 45.8},
    )
    assert response.status_code == 502
    assert "non-JSON" in response.json()["detail"]


@pytest.mark.asyncio
async def test_get_endpoint_client_is_shared_per_endpoint_and_token() -> None:
    await api_endpoint.close_endpoint_clients()
    try:
        first = api_endpoint.get_endpoint_client("https://example.com/tile", "t")
        again = api_endpoint.get_endpoint_client("https://example.com/tile", "t")
        other = api_endpoint.get_endpoint_client("https://example.com/tile", "u")
        assert first is again
        assert first is not other
    finally:
        await api_endpoint.close_endpoint_clients()


@pytest.mark.asyncio
async def test_close_endpoint_clients_closes_and_forgets() -> None:
    first = api_endpoint.get_endpoint_client("https://example.com/tile")
    http_client = first._client()

    await api_endpoint.close_endpoint_clients()

    assert http_client.is_closed
    assert api_endpoint.get_endpoint_client("https://example.com/tile") is not first
    await api_endpoint.close_endpoint_clients()
