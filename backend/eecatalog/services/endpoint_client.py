"""Client for the user-configured tile and analysis endpoint.

The endpoint is a single HTTP service reached through one base URL. A POST
to the base URL renders a dataset and answers with a tile URL template;
POSTs to ``/inspect``, ``/export`` and ``/timeseries`` below it run heavier
analysis whose JSON answers are handed back to the caller untouched.

Capability negotiation:
    A new client knows nothing about what the endpoint supports
    (CapabilitiesUnknown) and lets every call through. Each successful
    tile request replaces that state with the ``capabilities`` object of
    the response (CapabilitiesKnown). From then on, calling a feature the
    endpoint did not advertise fails locally with UnsupportedFeatureError,
    without a network round-trip. Only tile requests change the state.

Example:
    Render a dataset, then inspect a pixel:
        >>> async with EndpointClient(
        ...     "https://huggingface.co/spaces/giswqs/ee-tile-request",
        ...     token="hf_xxx",
        ... ) as client:
        ...     url = await client.get_tile_url(
        ...         TilePayload(asset_id="USGS/SRTMGL1_003")
        ...     )
        ...     value = await client.inspect_pixel(
        ...         InspectPayload(asset_id="USGS/SRTMGL1_003", lon=15.9, lat=45.8)
        ...     )
"""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import TYPE_CHECKING, Any, Literal

import httpx

if TYPE_CHECKING:
    import types

    from eecatalog.services import endpoint_payloads

logger = logging.getLogger(__name__)

Feature = Literal["inspect", "export", "timeSeries"]

_SPACE_URL = re.compile(
    r"^https://huggingface\.co/spaces/([^/]+)/([^/]+)/?$",
    re.IGNORECASE,
)


class EndpointError(RuntimeError):
    """Base class for failures talking to the analysis endpoint."""


class EndpointNotConfiguredError(EndpointError):
    """Raised when a client is created without an endpoint URL."""


class EndpointHTTPError(EndpointError):
    """Raised when the endpoint answers with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the endpoint.
        body: Response body text, possibly empty.
    """

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Endpoint error ({status_code}): {body or 'Unknown error'}")


class EndpointResponseError(EndpointError):
    """Raised when a 2xx response body is not valid JSON.

    Attributes:
        body: Response body text.
    """

    def __init__(self, body: str) -> None:
        self.body = body
        super().__init__(f"Endpoint returned a non-JSON response: {body[:200]}")


class TileUrlMissingError(EndpointError):
    """Raised when a tile response carries no recognizable tile URL."""


class UnsupportedFeatureError(EndpointError):
    """Raised locally when the endpoint did not advertise a feature.

    Attributes:
        feature: Name of the refused feature.
    """

    def __init__(self, feature: Feature) -> None:
        self.feature = feature
        super().__init__(
            f"Endpoint does not advertise {feature} support. Configure an "
            f"endpoint with {feature} capability or use tile-only mode."
        )


@dataclasses.dataclass(frozen=True)
class EndpointCapabilities:
    """Features an endpoint advertised beyond basic tile serving."""

    inspect: bool = False
    export: bool = False
    time_series: bool = False

    def supports(self, feature: Feature) -> bool:
        return {
            "inspect": self.inspect,
            "export": self.export,
            "timeSeries": self.time_series,
        }[feature]


@dataclasses.dataclass(frozen=True)
class CapabilitiesUnknown:
    """No tile request has succeeded yet."""


@dataclasses.dataclass(frozen=True)
class CapabilitiesKnown:
    """Snapshot taken from the latest successful tile response."""

    flags: EndpointCapabilities


CapabilityState = CapabilitiesUnknown | CapabilitiesKnown


def normalize_endpoint_url(endpoint: str) -> str:
    """Canonicalize a user-supplied endpoint URL.

    A Hugging Face Space page URL is rewritten to the Space's direct API
    host with the ``/tile`` path; any other value is returned trimmed.
    Normalizing an already normalized URL returns it unchanged.

    Args:
        endpoint: Raw endpoint URL as typed by the user.

    Returns:
        The canonical endpoint URL.

    Example:
        >>> normalize_endpoint_url(
        ...     "https://huggingface.co/spaces/giswqs/ee-tile-request"
        ... )
        'https://giswqs-ee-tile-request.hf.space/tile'
    """
    raw = endpoint.strip()
    match = _SPACE_URL.match(raw)
    if match:
        owner, space = match.groups()
        return f"https://{owner}-{space}.hf.space/tile"
    return raw


def parse_tile_url_from_response(data: dict[str, Any]) -> str:
    """Extract the tile URL template from a tile response body.

    Fields are checked in this order and the first non-empty string wins:
    ``tile_url``, ``tileUrl``, ``urlFormat``, ``tiles[0]``,
    ``data.tileUrl``, ``data.urlFormat``.

    Args:
        data: Decoded JSON body of a tile response.

    Returns:
        Tile URL template with ``{z}/{x}/{y}`` placeholders.

    Raises:
        TileUrlMissingError: If none of the fields holds a string.
    """
    nested = data.get("data")
    if not isinstance(nested, dict):
        nested = {}
    tiles = data.get("tiles")
    first_tile = tiles[0] if isinstance(tiles, list) and tiles else None

    candidates = (
        data.get("tile_url"),
        data.get("tileUrl"),
        data.get("urlFormat"),
        first_tile,
        nested.get("tileUrl"),
        nested.get("urlFormat"),
    )
    for candidate in candidates:
        if isinstance(candidate, str) and candidate:
            return candidate

    raise TileUrlMissingError(
        "Tile endpoint response missing tileUrl/urlFormat/tiles[0]."
    )


def parse_capabilities(data: dict[str, Any]) -> EndpointCapabilities:
    """Read the ``capabilities`` object of a tile response.

    Args:
        data: Decoded JSON body of a tile response.

    Returns:
        Advertised capabilities; all False when the object is absent.
    """
    raw = data.get("capabilities")
    if not isinstance(raw, dict):
        return EndpointCapabilities()
    return EndpointCapabilities(
        inspect=bool(raw.get("inspect")),
        export=bool(raw.get("export")),
        time_series=bool(raw.get("timeSeries")),
    )


def build_headers(token: str | None = None) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


class EndpointClient:
    """Talks to one endpoint with one token and tracks its capabilities.

    The client owns the capability state for its endpoint; nothing else
    reads or writes it. Use one instance per endpoint and token pair.

    Args:
        endpoint: Endpoint URL, normalized with normalize_endpoint_url.
        token: Optional bearer token.
        http_client: Optional httpx.AsyncClient to send requests with. When
            omitted the client creates one lazily and closes it in aclose().
        timeout: Timeout for the lazily created HTTP client, None waits
            indefinitely.

    Raises:
        EndpointNotConfiguredError: If the endpoint is empty or blank.
    """

    def __init__(
        self,
        endpoint: str | None,
        token: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self.endpoint = normalize_endpoint_url(endpoint or "")
        if not self.endpoint:
            raise EndpointNotConfiguredError("Tile endpoint is not configured.")

        self._headers = build_headers(token)
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._timeout = timeout
        self._state: CapabilityState = CapabilitiesUnknown()

    async def __aenter__(self) -> EndpointClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def capability_state(self) -> CapabilityState:
        """Current immutable capability state."""
        return self._state

    def capabilities(self) -> EndpointCapabilities:
        """Advertised capabilities, all False while still unknown."""
        if isinstance(self._state, CapabilitiesKnown):
            return self._state.flags
        return EndpointCapabilities()

    def ensure_supported(self, feature: Feature) -> None:
        """Refuse a feature the endpoint is known not to support.

        Args:
            feature: Wire name of the feature about to be called.

        Raises:
            UnsupportedFeatureError: If a capability snapshot exists and
                does not advertise ``feature``. Unknown capabilities never
                block a call.
        """
        if isinstance(self._state, CapabilitiesUnknown):
            return
        if self._state.flags.supports(feature):
            return
        logger.warning("Refusing %s: not advertised by %s", feature, self.endpoint)
        raise UnsupportedFeatureError(feature)

    def _url(self, path: str) -> str:
        return f"{self.endpoint.removesuffix('/')}/{path}"

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def _post_json(self, url: str, body: dict[str, Any]) -> Any:
        response = await self._client().post(url, json=body, headers=self._headers)
        if not response.is_success:
            logger.warning("Endpoint %s answered %d", url, response.status_code)
            raise EndpointHTTPError(response.status_code, response.text)
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("Endpoint %s answered with a non-JSON body", url)
            raise EndpointResponseError(response.text) from exc

    async def get_tile_url(self, payload: endpoint_payloads.TilePayload) -> str:
        """Render a dataset and return its tile URL template.

        A successful response replaces the capability snapshot, even when
        it then turns out to carry no tile URL.

        Args:
            payload: What to render.

        Returns:
            Tile URL template with ``{z}/{x}/{y}`` placeholders.

        Raises:
            EndpointHTTPError: If the endpoint answers with a non-2xx status.
            EndpointResponseError: If a 2xx body is not JSON.
            TileUrlMissingError: If the response has no tile URL field.
        """
        data = await self._post_json(self.endpoint, payload.to_wire())
        if not isinstance(data, dict):
            data = {}
        self._state = CapabilitiesKnown(parse_capabilities(data))
        logger.info("Endpoint %s capabilities: %s", self.endpoint, self._state.flags)
        return parse_tile_url_from_response(data)

    async def inspect_pixel(
        self,
        payload: endpoint_payloads.InspectPayload,
    ) -> Any:
        """Inspect pixel values at a location.

        Raises:
            UnsupportedFeatureError: If inspect is known to be unsupported.
            EndpointHTTPError: If the endpoint answers with a non-2xx status.
        """
        self.ensure_supported("inspect")
        return await self._post_json(self._url("inspect"), payload.to_wire())

    async def request_export(
        self,
        payload: endpoint_payloads.ExportPayload,
    ) -> Any:
        """Start an export task.

        Raises:
            UnsupportedFeatureError: If export is known to be unsupported.
            EndpointHTTPError: If the endpoint answers with a non-2xx status.
        """
        self.ensure_supported("export")
        return await self._post_json(self._url("export"), payload.to_wire())

    async def request_time_series(
        self,
        payload: endpoint_payloads.TimeSeriesPayload,
    ) -> Any:
        """Extract a time series.

        Raises:
            UnsupportedFeatureError: If time series is known to be
                unsupported.
            EndpointHTTPError: If the endpoint answers with a non-2xx status.
        """
        self.ensure_supported("timeSeries")
        return await self._post_json(self._url("timeseries"), payload.to_wire())


async def request_tile_url(
    payload: endpoint_payloads.TilePayload,
    endpoint: str,
    token: str | None = None,
) -> str:
    """Perform a single tile request with a throwaway client.

    Args:
        payload: What to render.
        endpoint: Endpoint URL.
        token: Optional bearer token.

    Returns:
        Tile URL template.
    """
    async with EndpointClient(endpoint, token) as client:
        return await client.get_tile_url(payload)
