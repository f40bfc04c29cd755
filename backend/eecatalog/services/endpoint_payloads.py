"""Request payloads for the analysis endpoint and their wire encoding.

The tile request is sent with snake_case keys (``asset_id``,
``vis_params``, ``date_range``, ``cloud_filter``); the inspect, export and
time-series requests are sent with camelCase keys (``assetId``,
``visParams``, ``maxPixels``). In both cases fields left unset are omitted
from the body rather than sent as null.

Python code always uses snake_case attribute names. The camelCase models
also accept camelCase input, so the FastAPI routes take request bodies in
the same shape the endpoint expects.

Example:
    Shape a tile request:
        >>> payload = TilePayload(
        ...     asset_id="USGS/SRTMGL1_003",
        ...     vis_params=VisualizeOptions(min=0, max=3000),
        ... )
        >>> payload.to_wire()
        {'asset_id': 'USGS/SRTMGL1_003', 'vis_params': {'min': 0.0, 'max': 3000.0}}
"""

from __future__ import annotations

from typing import Any, Literal

import pydantic
from pydantic import alias_generators

Frequency = Literal["day", "week", "month", "year"]
ExportDestination = Literal["drive", "cloud", "asset"]


class VisualizeOptions(pydantic.BaseModel):
    """Earth Engine visualization parameters."""

    bands: str | None = None
    min: float | None = None
    max: float | None = None
    palette: str | None = None
    opacity: float | None = None


class DateRange(pydantic.BaseModel):
    start: str
    end: str


class CloudFilter(pydantic.BaseModel):
    property: str
    threshold: float


class TilePayload(pydantic.BaseModel):
    """Body of a tile (base) request.

    Attributes:
        asset_id: Dataset to render.
        script: Earth Engine script producing the image to render.
        vis_params: Visualization parameters.
        date_range: Date window for image collections.
        cloud_filter: Metadata property and threshold used to drop cloudy
            scenes.
        reducer: Name of the reducer used to composite a collection.
    """

    asset_id: str | None = None
    script: str | None = None
    vis_params: VisualizeOptions | None = None
    date_range: DateRange | None = None
    cloud_filter: CloudFilter | None = None
    reducer: str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Return the snake_case JSON body, unset fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class _CamelPayload(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(
        alias_generator=alias_generators.to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase JSON body, unset fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class InspectPayload(_CamelPayload):
    """Body of a pixel inspection request at a lon/lat location."""

    asset_id: str
    lon: float
    lat: float
    vis_params: VisualizeOptions | None = None


class ExportPayload(_CamelPayload):
    """Body of an export task request."""

    asset_id: str
    description: str
    region: str | None = None
    scale: float | None = None
    crs: str | None = None
    max_pixels: int | None = None
    destination: ExportDestination | None = None


class TimeSeriesPayload(_CamelPayload):
    """Body of a time-series extraction request."""

    asset_id: str
    start_date: str
    end_date: str
    frequency: Frequency
    reducer: str
    vis_params: VisualizeOptions | None = None
