# roastmyrun/edit.py
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from . import config
from .metrics import elevation_to_dict
from .sketch import RouteSketch
from .terrain import TerrainSampler

router = APIRouter(prefix="/api/route")


class DrawnRouteRequest(BaseModel):
    coordinates: List[List[float]]  # [[lon, lat], ...] as the draw widget emits them
    duration: Optional[str] = None


class ElevationOut(BaseModel):
    gain: float
    loss: float
    max: float
    min: float


class MetricsOut(BaseModel):
    distance_km: float
    distance_miles: float
    elevation: Optional[ElevationOut] = None
    duration: Optional[str] = None


class MetricsResponse(BaseModel):
    metrics: Optional[MetricsOut]


class ElevationRequest(BaseModel):
    coordinates: List[List[float]]
    samples: int = Field(config.ELEVATION_SAMPLES, ge=2, le=200)


class ElevationResponse(BaseModel):
    elevation: Optional[ElevationOut]


def get_terrain_sampler(request: Request) -> TerrainSampler:
    return TerrainSampler(
        client=request.app.state.http_client,
        url_template=config.TERRAIN_TILE_URL,
        zoom=config.TERRAIN_ZOOM,
        access_token=config.MAPBOX_ACCESS_TOKEN,
    )


def _sketch_for(coordinates: List[List[float]], duration: Optional[str] = None) -> RouteSketch:
    # one sketch per request, the browser holds the live line
    sketch = RouteSketch(on_metrics_change=lambda metrics: None)
    sketch.set_duration(duration)
    sketch.set_points(coordinates)
    return sketch


@router.post("/metrics", response_model=MetricsResponse)
def route_metrics(payload: DrawnRouteRequest):
    """
    Take the drawn polyline and return its current metrics.

    Empty line -> metrics null, one point -> distance 0.
    Geometry that can't be measured is treated as "no metrics".
    """
    sketch = _sketch_for(payload.coordinates, payload.duration)
    metrics = sketch.metrics

    if metrics is None:
        return MetricsResponse(metrics=None)
    return MetricsResponse(metrics=MetricsOut(**metrics.to_display()))


@router.post("/elevation", response_model=ElevationResponse)
async def route_elevation(
    payload: ElevationRequest,
    sampler: TerrainSampler = Depends(get_terrain_sampler),
):
    """
    Sample terrain tiles along the line and return gain/loss/max/min in meters.
    Tiles that fail to load count as 0 m.
    """
    sketch = _sketch_for(payload.coordinates)
    metrics = await sketch.refresh_elevation(sampler, payload.samples)

    elevation: Optional[Dict[str, float]] = elevation_to_dict(metrics.elevation if metrics else None)
    if elevation is None:
        return ElevationResponse(elevation=None)
    return ElevationResponse(elevation=ElevationOut(**elevation))
