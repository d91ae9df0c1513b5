# roastmyrun/terrain.py
"""
Elevation sampling from terrain-RGB raster tiles.

Each tile pixel packs elevation into its color channels:
    elevation_m = -10000 + (R * 256 * 256 + G * 256 + B) * 0.1
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence
import asyncio
import io
import logging
import math

import httpx
from PIL import Image

from .metrics import ElevationStats, elevation_stats, sample_points, validate_coordinates

logger = logging.getLogger(__name__)

MAX_MERCATOR_LAT = 85.0511


@dataclass(frozen=True)
class TilePixel:
    z: int
    x: int
    y: int
    px: int
    py: int


def tile_for(lon: float, lat: float, zoom: int, tile_size: int = 256) -> TilePixel:
    """
    Web Mercator tile containing (lon, lat) plus the pixel inside that tile.
    """
    lat = max(-MAX_MERCATOR_LAT, min(MAX_MERCATOR_LAT, lat))
    n = 2 ** zoom

    fx = (lon + 180.0) / 360.0 * n
    lat_rad = math.radians(lat)
    fy = (1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n

    # lon == 180 would land one tile past the edge
    tx = min(int(fx), n - 1)
    ty = min(int(fy), n - 1)

    px = min(int((fx - tx) * tile_size), tile_size - 1)
    py = min(int((fy - ty) * tile_size), tile_size - 1)
    return TilePixel(z=zoom, x=tx, y=ty, px=px, py=py)


def rgb_to_elevation(r: int, g: int, b: int) -> float:
    return -10000.0 + (r * 256 * 256 + g * 256 + b) * 0.1


def decode_elevation(png_bytes: bytes, px: int, py: int, tile_size: int = 256) -> float:
    """
    Decode one pixel of a terrain tile. Handles @2x (512px) tiles by scaling
    the pixel position to the real image size.
    """
    with Image.open(io.BytesIO(png_bytes)) as img:
        rgb = img.convert("RGB")
        scale = rgb.width / tile_size
        x = min(int(px * scale), rgb.width - 1)
        y = min(int(py * scale), rgb.height - 1)
        r, g, b = rgb.getpixel((x, y))
    return rgb_to_elevation(r, g, b)


class TerrainSampler:
    def __init__(
        self,
        client: httpx.AsyncClient,
        url_template: str,
        zoom: int = 14,
        access_token: str = "",
        tile_size: int = 256,
    ):
        self.client = client
        self.url_template = url_template
        self.zoom = zoom
        self.access_token = access_token
        self.tile_size = tile_size

    def tile_url(self, tile: TilePixel) -> str:
        return self.url_template.format(z=tile.z, x=tile.x, y=tile.y, token=self.access_token)

    async def elevation_at(self, lon: float, lat: float) -> float:
        """
        Elevation in meters at one point. A failed fetch or decode gives 0.0,
        no retry.
        """
        tile = tile_for(lon, lat, self.zoom, self.tile_size)
        url = self.tile_url(tile)
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            return decode_elevation(response.content, tile.px, tile.py, self.tile_size)
        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.warning(f"Terrain tile {tile.z}/{tile.x}/{tile.y} failed: {e}")
            return 0.0

    async def sample_line(self, coords: Sequence[Sequence[float]], count: int) -> Optional[ElevationStats]:
        """
        Sample `count` equally spaced points along the line, one tile request
        per sample, all in flight at once.
        """
        points = sample_points(validate_coordinates(coords), count)
        if not points:
            return None

        elevations: List[float] = await asyncio.gather(
            *(self.elevation_at(lon, lat) for lon, lat in points)
        )
        logger.debug(f"Sampled {len(elevations)} elevations along route")
        return elevation_stats(elevations)
