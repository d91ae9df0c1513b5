# roastmyrun/metrics.py
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple
import math

EARTH_RADIUS_KM = 6371.0088
KM_TO_MILES = 0.621371

LonLat = Tuple[float, float]


@dataclass(frozen=True)
class ElevationStats:
    gain: float  # meters climbed
    loss: float  # meters descended (positive number)
    max: float
    min: float


@dataclass(frozen=True)
class RouteMetrics:
    distance: float  # km, full precision
    elevation: Optional[ElevationStats] = None
    duration: Optional[str] = None  # HH:MM:SS

    def with_elevation(self, elevation: Optional[ElevationStats]) -> "RouteMetrics":
        return replace(self, elevation=elevation)

    def with_duration(self, duration: Optional[str]) -> "RouteMetrics":
        return replace(self, duration=duration)

    def to_display(self) -> Dict:
        """
        Presentation form: distance rounded to 2 decimals in both km and miles.
        Rounding only happens here, the stored distance is never rounded.
        """
        return {
            "distance_km": round(self.distance, 2),
            "distance_miles": round(km_to_miles(self.distance), 2),
            "elevation": elevation_to_dict(self.elevation),
            "duration": self.duration,
        }


def elevation_to_dict(stats: Optional[ElevationStats]) -> Optional[Dict[str, float]]:
    if stats is None:
        return None
    return {
        "gain": round(stats.gain, 1),
        "loss": round(stats.loss, 1),
        "max": round(stats.max, 1),
        "min": round(stats.min, 1),
    }


def km_to_miles(km: float) -> float:
    return km * KM_TO_MILES


def haversine_km(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """
    Great-circle distance between 2 lon/lat points in kilometers.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    a = min(1.0, a)  # near-antipodal points can round past 1
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def wrap_longitude(lon: float) -> float:
    # map views report unwrapped longitudes on world copies (e.g. 180.1)
    if -180.0 <= lon <= 180.0:
        return lon
    return ((lon + 180.0) % 360.0) - 180.0


def validate_coordinates(coords: Sequence[Sequence[float]]) -> List[LonLat]:
    """
    Check a drawn line and return it as (lon, lat) tuples.

    Points may carry a third value (altitude) which is ignored.
    Raises ValueError on anything that isn't a usable position.
    """
    points: List[LonLat] = []
    for i, c in enumerate(coords):
        if not isinstance(c, (list, tuple)) or len(c) not in (2, 3):
            raise ValueError(f"point {i} is not a [lon, lat] pair: {c!r}")
        lon, lat = c[0], c[1]
        for v in (lon, lat):
            if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
                raise ValueError(f"point {i} has a non-numeric coordinate: {c!r}")
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"point {i} latitude out of range: {lat}")
        points.append((wrap_longitude(float(lon)), float(lat)))
    return points


def line_length_km(coords: Sequence[LonLat]) -> float:
    if len(coords) < 2:
        return 0.0

    total_km = 0.0
    for p1, p2 in zip(coords[:-1], coords[1:]):
        total_km += haversine_km(p1[0], p1[1], p2[0], p2[1])
    return total_km


def calculate_route_metrics(
    coords: Sequence[Sequence[float]],
    duration: Optional[str] = None,
) -> Optional[RouteMetrics]:
    """
    Metrics for the currently drawn line.

    No geometry -> None, a single point -> distance 0.
    """
    points = validate_coordinates(coords)
    if not points:
        return None
    if len(points) == 1:
        return RouteMetrics(distance=0.0, duration=duration)
    return RouteMetrics(distance=line_length_km(points), duration=duration)


def _interpolate(p1: LonLat, p2: LonLat, fraction: float) -> LonLat:
    """
    Point at `fraction` of the way from p1 to p2 along the great circle.
    """
    lon1, lat1 = math.radians(p1[0]), math.radians(p1[1])
    lon2, lat2 = math.radians(p2[0]), math.radians(p2[1])

    delta = haversine_km(p1[0], p1[1], p2[0], p2[1]) / EARTH_RADIUS_KM
    if delta == 0.0:
        return p1

    a = math.sin((1 - fraction) * delta) / math.sin(delta)
    b = math.sin(fraction * delta) / math.sin(delta)

    x = a * math.cos(lat1) * math.cos(lon1) + b * math.cos(lat2) * math.cos(lon2)
    y = a * math.cos(lat1) * math.sin(lon1) + b * math.cos(lat2) * math.sin(lon2)
    z = a * math.sin(lat1) + b * math.sin(lat2)

    lat = math.atan2(z, math.sqrt(x * x + y * y))
    lon = math.atan2(y, x)
    return math.degrees(lon), math.degrees(lat)


def point_along(coords: Sequence[LonLat], distance_km: float) -> LonLat:
    """
    Point `distance_km` along the line, clamped to its ends.
    """
    if not coords:
        raise ValueError("empty line")

    if distance_km <= 0:
        return coords[0]

    travelled = 0.0
    for p1, p2 in zip(coords[:-1], coords[1:]):
        seg_km = haversine_km(p1[0], p1[1], p2[0], p2[1])
        if seg_km > 0 and travelled + seg_km >= distance_km:
            return _interpolate(p1, p2, (distance_km - travelled) / seg_km)
        travelled += seg_km

    return coords[-1]


def sample_points(coords: Sequence[LonLat], count: int) -> List[LonLat]:
    """
    `count` equally spaced points along the line, both endpoints included.
    """
    if count < 1:
        raise ValueError("count must be >= 1")
    if not coords:
        return []
    if len(coords) == 1 or count == 1:
        return [coords[0]]

    total = line_length_km(coords)
    step = total / (count - 1)
    return [point_along(coords, i * step) for i in range(count)]


def elevation_stats(samples: Sequence[float]) -> Optional[ElevationStats]:
    """
    Linear scan over elevation samples (meters).

    Positive deltas go into gain, negative ones (absolute) into loss.
    """
    if not samples:
        return None

    gain = 0.0
    loss = 0.0
    highest = lowest = samples[0]

    for prev, cur in zip(samples[:-1], samples[1:]):
        diff = cur - prev
        if diff > 0:
            gain += diff
        else:
            loss += -diff
        highest = max(highest, cur)
        lowest = min(lowest, cur)

    return ElevationStats(gain=gain, loss=loss, max=highest, min=lowest)
