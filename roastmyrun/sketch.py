# roastmyrun/sketch.py
from typing import Callable, List, Optional, Sequence, Tuple
import logging

from .duration import normalize_duration
from .metrics import RouteMetrics, calculate_route_metrics
from .terrain import TerrainSampler

logger = logging.getLogger(__name__)

MetricsCallback = Callable[[Optional[RouteMetrics]], None]


class RouteSketch:
    """
    The drawn route: one line string edited point by point.

    Every change recomputes the metrics and hands them to `on_metrics_change`
    (None when there is nothing drawn or the geometry is unusable).
    """

    def __init__(self, on_metrics_change: MetricsCallback):
        self.on_metrics_change = on_metrics_change
        self.metrics: Optional[RouteMetrics] = None
        self._points: List[Tuple[float, ...]] = []
        self._duration: Optional[str] = None
        # bumped on every geometry change, lets late elevation results be dropped
        self._revision = 0

    @property
    def points(self) -> Tuple[Tuple[float, ...], ...]:
        return tuple(self._points)

    @property
    def revision(self) -> int:
        return self._revision

    def _emit(self, metrics: Optional[RouteMetrics]) -> None:
        self.metrics = metrics
        self.on_metrics_change(metrics)

    def add_point(self, lon: float, lat: float) -> None:
        self._points.append((lon, lat))
        self._revision += 1
        self.recalculate()

    def set_points(self, coords: Sequence[Sequence[float]]) -> None:
        self._points = [tuple(c) for c in coords]
        self._revision += 1
        self.recalculate()

    def set_duration(self, text: Optional[str]) -> None:
        self._duration = normalize_duration(text)
        if self.metrics is not None:
            self._emit(self.metrics.with_duration(self._duration))

    def recalculate(self) -> None:
        try:
            metrics = calculate_route_metrics(self._points, duration=self._duration)
        except ValueError as e:
            logger.warning(f"Could not calculate route metrics: {e}")
            metrics = None
        self._emit(metrics)

    def clear(self) -> None:
        """
        Delete the whole line. Always notifies exactly once, with None.
        """
        self._points = []
        self._revision += 1
        self._emit(None)

    async def refresh_elevation(self, sampler: TerrainSampler, count: int) -> Optional[RouteMetrics]:
        """
        Sample terrain along the current line and attach the result.

        If the line was edited while tiles were loading the result belongs to
        an old line, so it is dropped and nobody is notified.
        """
        if self.metrics is None:
            return None

        started_at = self._revision
        try:
            elevation = await sampler.sample_line(self._points, count)
        except ValueError as e:
            logger.warning(f"Could not sample elevation: {e}")
            return None

        if started_at != self._revision or self.metrics is None:
            logger.debug(f"Dropping stale elevation for revision {started_at} (now {self._revision})")
            return None

        self._emit(self.metrics.with_elevation(elevation))
        return self.metrics
