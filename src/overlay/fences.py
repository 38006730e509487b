"""
Geofence overlay

Static polylines and circles, appended for the lifetime of a session.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence

from ..utils.geo import LatLng, is_finite_coordinate, pair_coordinates
from .models import GeometryError
from .surface import DrawingSurface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FenceShape:
    kind: str       # "polyline" or "circle"
    shape_id: int


class FenceOverlay:
    """Append-only collection of fence shapes"""

    def __init__(self, surface: DrawingSurface):
        self.surface = surface
        self._shapes: List[FenceShape] = []

    def __len__(self) -> int:
        return len(self._shapes)

    @property
    def shapes(self) -> List[FenceShape]:
        return list(self._shapes)

    def add_polygon(self, color: str, width: float,
                    lats: Sequence[float], lngs: Sequence[float]) -> FenceShape:
        """
        Draw a fence outline through the paired coordinates

        Raises:
            GeometryError: On mismatched lengths or non-finite values
        """
        try:
            path = pair_coordinates(lats, lngs)
        except (TypeError, ValueError) as e:
            raise GeometryError(f"fence polygon: {e}") from e

        for i, p in enumerate(path):
            if not is_finite_coordinate(p.lat, p.lng):
                raise GeometryError(f"fence polygon: vertex {i} is non-finite ({p.lat}, {p.lng})")
        _check_width(width)

        shape_id = self.surface.create_polyline(
            path, color=color, width=width, opacity=1.0, geodesic=True)
        shape = FenceShape("polyline", shape_id)
        self._shapes.append(shape)

        logger.info(f"Fence polygon added: {len(path)} vertices, color={color}")
        return shape

    def add_circle(self, color: str, width: float,
                   lat: float, lng: float, radius: float) -> FenceShape:
        """
        Draw an unfilled fence circle

        Args:
            radius: Meters

        Raises:
            GeometryError: On a non-finite center or a negative/non-finite radius
        """
        if not is_finite_coordinate(lat, lng):
            raise GeometryError(f"fence circle: non-finite center ({lat}, {lng})")
        if not _is_finite(radius) or radius < 0:
            raise GeometryError(f"fence circle: invalid radius {radius}")
        _check_width(width)

        shape_id = self.surface.create_circle(
            LatLng(lat, lng), radius,
            color=color, width=width, opacity=1.0, fill_opacity=0.0)
        shape = FenceShape("circle", shape_id)
        self._shapes.append(shape)

        logger.info(f"Fence circle added: r={radius}m, color={color}")
        return shape

    def clear(self):
        """Remove every fence shape (session teardown)"""
        for shape in self._shapes:
            if shape.kind == "circle":
                self.surface.remove_circle(shape.shape_id)
            else:
                self.surface.remove_polyline(shape.shape_id)
        if self._shapes:
            logger.info(f"Cleared {len(self._shapes)} fence shapes")
        self._shapes.clear()


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except (TypeError, OverflowError):
        return False


def _check_width(width: float):
    if not _is_finite(width) or width < 0:
        raise GeometryError(f"invalid stroke width {width}")
