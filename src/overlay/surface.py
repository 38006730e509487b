"""
Drawing surface

The overlays never draw directly: they issue primitives against a
DrawingSurface. A browser map, a desktop widget or the in-memory
RecordingSurface below can sit behind it.
"""

import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..utils.geo import LatLng
from .models import IconDescriptor

ClickHandler = Callable[[LatLng], None]


class DrawingSurface(ABC):
    """Primitives the map overlays need from a map widget"""

    # ==================== Markers ====================

    @abstractmethod
    def create_marker(self, position: LatLng, *,
                      icon: Optional[IconDescriptor] = None,
                      title: str = "",
                      label: str = "",
                      label_anchor: Optional[Tuple[int, int]] = None,
                      label_class: str = "",
                      label_in_background: bool = True) -> int:
        """Place a marker and return its handle"""

    @abstractmethod
    def move_marker(self, marker_id: int, position: LatLng):
        pass

    @abstractmethod
    def get_marker_position(self, marker_id: int) -> LatLng:
        pass

    @abstractmethod
    def set_marker_label(self, marker_id: int, content: str):
        pass

    @abstractmethod
    def set_marker_title(self, marker_id: int, title: str):
        pass

    @abstractmethod
    def set_marker_icon(self, marker_id: int, icon: IconDescriptor):
        pass

    @abstractmethod
    def remove_marker(self, marker_id: int):
        pass

    # ==================== Shapes ====================

    @abstractmethod
    def create_polyline(self, path: Sequence[LatLng], *,
                        color: str,
                        width: float,
                        opacity: float = 1.0,
                        geodesic: bool = True,
                        z_index: Optional[int] = None) -> int:
        pass

    @abstractmethod
    def remove_polyline(self, polyline_id: int):
        pass

    @abstractmethod
    def create_circle(self, center: LatLng, radius: float, *,
                      color: str,
                      width: float,
                      opacity: float = 1.0,
                      fill_opacity: float = 0.0) -> int:
        pass

    @abstractmethod
    def remove_circle(self, circle_id: int):
        pass

    # ==================== Viewport ====================

    @abstractmethod
    def get_center(self) -> LatLng:
        pass

    @abstractmethod
    def set_center(self, position: LatLng):
        pass

    @abstractmethod
    def get_zoom(self) -> int:
        pass

    @abstractmethod
    def set_zoom(self, zoom: int):
        pass

    # ==================== Events ====================

    @abstractmethod
    def on_marker_click(self, marker_id: int, handler: Callable[[], None]):
        pass

    @abstractmethod
    def on_map_click(self, handler: ClickHandler):
        pass


def focus(surface: DrawingSurface, position: LatLng, min_zoom: int):
    """Center the viewport on `position`, zooming in to at least `min_zoom`"""
    surface.set_center(position)
    if surface.get_zoom() < min_zoom:
        surface.set_zoom(min_zoom)


@dataclass
class MarkerState:
    position: LatLng
    icon: Optional[IconDescriptor]
    title: str
    label: str
    label_anchor: Optional[Tuple[int, int]]
    label_class: str
    label_in_background: bool
    on_click: Optional[Callable[[], None]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position.to_dict(),
            "icon": self.icon.to_dict() if self.icon else None,
            "title": self.title,
            "label": self.label,
            "label_anchor": list(self.label_anchor) if self.label_anchor else None,
            "label_class": self.label_class,
            "label_in_background": self.label_in_background,
        }


@dataclass
class PolylineState:
    path: List[LatLng]
    color: str
    width: float
    opacity: float
    geodesic: bool
    z_index: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": [p.to_dict() for p in self.path],
            "color": self.color,
            "width": self.width,
            "opacity": self.opacity,
            "geodesic": self.geodesic,
            "z_index": self.z_index,
        }


@dataclass
class CircleState:
    center: LatLng
    radius: float
    color: str
    width: float
    opacity: float
    fill_opacity: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "center": self.center.to_dict(),
            "radius": self.radius,
            "color": self.color,
            "width": self.width,
            "opacity": self.opacity,
            "fill_opacity": self.fill_opacity,
        }


class RecordingSurface(DrawingSurface):
    """
    In-memory drawing surface

    Keeps the full drawn state and a log of every primitive call
    (`calls`, as (primitive, *args) tuples). The HTTP server serves its
    snapshot to browser clients; tests assert against it directly.
    """

    def __init__(self, center: LatLng = LatLng(0.0, 0.0), zoom: int = 0):
        self.markers: Dict[int, MarkerState] = {}
        self.polylines: Dict[int, PolylineState] = {}
        self.circles: Dict[int, CircleState] = {}
        self.center = center
        self.zoom = zoom
        self.calls: List[Tuple[Any, ...]] = []

        self._ids = itertools.count(1)
        self._map_click_handlers: List[ClickHandler] = []

    def _marker(self, marker_id: int) -> MarkerState:
        try:
            return self.markers[marker_id]
        except KeyError:
            raise KeyError(f"No marker with id {marker_id}") from None

    # ==================== Markers ====================

    def create_marker(self, position, *, icon=None, title="", label="",
                      label_anchor=None, label_class="", label_in_background=True):
        marker_id = next(self._ids)
        self.markers[marker_id] = MarkerState(
            position=position,
            icon=icon,
            title=title,
            label=label,
            label_anchor=label_anchor,
            label_class=label_class,
            label_in_background=label_in_background,
        )
        self.calls.append(("create_marker", marker_id, position))
        return marker_id

    def move_marker(self, marker_id, position):
        self._marker(marker_id).position = position
        self.calls.append(("move_marker", marker_id, position))

    def get_marker_position(self, marker_id):
        return self._marker(marker_id).position

    def set_marker_label(self, marker_id, content):
        self._marker(marker_id).label = content
        self.calls.append(("set_marker_label", marker_id))

    def set_marker_title(self, marker_id, title):
        self._marker(marker_id).title = title
        self.calls.append(("set_marker_title", marker_id))

    def set_marker_icon(self, marker_id, icon):
        self._marker(marker_id).icon = icon
        self.calls.append(("set_marker_icon", marker_id, icon))

    def remove_marker(self, marker_id):
        self.markers.pop(marker_id, None)
        self.calls.append(("remove_marker", marker_id))

    # ==================== Shapes ====================

    def create_polyline(self, path, *, color, width, opacity=1.0, geodesic=True, z_index=None):
        polyline_id = next(self._ids)
        self.polylines[polyline_id] = PolylineState(
            list(path), color, width, opacity, geodesic, z_index)
        self.calls.append(("create_polyline", polyline_id))
        return polyline_id

    def remove_polyline(self, polyline_id):
        self.polylines.pop(polyline_id, None)
        self.calls.append(("remove_polyline", polyline_id))

    def create_circle(self, center, radius, *, color, width, opacity=1.0, fill_opacity=0.0):
        circle_id = next(self._ids)
        self.circles[circle_id] = CircleState(center, radius, color, width, opacity, fill_opacity)
        self.calls.append(("create_circle", circle_id))
        return circle_id

    def remove_circle(self, circle_id):
        self.circles.pop(circle_id, None)
        self.calls.append(("remove_circle", circle_id))

    # ==================== Viewport ====================

    def get_center(self):
        return self.center

    def set_center(self, position):
        self.center = position
        self.calls.append(("set_center", position))

    def get_zoom(self):
        return self.zoom

    def set_zoom(self, zoom):
        self.zoom = zoom
        self.calls.append(("set_zoom", zoom))

    # ==================== Events ====================

    def on_marker_click(self, marker_id, handler):
        self._marker(marker_id).on_click = handler

    def on_map_click(self, handler):
        self._map_click_handlers.append(handler)

    def click_marker(self, marker_id: int):
        """Simulate a user click on a marker"""
        handler = self._marker(marker_id).on_click
        if handler is not None:
            handler()

    def click_map(self, position: LatLng):
        """Simulate a user click on the map background"""
        for handler in self._map_click_handlers:
            handler(position)

    # ==================== Inspection ====================

    def count_calls(self, primitive: str) -> int:
        return sum(1 for call in self.calls if call[0] == primitive)

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view of everything currently drawn"""
        return {
            "viewport": {"center": self.center.to_dict(), "zoom": self.zoom},
            "markers": {str(k): m.to_dict() for k, m in self.markers.items()},
            "polylines": {str(k): p.to_dict() for k, p in self.polylines.items()},
            "circles": {str(k): c.to_dict() for k, c in self.circles.items()},
        }
