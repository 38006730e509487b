"""
Map session

Owns every overlay for one map page: built at session start, closed at
session end.
"""

import logging
from typing import Any, Dict, Optional

from ..config import Config
from ..utils.geo import LatLng
from .colors import ColorAssigner
from .fences import FenceOverlay
from .guided import GuidedTargetOverlay
from .missions import MissionOverlay
from .models import VEHICLE_ICONS
from .surface import DrawingSurface, focus
from .vehicles import VehicleRegistry

logger = logging.getLogger(__name__)


class MapSession:
    """
    Vehicles, missions, guided targets and fences drawn on one surface

    Typical usage:
        session = MapSession(RecordingSurface())
        session.vehicles.up("A", "QUADROTOR")
        session.vehicles.update_position("A", 37.5, -122.0, 10)
        ...
        session.close()
    """

    def __init__(self, surface: DrawingSurface, config: Optional[Config] = None):
        if config is None:
            config = Config()
        self.config = config
        self.surface = surface

        map_cfg = config.map
        assets = config.assets

        self.colors = ColorAssigner(map_cfg.palette, assets.pin_base_url)
        self.missions = MissionOverlay(surface, self.colors, map_cfg.mission_path_width)
        self.guided = GuidedTargetOverlay(surface, self.colors)
        self.fences = FenceOverlay(surface)
        self.vehicles = VehicleRegistry(
            surface,
            self.missions,
            self.guided,
            icons={t: icon.with_base_url(assets.vehicle_icon_base_url)
                   for t, icon in VEHICLE_ICONS.items()},
            focus_zoom=map_cfg.focus_zoom,
            autonomous_mode=map_cfg.autonomous_mode,
            battery_icon_dir=assets.battery_icon_dir,
            battery_icon_size=(assets.battery_icon_width, assets.battery_icon_height),
        )

        self._closed = False

        surface.set_center(LatLng(map_cfg.center_lat, map_cfg.center_lng))
        surface.set_zoom(map_cfg.initial_zoom)
        surface.on_map_click(self._on_map_click)

        logger.info(f"Map session started at {map_cfg.center_lat}, {map_cfg.center_lng} "
                    f"(zoom {map_cfg.initial_zoom})")

    @property
    def closed(self) -> bool:
        return self._closed

    def _on_map_click(self, position: LatLng):
        focus(self.surface, position, self.config.map.focus_zoom)

    def close(self):
        """Tear down every vehicle (with cascades), mission, target and fence"""
        if self._closed:
            return

        self.vehicles.clear()
        # Missions/targets drawn for names that never came up
        self.missions.clear_all()
        self.guided.clear_all()
        self.fences.clear()

        self._closed = True
        logger.info("Map session closed")

    def status(self) -> Dict[str, Any]:
        """Summary of what the session currently owns"""
        missions = {}
        for name in self.missions.names():
            m = self.missions.get(name)
            missions[name] = {"num": m.num, "waypoints": [p.to_dict() for p in m.positions]}

        guided = {}
        for name in self.guided.names():
            t = self.guided.get(name)
            guided[name] = {"num": t.num, "position": t.position.to_dict()}

        return {
            "vehicles": {name: self.vehicles.get(name).to_dict() for name in self.vehicles.names()},
            "missions": missions,
            "guided": guided,
            "fences": len(self.fences),
        }
