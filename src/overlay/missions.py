"""
Mission overlay

Per-vehicle waypoint pins and the path connecting them.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..utils.geo import LatLng, drop_sentinels, is_finite_coordinate
from .colors import ColorAssigner
from .models import GeometryError, IconDescriptor
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

# Waypoint label sits on the pin head
PIN_LABEL_ANCHOR = (4, 29)
PIN_LABEL_CLASS = "waypoint"


@dataclass
class Mission:
    """A drawn mission: one pin per waypoint plus the connecting path"""
    name: str
    num: int
    positions: List[LatLng]
    pin_ids: List[int] = field(default_factory=list)
    path_id: Optional[int] = None

    @property
    def waypoint_count(self) -> int:
        return len(self.positions)


def validate_positions(positions: Sequence[LatLng]):
    """
    Reject non-finite coordinates

    Raises:
        GeometryError: On the first bad position
    """
    for i, p in enumerate(positions):
        if not is_finite_coordinate(p.lat, p.lng):
            raise GeometryError(f"waypoint {i}: non-finite coordinate ({p.lat}, {p.lng})")


class MissionOverlay:
    """Owns at most one drawn Mission per vehicle name"""

    def __init__(self, surface: DrawingSurface, colors: ColorAssigner,
                 path_width: int = 2):
        self.surface = surface
        self.colors = colors
        self.path_width = path_width
        self._missions: Dict[str, Mission] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._missions

    def __len__(self) -> int:
        return len(self._missions)

    def get(self, name: str) -> Optional[Mission]:
        return self._missions.get(name)

    def names(self) -> List[str]:
        return list(self._missions)

    def draw(self, name: str, num: int, waypoints: Sequence[LatLng]) -> Mission:
        """
        Draw a mission for `name`, replacing any previous one

        Unset (0, 0) waypoint slots are dropped before anything is drawn;
        pins are labeled 1..k over the remaining waypoints.

        Args:
            name: Owning vehicle name
            num: Mission number, selects color and pin icon
            waypoints: Ordered waypoint positions

        Returns:
            The new Mission

        Raises:
            GeometryError: If any waypoint is non-finite (nothing is changed)
        """
        validate_positions(waypoints)
        positions = drop_sentinels(waypoints)

        self.clear(name)

        pin_icon = IconDescriptor(self.colors.icon_for(num))
        mission = Mission(name=name, num=num, positions=positions)

        for i, position in enumerate(positions):
            pin_id = self.surface.create_marker(
                position,
                icon=pin_icon,
                label=str(i + 1),
                label_anchor=PIN_LABEL_ANCHOR,
                label_class=PIN_LABEL_CLASS,
                label_in_background=False,
            )
            mission.pin_ids.append(pin_id)

        mission.path_id = self.surface.create_polyline(
            positions,
            color=self.colors.color_for(num),
            width=self.path_width,
            opacity=1.0,
            geodesic=True,
            z_index=num,
        )

        self._missions[name] = mission
        logger.info(f"Mission {num} drawn for '{name}': "
                    f"{len(positions)} waypoints ({len(waypoints) - len(positions)} unset dropped)")
        return mission

    def clear(self, name: str) -> bool:
        """
        Remove the mission drawn for `name`

        Returns:
            True if a mission was removed, False if there was none
        """
        mission = self._missions.pop(name, None)
        if mission is None:
            return False

        for pin_id in mission.pin_ids:
            self.surface.remove_marker(pin_id)
        if mission.path_id is not None:
            self.surface.remove_polyline(mission.path_id)

        logger.info(f"Mission cleared for '{name}'")
        return True

    def clear_all(self):
        for name in list(self._missions):
            self.clear(name)
