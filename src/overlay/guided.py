"""
Guided target overlay

One operator-placed "G" marker per vehicle.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..utils.geo import LatLng, is_finite_coordinate
from .colors import ColorAssigner
from .models import GeometryError, IconDescriptor
from .missions import PIN_LABEL_ANCHOR, PIN_LABEL_CLASS
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

GUIDED_LABEL = "G"


@dataclass
class GuidedTarget:
    name: str
    num: int
    marker_id: int
    position: LatLng


class GuidedTargetOverlay:
    """Owns at most one guided target per vehicle name"""

    def __init__(self, surface: DrawingSurface, colors: ColorAssigner):
        self.surface = surface
        self.colors = colors
        self._targets: Dict[str, GuidedTarget] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._targets

    def __len__(self) -> int:
        return len(self._targets)

    def get(self, name: str) -> Optional[GuidedTarget]:
        return self._targets.get(name)

    def names(self) -> List[str]:
        return list(self._targets)

    def place(self, name: str, num: int, lat: float, lng: float) -> GuidedTarget:
        """
        Create the guided target for `name`, or move the existing one

        An existing target keeps its marker and its icon; `num` only
        matters when the target is first created.

        Raises:
            GeometryError: If the position is non-finite
        """
        if not is_finite_coordinate(lat, lng):
            raise GeometryError(f"guided target: non-finite coordinate ({lat}, {lng})")

        position = LatLng(lat, lng)
        target = self._targets.get(name)

        if target is not None:
            self.surface.move_marker(target.marker_id, position)
            target.position = position
            logger.debug(f"Guided target for '{name}' moved to {position.to_url_value()}")
            return target

        marker_id = self.surface.create_marker(
            position,
            icon=IconDescriptor(self.colors.icon_for(num)),
            label=GUIDED_LABEL,
            label_anchor=PIN_LABEL_ANCHOR,
            label_class=PIN_LABEL_CLASS,
            label_in_background=False,
        )
        target = GuidedTarget(name=name, num=num, marker_id=marker_id, position=position)
        self._targets[name] = target
        logger.info(f"Guided target placed for '{name}' at {position.to_url_value()}")
        return target

    def clear(self, name: str) -> bool:
        """Remove the guided target for `name`, if any"""
        target = self._targets.pop(name, None)
        if target is None:
            return False

        self.surface.remove_marker(target.marker_id)
        logger.info(f"Guided target cleared for '{name}'")
        return True

    def clear_all(self):
        for name in list(self._targets):
            self.clear(name)
