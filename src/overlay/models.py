"""
Map overlay models

Vehicle kinds, icon descriptors and the error taxonomy shared by the
overlays.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class MapError(Exception):
    """Base class for rejected map updates"""
    pass


class UnknownVehicleError(MapError, KeyError):
    """Raised when an update addresses a vehicle that is not registered"""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown vehicle '{self.name}'"


class GeometryError(MapError, ValueError):
    """Raised for malformed coordinates (non-finite, mismatched lengths)"""
    pass


class ValidationError(MapError, ValueError):
    """Raised when a non-geometric argument is invalid"""
    pass


class VehicleType(Enum):
    """Vehicle kinds the map knows how to draw"""
    QUADROTOR = "QUADROTOR"
    GROUND_ROVER = "GROUND_ROVER"
    FIXED_WING = "FIXED_WING"
    SURFACE_BOAT = "SURFACE_BOAT"

    @classmethod
    def parse(cls, value: Any) -> 'VehicleType':
        """
        Resolve a type from its name

        Raises:
            ValidationError: If the name is not a known vehicle type
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            known = ", ".join(t.value for t in cls)
            raise ValidationError(f"Unknown vehicle type '{value}' (expected one of {known})")


@dataclass(frozen=True)
class IconDescriptor:
    """Marker icon: image url, optional anchor point and rotation"""
    url: str
    anchor: Optional[Tuple[int, int]] = None
    rotation: Optional[float] = None

    def with_base_url(self, base_url: str) -> 'IconDescriptor':
        if not base_url:
            return self
        return IconDescriptor(base_url + self.url, self.anchor, self.rotation)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"url": self.url}
        if self.anchor is not None:
            d["anchor"] = list(self.anchor)
        if self.rotation is not None:
            d["rotation"] = self.rotation
        return d


VEHICLE_ICONS: Dict[VehicleType, IconDescriptor] = {
    VehicleType.QUADROTOR: IconDescriptor('quadcopter-transparent-44.png', anchor=(22, 22), rotation=25),
    VehicleType.GROUND_ROVER: IconDescriptor('rover-transparent-small.png'),
    VehicleType.FIXED_WING: IconDescriptor('plane-transparent.png', anchor=(22, 22)),
    VehicleType.SURFACE_BOAT: IconDescriptor('speedboat-transparent.png'),
}


class EventError(MapError, ValueError):
    """Raised when an inbound event is malformed (bad arity, bad shape)"""
    pass


class UnknownEventError(EventError):
    """Raised for an event name outside the map's event API"""

    def __init__(self, call: str):
        super().__init__(f"Unknown event '{call}'")
        self.call = call
