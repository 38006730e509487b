"""
Map overlay module

Live vehicle markers, mission paths, guided targets and geofences,
projected onto a drawing surface from a stream of named events.
"""

from .models import (
    MapError,
    UnknownVehicleError,
    GeometryError,
    ValidationError,
    EventError,
    UnknownEventError,
    VehicleType,
    IconDescriptor,
    VEHICLE_ICONS,
)
from .colors import ColorAssigner
from .surface import DrawingSurface, RecordingSurface
from .missions import Mission, MissionOverlay
from .guided import GuidedTarget, GuidedTargetOverlay
from .fences import FenceOverlay, FenceShape
from .vehicles import Vehicle, VehicleLabel, VehicleRegistry, battery_icon, build_label
from .session import MapSession
from .dispatcher import Dispatcher, EVENTS

__all__ = [
    # Errors
    'MapError',
    'UnknownVehicleError',
    'GeometryError',
    'ValidationError',
    'EventError',
    'UnknownEventError',
    # Models
    'VehicleType',
    'IconDescriptor',
    'VEHICLE_ICONS',
    # Drawing
    'DrawingSurface',
    'RecordingSurface',
    'ColorAssigner',
    # Overlays
    'Mission',
    'MissionOverlay',
    'GuidedTarget',
    'GuidedTargetOverlay',
    'FenceOverlay',
    'FenceShape',
    'Vehicle',
    'VehicleLabel',
    'VehicleRegistry',
    'battery_icon',
    'build_label',
    # Session
    'MapSession',
    'Dispatcher',
    'EVENTS',
]
