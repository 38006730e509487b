"""
Vehicle registry

Tracks live vehicles by name and keeps each vehicle's marker, label and
tooltip in step with incoming telemetry.

Every per-field update addressed to an unregistered name raises
UnknownVehicleError; arguments are validated before anything is changed.
"""

import html
import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..utils.formatting import format_number, round_half_up
from ..utils.geo import LatLng, SENTINEL, is_finite_coordinate
from .guided import GuidedTargetOverlay
from .missions import MissionOverlay
from .models import (
    GeometryError,
    IconDescriptor,
    UnknownVehicleError,
    ValidationError,
    VehicleType,
    VEHICLE_ICONS,
)
from .surface import DrawingSurface, focus

logger = logging.getLogger(__name__)

VEHICLE_LABEL_ANCHOR = (-30, 25)
VEHICLE_LABEL_CLASS = "vehicle"


@dataclass
class Vehicle:
    """Live vehicle and its latest telemetry"""
    name: str
    vehicle_type: VehicleType
    marker_id: int
    position: LatLng = SENTINEL
    altitude: float = 0.0
    heading: float = 0.0
    cog: float = 0.0
    groundspeed: float = 0.0
    airspeed: float = 0.0
    battery_level: float = 0.0
    battery_image: str = ""
    mode: str = ""
    throttle: float = 0.0

    @property
    def has_fix(self) -> bool:
        """False until the first real (non-sentinel) position arrives"""
        return not self.position.is_sentinel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.vehicle_type.value,
            "marker_id": self.marker_id,
            "position": self.position.to_dict() if self.has_fix else None,
            "altitude": self.altitude,
            "heading": self.heading,
            "cog": self.cog,
            "groundspeed": self.groundspeed,
            "airspeed": self.airspeed,
            "battery_level": self.battery_level,
            "battery_image": self.battery_image,
            "mode": self.mode,
            "throttle": self.throttle,
        }


@dataclass(frozen=True)
class VehicleLabel:
    """Marker label (HTML table) and hover tooltip (plain text)"""
    content: str
    title: str


def battery_icon(level: float, icon_dir: str = "battery") -> str:
    """
    Battery gauge image for a charge level

    Levels are bucketed to the nearest 10% (47 -> "battery/50.png").
    """
    bucket = int(round_half_up(level / 10.0)) * 10
    bucket = max(0, min(100, bucket))
    return f"{icon_dir}/{bucket}.png"


def build_label(vehicle: Vehicle, battery_icon_size: Tuple[int, int] = (21, 10)) -> VehicleLabel:
    """Render the label table and tooltip for a vehicle"""
    name = html.escape(vehicle.name)
    mode = html.escape(vehicle.mode)

    alt = format_number(vehicle.altitude, 2)
    gs = format_number(vehicle.groundspeed, 2)
    hdg = format_number(vehicle.heading, 0)
    thr = format_number(vehicle.throttle, 0)
    batt = format_number(vehicle.battery_level)
    width, height = battery_icon_size

    content = (
        '<table border=0 cellpadding=0>'
        f'<tr><td colspan=4>{name}</td></tr>'
        f'<tr><td>alt:</td><td>{alt}m</td><td>batt:</td><td>{batt}% '
        f'<img src="{vehicle.battery_image}" align=top width={width} height={height}></td></tr>'
        f'<tr><td>sp:</td><td>{gs}m/s</td><td>mode:</td><td>{mode}</td></tr>'
        f'<tr><td>hd:</td><td>{hdg}&deg;</td><td>thr:</td><td>{thr}%</td></tr>'
        '</table>'
    )

    title = "\n".join([
        vehicle.name,
        f"location: {vehicle.position.to_url_value(6)}",
        f"altitude: {alt}m",
        f"groundspeed: {gs}m/s",
        f"airspeed: {format_number(vehicle.airspeed, 2)}m/s",
        f"heading: {format_number(vehicle.heading, 2)}°",
        f"course: {format_number(vehicle.cog, 2)}°",
        f"battery: {batt}%",
        f"throttle: {format_number(vehicle.throttle, 2)}%",
    ])

    return VehicleLabel(content=content, title=title)


def _require_finite(field_name: str, value: float):
    try:
        ok = math.isfinite(value)
    except (TypeError, OverflowError):
        ok = False
    if not ok:
        raise ValidationError(f"{field_name}: expected a finite number, got {value!r}")


class VehicleRegistry:
    """
    Live vehicles keyed by name

    Removing a vehicle cascades to its mission and guided target.
    """

    def __init__(self, surface: DrawingSurface,
                 missions: MissionOverlay,
                 guided: GuidedTargetOverlay,
                 icons: Optional[Mapping[VehicleType, IconDescriptor]] = None,
                 focus_zoom: int = 16,
                 autonomous_mode: str = "AUTO",
                 battery_icon_dir: str = "battery",
                 battery_icon_size: Tuple[int, int] = (21, 10)):
        self.surface = surface
        self.missions = missions
        self.guided = guided
        self.icons = dict(icons) if icons is not None else dict(VEHICLE_ICONS)
        self.focus_zoom = focus_zoom
        self.autonomous_mode = autonomous_mode
        self.battery_icon_dir = battery_icon_dir
        self.battery_icon_size = battery_icon_size

        self._vehicles: Dict[str, Vehicle] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._vehicles

    def __len__(self) -> int:
        return len(self._vehicles)

    def names(self) -> List[str]:
        return list(self._vehicles)

    def get(self, name: str) -> Vehicle:
        """
        Look up a live vehicle

        Raises:
            UnknownVehicleError: If `name` is not registered
        """
        try:
            return self._vehicles[name]
        except KeyError:
            raise UnknownVehicleError(name) from None

    # ==================== Lifecycle ====================

    def up(self, name: str, vehicle_type) -> Vehicle:
        """
        Register a vehicle with zeroed telemetry and no fix

        A vehicle already registered under `name` has its marker removed
        first. Its mission and guided target belong to the name and stay.

        Raises:
            ValidationError: If `vehicle_type` is unknown
        """
        vtype = VehicleType.parse(vehicle_type)
        icon = self.icons.get(vtype)
        if icon is None:
            raise ValidationError(f"No icon configured for vehicle type {vtype.value}")

        previous = self._vehicles.pop(name, None)
        if previous is not None:
            self.surface.remove_marker(previous.marker_id)
            logger.warning(f"Vehicle '{name}' re-registered, replacing previous marker")

        marker_id = self.surface.create_marker(
            SENTINEL,
            icon=icon,
            title=name,
            label=name,
            label_anchor=VEHICLE_LABEL_ANCHOR,
            label_class=VEHICLE_LABEL_CLASS,
        )
        vehicle = Vehicle(
            name=name,
            vehicle_type=vtype,
            marker_id=marker_id,
            battery_image=battery_icon(100, self.battery_icon_dir),
        )
        self._vehicles[name] = vehicle
        self.surface.on_marker_click(marker_id, lambda: self._on_marker_click(name))

        logger.info(f"Vehicle up: '{name}' ({vtype.value})")
        return vehicle

    def down(self, name: str) -> bool:
        """
        Remove a vehicle with its mission and guided target

        Unknown names are ignored, so repeated calls are safe. Missions or
        targets drawn for a name that was never brought up are left alone.

        Returns:
            True if a vehicle was removed
        """
        vehicle = self._vehicles.pop(name, None)
        if vehicle is None:
            return False

        self.surface.remove_marker(vehicle.marker_id)
        self.missions.clear(name)
        self.guided.clear(name)
        logger.info(f"Vehicle down: '{name}'")
        return True

    def clear(self):
        for name in list(self._vehicles):
            self.down(name)

    # ==================== Telemetry ====================

    def update_position(self, name: str, lat: float, lng: float, alt: float) -> bool:
        """
        Move the vehicle marker

        A (0, 0) position means "no fix yet" and is ignored. The first real
        fix recenters the map on the vehicle; later fixes never do.

        Returns:
            True if this update was the vehicle's first fix
        """
        vehicle = self.get(name)
        if not is_finite_coordinate(lat, lng):
            raise GeometryError(f"position for '{name}': non-finite coordinate ({lat}, {lng})")
        _require_finite("altitude", alt)

        if lat == 0 and lng == 0:
            return False

        first_fix = not vehicle.has_fix
        position = LatLng(lat, lng)
        label = self._render(vehicle, position=position, altitude=alt)

        self.surface.move_marker(vehicle.marker_id, position)
        self._commit(vehicle, label, position=position, altitude=alt)

        if first_fix:
            self.surface.set_center(position)
            logger.info(f"First fix for '{name}' at {position.to_url_value()}, recentering")

        return first_fix

    def update_battery(self, name: str, level: float):
        vehicle = self.get(name)
        _require_finite("battery level", level)

        self._update(vehicle, battery_level=level,
                     battery_image=battery_icon(level, self.battery_icon_dir))

    def update_speeds(self, name: str, groundspeed: float, airspeed: float):
        vehicle = self.get(name)
        _require_finite("groundspeed", groundspeed)
        _require_finite("airspeed", airspeed)

        self._update(vehicle, groundspeed=groundspeed, airspeed=airspeed)

    def update_heading(self, name: str, heading: float):
        vehicle = self.get(name)
        _require_finite("heading", heading)

        self._update(vehicle, heading=heading)

    def update_course(self, name: str, cog: float):
        vehicle = self.get(name)
        _require_finite("course", cog)

        self._update(vehicle, cog=cog)

    def update_throttle(self, name: str, throttle: float):
        vehicle = self.get(name)
        _require_finite("throttle", throttle)

        self._update(vehicle, throttle=throttle)

    def update_mode(self, name: str, mode: str):
        """
        Set the flight mode

        Switching to the autonomous mode removes the vehicle's guided
        target: the vehicle is back on its own mission.
        """
        vehicle = self.get(name)
        mode = "" if mode is None else str(mode)

        previous = vehicle.mode
        self._update(vehicle, mode=mode)

        if mode != previous:
            logger.info(f"Vehicle '{name}' mode {previous or '-'} -> {mode}")
        if mode == self.autonomous_mode:
            self.guided.clear(name)

    # ==================== Rendering ====================

    def label(self, vehicle: Vehicle) -> VehicleLabel:
        return build_label(vehicle, self.battery_icon_size)

    def _render(self, vehicle: Vehicle, **changes) -> VehicleLabel:
        # Renders against a copy; the live record changes only in _commit
        return self.label(replace(vehicle, **changes))

    def _commit(self, vehicle: Vehicle, label: VehicleLabel, **changes):
        for field_name, value in changes.items():
            setattr(vehicle, field_name, value)
        self.surface.set_marker_label(vehicle.marker_id, label.content)
        self.surface.set_marker_title(vehicle.marker_id, label.title)

    def _update(self, vehicle: Vehicle, **changes):
        self._commit(vehicle, self._render(vehicle, **changes), **changes)

    def _on_marker_click(self, name: str):
        vehicle = self._vehicles.get(name)
        # Never pan to the origin for a vehicle without a fix
        if vehicle is None or not vehicle.has_fix:
            return
        focus(self.surface, vehicle.position, self.focus_zoom)
