"""
Event dispatcher

Routes the named map events (vehicleUp, positionUpdate, drawMission, ...)
to the session that owns the overlays.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..utils.geo import LatLng
from ..utils.logger import EventJournal
from .models import EventError, GeometryError, UnknownEventError, ValidationError
from .session import MapSession

logger = logging.getLogger(__name__)


# Event name -> parameter names, in positional order
EVENTS: Dict[str, Tuple[str, ...]] = {
    'vehicleUp': ('name', 'type'),
    'vehicleDown': ('name',),
    'positionUpdate': ('name', 'lat', 'lng', 'alt'),
    'batteryUpdate': ('name', 'level'),
    'headingUpdate': ('name', 'heading'),
    'cogUpdate': ('name', 'cog'),
    'speedUpdate': ('name', 'ground', 'air'),
    'throttleUpdate': ('name', 'throttle'),
    'modeUpdate': ('name', 'mode'),
    'drawMission': ('name', 'num', 'items'),
    'placeGuided': ('name', 'num', 'lat', 'lng'),
    'clearGuided': ('name',),
    'clearMission': ('name',),
    'drawPolygon': ('color', 'width', 'lats', 'lngs'),
    'drawCircle': ('color', 'width', 'lat', 'lng', 'radius'),
}


def parse_waypoints(items: Any) -> List[LatLng]:
    """
    Convert mission items to positions

    Each item is a {"lat": .., "lng": ..} mapping or a (lat, lng) pair.

    Raises:
        GeometryError: If an item has neither shape
    """
    if isinstance(items, (str, bytes)) or not isinstance(items, Sequence):
        raise GeometryError(f"mission items must be a list, got {type(items).__name__}")

    positions = []
    for i, item in enumerate(items):
        if isinstance(item, Mapping):
            if 'lat' not in item or 'lng' not in item:
                raise GeometryError(f"mission item {i}: missing 'lat' or 'lng'")
            positions.append(LatLng(item['lat'], item['lng']))
        elif isinstance(item, Sequence) and not isinstance(item, str) and len(item) == 2:
            positions.append(LatLng(item[0], item[1]))
        else:
            raise GeometryError(f"mission item {i}: expected {{lat, lng}}, got {item!r}")
    return positions


def parse_mission_number(num: Any) -> int:
    """Mission numbers are integers; integral floats (from JSON) are accepted"""
    if isinstance(num, bool):
        raise ValidationError(f"mission number must be an integer, got {num!r}")
    if isinstance(num, int):
        return num
    if isinstance(num, float) and num.is_integer():
        return int(num)
    raise ValidationError(f"mission number must be an integer, got {num!r}")


class Dispatcher:
    """
    Apply named events to a MapSession

    Events run one at a time, each to completion; callers sharing a
    dispatcher across threads must serialize calls themselves.
    """

    def __init__(self, session: MapSession, journal: Optional[EventJournal] = None):
        self.session = session
        self.journal = journal
        self.event_count = 0

        self._handlers: Dict[str, Callable[..., Any]] = {
            'vehicleUp': self._vehicle_up,
            'vehicleDown': self._vehicle_down,
            'positionUpdate': session.vehicles.update_position,
            'batteryUpdate': session.vehicles.update_battery,
            'headingUpdate': session.vehicles.update_heading,
            'cogUpdate': session.vehicles.update_course,
            'speedUpdate': session.vehicles.update_speeds,
            'throttleUpdate': session.vehicles.update_throttle,
            'modeUpdate': session.vehicles.update_mode,
            'drawMission': self._draw_mission,
            'placeGuided': self._place_guided,
            'clearGuided': session.guided.clear,
            'clearMission': session.missions.clear,
            'drawPolygon': session.fences.add_polygon,
            'drawCircle': session.fences.add_circle,
        }

    @staticmethod
    def calls() -> List[str]:
        return list(EVENTS)

    def dispatch(self, call: str, *args, **kwargs) -> Any:
        """
        Apply one event

        Arguments may be positional, in the order listed in EVENTS, or
        by parameter name.

        Raises:
            UnknownEventError: If `call` is not a map event
            EventError: If the arguments don't match the event's parameters
            MapError: Whatever the target operation rejects
        """
        params = EVENTS.get(call)
        if params is None:
            raise UnknownEventError(call)

        values = _bind(call, params, args, kwargs)
        if 'name' in params:
            name = values[params.index('name')]
            if not isinstance(name, str):
                raise EventError(f"{call}: 'name' must be a string, got {type(name).__name__}")
        logger.debug(f"{call}{tuple(values)}")

        result = self._handlers[call](*values)

        self.event_count += 1
        if self.journal is not None:
            self.journal.record(call, values)
        return result

    def dispatch_event(self, event: Mapping[str, Any]) -> Any:
        """
        Apply an event given as a message

        Accepted shapes:
            {"call": "positionUpdate", "args": ["A", 37.5, -122.0, 10]}
            {"call": "positionUpdate", "params": {"name": "A", "lat": ...}}
        """
        if not isinstance(event, Mapping):
            raise EventError(f"event must be an object, got {type(event).__name__}")

        call = event.get('call')
        if not isinstance(call, str):
            raise EventError("event is missing 'call'")

        args = event.get('args', [])
        params = event.get('params', {})
        if not isinstance(args, list):
            raise EventError("'args' must be a list")
        if not isinstance(params, Mapping):
            raise EventError("'params' must be an object")

        return self.dispatch(call, *args, **params)

    # ==================== Handlers ====================

    def _vehicle_up(self, name, vehicle_type):
        self.session.vehicles.up(name, vehicle_type)

    def _vehicle_down(self, name):
        self.session.vehicles.down(name)

    def _draw_mission(self, name, num, items):
        self.session.missions.draw(name, parse_mission_number(num), parse_waypoints(items))

    def _place_guided(self, name, num, lat, lng):
        self.session.guided.place(name, parse_mission_number(num), lat, lng)


def _bind(call: str, params: Tuple[str, ...],
          args: Sequence[Any], kwargs: Mapping[str, Any]) -> List[Any]:
    if len(args) > len(params):
        raise EventError(f"{call}: expected {len(params)} arguments, got {len(args)}")

    values = list(args)
    for param in params[len(args):]:
        if param not in kwargs:
            raise EventError(f"{call}: missing argument '{param}' "
                             f"(expects {', '.join(params)})")
        values.append(kwargs[param])

    unexpected = set(kwargs) - set(params[len(args):])
    if unexpected:
        raise EventError(f"{call}: unexpected argument(s) {', '.join(sorted(unexpected))}")

    return values
