"""
Tests for the event dispatcher

Exercises the named event API end to end on a recording surface.
"""

import json
import pytest

from src.overlay import (
    Dispatcher,
    EVENTS,
    EventError,
    GeometryError,
    UnknownEventError,
    UnknownVehicleError,
    ValidationError,
)
from src.overlay.dispatcher import parse_mission_number, parse_waypoints
from src.utils.geo import LatLng, SENTINEL
from src.utils.logger import EventJournal


class TestDispatch:
    """Test routing of named events"""

    def test_first_fix_sequence(self, dispatcher, session, surface):
        """positionUpdate recenters exactly once, on the first real fix"""
        dispatcher.dispatch("vehicleUp", "A", "QUADROTOR")
        marker_id = session.vehicles.get("A").marker_id
        before = surface.count_calls("set_center")

        dispatcher.dispatch("positionUpdate", "A", 0, 0, 10)
        assert surface.markers[marker_id].position == SENTINEL
        assert surface.count_calls("set_center") == before

        dispatcher.dispatch("positionUpdate", "A", 37.5, -122.0, 10)
        assert surface.markers[marker_id].position == LatLng(37.5, -122.0)
        assert surface.count_calls("set_center") == before + 1

        dispatcher.dispatch("positionUpdate", "A", 37.6, -122.0, 12)
        assert surface.markers[marker_id].position == LatLng(37.6, -122.0)
        assert surface.count_calls("set_center") == before + 1

    def test_full_session(self, dispatcher, session, surface):
        """Every event in the API routes to its operation"""
        dispatcher.dispatch("vehicleUp", "A", "QUADROTOR")
        dispatcher.dispatch("positionUpdate", "A", 37.5, -122.0, 10)
        dispatcher.dispatch("batteryUpdate", "A", 47)
        dispatcher.dispatch("headingUpdate", "A", 12.345)
        dispatcher.dispatch("cogUpdate", "A", 13.5)
        dispatcher.dispatch("speedUpdate", "A", 5.0, 6.0)
        dispatcher.dispatch("throttleUpdate", "A", 40)
        dispatcher.dispatch("modeUpdate", "A", "GUIDED")
        dispatcher.dispatch("drawMission", "A", 1, [{"lat": 0, "lng": 0}, {"lat": 1, "lng": 1}])
        dispatcher.dispatch("placeGuided", "A", 1, 37.6, -122.1)
        dispatcher.dispatch("drawPolygon", "red", 2, [1, 2, 3], [1, 2, 3])
        dispatcher.dispatch("drawCircle", "green", 1, 37.5, -122.0, 50)

        vehicle = session.vehicles.get("A")
        assert vehicle.battery_image == "battery/50.png"
        assert vehicle.heading == 12.345
        assert vehicle.cog == 13.5
        assert (vehicle.groundspeed, vehicle.airspeed) == (5.0, 6.0)
        assert vehicle.throttle == 40
        assert vehicle.mode == "GUIDED"
        assert session.missions.get("A").waypoint_count == 1
        assert session.guided.get("A") is not None
        assert len(session.fences) == 2

        dispatcher.dispatch("clearGuided", "A")
        dispatcher.dispatch("clearMission", "A")
        assert session.guided.get("A") is None
        assert session.missions.get("A") is None

        dispatcher.dispatch("vehicleDown", "A")
        dispatcher.dispatch("vehicleDown", "A")
        assert "A" not in session.vehicles
        assert dispatcher.event_count == 16

    def test_every_event_has_a_handler(self, dispatcher):
        assert sorted(dispatcher._handlers) == sorted(EVENTS)
        assert Dispatcher.calls() == list(EVENTS)

    def test_mode_auto_clears_guided(self, dispatcher, session):
        dispatcher.dispatch("vehicleUp", "A", "QUADROTOR")
        dispatcher.dispatch("placeGuided", "A", 1, 37.5, -122.0)

        dispatcher.dispatch("modeUpdate", "A", "MANUAL")
        assert session.guided.get("A") is not None

        dispatcher.dispatch("modeUpdate", "A", "AUTO")
        assert session.guided.get("A") is None

    def test_keyword_arguments(self, dispatcher, session):
        dispatcher.dispatch("vehicleUp", name="A", type="FIXED_WING")
        dispatcher.dispatch("positionUpdate", "A", lat=37.5, lng=-122.0, alt=100)

        assert session.vehicles.get("A").position == LatLng(37.5, -122.0)


class TestDispatchErrors:
    """Test rejected events"""

    def test_unknown_event(self, dispatcher):
        with pytest.raises(UnknownEventError) as exc_info:
            dispatcher.dispatch("teleport", "A")
        assert exc_info.value.call == "teleport"

    def test_too_many_arguments(self, dispatcher):
        with pytest.raises(EventError):
            dispatcher.dispatch("vehicleDown", "A", "B")

    def test_missing_argument(self, dispatcher):
        with pytest.raises(EventError) as exc_info:
            dispatcher.dispatch("positionUpdate", "A", 37.5)
        assert "lng" in str(exc_info.value)

    def test_unexpected_keyword(self, dispatcher):
        with pytest.raises(EventError):
            dispatcher.dispatch("vehicleDown", name="A", force=True)

    def test_duplicate_keyword(self, dispatcher):
        """A parameter given positionally can't be repeated by name"""
        with pytest.raises(EventError):
            dispatcher.dispatch("vehicleDown", "A", name="A")

    def test_unknown_vehicle(self, dispatcher):
        with pytest.raises(UnknownVehicleError):
            dispatcher.dispatch("headingUpdate", "ghost", 10)

    @pytest.mark.parametrize("name", [["A"], {"n": "A"}, 1, None])
    def test_name_must_be_string(self, dispatcher, session, name):
        session.vehicles.up("A", "QUADROTOR")

        with pytest.raises(EventError, match="must be a string"):
            dispatcher.dispatch("headingUpdate", name, 5)
        with pytest.raises(EventError):
            dispatcher.dispatch("vehicleDown", name=name)

        assert session.vehicles.get("A").heading == 0
        assert dispatcher.event_count == 0

    def test_rejected_event_not_counted(self, dispatcher):
        with pytest.raises(UnknownVehicleError):
            dispatcher.dispatch("headingUpdate", "ghost", 10)
        assert dispatcher.event_count == 0

    def test_bad_mission_items(self, dispatcher, session):
        with pytest.raises(GeometryError):
            dispatcher.dispatch("drawMission", "A", 1, [{"lat": 1}])
        with pytest.raises(GeometryError):
            dispatcher.dispatch("drawMission", "A", 1, "not a list")
        assert session.missions.get("A") is None

    def test_bad_mission_number(self, dispatcher):
        with pytest.raises(ValidationError):
            dispatcher.dispatch("drawMission", "A", 1.5, [])
        with pytest.raises(ValidationError):
            dispatcher.dispatch("placeGuided", "A", "one", 37.5, -122.0)


class TestDispatchEvent:
    """Test message-shaped events"""

    def test_args(self, dispatcher, session):
        dispatcher.dispatch_event({"call": "vehicleUp", "args": ["A", "QUADROTOR"]})
        assert "A" in session.vehicles

    def test_params(self, dispatcher, session):
        dispatcher.dispatch_event({"call": "vehicleUp", "params": {"name": "A", "type": "SURFACE_BOAT"}})
        assert session.vehicles.get("A").vehicle_type.value == "SURFACE_BOAT"

    def test_missing_call(self, dispatcher):
        with pytest.raises(EventError):
            dispatcher.dispatch_event({"args": []})

    def test_not_an_object(self, dispatcher):
        with pytest.raises(EventError):
            dispatcher.dispatch_event(["vehicleUp", "A"])

    def test_args_must_be_list(self, dispatcher):
        with pytest.raises(EventError):
            dispatcher.dispatch_event({"call": "vehicleDown", "args": "A"})


class TestParsing:
    """Test argument parsing helpers"""

    def test_waypoints_from_mappings_and_pairs(self):
        assert parse_waypoints([{"lat": 1, "lng": 2}, [3, 4], (5, 6)]) == \
            [LatLng(1, 2), LatLng(3, 4), LatLng(5, 6)]

    def test_waypoints_bad_pair(self):
        with pytest.raises(GeometryError):
            parse_waypoints([[1, 2, 3]])

    def test_mission_number(self):
        assert parse_mission_number(3) == 3
        assert parse_mission_number(3.0) == 3
        assert parse_mission_number(-2) == -2
        with pytest.raises(ValidationError):
            parse_mission_number(True)


class TestJournal:
    """Test event journaling"""

    def test_applied_events_recorded(self, session, tmp_path):
        journal = EventJournal(str(tmp_path))
        path = journal.start("test")
        dispatcher = Dispatcher(session, journal)

        dispatcher.dispatch("vehicleUp", "A", "QUADROTOR")
        with pytest.raises(UnknownVehicleError):
            dispatcher.dispatch("headingUpdate", "ghost", 1)
        dispatcher.dispatch("drawMission", "A", 1, [{"lat": 1, "lng": 1}])
        journal.stop()

        lines = [json.loads(line) for line in path.read_text().splitlines()]
        assert [e["call"] for e in lines] == ["vehicleUp", "drawMission"]
        assert lines[0]["args"] == ["A", "QUADROTOR"]
        assert lines[1]["args"] == ["A", 1, [{"lat": 1, "lng": 1}]]
        assert journal.count == 2
        assert not journal.is_recording
