"""
Tests for the mission overlay
"""

import math
import pytest

from src.overlay import GeometryError, IconDescriptor
from src.utils.geo import LatLng


def pin_labels(surface, mission):
    return [surface.markers[pin_id].label for pin_id in mission.pin_ids]


class TestMissionDraw:
    """Test drawing waypoint pins and paths"""

    def test_sentinel_slots_dropped(self, session, surface):
        """Unset slots are dropped and labels follow the filtered order"""
        mission = session.missions.draw("A", 1, [LatLng(0, 0), LatLng(1, 1), LatLng(2, 2)])

        assert len(mission.pin_ids) == 2
        assert pin_labels(surface, mission) == ["1", "2"]
        assert surface.polylines[mission.path_id].path == [LatLng(1, 1), LatLng(2, 2)]
        assert mission.waypoint_count == 2

    def test_sentinel_in_middle(self, session, surface):
        mission = session.missions.draw(
            "A", 1, [LatLng(1, 1), LatLng(0, 0), LatLng(2, 2), LatLng(3, 3)])

        assert pin_labels(surface, mission) == ["1", "2", "3"]
        assert [surface.markers[p].position for p in mission.pin_ids] == \
            [LatLng(1, 1), LatLng(2, 2), LatLng(3, 3)]

    def test_style_follows_mission_number(self, session, surface):
        """Color and pin are keyed by mission number, not vehicle"""
        mission = session.missions.draw("A", 1, [LatLng(1, 1), LatLng(2, 2)])

        path = surface.polylines[mission.path_id]
        assert path.color == "yellow"
        assert path.width == 2
        assert path.opacity == 1.0
        assert path.geodesic is True
        assert path.z_index == 1

        pin = surface.markers[mission.pin_ids[0]]
        assert pin.icon == IconDescriptor("http://google.com/mapfiles/ms/micons/yellow.png")
        assert pin.label_class == "waypoint"
        assert pin.label_anchor == (4, 29)
        assert pin.label_in_background is False

    def test_two_vehicles_same_number_share_color(self, session, surface):
        a = session.missions.draw("A", 3, [LatLng(1, 1)])
        b = session.missions.draw("B", 8, [LatLng(2, 2)])

        assert surface.polylines[a.path_id].color == surface.polylines[b.path_id].color

    def test_redraw_replaces(self, session, surface):
        """Second draw leaves only the second mission's pins and path"""
        first = session.missions.draw("A", 1, [LatLng(1, 1), LatLng(2, 2), LatLng(3, 3)])
        second = session.missions.draw("A", 2, [LatLng(4, 4), LatLng(5, 5)])

        for pin_id in first.pin_ids:
            assert pin_id not in surface.markers
        assert first.path_id not in surface.polylines

        assert set(surface.markers) == set(second.pin_ids)
        assert set(surface.polylines) == {second.path_id}
        assert session.missions.get("A") is second

    def test_empty_mission(self, session, surface):
        mission = session.missions.draw("A", 0, [LatLng(0, 0)])

        assert mission.pin_ids == []
        assert surface.polylines[mission.path_id].path == []

    def test_non_finite_rejected_keeps_previous(self, session, surface):
        """A rejected draw leaves the existing mission untouched"""
        first = session.missions.draw("A", 1, [LatLng(1, 1)])

        with pytest.raises(GeometryError):
            session.missions.draw("A", 2, [LatLng(2, 2), LatLng(math.nan, 3)])

        assert session.missions.get("A") is first
        assert first.pin_ids[0] in surface.markers
        assert first.path_id in surface.polylines


class TestMissionClear:
    """Test mission teardown"""

    def test_clear(self, session, surface):
        session.missions.draw("A", 1, [LatLng(1, 1), LatLng(2, 2)])

        assert session.missions.clear("A") is True

        assert surface.markers == {}
        assert surface.polylines == {}
        assert "A" not in session.missions

    def test_clear_missing_is_noop(self, session, surface):
        assert session.missions.clear("A") is False
        assert surface.count_calls("remove_marker") == 0
        assert surface.count_calls("remove_polyline") == 0

    def test_clear_all(self, session, surface):
        session.missions.draw("A", 1, [LatLng(1, 1)])
        session.missions.draw("B", 2, [LatLng(2, 2)])

        session.missions.clear_all()

        assert len(session.missions) == 0
        assert surface.markers == {}
