"""
Geographic utilities

Coordinate value type and checks shared by the map overlays.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .formatting import format_number


@dataclass(frozen=True)
class LatLng:
    """Geographic position in degrees"""
    lat: float
    lng: float

    @property
    def is_sentinel(self) -> bool:
        """True for the (0, 0) "no fix yet" position"""
        return is_sentinel(self.lat, self.lng)

    def to_url_value(self, precision: int = 6) -> str:
        """
        Render as "lat,lng" rounded to `precision` decimals

        Trailing zeros are dropped, so the origin renders as "0,0".
        """
        return f"{format_number(self.lat, precision)},{format_number(self.lng, precision)}"

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


# Reserved "no GPS fix" position, never a valid vehicle location
SENTINEL = LatLng(0.0, 0.0)


def is_sentinel(lat: float, lng: float) -> bool:
    """Check whether a coordinate pair is the (0, 0) sentinel"""
    return lat == 0 and lng == 0


def is_finite_coordinate(lat: float, lng: float) -> bool:
    """Check that both components are real, finite numbers"""
    try:
        return math.isfinite(lat) and math.isfinite(lng)
    except (TypeError, OverflowError):
        return False


def pair_coordinates(lats: Sequence[float], lngs: Sequence[float]) -> List[LatLng]:
    """
    Zip parallel latitude/longitude sequences into positions

    Raises:
        ValueError: If the sequences differ in length
    """
    if len(lats) != len(lngs):
        raise ValueError(f"coordinate length mismatch: {len(lats)} lats, {len(lngs)} lngs")
    return [LatLng(lat, lng) for lat, lng in zip(lats, lngs)]


def drop_sentinels(positions: Iterable[LatLng]) -> List[LatLng]:
    """Remove unset (0, 0) slots, keeping order"""
    return [p for p in positions if not p.is_sentinel]

