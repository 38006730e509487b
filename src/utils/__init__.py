"""
Utility modules
"""

from .formatting import format_number, round_half_up
from .geo import LatLng, SENTINEL, is_sentinel, is_finite_coordinate
from .logger import setup_logging

__all__ = [
    'format_number', 'round_half_up',
    'LatLng', 'SENTINEL', 'is_sentinel', 'is_finite_coordinate',
    'setup_logging',
]
