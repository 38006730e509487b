"""
Color assignment for mission, guided and fence overlays
"""

from typing import Sequence

from .models import ValidationError

DEFAULT_PALETTE = ('orange', 'yellow', 'lightblue', 'green', 'red')
DEFAULT_PIN_BASE_URL = 'http://google.com/mapfiles/ms/micons/'


class ColorAssigner:
    """
    Deterministic color/pin selection keyed by mission number

    The key is the mission number, not the vehicle, so two vehicles may
    share a color.
    """

    def __init__(self, palette: Sequence[str] = DEFAULT_PALETTE,
                 pin_base_url: str = DEFAULT_PIN_BASE_URL):
        if not palette:
            raise ValidationError("Color palette must not be empty")
        self.palette = tuple(palette)
        self.pin_base_url = pin_base_url

    @property
    def size(self) -> int:
        return len(self.palette)

    def color_for(self, num: int) -> str:
        # Python's % is a true modulo, so negative numbers stay in range
        return self.palette[int(num) % len(self.palette)]

    def icon_for(self, num: int) -> str:
        """Pin image url in the mission color"""
        return f"{self.pin_base_url}{self.color_for(num)}.png"
