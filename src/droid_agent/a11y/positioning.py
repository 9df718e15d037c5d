"""Mapping reported coordinates onto the device display."""

from __future__ import annotations

from droid_agent.a11y.geometry import Point
from droid_agent.config import DisplayConfig
from droid_agent.core.errors import InvalidCoordinatesError


def translate_coordinate(value: float, length: int, offset: float = 0) -> float:
    """Values strictly between 0 and 1 are fractions of *length*."""
    if 0 < value < 1:
        value = value * length
    return value + offset


class DisplayPositionMapper:
    """Turns reported points into device-absolute pixels."""

    def __init__(self, width: int, height: int, check_bounds: bool = True):
        self.width = width
        self.height = height
        self.check_bounds = check_bounds

    @classmethod
    def from_config(cls, display: DisplayConfig) -> DisplayPositionMapper:
        return cls(display.width, display.height)

    def to_device_absolute(self, point: Point) -> Point:
        absolute = Point(
            translate_coordinate(point.x, self.width),
            translate_coordinate(point.y, self.height),
        )
        if self.check_bounds and not (
            0 <= absolute.x <= self.width and 0 <= absolute.y <= self.height
        ):
            raise InvalidCoordinatesError(point.x, point.y, self.width, self.height)
        return absolute
