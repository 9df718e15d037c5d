"""Points and rectangles in device-pixel space (top-left origin)."""

from __future__ import annotations

import re
from dataclasses import dataclass

_BOUNDS_RE = re.compile(r"^\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]$")


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def truncated(self) -> Point:
        return Point(int(self.x), int(self.y))


@dataclass(frozen=True)
class Bounds:
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def center(self) -> Point:
        # Integer division matches Android's Rect.centerX()/centerY()
        return Point((self.left + self.right) // 2, (self.top + self.bottom) // 2)

    def contains(self, point: Point) -> bool:
        return self.left <= point.x < self.right and self.top <= point.y < self.bottom

    def intersect(self, other: Bounds) -> Bounds:
        """Return the overlap; an empty rectangle when the two are disjoint."""
        left = max(self.left, other.left)
        top = max(self.top, other.top)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return Bounds(left, top, left, top)
        return Bounds(left, top, right, bottom)

    def to_short_string(self) -> str:
        return f"[{self.left},{self.top}][{self.right},{self.bottom}]"

    def to_dict(self) -> dict[str, int]:
        return {
            "left": self.left,
            "top": self.top,
            "right": self.right,
            "bottom": self.bottom,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def parse(cls, text: str) -> Bounds:
        """Parse the ``[l,t][r,b]`` form used by uiautomator dumps."""
        m = _BOUNDS_RE.match(text.strip())
        if not m:
            raise ValueError(f"Malformed bounds: {text!r}")
        return cls(*(int(g) for g in m.groups()))
