from __future__ import annotations

from dataclasses import dataclass

# 间距比例，乘以画布宽度
GAPS = {
    "xl": 0.045,
    "large": 0.028,
    "medium": 0.02,
    "small": 0.015,
}


@dataclass(slots=True)
class LayoutCursor:
    """Vertical flow position for one template routine.

    Every draw primitive returns the y just below what it drew; the cursor
    keeps that value and adds the named gaps between blocks.
    """

    width: float
    height: float
    y: float

    @classmethod
    def start(cls, width: float, height: float, fraction: float) -> "LayoutCursor":
        return cls(width=float(width), height=float(height), y=float(height) * fraction)

    def advance_to(self, next_y: float) -> float:
        self.y = float(next_y)
        return self.y

    def gap(self, name: str) -> float:
        self.y += self.width * GAPS[name]
        return self.y

    def move(self, delta: float) -> float:
        self.y += delta
        return self.y
