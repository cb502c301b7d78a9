from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Pixel:
    """
    One 24-bit pixel in on-disk channel order (blue, green, red).
    """
    blue: int = 0
    green: int = 0
    red: int = 0

    def __post_init__(self):
        for name in ("blue", "green", "red"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"Pixel {name} channel out of range 0-255: {value}")

    @classmethod
    def from_tuple(cls, values: Sequence[int]) -> "Pixel":
        blue, green, red = (int(v) for v in values)
        return cls(blue=blue, green=green, red=red)

    def as_tuple(self) -> tuple[int, int, int]:
        return self.blue, self.green, self.red


BLACK = Pixel(0, 0, 0)
