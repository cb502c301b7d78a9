from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable
import numpy as np

from .pixel import Pixel


def check_pixels(pixels: np.ndarray) -> None:
    """
    Raise ValueError unless pixels is a non-empty (H, W, 3) uint8 array.
    """
    if not isinstance(pixels, np.ndarray):
        raise ValueError(f"Pixel buffer must be a numpy array, got {type(pixels).__name__}")
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Pixel buffer must have shape (H, W, 3), got {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Pixel buffer must be uint8, got {pixels.dtype}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ValueError(f"Pixel buffer must not be empty, got {pixels.shape[1]}x{pixels.shape[0]}")


@dataclass
class BitmapImage:
    """
    Simple data object: BGR pixels (+ optional source path for bookkeeping).
    pixels is row-major with no row padding, so width and height always
    follow from its shape. None means the buffer has been released.
    """
    pixels: np.ndarray | None  # Shape (H, W, 3), dtype uint8, BGR order.
    path: Path | None = None  # Source of the image.

    def __post_init__(self):
        if self.pixels is not None:
            check_pixels(self.pixels)
            self.pixels = np.ascontiguousarray(self.pixels)

    @property
    def width(self) -> int:
        return 0 if self.pixels is None else int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return 0 if self.pixels is None else int(self.pixels.shape[0])

    @property
    def is_released(self) -> bool:
        return self.pixels is None

    def __len__(self) -> int:
        return self.width * self.height

    @classmethod
    def from_pixels(
        cls,
        pixels: Iterable[Pixel | tuple[int, int, int]],
        width: int,
        height: int,
        path: str | Path | None = None,
    ) -> "BitmapImage":
        """
        Build an image from a row-major sequence of pixels (row 0 first).
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

        rows = [(p if isinstance(p, Pixel) else Pixel.from_tuple(p)).as_tuple() for p in pixels]
        if len(rows) != width * height:
            raise ValueError(
                f"Expected {width * height} pixels for {width}x{height}, got {len(rows)}"
            )

        arr = np.array(rows, dtype=np.uint8).reshape(height, width, 3)
        return cls(pixels=arr, path=Path(path) if path is not None else None)

    def to_list(self) -> list[Pixel]:
        """Row-major list of pixels; empty for a released image."""
        if self.pixels is None:
            return []
        return [Pixel.from_tuple(v) for v in self.pixels.reshape(-1, 3)]
