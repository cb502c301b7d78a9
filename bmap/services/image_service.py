from pathlib import Path
from typing import Union
import logging
import os
import numpy as np
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..constants import DEFAULT_MAX_PIXELS
from ..errors import OutOfMemoryError, InvalidImageError
from ..models.image import BitmapImage
from ..models.pixel import Pixel, BLACK
from ..repositories.bitmap_repository import BitmapRepository, Source

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageService:
    """
    Business-level access to bitmaps: load/save, construction, release and
    bounds-checked pixel access. File I/O is delegated to BitmapRepository.
    """
    def __init__(self, max_pixels: int | None = None):
        if max_pixels is None:
            max_pixels = int(os.getenv("BMAP_MAX_PIXELS", str(DEFAULT_MAX_PIXELS)))
        self.max_pixels = max_pixels
        self.bitmap_repository = BitmapRepository(max_pixels=max_pixels)

    # ─── I/O ───────────────────────────────────────────────────────────
    def load(self, source: Source) -> BitmapImage:
        """Decode a 24-bit bitmap from a path or binary stream."""
        return self.bitmap_repository.load(source)

    def save(self, image: BitmapImage, sink: Source | None = None) -> None:
        """Encode image to sink, or to image.path when no sink is given."""
        self.bitmap_repository.save(image, sink)

    def load_bytes(self, data: bytes) -> BitmapImage:
        return self.bitmap_repository.load_bytes(data)

    def save_bytes(self, image: BitmapImage) -> bytes:
        return self.bitmap_repository.save_bytes(image)

    def inspect(self, source: Source) -> dict:
        return self.bitmap_repository.inspect(source)

    # ─── lifecycle ─────────────────────────────────────────────────────
    def create_image(
        self,
        width: int,
        height: int,
        fill: Pixel = BLACK,
        path: Union[str, Path] = None,
    ) -> BitmapImage:
        """
        Create a width x height image filled with a single colour.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        if width * height > self.max_pixels:
            raise OutOfMemoryError(width, height, f"{width}x{height} exceeds the {self.max_pixels} pixel limit")

        try:
            pixels = np.empty((height, width, 3), dtype=np.uint8)
        except MemoryError as exc:
            raise OutOfMemoryError(width, height) from exc
        pixels[...] = fill.as_tuple()
        logger.debug(f"Created {width}x{height} image")
        return BitmapImage(pixels=pixels, path=Path(path) if path is not None else None)

    def release(self, image: BitmapImage | None) -> None:
        """Drop the pixel buffer. Safe to call twice or with None."""
        if image is None:
            return
        if image.pixels is not None:
            logger.debug(f"Releasing {image.width}x{image.height} buffer")
        self.bitmap_repository.release(image)

    # ─── pixel access ──────────────────────────────────────────────────
    @staticmethod
    def _in_bounds(image: BitmapImage | None, x: int, y: int) -> bool:
        if image is None or image.pixels is None:
            return False
        return 0 <= x < image.width and 0 <= y < image.height

    def get_pixel(self, image: BitmapImage | None, x: int, y: int) -> Pixel:
        """
        Pixel at column x, row y. Out-of-range coordinates, a None image or
        a released buffer all yield BLACK instead of raising.
        """
        if not self._in_bounds(image, x, y):
            return BLACK
        return Pixel.from_tuple(image.pixels[y, x])

    def set_pixel(self, image: BitmapImage | None, x: int, y: int, color) -> None:
        """
        Write color at (x, y). Anything out of range is silently ignored.
        Plain triples go through Pixel, so bad channel values raise ValueError.
        """
        if not self._in_bounds(image, x, y):
            return
        if not isinstance(color, Pixel):
            color = Pixel.from_tuple(color)
        image.pixels[y, x] = color.as_tuple()

    # ─── Pillow interop ────────────────────────────────────────────────
    def to_pil_image(self, image: BitmapImage) -> PILImage.Image:
        """
        Convert to an RGB PIL Image. Buffer rows are bottom-up, PIL rows are
        top-down, so rows are reversed along with the channel order.
        """
        if image is None or image.pixels is None:
            raise InvalidImageError("Cannot convert a released image")
        rgb = np.ascontiguousarray(image.pixels[::-1, :, ::-1])
        return PILImage.fromarray(rgb)

    def from_pil_image(self, pil_image: PILImage.Image, path: Union[str, Path] = None) -> BitmapImage:
        """Inverse of to_pil_image; any PIL mode is converted to RGB first."""
        rgb = np.asarray(pil_image.convert("RGB"), dtype=np.uint8)
        bgr = np.ascontiguousarray(rgb[::-1, :, ::-1])
        return BitmapImage(pixels=bgr, path=Path(path) if path is not None else None)
