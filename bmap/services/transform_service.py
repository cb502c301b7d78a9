import logging
import numpy as np

from ..errors import InvalidImageError, OutOfMemoryError
from ..models.image import BitmapImage
from ..repositories.bitmap_repository import BitmapRepository

logger = logging.getLogger(__name__)


class TransformService:
    """
    Geometric and colour transforms on BitmapImage buffers.

    rotate_clockwise_90 and flip_horizontal build a new buffer and swap it in
    (image.pixels identity changes). grayscale and invert write into the
    existing buffer.

    With strict=False (the default) a None image or a released buffer is a
    no-op. With strict=True it raises InvalidImageError, and an allocation
    failure raises OutOfMemoryError instead of returning False.
    """

    def __init__(self):
        self.bitmap_repository = BitmapRepository()

    @staticmethod
    def _usable(image: BitmapImage | None, strict: bool, op: str) -> bool:
        if image is not None and image.pixels is not None:
            return True
        if strict:
            raise InvalidImageError(f"{op}: image is missing or released")
        return False

    def _swap_in(self, image: BitmapImage, build, strict: bool, op: str) -> bool:
        """
        Build the replacement buffer completely, then assign it in one step.
        The image is left untouched if building fails.
        """
        width, height = image.width, image.height
        try:
            new_pixels = np.ascontiguousarray(build(image.pixels))
        except MemoryError as exc:
            logger.warning(f"{op}: allocation failed for {width}x{height} image")
            if strict:
                raise OutOfMemoryError(width, height) from exc
            return False
        self.bitmap_repository.set_pixels(image, new_pixels)
        return True

    # ─── geometry ──────────────────────────────────────────────────────
    def rotate_clockwise_90(self, image: BitmapImage | None, strict: bool = False) -> bool:
        """
        Rotate 90° clockwise: new width = old height, new height = old width.
        Source (column j, row i) moves to row j, column old_height - 1 - i.

        Returns:
            True if the image was rotated, False if it was left unchanged.
        """
        if not self._usable(image, strict, "rotate_clockwise_90"):
            return False
        return self._swap_in(image, lambda p: np.rot90(p, k=-1, axes=(0, 1)), strict, "rotate_clockwise_90")

    def flip_horizontal(self, image: BitmapImage | None, strict: bool = False) -> bool:
        """Mirror each row left-right; rows keep their position."""
        if not self._usable(image, strict, "flip_horizontal"):
            return False
        return self._swap_in(image, lambda p: p[:, ::-1], strict, "flip_horizontal")

    # ─── filters (in place) ────────────────────────────────────────────
    def grayscale(self, image: BitmapImage | None, strict: bool = False) -> None:
        """
        Replace every channel with the truncated mean (red + green + blue) // 3.
        """
        if not self._usable(image, strict, "grayscale"):
            return
        pixels = image.pixels
        avg = pixels.sum(axis=2, dtype=np.uint16) // 3
        pixels[...] = avg.astype(np.uint8)[..., np.newaxis]

    def invert(self, image: BitmapImage | None, strict: bool = False) -> None:
        """Negative: every channel becomes 255 - channel."""
        if not self._usable(image, strict, "invert"):
            return
        np.subtract(255, image.pixels, out=image.pixels)
