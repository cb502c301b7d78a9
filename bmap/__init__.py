"""
In-memory codec and transforms for uncompressed 24-bit bitmap files.

    img = bmap.decode("in.bmp")
    bmap.rotate_clockwise_90(img)
    bmap.grayscale(img)
    bmap.encode(img, "out.bmp")
"""

from .constants import BMP_SIGNATURE, BITS_PER_PIXEL
from .errors import (
    BitmapError,
    NotFoundError,
    InvalidFormatError,
    OutOfMemoryError,
    WriteError,
    InvalidImageError,
)
from .models.image import BitmapImage
from .models.pixel import Pixel, BLACK
from .repositories.bitmap_repository import compute_padding
from .services.image_service import ImageService
from .services.transform_service import TransformService

__version__ = "1.0.0"

image_service = ImageService()
transform_service = TransformService()

decode = image_service.load
encode = image_service.save
decode_bytes = image_service.load_bytes
encode_bytes = image_service.save_bytes
inspect = image_service.inspect
create_image = image_service.create_image
release = image_service.release
get_pixel = image_service.get_pixel
set_pixel = image_service.set_pixel

rotate_clockwise_90 = transform_service.rotate_clockwise_90
flip_horizontal = transform_service.flip_horizontal
grayscale = transform_service.grayscale
invert = transform_service.invert

__all__ = [
    "BitmapImage", "Pixel", "BLACK",
    "BitmapError", "NotFoundError", "InvalidFormatError",
    "OutOfMemoryError", "WriteError", "InvalidImageError",
    "ImageService", "TransformService",
    "decode", "encode", "decode_bytes", "encode_bytes", "inspect",
    "create_image", "release", "get_pixel", "set_pixel",
    "rotate_clockwise_90", "flip_horizontal", "grayscale", "invert",
    "compute_padding", "BMP_SIGNATURE", "BITS_PER_PIXEL",
]
