from __future__ import annotations
from dataclasses import dataclass, astuple
import struct

from ..constants import (
    BMP_SIGNATURE,
    INFO_HEADER_SIZE,
    HEADERS_SIZE,
    PLANES,
    BITS_PER_PIXEL,
    COMPRESSION_NONE,
    RESOLUTION_PPM,
)


@dataclass
class FileHeader:
    """
    14-byte file header. Only lives for the duration of a decode/encode.
    """
    signature: int = BMP_SIGNATURE
    file_size: int = 0
    reserved1: int = 0
    reserved2: int = 0
    pixel_offset: int = HEADERS_SIZE

    FORMAT = struct.Struct("<HIHHI")

    @classmethod
    def unpack(cls, raw: bytes) -> "FileHeader":
        return cls(*cls.FORMAT.unpack(raw))

    def pack(self) -> bytes:
        return self.FORMAT.pack(*astuple(self))


@dataclass
class InfoHeader:
    """
    40-byte info header. A negative height marks a top-down file.
    """
    header_size: int = INFO_HEADER_SIZE
    width: int = 0
    height: int = 0
    planes: int = PLANES
    bits_per_pixel: int = BITS_PER_PIXEL
    compression: int = COMPRESSION_NONE
    image_size: int = 0
    x_pixels_per_meter: int = RESOLUTION_PPM
    y_pixels_per_meter: int = RESOLUTION_PPM
    colors_used: int = 0
    colors_important: int = 0

    FORMAT = struct.Struct("<IiiHHIIiiII")

    @classmethod
    def unpack(cls, raw: bytes) -> "InfoHeader":
        return cls(*cls.FORMAT.unpack(raw))

    def pack(self) -> bytes:
        return self.FORMAT.pack(*astuple(self))

    @property
    def is_top_down(self) -> bool:
        return self.height < 0
