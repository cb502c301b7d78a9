import struct

import numpy as np
import pytest

from bmap.models.image import BitmapImage
from bmap.models.pixel import Pixel


P0 = Pixel(10, 20, 30)
P1 = Pixel(40, 50, 60)
P2 = Pixel(70, 80, 90)
P3 = Pixel(100, 110, 120)


@pytest.fixture
def square_image():
    """2x2 image, row 0 = [P0, P1], row 1 = [P2, P3]."""
    return BitmapImage.from_pixels([P0, P1, P2, P3], width=2, height=2)


@pytest.fixture
def random_image():
    rng = np.random.default_rng(1234)
    pixels = rng.integers(0, 256, size=(3, 5, 3), dtype=np.uint8)
    return BitmapImage(pixels=pixels)


@pytest.fixture
def make_bmp():
    """
    Build raw BMP bytes by hand, independently of the library's encoder.
    rows are given in the order they should appear in the file.
    """
    def _make(rows, *, signature=b"BM", bpp=24, compression=0, height=None,
              gap=0, pad_last_row=True):
        width = len(rows[0])
        stored_height = len(rows) if height is None else height
        padding = (4 - (width * 3) % 4) % 4
        body = b""
        for index, row in enumerate(rows):
            body += bytes(channel for px in row for channel in px)
            if pad_last_row or index < len(rows) - 1:
                body += b"\x00" * padding
        offset = 54 + gap
        file_header = struct.pack("<2sIHHI", signature, offset + len(body), 0, 0, offset)
        info_header = struct.pack("<IiiHHIIiiII", 40, width, stored_height, 1, bpp,
                                  compression, len(body), 2835, 2835, 0, 0)
        return file_header + info_header + b"\xAA" * gap + body

    return _make
