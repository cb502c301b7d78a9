from bmap.constants import BMP_SIGNATURE, HEADERS_SIZE
from bmap.models.headers import FileHeader, InfoHeader
from bmap.repositories.bitmap_repository import BitmapRepository


def test_header_record_sizes():
    assert FileHeader.FORMAT.size == 14
    assert InfoHeader.FORMAT.size == 40


def test_file_header_starts_with_bm():
    raw = FileHeader(file_size=70).pack()
    assert raw[:2] == b"BM"
    assert FileHeader.unpack(raw).signature == BMP_SIGNATURE


def test_info_header_keeps_signed_height():
    raw = InfoHeader(width=3, height=-7).pack()
    parsed = InfoHeader.unpack(raw)
    assert parsed.width == 3
    assert parsed.height == -7
    assert parsed.is_top_down


def test_build_headers_for_2x2():
    file_header, info_header = BitmapRepository.build_headers(2, 2)

    # each row: 6 bytes of pixels + 2 bytes padding
    assert info_header.image_size == 16
    assert file_header.file_size == HEADERS_SIZE + 16
    assert file_header.pixel_offset == 54
    assert (file_header.reserved1, file_header.reserved2) == (0, 0)
    assert info_header.header_size == 40
    assert info_header.planes == 1
    assert info_header.bits_per_pixel == 24
    assert info_header.compression == 0
    assert info_header.x_pixels_per_meter == info_header.y_pixels_per_meter == 2835
    assert info_header.colors_used == info_header.colors_important == 0
