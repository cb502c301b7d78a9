"""On-disk constants for uncompressed 24-bit bitmap files."""

BMP_SIGNATURE = 0x4D42          # b"BM" read as a little-endian u16
FILE_HEADER_SIZE = 14
INFO_HEADER_SIZE = 40
HEADERS_SIZE = FILE_HEADER_SIZE + INFO_HEADER_SIZE

BITS_PER_PIXEL = 24
BYTES_PER_PIXEL = 3
COMPRESSION_NONE = 0
PLANES = 1

# 72 DPI expressed in pixels per metre
RESOLUTION_PPM = 2835

ROW_ALIGNMENT = 4

DEFAULT_MAX_PIXELS = 268_435_456
