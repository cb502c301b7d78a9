from __future__ import annotations
from contextlib import contextmanager
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Iterator, Union
import logging
import os

import numpy as np
from dotenv import load_dotenv

from ..constants import (
    BMP_SIGNATURE,
    BITS_PER_PIXEL,
    BYTES_PER_PIXEL,
    COMPRESSION_NONE,
    FILE_HEADER_SIZE,
    INFO_HEADER_SIZE,
    HEADERS_SIZE,
    ROW_ALIGNMENT,
    DEFAULT_MAX_PIXELS,
)
from ..errors import (
    NotFoundError,
    InvalidFormatError,
    OutOfMemoryError,
    WriteError,
    InvalidImageError,
)
from ..models.headers import FileHeader, InfoHeader
from ..models.image import BitmapImage, check_pixels

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, BinaryIO]


def compute_padding(width: int) -> int:
    """Zero bytes appended to an on-disk row of `width` pixels."""
    return (ROW_ALIGNMENT - (width * BYTES_PER_PIXEL) % ROW_ALIGNMENT) % ROW_ALIGNMENT


def _is_path(target) -> bool:
    return isinstance(target, (str, os.PathLike))


class BitmapRepository:
    """
    Handles file I/O and buffer replacement for BitmapImage entities.
    Only uncompressed 24-bit files are read or written.
    """
    def __init__(self, max_pixels: int | None = None):
        if max_pixels is None:
            max_pixels = int(os.getenv("BMAP_MAX_PIXELS", str(DEFAULT_MAX_PIXELS)))
        self.max_pixels = max_pixels

    # ─── opening sources and sinks ─────────────────────────────────────
    @staticmethod
    @contextmanager
    def _open_source(source: Source) -> Iterator[BinaryIO]:
        if not _is_path(source):
            # caller-owned stream, left open
            seekable = getattr(source, "seekable", None)
            if seekable is None or not seekable():
                # pixel data is located by absolute offset
                try:
                    source = BytesIO(source.read())
                except OSError as exc:
                    raise NotFoundError(getattr(source, "name", source), f"Error reading stream: {exc}") from exc
            yield source
            return
        path = Path(source)
        try:
            fh = path.open("rb")
        except OSError as exc:
            logger.warning(f"Cannot open {path} for reading: {exc}")
            raise NotFoundError(path, f"Bitmap not found or unreadable: {path}") from exc
        with fh:
            yield fh

    @staticmethod
    @contextmanager
    def _open_sink(sink: Source) -> Iterator[BinaryIO]:
        if not _is_path(sink):
            yield sink
            return
        path = Path(sink)
        try:
            fh = path.open("wb")
        except OSError as exc:
            logger.warning(f"Cannot open {path} for writing: {exc}")
            raise NotFoundError(path, f"Cannot open bitmap for writing: {path}") from exc
        with fh:
            yield fh

    # ─── headers ───────────────────────────────────────────────────────
    @staticmethod
    def _read_exact(fh: BinaryIO, size: int, what: str) -> bytes:
        try:
            raw = fh.read(size)
        except OSError as exc:
            raise NotFoundError(getattr(fh, "name", fh), f"Error reading {what}: {exc}") from exc
        if raw is None or len(raw) != size:
            got = 0 if raw is None else len(raw)
            raise InvalidFormatError(f"Truncated {what}: expected {size} bytes, got {got}")
        return raw

    def read_headers(self, fh: BinaryIO) -> tuple[FileHeader, InfoHeader]:
        """
        Read and validate both headers from the current stream position.

        Raises:
            InvalidFormatError: bad signature, bit depth, compression or dimensions.
        """
        file_header = FileHeader.unpack(self._read_exact(fh, FILE_HEADER_SIZE, "file header"))
        info_header = InfoHeader.unpack(self._read_exact(fh, INFO_HEADER_SIZE, "info header"))

        if file_header.signature != BMP_SIGNATURE:
            raise InvalidFormatError(
                f"Invalid bitmap signature: 0x{file_header.signature:04X}",
                field="signature", value=file_header.signature,
            )
        if info_header.bits_per_pixel != BITS_PER_PIXEL:
            raise InvalidFormatError(
                f"Unsupported bit depth: {info_header.bits_per_pixel} (only 24-bit is supported)",
                field="bits_per_pixel", value=info_header.bits_per_pixel,
            )
        if info_header.compression != COMPRESSION_NONE:
            raise InvalidFormatError(
                f"Compressed bitmaps are not supported (compression={info_header.compression})",
                field="compression", value=info_header.compression,
            )
        if info_header.width <= 0:
            raise InvalidFormatError(
                f"Invalid bitmap width: {info_header.width}",
                field="width", value=info_header.width,
            )
        if info_header.height == 0:
            raise InvalidFormatError("Invalid bitmap height: 0", field="height", value=0)

        return file_header, info_header

    # ─── decode / encode ───────────────────────────────────────────────
    def _allocate(self, width: int, height: int) -> np.ndarray:
        if width * height > self.max_pixels:
            logger.warning(f"Refusing {width}x{height} buffer (limit {self.max_pixels} pixels)")
            raise OutOfMemoryError(
                width, height,
                f"{width}x{height} exceeds the {self.max_pixels} pixel limit",
            )
        try:
            return np.empty((height, width, BYTES_PER_PIXEL), dtype=np.uint8)
        except MemoryError as exc:
            logger.warning(f"Allocation of {width}x{height} buffer failed")
            raise OutOfMemoryError(width, height) from exc

    def load(self, source: Source) -> BitmapImage:
        """
        Decode a 24-bit bitmap into a BitmapImage.

        Row 0 of the returned buffer is the first row stored in a bottom-up
        file. Top-down files (negative height) are reversed into the same
        order so every buffer follows the bottom-up convention.

        Raises:
            NotFoundError, InvalidFormatError, OutOfMemoryError
        """
        with self._open_source(source) as fh:
            start = fh.tell()
            file_header, info_header = self.read_headers(fh)

            width = info_header.width
            height = abs(info_header.height)
            padding = compute_padding(width)
            row_bytes = width * BYTES_PER_PIXEL
            stride = row_bytes + padding
            logger.debug(
                f"{width}x{height}, padding={padding}, offset={file_header.pixel_offset}, "
                f"top_down={info_header.is_top_down}"
            )

            pixels = self._allocate(width, height)

            try:
                fh.seek(start + file_header.pixel_offset)
            except (OSError, ValueError) as exc:
                raise InvalidFormatError(
                    f"Cannot seek to pixel data at {file_header.pixel_offset}",
                    field="pixel_offset", value=file_header.pixel_offset,
                ) from exc

            for i in range(height):
                raw = fh.read(stride) or b""
                # the last row may omit its padding
                if len(raw) < row_bytes or (len(raw) < stride and i < height - 1):
                    raise InvalidFormatError(
                        f"Truncated pixel data: row {i} of {height} is incomplete",
                        field="pixel_data", value=i,
                    )
                pixels[i] = np.frombuffer(raw, dtype=np.uint8, count=row_bytes).reshape(width, BYTES_PER_PIXEL)

        if info_header.is_top_down:
            pixels = np.ascontiguousarray(pixels[::-1])

        path = Path(source) if _is_path(source) else None
        logger.info(f"Decoded {width}x{height} bitmap" + (f" from {path}" if path else ""))
        return BitmapImage(pixels=pixels, path=path)

    @staticmethod
    def build_headers(width: int, height: int) -> tuple[FileHeader, InfoHeader]:
        padding = compute_padding(width)
        image_size = (width * BYTES_PER_PIXEL + padding) * height
        file_header = FileHeader(file_size=HEADERS_SIZE + image_size, pixel_offset=HEADERS_SIZE)
        info_header = InfoHeader(width=width, height=height, image_size=image_size)
        return file_header, info_header

    def save(self, image: BitmapImage, sink: Source | None = None) -> None:
        """
        Encode image as a bottom-up 24-bit bitmap. Defaults to image.path.

        Raises:
            InvalidImageError: image has no buffer or no destination.
            NotFoundError: sink could not be opened.
            WriteError: writing failed part-way.
        """
        if image is None or image.pixels is None:
            raise InvalidImageError("Cannot encode a released image")
        try:
            check_pixels(image.pixels)
        except ValueError as exc:
            raise InvalidImageError(f"Cannot encode image: {exc}") from exc
        if sink is None:
            if image.path is None:
                raise InvalidImageError("No destination given and image has no path")
            sink = image.path

        width, height = image.width, image.height
        padding = compute_padding(width)
        file_header, info_header = self.build_headers(width, height)
        pad_bytes = b"\x00" * padding

        pixels = image.pixels
        if not pixels.flags['C_CONTIGUOUS']:
            pixels = np.ascontiguousarray(pixels)

        with self._open_sink(sink) as fh:
            try:
                self._write_all(fh, file_header.pack())
                self._write_all(fh, info_header.pack())
                for row in pixels:
                    self._write_all(fh, row.tobytes() + pad_bytes)
                fh.flush()
            except OSError as exc:
                logger.warning(f"Write to {sink} failed: {exc}")
                raise WriteError(sink, f"Error writing bitmap to {sink}: {exc}") from exc

        logger.info(f"Encoded {width}x{height} bitmap ({file_header.file_size} bytes)")

    @staticmethod
    def _write_all(fh: BinaryIO, data: bytes) -> None:
        written = fh.write(data)
        if written is not None and written != len(data):
            raise OSError(f"short write: {written} of {len(data)} bytes")

    # ─── in-memory helpers ─────────────────────────────────────────────
    def load_bytes(self, data: bytes) -> BitmapImage:
        return self.load(BytesIO(data))

    def save_bytes(self, image: BitmapImage) -> bytes:
        buffer = BytesIO()
        self.save(image, buffer)
        return buffer.getvalue()

    def inspect(self, source: Source) -> dict:
        """Header summary without decoding pixel data."""
        with self._open_source(source) as fh:
            file_header, info_header = self.read_headers(fh)
        return {
            'width': info_header.width,
            'height': abs(info_header.height),
            'bits_per_pixel': info_header.bits_per_pixel,
            'compression': info_header.compression,
            'pixel_data_offset': file_header.pixel_offset,
            'row_padding': compute_padding(info_header.width),
            'file_size': file_header.file_size,
            'is_top_down': info_header.is_top_down,
        }

    # ─── buffer replacement ────────────────────────────────────────────
    @staticmethod
    def set_pixels(image: BitmapImage, new_pixels: np.ndarray) -> None:
        image.pixels = new_pixels

    @staticmethod
    def release(image: BitmapImage) -> None:
        image.pixels = None
