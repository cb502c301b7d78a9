import numpy as np
import pytest

import bmap
from bmap.errors import InvalidImageError, OutOfMemoryError
from bmap.models.image import BitmapImage
from bmap.models.pixel import Pixel
from bmap.services.transform_service import TransformService
from conftest import P0, P1, P2, P3


@pytest.fixture
def service():
    return TransformService()


# ─── rotation ─────────────────────────────────────────────────────────
def test_rotate_2x2(service, square_image):
    assert service.rotate_clockwise_90(square_image) is True
    assert square_image.to_list() == [P2, P0, P3, P1]


def test_rotate_follows_index_formula(service, random_image):
    old = random_image.pixels.copy()
    old_height, old_width = old.shape[:2]

    service.rotate_clockwise_90(random_image)

    new_width = random_image.width
    assert (random_image.width, random_image.height) == (old_height, old_width)
    flat = random_image.pixels.reshape(-1, 3)
    for i in range(old_height):
        for j in range(old_width):
            np.testing.assert_array_equal(flat[j * new_width + (old_height - 1 - i)], old[i, j])


def test_rotate_four_times_is_identity(service, random_image):
    original = random_image.pixels.copy()
    for _ in range(4):
        service.rotate_clockwise_90(random_image)
    np.testing.assert_array_equal(random_image.pixels, original)


def test_rotate_replaces_buffer(service, random_image):
    before = random_image.pixels
    service.rotate_clockwise_90(random_image)
    assert random_image.pixels is not before
    assert random_image.pixels.flags['C_CONTIGUOUS']
    assert len(random_image) == 15


def test_rotate_allocation_failure_leaves_image(monkeypatch, service, random_image):
    original = random_image.pixels

    def no_memory(*args, **kwargs):
        raise MemoryError

    monkeypatch.setattr(np, "rot90", no_memory)

    assert service.rotate_clockwise_90(random_image) is False
    assert random_image.pixels is original
    with pytest.raises(OutOfMemoryError):
        service.rotate_clockwise_90(random_image, strict=True)


# ─── mirroring ────────────────────────────────────────────────────────
def test_flip_horizontal_2x2(service, square_image):
    assert service.flip_horizontal(square_image) is True
    assert square_image.to_list() == [P1, P0, P3, P2]


def test_flip_twice_is_identity(service, random_image):
    original = random_image.pixels.copy()
    service.flip_horizontal(random_image)
    assert not np.array_equal(random_image.pixels, original)
    service.flip_horizontal(random_image)
    np.testing.assert_array_equal(random_image.pixels, original)


def test_flip_keeps_dimensions(service, random_image):
    service.flip_horizontal(random_image)
    assert (random_image.width, random_image.height) == (5, 3)


# ─── filters ──────────────────────────────────────────────────────────
def test_grayscale_truncates(service):
    img = BitmapImage.from_pixels([(1, 1, 2), (255, 255, 254)], width=2, height=1)
    service.grayscale(img)
    assert img.to_list() == [Pixel(1, 1, 1), Pixel(254, 254, 254)]


def test_grayscale_is_idempotent_and_in_place(service, random_image):
    before = random_image.pixels
    service.grayscale(random_image)
    once = random_image.pixels.copy()
    service.grayscale(random_image)
    assert random_image.pixels is before
    np.testing.assert_array_equal(random_image.pixels, once)


def test_invert_values(service, square_image):
    service.invert(square_image)
    assert bmap.get_pixel(square_image, 0, 0) == Pixel(245, 235, 225)


def test_invert_twice_is_identity(service, random_image):
    before = random_image.pixels
    original = before.copy()
    service.invert(random_image)
    service.invert(random_image)
    assert random_image.pixels is before
    np.testing.assert_array_equal(random_image.pixels, original)


# ─── missing images ───────────────────────────────────────────────────
def test_transforms_ignore_none(service):
    assert service.rotate_clockwise_90(None) is False
    assert service.flip_horizontal(None) is False
    service.grayscale(None)
    service.invert(None)


def test_transforms_ignore_released_image(service, square_image):
    bmap.release(square_image)
    assert service.rotate_clockwise_90(square_image) is False
    service.invert(square_image)
    assert square_image.pixels is None


@pytest.mark.parametrize("op", ["rotate_clockwise_90", "flip_horizontal", "grayscale", "invert"])
def test_strict_mode_rejects_missing_image(service, op):
    with pytest.raises(InvalidImageError):
        getattr(service, op)(None, strict=True)
