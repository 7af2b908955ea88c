"""
Unit tests for grid pixel sampling.

Tests the sampler against packed and padded buffers, the supported channel
orders, and the degenerate inputs that must produce no samples.
"""

import numpy as np
import pytest

from colorit.services.colors.sampling import Bitmap, sample_pixel_array, sample_pixels
from colorit.services.colors.space import Color


def _padded_bitmap() -> Bitmap:
    """2x2 RGB bitmap with 2 bytes of padding after each row."""
    data = bytes([
        1, 2, 3, 4, 5, 6, 99, 99,
        7, 8, 9, 10, 11, 12, 99, 99,
    ])
    return Bitmap(width=2, height=2, stride=8, data=data, channel_order="RGB")


class TestBitmapFromArray:
    """Test wrapping numpy images"""

    def test_rgb_defaults(self):
        bitmap = Bitmap.from_array(np.zeros((4, 6, 3), dtype=np.uint8))
        assert (bitmap.width, bitmap.height, bitmap.stride) == (6, 4, 18)
        assert bitmap.channel_order == "RGB"
        assert bitmap.bytes_per_pixel == 3
        assert bitmap.bits_per_channel == 8

    def test_rgba_default(self):
        bitmap = Bitmap.from_array(np.zeros((2, 2, 4), dtype=np.uint8))
        assert bitmap.channel_order == "RGBA"
        assert bitmap.stride == 8

    def test_grayscale(self):
        bitmap = Bitmap.from_array(np.zeros((2, 3), dtype=np.uint8))
        assert bitmap.channel_order == "L"

    def test_rejects_other_shapes(self):
        with pytest.raises(ValueError):
            Bitmap.from_array(np.zeros((2, 2, 2, 3), dtype=np.uint8))


class TestGridSampling:
    """Test sample counts and ordering"""

    def test_square_image_is_bounded_by_grid(self):
        bitmap = Bitmap.from_array(np.zeros((100, 100, 3), dtype=np.uint8))
        samples = sample_pixel_array(bitmap, grid=40)
        # step = 100 // 40 = 2 in both directions
        assert samples.shape == (2500, 3)
        assert samples.dtype == np.uint8

    def test_step_follows_short_edge(self):
        bitmap = Bitmap.from_array(np.zeros((100, 200, 3), dtype=np.uint8))
        samples = sample_pixel_array(bitmap, grid=40)
        assert len(samples) == 50 * 100

    def test_small_image_sampled_fully(self):
        bitmap = Bitmap.from_array(np.zeros((10, 10, 3), dtype=np.uint8))
        assert len(sample_pixel_array(bitmap, grid=40)) == 100

    def test_default_grid_from_config(self):
        bitmap = Bitmap.from_array(np.zeros((80, 80, 3), dtype=np.uint8))
        assert len(sample_pixel_array(bitmap)) == 40 * 40

    def test_row_major_order_starting_at_origin(self):
        img = np.zeros((4, 4, 3), dtype=np.uint8)
        img[0, 0] = (1, 1, 1)
        img[0, 2] = (2, 2, 2)
        img[2, 0] = (3, 3, 3)
        img[2, 2] = (4, 4, 4)
        samples = sample_pixel_array(Bitmap.from_array(img), grid=2)
        np.testing.assert_array_equal(samples[:, 0], [1, 2, 3, 4])


class TestChannelOrders:
    """Test channel layouts"""

    def test_bgr_is_reordered(self):
        img = np.zeros((8, 8, 3), dtype=np.uint8)
        img[:, :] = (10, 20, 30)
        samples = sample_pixel_array(Bitmap.from_array(img, channel_order="BGR"))
        assert np.all(samples == [30, 20, 10])

    def test_alpha_is_ignored(self):
        img = np.zeros((8, 8, 4), dtype=np.uint8)
        img[:, :] = (10, 20, 30, 0)
        samples = sample_pixel_array(Bitmap.from_array(img))
        assert np.all(samples == [10, 20, 30])

    def test_argb(self):
        img = np.zeros((2, 2, 4), dtype=np.uint8)
        img[:, :] = (255, 10, 20, 30)
        samples = sample_pixel_array(Bitmap.from_array(img, channel_order="ARGB"))
        assert np.all(samples == [10, 20, 30])


class TestPaddedRows:
    """Test stride handling"""

    def test_padding_is_skipped(self):
        samples = sample_pixel_array(_padded_bitmap(), grid=2)
        np.testing.assert_array_equal(samples, [[1, 2, 3], [4, 5, 6], [7, 8, 9], [10, 11, 12]])

    def test_last_row_may_omit_padding(self):
        bitmap = _padded_bitmap()
        trimmed = Bitmap(width=2, height=2, stride=8, data=bitmap.data[:14], channel_order="RGB")
        assert len(sample_pixel_array(trimmed, grid=2)) == 4

    def test_sample_pixels_returns_colors(self):
        colors = sample_pixels(_padded_bitmap(), grid=2)
        assert colors == [Color(1, 2, 3), Color(4, 5, 6), Color(7, 8, 9), Color(10, 11, 12)]


class TestDegenerateInputs:
    """Unreadable bitmaps produce an empty sample set instead of raising"""

    def test_none(self):
        assert sample_pixel_array(None).shape == (0, 3)
        assert sample_pixels(None) == []

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, 5)])
    def test_zero_or_negative_dimensions(self, width, height):
        bitmap = Bitmap(width=width, height=height, stride=30, data=bytes(300), channel_order="RGB")
        assert len(sample_pixel_array(bitmap)) == 0

    def test_truncated_buffer(self):
        bitmap = _padded_bitmap()
        short = Bitmap(width=2, height=2, stride=8, data=bitmap.data[:13], channel_order="RGB")
        assert len(sample_pixel_array(short)) == 0

    def test_stride_smaller_than_row(self):
        bitmap = Bitmap(width=4, height=4, stride=8, data=bytes(64), channel_order="RGB")
        assert len(sample_pixel_array(bitmap)) == 0

    def test_unbufferable_data(self):
        bitmap = Bitmap(width=2, height=2, stride=6, data=12345, channel_order="RGB")
        assert len(sample_pixel_array(bitmap)) == 0

    @pytest.mark.parametrize("order", ["L", "XYZ", "RRGB", "RG"])
    def test_unsupported_channel_order(self, order):
        bitmap = Bitmap(width=2, height=2, stride=2 * len(order), data=bytes(16), channel_order=order)
        assert len(sample_pixel_array(bitmap)) == 0

    def test_sixteen_bit_channels(self):
        img = np.zeros((4, 4, 3), dtype=np.uint16)
        assert len(sample_pixel_array(Bitmap.from_array(img))) == 0
