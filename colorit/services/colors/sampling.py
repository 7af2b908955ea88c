"""
Pixel sampling from decoded bitmap buffers.

Regular-grid subsampling of a bitmap into a bounded sample set. The sampler
never raises: unreadable, zero-sized or unsupported buffers produce an empty
sample set.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import numpy as np
from loguru import logger

from colorit.config import config
from .space import Color


@dataclass(frozen=True)
class Bitmap:
    """Descriptor of a decoded, byte-per-channel pixel buffer."""
    width: int
    height: int
    stride: int  # bytes per row, may include padding
    data: Any  # any object exposing the buffer protocol
    channel_order: str = "RGBA"
    bits_per_channel: int = 8

    @property
    def bytes_per_pixel(self) -> int:
        return len(self.channel_order)

    @classmethod
    def from_array(cls, array: np.ndarray, channel_order: Optional[str] = None) -> "Bitmap":
        """
        Wrap an ``(H, W, C)`` or ``(H, W)`` numpy image.

        The channel order defaults to ``RGB``/``RGBA`` by channel count;
        OpenCV images should pass ``"BGR"``.
        """
        arr = np.ascontiguousarray(array)
        if arr.ndim == 2:
            arr = arr[:, :, None]
        if arr.ndim != 3:
            raise ValueError(f"Expected a 2D or 3D image array, got shape {arr.shape}")
        height, width, channels = arr.shape
        if channel_order is None:
            channel_order = {1: "L", 3: "RGB", 4: "RGBA"}.get(channels, "X" * channels)
        return cls(
            width=width,
            height=height,
            stride=width * channels * arr.itemsize,
            data=arr.tobytes(),
            channel_order=channel_order,
            bits_per_channel=arr.itemsize * 8,
        )


def _channel_offsets(bitmap: Bitmap) -> Optional[Tuple[int, int, int]]:
    """Byte offsets of R, G and B inside a pixel, or None if unsupported."""
    if bitmap.bits_per_channel != 8:
        return None
    order = str(bitmap.channel_order).upper()
    if len(set(order)) != len(order):
        return None
    if not all(ch in order for ch in "RGB"):
        return None
    return order.index("R"), order.index("G"), order.index("B")


def sample_pixel_array(bitmap: Optional[Bitmap], grid: Optional[int] = None) -> np.ndarray:
    """
    Sample a bitmap on a regular grid.

    The stride between visited pixels is ``max(1, min(W, H) // grid)`` in
    both directions, starting at (0, 0), visited row by row.

    Args:
        bitmap: Bitmap descriptor, may be None
        grid: Target samples per short edge (default from config)

    Returns:
        Sampled RGB pixels array (N, 3) uint8, empty if the bitmap is unreadable
    """
    empty = np.empty((0, 3), dtype=np.uint8)
    if bitmap is None or bitmap.data is None:
        return empty

    width, height, stride = bitmap.width, bitmap.height, bitmap.stride
    if not all(isinstance(v, (int, np.integer)) for v in (width, height, stride)):
        return empty
    if width <= 0 or height <= 0:
        return empty

    offsets = _channel_offsets(bitmap)
    if offsets is None:
        logger.debug(f"Unsupported pixel layout {bitmap.channel_order!r} "
                     f"at {bitmap.bits_per_channel} bits per channel")
        return empty

    try:
        buffer = np.frombuffer(bitmap.data, dtype=np.uint8)
    except (TypeError, ValueError, BufferError) as e:
        logger.debug(f"Unreadable bitmap buffer: {e}")
        return empty

    bpp = bitmap.bytes_per_pixel
    row_bytes = width * bpp
    if stride < row_bytes or buffer.size < stride * (height - 1) + row_bytes:
        logger.debug(f"Bitmap buffer too small: {buffer.size} bytes for {width}x{height} stride {stride}")
        return empty

    grid = max(1, grid if grid is not None else config.SAMPLE_GRID)
    step = max(1, min(width, height) // grid)

    ys = np.arange(0, height, step)
    xs = np.arange(0, width, step)
    pixel_starts = (ys[:, None] * stride + xs[None, :] * bpp).ravel()

    samples = np.stack([buffer[pixel_starts + off] for off in offsets], axis=1)
    logger.debug(f"Sampled {len(samples)} pixels from {width}x{height} bitmap with step={step}")
    return samples


def sample_pixels(bitmap: Optional[Bitmap], grid: Optional[int] = None) -> List[Color]:
    """Sample a bitmap on a regular grid and return the samples as colors."""
    return [Color(int(r), int(g), int(b)) for r, g, b in sample_pixel_array(bitmap, grid)]
