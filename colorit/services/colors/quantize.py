"""
Palette extraction by k-means clustering in RGB space.

Centroids are seeded from the samples with an injectable random generator,
refined for a bounded number of iterations (stopping early once they settle),
and returned deduplicated by hex in first-occurrence order.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

import numpy as np
from loguru import logger

from colorit.config import config
from .space import Color


Samples = Union[np.ndarray, Iterable[Color]]


@dataclass(frozen=True)
class PaletteEntry:
    """A palette color with the share of samples it represents."""
    color: Color
    ratio: float

    @property
    def hex(self) -> str:
        return self.color.hex


def _as_pixel_array(samples: Samples) -> np.ndarray:
    """Coerce colors, RGB triples or an (..., 3) array into an (N, 3) int64 array."""
    empty = np.empty((0, 3), dtype=np.int64)
    if samples is None:
        return empty
    if isinstance(samples, np.ndarray):
        arr = samples
    else:
        arr = np.array([getattr(s, "rgb", s) for s in samples])
    if arr.size == 0:
        return empty
    if arr.shape[-1] != 3:
        logger.debug(f"Ignoring samples with unexpected shape {arr.shape}")
        return empty
    return np.clip(arr.reshape(-1, 3), 0, 255).astype(np.int64)


def _assign(pixels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid per pixel; argmin keeps the lowest index on ties."""
    diff = pixels[:, None, :] - centroids[None, :, :]
    return (diff * diff).sum(axis=2).argmin(axis=1)


class QuantizationEngine:
    """K-means palette extractor with reproducible seeding."""

    def __init__(self,
                 rng: Optional[np.random.Generator] = None,
                 seed: Optional[int] = None,
                 max_iterations: Optional[int] = None,
                 epsilon: Optional[float] = None):
        """
        Args:
            rng: Random generator used to pick the initial centroids
            seed: Seed for a fresh generator when ``rng`` is not given
            max_iterations: Upper bound on refinement passes (default from config)
            epsilon: Largest centroid move still treated as converged (default from config)
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.max_iterations = config.KMEANS_MAX_ITER if max_iterations is None else max_iterations
        self.epsilon = config.KMEANS_EPSILON if epsilon is None else epsilon

    def extract_palette(self, samples: Samples, k: int) -> List[Color]:
        """
        Cluster samples into at most ``k`` representative colors.

        Returns an empty list for ``k <= 0`` or an empty sample set. The
        result never holds two colors with the same hex.
        """
        return [entry.color for entry in self.extract_weighted_palette(samples, k)]

    def extract_weighted_palette(self, samples: Samples, k: int) -> List[PaletteEntry]:
        """Same colors and order as ``extract_palette``, each with its sample share."""
        pixels = _as_pixel_array(samples)
        if k <= 0 or len(pixels) == 0:
            return []

        # No palette can hold more colors than there are distinct samples
        k = min(k, len(np.unique(pixels, axis=0)))

        logger.debug(f"Starting clustering with k={k}, {len(pixels)} pixels")
        centroids = self._cluster(pixels, k)

        counts = np.bincount(_assign(pixels, centroids), minlength=k)
        total = float(len(pixels))

        palette: List[PaletteEntry] = []
        positions = {}
        for center, count in zip(centroids, counts):
            color = Color(*(int(v) for v in center))
            if color.hex in positions:
                i = positions[color.hex]
                palette[i] = PaletteEntry(color, palette[i].ratio + int(count) / total)
                continue
            positions[color.hex] = len(palette)
            palette.append(PaletteEntry(color, int(count) / total))

        logger.debug(f"Clustering produced {len(palette)} unique colors: {[p.hex for p in palette]}")
        return palette

    def _cluster(self, pixels: np.ndarray, k: int) -> np.ndarray:
        n = len(pixels)
        centroids = pixels[self.rng.integers(0, n, size=k)].copy()

        for iteration in range(self.max_iterations):
            labels = _assign(pixels, centroids)
            counts = np.bincount(labels, minlength=k)
            sums = np.zeros((k, 3), dtype=np.int64)
            np.add.at(sums, labels, pixels)

            updated = centroids.copy()
            filled = counts > 0
            updated[filled] = sums[filled] // counts[filled, None]

            for j in np.flatnonzero(~filled):
                updated[j] = self._reseed(pixels, updated, j)

            shift = np.sqrt(((updated - centroids) ** 2).sum(axis=1)).max()
            centroids = updated
            if shift <= self.epsilon:
                logger.debug(f"Clustering converged after {iteration + 1} iterations")
                break

        return centroids

    @staticmethod
    def _reseed(pixels: np.ndarray, centroids: np.ndarray, empty_index: int) -> np.ndarray:
        """Sample with the largest summed distance to every other centroid."""
        others = np.delete(centroids, empty_index, axis=0)
        if len(others) == 0:
            return centroids[empty_index]
        diff = (pixels[:, None, :] - others[None, :, :]).astype(np.float64)
        spread = np.sqrt((diff * diff).sum(axis=2)).sum(axis=1)
        return pixels[int(spread.argmax())]


def extract_palette(samples: Samples, k: int,
                    rng: Optional[np.random.Generator] = None,
                    seed: Optional[int] = None,
                    max_iterations: Optional[int] = None,
                    epsilon: Optional[float] = None) -> List[Color]:
    """Convenience wrapper building a one-off ``QuantizationEngine``."""
    engine = QuantizationEngine(rng=rng, seed=seed, max_iterations=max_iterations, epsilon=epsilon)
    return engine.extract_palette(samples, k)
