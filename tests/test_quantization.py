"""
Unit tests for k-means palette extraction.

Tests the clustering contract:
- empty inputs and non-positive k
- palette size bound and hex uniqueness
- deterministic results under a fixed seed or injected generator
- empty-cluster reseeding and integer centroid means
- iteration cap and early stop once centroids settle
"""

import numpy as np
import pytest

from colorit.services.colors import quantize
from colorit.services.colors.quantize import PaletteEntry, QuantizationEngine, extract_palette
from colorit.services.colors.space import Color


@pytest.fixture
def noisy_pixels():
    """Random pixels around three well separated colors."""
    rng = np.random.default_rng(42)
    centers = np.array([[200, 30, 30], [30, 200, 30], [30, 30, 200]])
    pixels = np.concatenate([
        np.clip(center + rng.integers(-10, 11, size=(200, 3)), 0, 255) for center in centers
    ])
    return pixels.astype(np.uint8)


class ZeroGenerator:
    """Generator stand-in that always picks the first sample."""

    def __init__(self):
        self.calls = []

    def integers(self, low, high=None, size=None):
        self.calls.append((low, high, size))
        return np.zeros(size, dtype=np.int64)


@pytest.fixture
def black_and_white():
    return np.array([[0, 0, 0]] * 5 + [[255, 255, 255]] * 5)


@pytest.fixture
def assign_calls(monkeypatch):
    """Count nearest-centroid passes, including the final share count."""
    calls = []
    original = quantize._assign

    def counting_assign(pixels, centroids):
        calls.append(centroids.copy())
        return original(pixels, centroids)

    monkeypatch.setattr(quantize, "_assign", counting_assign)
    return calls


class TestDegenerateInputs:
    """Test inputs that produce no palette"""

    def test_empty_samples(self):
        assert extract_palette([], 5, seed=0) == []
        assert extract_palette(np.empty((0, 3), dtype=np.uint8), 5, seed=0) == []
        assert extract_palette(None, 5, seed=0) == []

    @pytest.mark.parametrize("k", [0, -1])
    def test_non_positive_k(self, k):
        assert extract_palette([Color(1, 2, 3)], k, seed=0) == []

    def test_huge_k_is_bounded_by_distinct_samples(self):
        pixels = np.array([[1, 2, 3], [4, 5, 6], [1, 2, 3]])
        rng = ZeroGenerator()
        palette = extract_palette(pixels, 10 ** 9, rng=rng)
        assert set(palette) <= {Color(1, 2, 3), Color(4, 5, 6)}
        assert rng.calls == [(0, 3, 2)]


class TestPaletteContract:
    """Test size bound, uniqueness and ordering"""

    def test_uniform_image_collapses_to_one_color(self):
        pixels = np.full((100, 3), (200, 100, 50), dtype=np.uint8)
        palette = extract_palette(pixels, 5, seed=0)
        assert palette == [Color(200, 100, 50)]

    def test_size_bound_and_unique_hex(self, noisy_pixels):
        for k in range(1, 8):
            palette = extract_palette(noisy_pixels, k, seed=k)
            assert 1 <= len(palette) <= k
            hexes = [c.hex for c in palette]
            assert len(hexes) == len(set(hexes))

    def test_fewer_samples_than_k(self):
        samples = [Color(10, 10, 10), Color(250, 250, 250)]
        palette = extract_palette(samples, 6, seed=3)
        assert len(palette) <= 2
        assert set(palette) <= set(samples)

    def test_accepts_color_list(self):
        palette = extract_palette([Color(1, 2, 3)] * 10, 3, seed=1)
        assert palette == [Color(1, 2, 3)]

    def test_two_clusters_are_separated(self):
        pixels = np.array([[10, 10, 10]] * 50 + [[240, 240, 240]] * 50)
        for seed in range(5):
            palette = extract_palette(pixels, 2, seed=seed)
            assert {c.hex for c in palette} == {"#0A0A0A", "#F0F0F0"}

    def test_centroid_mean_is_floored(self):
        pixels = np.array([[0, 0, 0], [1, 1, 1]])
        assert extract_palette(pixels, 1, seed=0) == [Color(0, 0, 0)]


class TestDeterminism:
    """Test reproducibility"""

    def test_same_seed_same_palette(self, noisy_pixels):
        a = QuantizationEngine(seed=11).extract_palette(noisy_pixels, 4)
        b = QuantizationEngine(seed=11).extract_palette(noisy_pixels, 4)
        assert a == b

    def test_injected_generator(self, noisy_pixels):
        a = extract_palette(noisy_pixels, 4, rng=np.random.default_rng(5))
        b = extract_palette(noisy_pixels, 4, rng=np.random.default_rng(5))
        assert a == b


class TestWeightedPalette:
    """Test sample shares"""

    def test_ratios_sum_to_one(self, noisy_pixels):
        entries = QuantizationEngine(seed=2).extract_weighted_palette(noisy_pixels, 5)
        assert all(isinstance(e, PaletteEntry) for e in entries)
        assert sum(e.ratio for e in entries) == pytest.approx(1.0)

    def test_uniform_image_has_full_share(self):
        pixels = np.full((30, 3), (5, 6, 7), dtype=np.uint8)
        entries = QuantizationEngine(seed=0).extract_weighted_palette(pixels, 3)
        assert len(entries) == 1
        assert entries[0].hex == "#050607"
        assert entries[0].ratio == pytest.approx(1.0)

    def test_same_colors_as_plain_palette(self, noisy_pixels):
        weighted = QuantizationEngine(seed=9).extract_weighted_palette(noisy_pixels, 4)
        plain = QuantizationEngine(seed=9).extract_palette(noisy_pixels, 4)
        assert [e.color for e in weighted] == plain


class TestReseed:
    """Test empty-cluster reseeding"""

    def test_picks_sample_farthest_from_other_centroids(self):
        pixels = np.array([[0, 0, 0], [100, 100, 100], [255, 255, 255]])
        centroids = np.array([[0, 0, 0], [9, 9, 9]])
        np.testing.assert_array_equal(QuantizationEngine._reseed(pixels, centroids, 1), [255, 255, 255])

    def test_ties_resolve_to_first_sample(self):
        pixels = np.array([[10, 0, 0], [0, 10, 0]])
        centroids = np.array([[0, 0, 0], [5, 5, 5]])
        np.testing.assert_array_equal(QuantizationEngine._reseed(pixels, centroids, 1), [10, 0, 0])

    def test_distances_are_summed_over_centroids(self):
        pixels = np.array([[0, 0, 0], [128, 128, 128], [255, 0, 0]])
        centroids = np.array([[0, 0, 0], [50, 50, 50], [255, 255, 255]])
        np.testing.assert_array_equal(QuantizationEngine._reseed(pixels, centroids, 1), [255, 0, 0])

    def test_empty_cluster_reseeded_during_extraction(self, black_and_white, assign_calls):
        # Both centroids start on black, so the second cluster is empty after one pass
        palette = extract_palette(black_and_white, 2, rng=ZeroGenerator())
        assert [c.hex for c in palette] == ["#000000", "#FFFFFF"]
        np.testing.assert_array_equal(assign_calls[1], [[127, 127, 127], [255, 255, 255]])


class TestIterationBounds:
    """Test the iteration cap and the convergence threshold"""

    def test_default_stops_once_centroids_settle(self, black_and_white, assign_calls):
        engine = QuantizationEngine(rng=ZeroGenerator())
        assert engine.max_iterations == 10
        palette = engine.extract_palette(black_and_white, 2)

        assert [c.hex for c in palette] == ["#000000", "#FFFFFF"]
        # Three refinement passes (the last moves nothing) plus the share count
        assert len(assign_calls) == 4

    def test_zero_iterations_keeps_initial_centroids(self, black_and_white, assign_calls):
        entries = QuantizationEngine(rng=ZeroGenerator(), max_iterations=0).extract_weighted_palette(black_and_white, 2)

        assert [e.hex for e in entries] == ["#000000"]
        assert entries[0].ratio == pytest.approx(1.0)
        assert len(assign_calls) == 1

    def test_single_iteration_cap(self, black_and_white, assign_calls):
        entries = QuantizationEngine(rng=ZeroGenerator(), max_iterations=1).extract_weighted_palette(black_and_white, 2)

        assert [e.hex for e in entries] == ["#7F7F7F", "#FFFFFF"]
        assert [e.ratio for e in entries] == pytest.approx([0.5, 0.5])
        assert len(assign_calls) == 2

    def test_large_epsilon_stops_after_first_pass(self, black_and_white, assign_calls):
        palette = extract_palette(black_and_white, 2, rng=ZeroGenerator(), epsilon=1000)

        assert [c.hex for c in palette] == ["#7F7F7F", "#FFFFFF"]
        assert len(assign_calls) == 2
