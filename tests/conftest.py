"""
Test configuration and fixtures for the Colorit engine tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Import the main app
from main import app
from colorit.api.v1 import catalog_registry


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from colorit.utils.metrics import reset_metrics
    reset_metrics()


@pytest.fixture(autouse=True)
def empty_catalog():
    """Start every test with no loaded catalogs."""
    catalog_registry.clear()
    yield
    catalog_registry.clear()


def _encode_png(rgb: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(rgb.astype(np.uint8), "RGB").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def encode_png():
    """Encode an (H, W, 3) RGB array as PNG bytes."""
    return _encode_png


@pytest.fixture
def two_block_rgb():
    """100x100 image, left half red and right half blue (RGB)."""
    img = np.zeros((100, 100, 3), dtype=np.uint8)
    img[:, :50] = (255, 0, 0)
    img[:, 50:] = (0, 0, 255)
    return img


@pytest.fixture
def two_block_png(two_block_rgb):
    return _encode_png(two_block_rgb)
