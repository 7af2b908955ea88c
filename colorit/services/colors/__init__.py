"""
Colorit Colors Module

Provides pixel sampling, palette extraction, color space conversion,
catalog nearest-match search and WCAG contrast for the color analysis engine.
"""

from .space import (
    Color, to_hex, from_hex, parse_hex_strict, normalize_hex,
    to_hsl, from_hsl, to_hsb, from_hsb, to_cmyk, distance, describe
)
from .sampling import Bitmap, sample_pixels, sample_pixel_array
from .quantize import PaletteEntry, QuantizationEngine, extract_palette
from .catalog import (
    CatalogEntry, CatalogIndex, CatalogMatch, ColorCatalog, NearestMatchCache,
    VendorInfo, find_nearest, merge_catalogs
)
from .contrast import relative_luminance, contrast_ratio, wcag_level, passes_aa, best_text_color

__version__ = "1.0.0"
