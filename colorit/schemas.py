"""
Colorit API Schemas
Pydantic models for palette, conversion, contrast, harmony and catalog request/response validation.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from colorit.services.colors.catalog import CatalogRecord

HEX_PATTERN = r"^#?([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$"


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field("ok", description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("colorit-engine", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")


# ============================================================================
# PALETTE SCHEMAS
# ============================================================================

class PaletteColor(BaseModel):
    """Single color in an extracted palette with its sample share."""
    hex: str = Field(
        ...,
        pattern=r"^#[0-9A-F]{6}$",
        description="Hex color code in format #RRGGBB"
    )
    rgb: List[int] = Field(..., min_length=3, max_length=3, description="Channel triple [R, G, B]")
    ratio: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Share of sampled pixels (0.0-1.0) assigned to this color"
    )


class PaletteTimings(BaseModel):
    """Stage durations in milliseconds."""
    ms_decode: float = Field(..., description="Upload decode and resize time")
    ms_extract: float = Field(..., description="Sampling and clustering time")
    ms_total: float = Field(..., description="Total request time")


class PaletteResponse(BaseModel):
    """Palette extraction response."""
    request_id: str = Field(..., description="Request identifier for tracing")
    width: int = Field(..., description="Processed image width in pixels")
    height: int = Field(..., description="Processed image height in pixels")
    k: int = Field(..., description="Number of colors requested")
    sampled_pixels: int = Field(..., description="Number of grid-sampled pixels clustered")
    palette: List[PaletteColor] = Field(
        ...,
        description="Unique palette colors (at most k), in cluster order"
    )
    timings: PaletteTimings = Field(..., description="Processing durations")


# ============================================================================
# CONVERSION / MATCHING SCHEMAS
# ============================================================================

class CatalogEntryOut(BaseModel):
    """Catalog entry as returned by the API."""
    name: str
    hex: str
    brand: Optional[str] = None
    code: Optional[str] = None


class NearestMatchResponse(BaseModel):
    """Nearest catalog entry for a query color."""
    query: str = Field(..., description="Query color as #RRGGBB")
    entry: CatalogEntryOut
    distance: float = Field(..., ge=0.0, description="Euclidean RGB distance to the entry")


class ColorDescription(BaseModel):
    """All representations of a color."""
    hex: str
    rgb: List[int]
    hsl: List[float] = Field(..., description="[hue°, saturation%, lightness%]")
    hsb: List[float] = Field(..., description="[hue°, saturation%, brightness%]")
    cmyk: List[float] = Field(..., description="[C%, M%, Y%, K%]")
    rgb_text: str
    hsb_text: str
    cmyk_text: str
    best_text_color: str = Field(..., description="#000000 or #FFFFFF, whichever contrasts more")
    nearest: Optional[NearestMatchResponse] = None


class ContrastRequest(BaseModel):
    """Pair of colors to compare."""
    a: str = Field(..., pattern=HEX_PATTERN, description="First color (#RGB or #RRGGBB)")
    b: str = Field(..., pattern=HEX_PATTERN, description="Second color (#RGB or #RRGGBB)")


class ContrastResponse(BaseModel):
    """WCAG contrast between two colors."""
    a: str
    b: str
    ratio: float = Field(..., ge=1.0, description="Contrast ratio between 1 and 21")
    normal_text: str = Field(..., description="AAA, AA or fail for normal text")
    large_text: str = Field(..., description="AAA, AA or fail for large text")


class HarmonyResponse(BaseModel):
    """Harmony colors generated from a base color."""
    base: str
    mode: str
    colors: List[str]


# ============================================================================
# CATALOG SCHEMAS
# ============================================================================

class CatalogUpload(BaseModel):
    """Catalog records supplied by the caller."""
    name: str = Field("catalog", min_length=1, max_length=120)
    entries: List[CatalogRecord] = Field(..., description="Ordered catalog records")


class CatalogInfo(BaseModel):
    """Summary of the installed catalog."""
    name: str
    size: int
    cache_entries: int


class CatalogSelection(BaseModel):
    """Names of loaded catalogs to serve, merged in load order."""
    names: List[str] = Field(..., description="Catalog names to activate")


class CatalogRegistryInfo(BaseModel):
    """Loaded catalogs, the active selection and the catalog it serves."""
    catalogs: List[str] = Field(..., description="Loaded catalog names in load order")
    active: List[str] = Field(..., description="Active catalog names")
    served: CatalogInfo


class CatalogSearchResponse(BaseModel):
    query: str
    results: List[CatalogEntryOut]


class MetricsResponse(BaseModel):
    uptime_seconds: float
    counters: Dict[str, int]
    timing_stats: Dict[str, Dict[str, float]]
    palette_size_stats: Dict[str, float]
