"""
Colorit v1 API Routes
Palette extraction, color conversion, contrast, harmony and catalog matching.
"""
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from colorit.config import config
from colorit.schemas import (
    CatalogEntryOut, CatalogInfo, CatalogRegistryInfo, CatalogSearchResponse, CatalogSelection,
    CatalogUpload, ColorDescription,
    ContrastRequest, ContrastResponse, HarmonyResponse, MetricsResponse, NearestMatchResponse,
    PaletteResponse
)
from colorit.services.colors.catalog import (
    CatalogEntry, CatalogIndex, CatalogMatch, CatalogRegistry, ColorCatalog
)
from colorit.services.colors.contrast import best_text_color, contrast_ratio, wcag_level
from colorit.services.colors.extract_api import handle_palette
from colorit.services.colors.harmony import HARMONY_MODES, harmony
from colorit.services.colors.space import Color, describe, parse_hex_strict
from colorit.utils.ids import generate_request_id
from colorit.utils.logging import get_logger
from colorit.utils.metrics import get_metrics_instance

router = APIRouter(prefix="/v1", tags=["Color Analysis"])
log = get_logger()
metrics = get_metrics_instance()

# Catalog served by the nearest-match endpoints: the merge of the active named catalogs
catalog_index = CatalogIndex(on_lookup=metrics.record_cache_lookup)
catalog_registry = CatalogRegistry(catalog_index)


def _parse_color(value: str) -> Color:
    try:
        return parse_hex_strict(value)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _entry_out(entry: CatalogEntry) -> CatalogEntryOut:
    return CatalogEntryOut(
        name=entry.name,
        hex=entry.color.hex,
        brand=entry.brand,
        code=entry.vendor.code if entry.vendor else None
    )


def _match_out(color: Color, match: CatalogMatch) -> NearestMatchResponse:
    return NearestMatchResponse(query=color.hex, entry=_entry_out(match.entry), distance=match.distance)


def _catalog_info() -> CatalogInfo:
    return CatalogInfo(
        name=catalog_index.catalog.name,
        size=len(catalog_index.catalog),
        cache_entries=len(catalog_index.cache)
    )


@router.post("/palette", response_model=PaletteResponse,
             summary="Extract Palette",
             description="Extract up to k representative colors from an uploaded photo")
async def extract_palette_endpoint(
    file: UploadFile = File(..., description="JPEG or PNG image"),
    k: int = Query(config.PALETTE_K, ge=config.MIN_K, le=config.MAX_K, description="Number of colors"),
    seed: Optional[int] = Query(None, ge=0, description="Seed for reproducible clustering"),
    max_edge: Optional[int] = Query(None, description="Long-edge limit applied before sampling (40-4096)")
):
    request_id = generate_request_id("palette")
    try:
        return await handle_palette(file, k=k, seed=seed, max_edge=max_edge, request_id=request_id)
    except HTTPException as e:
        metrics.increment_failure_count(f"palette_{e.status_code}")
        raise
    except Exception as e:
        metrics.increment_failure_count("palette_internal")
        log.error("Palette extraction failed", extra={"request_id": request_id, "error": str(e)})
        raise HTTPException(status_code=500, detail="Palette extraction failed")


@router.get("/colors/{hex_value}", response_model=ColorDescription,
            summary="Describe Color")
def describe_color(hex_value: str):
    """All representations of a color plus its nearest catalog entry."""
    color = _parse_color(hex_value)
    metrics.increment_request_count("describe")

    match = catalog_index.match(color)
    return ColorDescription(
        **describe(color),
        best_text_color=best_text_color(color).hex,
        nearest=_match_out(color, match) if match else None
    )


@router.post("/contrast", response_model=ContrastResponse, summary="WCAG Contrast")
def contrast(body: ContrastRequest):
    a = _parse_color(body.a)
    b = _parse_color(body.b)
    metrics.increment_request_count("contrast")

    ratio = contrast_ratio(a, b)
    return ContrastResponse(
        a=a.hex,
        b=b.hex,
        ratio=ratio,
        normal_text=wcag_level(ratio),
        large_text=wcag_level(ratio, large_text=True)
    )


@router.get("/harmony/{hex_value}", response_model=HarmonyResponse, summary="Color Harmony")
def color_harmony(
    hex_value: str,
    mode: str = Query("analogous", description=f"One of: {', '.join(HARMONY_MODES)}")
):
    color = _parse_color(hex_value)
    try:
        colors = harmony(color, mode)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    metrics.increment_request_count("harmony")
    return HarmonyResponse(base=color.hex, mode=mode.lower(), colors=[c.hex for c in colors])


def _registry_info() -> CatalogRegistryInfo:
    return CatalogRegistryInfo(
        catalogs=catalog_registry.names,
        active=catalog_registry.active,
        served=_catalog_info()
    )


@router.put("/catalog", response_model=CatalogInfo, summary="Install Catalog")
def install_catalog(body: CatalogUpload):
    """Load a catalog and serve it alone; previously cached matches are invalidated."""
    catalog = ColorCatalog.from_records(body.entries, name=body.name)
    catalog_registry.load(body.name, catalog)
    catalog_registry.activate([body.name])
    metrics.increment_request_count("catalog_install")
    return _catalog_info()


@router.get("/catalog", response_model=CatalogInfo, summary="Catalog Info")
def catalog_info():
    return _catalog_info()


@router.get("/catalogs", response_model=CatalogRegistryInfo, summary="Loaded Catalogs")
def list_catalogs():
    return _registry_info()


@router.put("/catalogs/active", response_model=CatalogRegistryInfo, summary="Select Catalogs")
def select_catalogs(body: CatalogSelection):
    """Serve the merge of the named catalogs; the first entry per key wins in load order."""
    try:
        catalog_registry.activate(body.names)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=f"Unknown catalog: {e.args[0]}")
    metrics.increment_request_count("catalog_select")
    return _registry_info()


@router.put("/catalogs/{name}", response_model=CatalogRegistryInfo, summary="Load Named Catalog")
def load_catalog(
    name: str,
    body: CatalogUpload,
    activate: bool = Query(True, description="Add the catalog to the active selection")
):
    """Load or replace a named catalog alongside the others."""
    catalog = ColorCatalog.from_records(body.entries, name=name)
    catalog_registry.load(name, catalog, activate=activate)
    metrics.increment_request_count("catalog_install")
    return _registry_info()


@router.delete("/catalogs/{name}", response_model=CatalogRegistryInfo, summary="Unload Catalog")
def unload_catalog(name: str):
    try:
        catalog_registry.unload(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown catalog: {name}")
    return _registry_info()


@router.get("/catalog/search", response_model=CatalogSearchResponse, summary="Search Catalog")
def search_catalog(q: str = Query("", max_length=120, description="Name, hex, code or brand fragment")):
    results = catalog_index.catalog.search(q)
    return CatalogSearchResponse(query=q, results=[_entry_out(e) for e in results])


@router.get("/catalog/nearest/{hex_value}", response_model=NearestMatchResponse,
            summary="Nearest Catalog Color")
def nearest_catalog_color(hex_value: str):
    color = _parse_color(hex_value)
    metrics.increment_request_count("nearest")

    match = catalog_index.match(color)
    if match is None:
        raise HTTPException(status_code=404, detail="Catalog is empty")
    return _match_out(color, match)


@router.get("/metrics", response_model=MetricsResponse, summary="Service Metrics")
def get_service_metrics():
    return metrics.get_summary()
