"""
Palette Extraction API Orchestrator

Coordinates the upload-to-palette pipeline: input validation, decoding and
downscaling, grid sampling and k-means clustering, with request-scoped
logging and metrics.
"""

import time
from typing import Optional

from fastapi import HTTPException, UploadFile

from colorit.config import config
from colorit.schemas import PaletteColor, PaletteResponse, PaletteTimings
from colorit.services.colors.jobs import run_bitmap_extraction
from colorit.services.colors.quantize import QuantizationEngine
from colorit.services.imaging import (
    get_image_dimensions, read_image, resize_long_edge, to_bitmap, validate_file_upload
)
from colorit.utils.ids import generate_request_id
from colorit.utils.logging import get_logger
from colorit.utils.metrics import get_metrics_instance

log = get_logger()


async def handle_palette(
    file: UploadFile,
    k: int = None,
    seed: Optional[int] = None,
    max_edge: Optional[int] = None,
    request_id: Optional[str] = None
) -> PaletteResponse:
    """
    Extract a palette from an uploaded photo.

    Args:
        file: Uploaded JPEG or PNG image
        k: Number of palette colors requested (default from config)
        seed: Seed for centroid initialization (default from config, unseeded if unset)
        max_edge: Long-edge limit applied before sampling (default from config)
        request_id: Id used in logs and the response (generated when omitted)

    Returns:
        PaletteResponse with the unique palette colors and their sample shares

    Raises:
        HTTPException: 422 for out-of-range k or max_edge, 400/415 for invalid,
            unsupported or corrupt uploads
    """
    request_id = request_id or generate_request_id("palette")
    metrics = get_metrics_instance()
    metrics.increment_request_count("palette")
    k = config.PALETTE_K if k is None else k
    seed = config.KMEANS_SEED if seed is None else seed

    if not config.validate_k(k):
        raise HTTPException(status_code=422, detail=f"k must be between {config.MIN_K} and {config.MAX_K}")
    if max_edge is not None and not config.validate_max_edge(max_edge):
        raise HTTPException(status_code=422, detail="max_edge must be between 40 and 4096")

    start_time = time.time()

    log.info("Starting palette extraction", extra={"request_id": request_id, "k": k, "seed": seed, "max_edge": max_edge})

    validate_file_upload(file)
    img_bgr = await read_image(file)
    img_bgr = resize_long_edge(img_bgr, max_edge)
    width, height = get_image_dimensions(img_bgr)
    decode_ms = (time.time() - start_time) * 1000

    log.info(f"Input processing complete: {width}x{height}",
             extra={"request_id": request_id, "ms_decode": decode_ms})

    extract_start = time.time()
    engine = QuantizationEngine(seed=seed)
    sampled_pixels, palette = await run_bitmap_extraction(engine, to_bitmap(img_bgr), k)
    extract_ms = (time.time() - extract_start) * 1000
    total_ms = (time.time() - start_time) * 1000

    metrics.record_timing("palette_decode", decode_ms)
    metrics.record_timing("palette_extract", extract_ms)
    metrics.record_palette_size(len(palette))

    log.info(f"Palette extraction complete: {len(palette)} colors from {sampled_pixels} samples",
             extra={"request_id": request_id, "ms_extract": extract_ms, "ms_total": total_ms})

    return PaletteResponse(
        request_id=request_id,
        width=width,
        height=height,
        k=k,
        sampled_pixels=sampled_pixels,
        palette=[
            PaletteColor(hex=entry.hex, rgb=list(entry.color.rgb), ratio=min(1.0, entry.ratio))
            for entry in palette
        ],
        timings=PaletteTimings(ms_decode=decode_ms, ms_extract=extract_ms, ms_total=total_ms)
    )
