"""
Colorit Imaging Utilities
Handles upload validation, decoding and downscaling of photos into bitmaps.
"""
import io
from typing import Tuple

import cv2
import numpy as np
from fastapi import HTTPException, UploadFile
from PIL import Image, UnidentifiedImageError

from colorit.config import config
from colorit.services.colors.sampling import Bitmap


def validate_file_upload(file: UploadFile) -> None:
    """
    Validate uploaded file for security and format compliance.

    Args:
        file: FastAPI UploadFile object

    Raises:
        HTTPException: 400 for invalid files, 415 for unsupported formats
    """
    # Check file size (file.size might be None for some clients)
    if getattr(file, "size", None) and file.size > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    # Validate MIME type
    if file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )

    # Validate file extension
    if file.filename:
        ext = file.filename.lower().split('.')[-1] if '.' in file.filename else ''
        if f".{ext}" not in config.SUPPORTED_EXTENSIONS:
            raise HTTPException(
                status_code=415,
                detail=f"Unsupported file extension. Supported: {', '.join(sorted(config.SUPPORTED_EXTENSIONS))}"
            )


def validate_magic_bytes(file_bytes: bytes) -> str:
    """
    Validate file magic bytes to ensure it's actually an image.

    Args:
        file_bytes: Raw file bytes

    Returns:
        Detected MIME type

    Raises:
        HTTPException: 400 for invalid/corrupt files
    """
    if len(file_bytes) < 8:
        raise HTTPException(status_code=400, detail="File too small or corrupt")

    if file_bytes.startswith(b'\xff\xd8\xff'):
        return "image/jpeg"
    elif file_bytes.startswith(b'\x89PNG\r\n\x1a\n'):
        return "image/png"
    else:
        raise HTTPException(
            status_code=400,
            detail="Invalid image file. Magic bytes don't match supported formats."
        )


def decode_image_bytes(file_bytes: bytes) -> np.ndarray:
    """
    Decode image bytes to a BGR numpy array.

    Raises:
        HTTPException: 400 for oversize, unsupported or corrupt data
    """
    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    validate_magic_bytes(file_bytes)

    try:
        # Decode using PIL for safety, then convert to OpenCV format
        pil_image = Image.open(io.BytesIO(file_bytes))
        if pil_image.mode != 'RGB':
            pil_image = pil_image.convert('RGB')
        rgb_array = np.array(pil_image)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Failed to decode image: {str(e)}")

    return cv2.cvtColor(rgb_array, cv2.COLOR_RGB2BGR)


async def read_image(file: UploadFile) -> np.ndarray:
    """
    Safely read and decode an uploaded image to a BGR numpy array.

    Raises:
        HTTPException: 400 for read or decode errors
    """
    try:
        file_bytes = await file.read()
    except OSError as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {str(e)}")

    return decode_image_bytes(file_bytes)


def resize_long_edge(img_bgr: np.ndarray, max_edge: int = None) -> np.ndarray:
    """
    Resize image so the longest edge is at most max_edge pixels.

    Args:
        img_bgr: Input image in BGR format
        max_edge: Maximum edge size (default from config)

    Returns:
        Resized image in BGR format
    """
    if max_edge is None:
        max_edge = config.MAX_EDGE

    height, width = img_bgr.shape[:2]
    current_max = max(height, width)

    if current_max <= max_edge:
        return img_bgr

    scale = max_edge / current_max
    new_width = max(1, int(width * scale))
    new_height = max(1, int(height * scale))

    # Use INTER_AREA for downscaling (better quality)
    return cv2.resize(img_bgr, (new_width, new_height), interpolation=cv2.INTER_AREA)


def to_bitmap(img_bgr: np.ndarray) -> Bitmap:
    """Wrap an OpenCV image as a sampler bitmap."""
    return Bitmap.from_array(img_bgr, channel_order="BGR")


def get_image_dimensions(img_bgr: np.ndarray) -> Tuple[int, int]:
    """Return (width, height) of an image."""
    height, width = img_bgr.shape[:2]
    return width, height
