"""
Running palette extraction off the event loop.

Extraction is CPU-bound and has no suspension points, so async callers hand
it to a worker thread. ``LatestResultGate`` gives last-result-wins semantics
to callers that fire extractions repeatedly and only care about the newest.
"""

import asyncio
from threading import Lock
from typing import Generic, List, Optional, Tuple, TypeVar

from loguru import logger

from .quantize import PaletteEntry, QuantizationEngine, Samples
from .sampling import Bitmap, sample_pixel_array

T = TypeVar("T")


class LatestResultGate(Generic[T]):
    """Accepts a result only if it belongs to the most recently started job."""

    def __init__(self):
        self._lock = Lock()
        self._issued = 0
        self._accepted: Optional[Tuple[int, T]] = None

    def begin(self) -> int:
        """Start a new job and return its ticket."""
        with self._lock:
            self._issued += 1
            return self._issued

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._issued

    def offer(self, ticket: int, result: T) -> bool:
        """Publish a result; returns False and discards it if a newer job was started."""
        with self._lock:
            if ticket != self._issued:
                logger.debug(f"Discarding superseded result for ticket {ticket} (latest {self._issued})")
                return False
            self._accepted = (ticket, result)
            return True

    @property
    def latest(self) -> Optional[T]:
        with self._lock:
            return None if self._accepted is None else self._accepted[1]


def extract_from_bitmap(engine: QuantizationEngine, bitmap: Bitmap, k: int,
                        grid: Optional[int] = None) -> Tuple[int, List[PaletteEntry]]:
    """Sample a bitmap and cluster it; returns (sample count, weighted palette)."""
    samples = sample_pixel_array(bitmap, grid)
    return len(samples), engine.extract_weighted_palette(samples, k)


async def run_extraction(engine: QuantizationEngine, samples: Samples, k: int) -> List[PaletteEntry]:
    """Run ``extract_weighted_palette`` in a worker thread."""
    return await asyncio.to_thread(engine.extract_weighted_palette, samples, k)


async def run_bitmap_extraction(engine: QuantizationEngine, bitmap: Bitmap, k: int,
                                grid: Optional[int] = None) -> Tuple[int, List[PaletteEntry]]:
    """Run ``extract_from_bitmap`` in a worker thread."""
    return await asyncio.to_thread(extract_from_bitmap, engine, bitmap, k, grid)


async def run_latest(gate: LatestResultGate, engine: QuantizationEngine,
                     samples: Samples, k: int) -> Tuple[bool, List[PaletteEntry]]:
    """
    Extract a palette under a gate.

    Returns whether the result was accepted as the newest, plus the result.
    """
    ticket = gate.begin()
    result = await run_extraction(engine, samples, k)
    return gate.offer(ticket, result), result
