"""
Parallel backends for drawing fractal frames.

The output buffer is split into contiguous, pixel-aligned byte slices, one
per worker. Every worker owns its slice exclusively, so no locking is needed.
Two backends are provided: a thread pool writing straight into the shared
output array, and a process pool whose workers paint a private copy of
their slice that is assembled into the output once every task has joined.
A failure in any worker aborts the draw and is raised once as ``DrawError``.
"""

import numpy as np
from typing import Any, Dict, List, Optional, Sequence, Tuple
import multiprocessing as mp
import threading
import logging
import time
from dataclasses import dataclass
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor, wait

from ..core.fractal_types import FractalAlgorithm
from ..rendering.coloring import ColoringTechnique, CombinationFunction

logger = logging.getLogger(__name__)

BYTES_PER_PIXEL = 4

BACKENDS = ('thread', 'process')


class DrawError(RuntimeError):
    """Raised when any worker fails while drawing a frame."""

    def __init__(self, message: str, slice_id: Optional[int] = None):
        super().__init__(message)
        self.slice_id = slice_id


@dataclass(frozen=True)
class BufferSlice:
    """Specification for a single slice of the output buffer."""
    slice_id: int
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def pixel_count(self) -> int:
        return self.length // BYTES_PER_PIXEL


@dataclass(frozen=True)
class SliceResult:
    """Result from painting a single slice."""
    slice_id: int
    pixels: int
    processing_time: float
    data: Optional[np.ndarray] = None


@dataclass(frozen=True)
class PixelJob:
    """
    Everything a worker needs to color pixels.

    ``viewport`` must provide ``width`` and ``to_fractal_space(x, y)``; it is
    immutable for the duration of a draw.
    """
    viewport: Any
    color: float
    motion: float
    algorithm: FractalAlgorithm
    techniques: Tuple[ColoringTechnique, ...]
    combine: CombinationFunction


def get_default_worker_count() -> int:
    """Number of workers used when the caller does not ask for a count."""
    return mp.cpu_count()


def resolve_worker_count(workers: Optional[int]) -> int:
    """Replace a missing or non-positive worker count with the default."""
    if workers is None or workers <= 0:
        return get_default_worker_count()
    return workers


def slice_buffer(total_bytes: int, slices: int) -> List[BufferSlice]:
    """
    Partition a buffer into contiguous pixel-aligned slices.

    Every slice but the last holds ``total_pixels // slices`` pixels; the
    last one absorbs the remainder. The slice count is capped at the number
    of pixels so that no slice is empty.

    Args:
        total_bytes: Buffer length, a multiple of 4
        slices: Requested number of slices

    Returns:
        List of BufferSlice objects covering the whole buffer
    """
    if total_bytes % BYTES_PER_PIXEL != 0:
        raise ValueError(f"Buffer length {total_bytes} is not a multiple of {BYTES_PER_PIXEL}")
    if slices <= 0:
        raise ValueError("slices must be positive")

    total_pixels = total_bytes // BYTES_PER_PIXEL
    if total_pixels == 0:
        return []

    slices = min(slices, total_pixels)
    bytes_per_slice = total_pixels // slices * BYTES_PER_PIXEL

    result = []
    for p in range(slices):
        start = p * bytes_per_slice
        length = bytes_per_slice if p < slices - 1 else total_bytes - start
        result.append(BufferSlice(slice_id=p, start=start, length=length))

    logger.debug(f"Created {len(result)} slices of {bytes_per_slice} bytes")
    return result


def paint_slice(job: PixelJob, buffer: np.ndarray, buffer_slice: BufferSlice,
                base: int = 0, abort: Optional[Any] = None) -> int:
    """
    Color every pixel of one slice in place.

    Pixel coordinates come from the absolute buffer offset,
    ``x = (offset / 4) mod width`` and ``y = (offset / 4) div width``. Bytes
    are written in blue, green, red, alpha order at ``offset - base``, so
    ``buffer`` may be either the whole output (``base=0``) or a private array
    holding just this slice (``base=buffer_slice.start``). The ``abort`` flag
    is checked between pixels, never inside one.

    Returns:
        Number of pixels written
    """
    width = job.viewport.width
    to_fractal_space = job.viewport.to_fractal_space
    algorithm = job.algorithm
    techniques = job.techniques
    combine = job.combine
    color = job.color
    motion = job.motion

    written = 0
    for offset in range(buffer_slice.start, buffer_slice.end, BYTES_PER_PIXEL):
        if abort is not None and abort.is_set():
            break

        pixel = offset // BYTES_PER_PIXEL
        x = pixel % width
        y = pixel // width

        number = to_fractal_space(x, y)
        result = algorithm.calculate(number, motion)
        colors = [technique.colorize(result, color) for technique in techniques]
        final = combine(colors)

        local = offset - base
        buffer[local:local + BYTES_PER_PIXEL] = final.to_bgra_bytes()
        written += 1

    return written


def _paint_guarded(job: PixelJob, buffer: np.ndarray, buffer_slice: BufferSlice,
                   base: int, abort: Optional[Any]) -> Tuple[int, float]:
    start_time = time.time()
    try:
        written = paint_slice(job, buffer, buffer_slice, base, abort)
    except Exception:
        # stop the sibling slices at their next pixel boundary
        if abort is not None:
            abort.set()
        raise
    return written, time.time() - start_time


def _paint_thread_slice(job: PixelJob, buffer: np.ndarray, buffer_slice: BufferSlice,
                        abort: threading.Event) -> SliceResult:
    written, elapsed = _paint_guarded(job, buffer, buffer_slice, 0, abort)
    return SliceResult(buffer_slice.slice_id, written, elapsed)


# Worker-process state set by the pool initializer
_G = {}


def _init_process_worker(abort_event) -> None:
    _G["abort"] = abort_event


def _paint_process_slice(job: PixelJob, buffer_slice: BufferSlice) -> SliceResult:
    data = np.zeros(buffer_slice.length, dtype=np.uint8)
    written, elapsed = _paint_guarded(job, data, buffer_slice, buffer_slice.start, _G.get("abort"))
    return SliceResult(buffer_slice.slice_id, written, elapsed, data)


def _collect(futures: Dict[Future, BufferSlice], backend: str) -> List[SliceResult]:
    """
    Join every future, then raise the first failure as ``DrawError``.

    Returns:
        Slice results ordered by slice id
    """
    wait(list(futures))

    failures = []
    results = []
    for future, buffer_slice in futures.items():
        error = future.exception()
        if error is not None:
            logger.error(f"Slice {buffer_slice.slice_id} failed: {error!r}")
            failures.append((buffer_slice, error))
        else:
            results.append(future.result())

    if failures:
        failures.sort(key=lambda item: item[0].slice_id)
        buffer_slice, error = failures[0]
        raise DrawError(
            f"Draw aborted: {len(failures)} of {len(futures)} slices failed "
            f"({backend} backend); first failure in slice {buffer_slice.slice_id}: {error!r}",
            slice_id=buffer_slice.slice_id,
        ) from error

    results.sort(key=lambda r: r.slice_id)
    for result in results:
        logger.debug(f"Slice {result.slice_id}: {result.pixels} pixels in {result.processing_time:.3f}s")
    return results


class ParallelDrawer:
    """Fork-join painter over the slices of one output buffer."""

    def __init__(self, workers: Optional[int] = None, backend: str = 'thread'):
        """
        Initialize parallel drawer.

        Args:
            workers: Number of workers (None or non-positive for CPU count)
            backend: 'thread' or 'process'. The process backend pickles the
                algorithm, techniques and combination function, so those
                must be defined at module level.
        """
        if backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{backend}'. Available: {', '.join(BACKENDS)}")
        self.workers = resolve_worker_count(workers)
        self.backend = backend
        self.last_processing_time = 0.0

    def draw(self, job: PixelJob, total_bytes: int) -> np.ndarray:
        """
        Paint a full buffer of ``total_bytes`` bytes.

        Returns only after every slice has been joined.

        Returns:
            Flat uint8 array in BGRA order

        Raises:
            DrawError: If any slice failed
        """
        slices = slice_buffer(total_bytes, self.workers)
        if not slices:
            return np.zeros(total_bytes, dtype=np.uint8)

        logger.debug(f"Dispatching {len(slices)} slices to the {self.backend} backend")
        if self.backend == 'process':
            buffer, results = self._draw_processes(job, total_bytes, slices)
        else:
            buffer, results = self._draw_threads(job, total_bytes, slices)

        self.last_processing_time = sum(r.processing_time for r in results)
        return buffer

    def _draw_threads(self, job: PixelJob, total_bytes: int,
                      slices: Sequence[BufferSlice]) -> Tuple[np.ndarray, List[SliceResult]]:
        buffer = np.zeros(total_bytes, dtype=np.uint8)
        abort = threading.Event()

        with ThreadPoolExecutor(max_workers=len(slices)) as executor:
            futures = {executor.submit(_paint_thread_slice, job, buffer, s, abort): s for s in slices}
            results = _collect(futures, self.backend)

        return buffer, results

    def _draw_processes(self, job: PixelJob, total_bytes: int,
                        slices: Sequence[BufferSlice]) -> Tuple[np.ndarray, List[SliceResult]]:
        abort = mp.Event()

        with ProcessPoolExecutor(max_workers=len(slices),
                                 initializer=_init_process_worker,
                                 initargs=(abort,)) as executor:
            futures = {executor.submit(_paint_process_slice, job, s): s for s in slices}
            results = _collect(futures, self.backend)

        buffer = np.zeros(total_bytes, dtype=np.uint8)
        by_id = {s.slice_id: s for s in slices}
        for result in results:
            buffer_slice = by_id[result.slice_id]
            buffer[buffer_slice.start:buffer_slice.end] = result.data
        return buffer, results
