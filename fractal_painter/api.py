"""
Main API classes for fractal drawing.

This module provides the high-level interface: the viewport state with its
pure transition functions, the ``FractalPainter`` that owns a viewport and
draws frames into BGRA byte buffers, and the ``PainterConfig`` used to build
a painter and its collaborators from plain settings.
"""

import numpy as np
from typing import Optional, Dict, Any, List, Sequence, Tuple
from dataclasses import dataclass, field, replace
import logging
import time

from .core.fractal_types import FractalAlgorithm, FractalRegistry
from .rendering.coloring import (
    COMBINATIONS, ColoringTechnique, CombinationFunction, TechniqueRegistry, WeightedCombination,
    get_combination,
)
from .acceleration.multiprocessing import (
    BACKENDS, BYTES_PER_PIXEL, ParallelDrawer, PixelJob, resolve_worker_count
)

logger = logging.getLogger(__name__)

# Width of the default viewport along the real axis
DEFAULT_EXTENT = 4.0
DEFAULT_TOP_LEFT = complex(-2.0, -2.0)
DEFAULT_BOTTOM_RIGHT = complex(2.0, 2.0)

Pixel = Tuple[float, float]


@dataclass(frozen=True)
class Viewport:
    """
    Rectangle of the complex plane mapped onto a ``width`` x ``height`` frame.

    Instances are immutable; use ``reset_viewport``, ``resize_viewport`` and
    ``zoom_viewport`` to derive new ones.
    """

    width: int
    height: int
    top_left: complex = DEFAULT_TOP_LEFT
    bottom_right: complex = DEFAULT_BOTTOM_RIGHT
    increment: complex = 0j
    zoom_level: float = 1.0

    @property
    def extent(self) -> complex:
        """Size of the viewport along both axes."""
        return self.bottom_right - self.top_left

    def to_fractal_space(self, x: float, y: float) -> complex:
        """Map pixel ``(x, y)`` to a point of the complex plane."""
        left = self.top_left.real
        top = self.top_left.imag
        return complex((x / self.width) * (self.bottom_right.real - left) + left,
                       (y / self.height) * (self.bottom_right.imag - top) + top)

    def to_bitmap_space(self, number: complex) -> Pixel:
        """Map a point of the complex plane to (possibly fractional) pixel coordinates."""
        dx = self.bottom_right.real - self.top_left.real
        dy = self.bottom_right.imag - self.top_left.imag
        px = (number.real - self.top_left.real) / dx
        py = (number.imag - self.top_left.imag) / dy
        return (px * self.width, py * self.height)

    @property
    def buffer_size(self) -> int:
        return self.width * self.height * BYTES_PER_PIXEL


def _increment(top_left: complex, bottom_right: complex, width: int, height: int) -> complex:
    return complex((bottom_right.real - top_left.real) / width if width else 0.0,
                   (bottom_right.imag - top_left.imag) / height if height else 0.0)


def _validate_dimensions(width: int, height: int) -> None:
    if width < 0 or height < 0:
        raise ValueError("Width and height must not be negative")


def reset_viewport(viewport: Viewport) -> Viewport:
    """Return the default ``(-2, -2)`` to ``(2, 2)`` viewport at the same frame size."""
    return replace(viewport,
                   top_left=DEFAULT_TOP_LEFT,
                   bottom_right=DEFAULT_BOTTOM_RIGHT,
                   increment=_increment(DEFAULT_TOP_LEFT, DEFAULT_BOTTOM_RIGHT,
                                        viewport.width, viewport.height),
                   zoom_level=1.0)


def resize_viewport(viewport: Viewport, width: int, height: int) -> Viewport:
    """Change the frame dimensions only; the complex-plane rectangle is kept."""
    _validate_dimensions(width, height)
    return replace(viewport, width=width, height=height)


def zoom_viewport(viewport: Viewport, pixel_from: Pixel, pixel_to: Pixel) -> Viewport:
    """
    Zoom to the rectangle spanned by two pixel corners.

    Both corners are mapped through the current viewport before anything
    changes. The zoom level is measured against the real extent of the
    default viewport.

    Args:
        viewport: Current viewport
        pixel_from: Pixel of the new top-left corner
        pixel_to: Pixel of the new bottom-right corner

    Returns:
        Zoomed viewport
    """
    if viewport.width == 0 or viewport.height == 0:
        raise ValueError("Cannot zoom an empty frame")

    new_from = viewport.to_fractal_space(*pixel_from)
    new_to = viewport.to_fractal_space(*pixel_to)

    new_dx = new_to.real - new_from.real
    if new_dx == 0:
        raise ValueError("Zoom rectangle has no extent along the real axis")
    new_dy = new_to.imag - new_from.imag
    if new_dy == 0:
        raise ValueError("Zoom rectangle has no extent along the imaginary axis")

    return replace(viewport,
                   top_left=new_from,
                   bottom_right=new_to,
                   increment=complex(new_dx / viewport.width, new_dy / viewport.height),
                   zoom_level=DEFAULT_EXTENT / new_dx)


def step_parameter(value: float, step: float = 0.05) -> float:
    """Advance an animation parameter by ``step``, wrapping to 0 once it reaches 1."""
    value += step
    if value >= 1.0:
        value = 0.0
    return value


@dataclass
class DrawStats:
    """Timing of the most recent draw."""
    width: int = 0
    height: int = 0
    workers: int = 0
    backend: str = ''
    elapsed_seconds: float = 0.0
    processing_seconds: float = 0.0

    @property
    def pixels_per_second(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return (self.width * self.height) / self.elapsed_seconds


class FractalPainter:
    """Main fractal drawing engine."""

    def __init__(self, width: int, height: int, workers: Optional[int] = None,
                 backend: str = 'thread'):
        """
        Initialize fractal painter.

        Args:
            width, height: Frame size in pixels
            workers: Default worker count for ``draw`` (None for CPU count)
            backend: Default parallel backend, 'thread' or 'process'
        """
        _validate_dimensions(width, height)
        if backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{backend}'. Available: {', '.join(BACKENDS)}")
        self.viewport = reset_viewport(Viewport(width, height))
        self.workers = workers
        self.backend = backend
        self.last_stats = DrawStats()

        logger.info(f"FractalPainter initialized: {width}x{height}, backend={backend}")

    @property
    def width(self) -> int:
        return self.viewport.width

    @property
    def height(self) -> int:
        return self.viewport.height

    @property
    def top_left(self) -> complex:
        return self.viewport.top_left

    @property
    def bottom_right(self) -> complex:
        return self.viewport.bottom_right

    @property
    def increment(self) -> complex:
        return self.viewport.increment

    @property
    def zoom_level(self) -> float:
        return self.viewport.zoom_level

    def reset(self) -> None:
        """Return to the default viewport."""
        self.viewport = reset_viewport(self.viewport)

    def resize(self, width: int, height: int) -> None:
        """Change the frame size. Call before ``draw`` whenever the surface size changes."""
        self.viewport = resize_viewport(self.viewport, width, height)

    def zoom(self, pixel_from: Pixel, pixel_to: Pixel) -> None:
        """Zoom into the rectangle spanned by two pixel corners."""
        self.viewport = zoom_viewport(self.viewport, pixel_from, pixel_to)
        logger.info(f"Zoomed to {self.viewport.top_left} .. {self.viewport.bottom_right} "
                    f"(zoom level {self.viewport.zoom_level:.4g})")

    def to_fractal_space(self, pixel: Pixel) -> complex:
        if self.width == 0 or self.height == 0:
            raise ValueError("An empty frame has no pixels to map")
        return self.viewport.to_fractal_space(*pixel)

    def to_bitmap_space(self, number: complex) -> Pixel:
        return self.viewport.to_bitmap_space(number)

    def draw(self, color: float, motion: float, algorithm: FractalAlgorithm,
             techniques: Sequence[ColoringTechnique], combine: CombinationFunction,
             workers: Optional[int] = None, backend: Optional[str] = None) -> np.ndarray:
        """
        Draw one frame.

        Every pixel is mapped to the complex plane, run through ``algorithm``,
        colored by each of ``techniques`` in order, and the resulting colors are
        merged by ``combine``. All of these are called concurrently and must be
        pure.

        Args:
            color: Color parameter passed to every technique
            motion: Motion parameter passed to the algorithm
            algorithm: Fractal algorithm
            techniques: Non-empty ordered sequence of coloring techniques
            combine: Function merging the per-technique colors into one
            workers: Worker count (falls back to the painter default, then CPU count)
            backend: 'thread' or 'process' (falls back to the painter default)

        Returns:
            Flat uint8 array of ``width * height * 4`` bytes, BGRA, row-major

        Raises:
            DrawError: If any worker failed; no partial buffer is returned
        """
        techniques = tuple(techniques)
        if not techniques:
            raise ValueError("At least one coloring technique is required")

        worker_count = resolve_worker_count(workers if workers is not None else self.workers)
        drawer = ParallelDrawer(worker_count, backend or self.backend)

        job = PixelJob(viewport=self.viewport, color=color, motion=motion,
                       algorithm=algorithm, techniques=techniques, combine=combine)

        start_time = time.time()
        logger.info(f"Starting draw: {algorithm!r} {self.width}x{self.height}, "
                    f"{worker_count} workers ({drawer.backend})")

        buffer = drawer.draw(job, self.viewport.buffer_size)

        elapsed = time.time() - start_time
        self.last_stats = DrawStats(width=self.width, height=self.height, workers=worker_count,
                                    backend=drawer.backend, elapsed_seconds=elapsed,
                                    processing_seconds=drawer.last_processing_time)
        logger.info(f"Draw complete: {elapsed:.2f}s")
        return buffer


@dataclass
class PainterConfig:
    """Configuration for fractal drawing."""

    # Frame parameters
    width: int = 800
    height: int = 600

    # Fractal parameters
    algorithm: str = 'julia'
    max_iterations: int = 100

    # Coloring
    techniques: List[str] = field(default_factory=lambda: ['phase_magnitude'])
    combination: str = 'first'
    weights: Optional[List[float]] = None
    color: float = 0.0
    motion: float = 0.0

    # Performance
    workers: Optional[int] = None
    backend: str = 'thread'

    def validate(self):
        """Validate configuration parameters."""
        if self.width < 0 or self.height < 0:
            raise ValueError("Width and height must not be negative")

        if self.max_iterations <= 0:
            raise ValueError("max_iterations must be positive")

        if not self.techniques:
            raise ValueError("techniques must name at least one coloring technique")

        if self.combination not in COMBINATIONS and self.combination != 'weighted':
            available = ', '.join(list(COMBINATIONS.keys()) + ['weighted'])
            raise ValueError(f"Unknown combination '{self.combination}'. Available: {available}")

        if self.combination == 'weighted':
            if not self.weights or len(self.weights) != len(self.techniques):
                raise ValueError("weighted combination needs one weight per technique")

        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{self.backend}'. Available: {', '.join(BACKENDS)}")

        # Unknown names raise with the list of available ones
        FractalRegistry.get(self.algorithm)
        for name in self.techniques:
            TechniqueRegistry.get(name)

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if not k.startswith('_')}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PainterConfig':
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown configuration parameter(s): {', '.join(sorted(unknown))}")
        return cls(**data)

    def create_painter(self) -> FractalPainter:
        self.validate()
        return FractalPainter(self.width, self.height, self.workers, self.backend)

    def create_algorithm(self) -> FractalAlgorithm:
        return FractalRegistry.create(self.algorithm, self.max_iterations)

    def create_techniques(self) -> List[ColoringTechnique]:
        return TechniqueRegistry.create_all(self.techniques)

    def create_combination(self) -> CombinationFunction:
        if self.combination == 'weighted':
            return WeightedCombination(self.weights)
        return get_combination(self.combination)


def draw_from_config(config: PainterConfig,
                     zoom: Optional[Tuple[Pixel, Pixel]] = None) -> Tuple[np.ndarray, FractalPainter]:
    """
    Build a painter from ``config`` and draw one frame.

    Args:
        config: Painter configuration
        zoom: Optional pair of pixel corners to zoom into before drawing

    Returns:
        Tuple of (buffer, painter)
    """
    painter = config.create_painter()
    if zoom is not None:
        painter.zoom(*zoom)
    buffer = painter.draw(config.color, config.motion, config.create_algorithm(),
                          config.create_techniques(), config.create_combination())
    return buffer, painter
