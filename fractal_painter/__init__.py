"""
Parallel fractal drawing library.

This library draws escape-time and Newton fractals into 32-bit BGRA pixel
buffers, splitting every frame across a pool of worker threads or processes.

Key Features:
- Julia, Julia exp4, Julia exp5 and Newton algorithms driven by a motion parameter
- Pluggable coloring techniques combined per pixel
- Double-precision RGBA color model with HSV/HSL conversions
- Viewport zooming with pixel/complex-plane coordinate mapping
- Deterministic output regardless of worker count or backend

Example usage:
    >>> from fractal_painter import FractalPainter, JuliaAlgorithm, PhaseMagnitudeColoring, first_color
    >>> painter = FractalPainter(width=320, height=240)
    >>> buffer = painter.draw(0.3, 0.0, JuliaAlgorithm(), [PhaseMagnitudeColoring()], first_color)
"""

__version__ = "1.0.0"
__author__ = "Fractal Painter Team"

from fractal_painter.core.fractal_types import (
    FractalAlgorithm, FractalRegistry, JuliaAlgorithm, JuliaExp4Algorithm, JuliaExp5Algorithm,
    NewtonAlgorithm,
)
from fractal_painter.core.math_functions import IterationResult
from fractal_painter.rendering.color import Color
from fractal_painter.rendering.coloring import (
    ColoringTechnique, EscapeTimeColoring, PhaseMagnitudeColoring, TechniqueRegistry,
    WeightedCombination, average_colors, first_color,
)
from fractal_painter.acceleration.multiprocessing import DrawError
from fractal_painter.io.config import ConfigManager

# Main API classes
from fractal_painter.api import FractalPainter, PainterConfig, Viewport, step_parameter

__all__ = [
    "FractalPainter",
    "PainterConfig",
    "Viewport",
    "step_parameter",
    "FractalAlgorithm",
    "FractalRegistry",
    "JuliaAlgorithm",
    "JuliaExp4Algorithm",
    "JuliaExp5Algorithm",
    "NewtonAlgorithm",
    "IterationResult",
    "Color",
    "ColoringTechnique",
    "PhaseMagnitudeColoring",
    "EscapeTimeColoring",
    "TechniqueRegistry",
    "WeightedCombination",
    "first_color",
    "average_colors",
    "DrawError",
    "ConfigManager",
]
