"""
Coloring techniques and color combination for fractal rendering.

A coloring technique maps one ``IterationResult`` plus a scalar color
parameter to a ``Color``. Several techniques may run per pixel; their
colors are then merged by a combination function such as ``first_color``,
``average_colors`` or ``WeightedCombination``.
"""

import math
from typing import Callable, Dict, List, Sequence, Type
from abc import ABC, abstractmethod
import logging

from ..core.math_functions import IterationResult, clamp, phase
from .color import Color

logger = logging.getLogger(__name__)

CombinationFunction = Callable[[Sequence[Color]], Color]


class ColoringTechnique(ABC):
    """Abstract base class for coloring techniques."""

    name = "technique"

    @abstractmethod
    def colorize(self, result: IterationResult, color: float) -> Color:
        """
        Compute the color of a single pixel.

        Args:
            result: Iteration result for the pixel
            color: Color parameter, conventionally in [0, 1)

        Returns:
            Pixel color
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class PhaseMagnitudeColoring(ColoringTechnique):
    """
    Blend phase, magnitude and escape time of the final value into one color.

    The argument of the final number, its squared modulus and the fraction of
    the iteration budget used are each turned into a grey level. Their mean
    tints a hue picked by the color parameter, which is then mixed with an
    HSV color derived from phase and magnitude. The result is brightened by
    0.2 and its contrast raised by 2.5.
    """

    name = "phase_magnitude"

    def colorize(self, result: IterationResult, color: float) -> Color:
        iteration = clamp(result.iterations / float(result.max_iterations), 0.0, 1.0)

        # sin of the phase spans [-1, 1], shifted into [0, 1]
        phase_level = clamp((math.sin(phase(result.final_number)) + 1.0) / 2.0, 0.0, 1.0)

        final = result.final_number
        magnitude = final.real * final.real + final.imag * final.imag
        magnitude = clamp(magnitude / 8.0 if magnitude >= 4.0 else magnitude / 2.0, 0.0, 1.0)

        mix_color = Color.from_hsv(phase_level, magnitude * phase_level, 1.0 - magnitude)
        hue_color = Color.from_hsl(color, 0.7, 0.7)
        phase_color = Color(phase_level, phase_level, phase_level)
        magnitude_color = Color(magnitude, magnitude, magnitude)
        iteration_color = Color(iteration, iteration, iteration)

        r = (hue_color.r * ((phase_color.r + magnitude_color.r + iteration_color.r) / 3.0) * 3.0
             + mix_color.r) / 4.0
        g = (hue_color.g * ((phase_color.g + magnitude_color.g + iteration_color.g) / 3.0) * 3.0
             + mix_color.g) / 4.0
        b = (hue_color.b * ((phase_color.b + magnitude_color.b + iteration_color.b) / 3.0) * 3.0
             + mix_color.b) / 4.0

        return Color(r, g, b).brightness(0.2).contrast(2.5)


class EscapeTimeColoring(ColoringTechnique):
    """Grey level proportional to the fraction of the iteration budget used."""

    name = "escape_time"

    def colorize(self, result: IterationResult, color: float) -> Color:
        level = result.get_normalized_iterations()
        return Color(level, level, level)


def first_color(colors: Sequence[Color]) -> Color:
    """Combination that keeps the color of the first technique."""
    if not colors:
        raise ValueError("first_color requires at least one color")
    return colors[0]


def average_colors(colors: Sequence[Color]) -> Color:
    """Combination that averages the colors of all techniques."""
    return Color.average(*colors)


class WeightedCombination:
    """
    Combination that applies ``Color.weighted_sum`` with fixed weights.

    Instances are picklable and may be sent to worker processes.
    """

    def __init__(self, weights: Sequence[float]):
        if not weights:
            raise ValueError("WeightedCombination requires at least one weight")
        self.weights = tuple(float(w) for w in weights)

    def __call__(self, colors: Sequence[Color]) -> Color:
        return Color.weighted_sum(colors, self.weights)

    def __repr__(self) -> str:
        return f"WeightedCombination({list(self.weights)})"


COMBINATIONS: Dict[str, CombinationFunction] = {
    'first': first_color,
    'average': average_colors,
}


def get_combination(name: str) -> CombinationFunction:
    """Get a combination function by name."""
    if name not in COMBINATIONS:
        available = ', '.join(COMBINATIONS.keys())
        raise ValueError(f"Unknown combination '{name}'. Available: {available}")
    return COMBINATIONS[name]


class TechniqueRegistry:
    """Registry for managing available coloring techniques."""

    _techniques: Dict[str, Type[ColoringTechnique]] = {
        'phase_magnitude': PhaseMagnitudeColoring,
        'escape_time': EscapeTimeColoring,
    }

    @classmethod
    def register(cls, name: str, technique_class: Type[ColoringTechnique]) -> None:
        """Register a custom coloring technique."""
        if not isinstance(technique_class, type) or not issubclass(technique_class, ColoringTechnique):
            raise ValueError("Technique class must inherit from ColoringTechnique")
        cls._techniques[name.lower()] = technique_class
        logger.info(f"Registered coloring technique: {name}")

    @classmethod
    def unregister(cls, name: str) -> None:
        if cls._techniques.pop(name.lower(), None) is not None:
            logger.info(f"Unregistered coloring technique: {name}")

    @classmethod
    def get(cls, name: str) -> Type[ColoringTechnique]:
        """Get a coloring technique class by name."""
        technique_class = cls._techniques.get(name.lower())
        if technique_class is None:
            available = ', '.join(cls._techniques.keys())
            raise ValueError(f"Unknown coloring technique '{name}'. Available: {available}")
        return technique_class

    @classmethod
    def create(cls, name: str) -> ColoringTechnique:
        return cls.get(name)()

    @classmethod
    def create_all(cls, names: Sequence[str]) -> List[ColoringTechnique]:
        """Create technique instances in the given order."""
        return [cls.create(name) for name in names]

    @classmethod
    def list_techniques(cls) -> Dict[str, str]:
        """Get a dictionary of available techniques and their descriptions."""
        result = {}
        for name, technique_class in cls._techniques.items():
            doc = (technique_class.__doc__ or '').strip()
            result[name] = doc.splitlines()[0] if doc else name
        return result
