"""
Fractal algorithm definitions and registry.

This module defines the fractal algorithms as configurable classes sharing a
single ``calculate`` contract, providing a plugin-style architecture where
new formulas can be added and selected by name.
"""

import math
from typing import Dict, Tuple, Type
from abc import ABC, abstractmethod
import logging

from .math_functions import (
    IterationResult, complex_abs, complex_pow, ieee_divide, magnitude
)

logger = logging.getLogger(__name__)

# Escape-time algorithms stop once |z| reaches this radius
ESCAPE_RADIUS = 2.0

# Modulus of the Julia constant, rotated around the origin by the motion angle
JULIA_CONSTANT_MODULUS = 0.7885

# Newton iteration stops once consecutive values are closer than this
NEWTON_TOLERANCE = 1e-5


def motion_angle(motion: float) -> float:
    """Convert a motion parameter, conventionally in [0, 1), to an angle."""
    return 2.0 * math.pi * motion


def julia_constant(motion: float) -> complex:
    """Julia constant ``0.7885 * (cos theta, sin theta)`` for a motion value."""
    theta = motion_angle(motion)
    return complex(math.cos(theta), math.sin(theta)) * JULIA_CONSTANT_MODULUS


class FractalAlgorithm(ABC):
    """Abstract base class for fractal algorithms."""

    name = "fractal"

    def __init__(self, max_iterations: int = 100):
        """
        Initialize fractal algorithm.

        Args:
            max_iterations: Iteration budget for every ``calculate`` call
        """
        if not isinstance(max_iterations, int) or isinstance(max_iterations, bool):
            raise ValueError("max_iterations must be an integer")
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        self.max_iterations = max_iterations

    @abstractmethod
    def calculate(self, number: complex, motion: float) -> IterationResult:
        """
        Iterate the formula starting from ``number``.

        Implementations must be pure: they are called concurrently from
        several workers without synchronization.

        Args:
            number: Starting point in the complex plane
            motion: Animation parameter, converted to an angle ``2*pi*motion``

        Returns:
            IterationResult describing where and when the iteration stopped
        """
        pass

    def get_description(self) -> str:
        """Get a description of this fractal algorithm."""
        return f"{self.name} fractal"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(max_iterations={self.max_iterations})"


class EscapeTimeAlgorithm(FractalAlgorithm):
    """
    Base class for algorithms that iterate until ``|z| >= 2``.

    Subclasses supply ``prepare``, which turns the motion parameter into the
    per-call constants of the formula, and ``step``, which applies it once.
    """

    def prepare(self, motion: float) -> Tuple[float, ...]:
        """Per-call constants derived from the motion parameter."""
        return (julia_constant(motion),)

    @abstractmethod
    def step(self, z: complex, constants: Tuple[float, ...]) -> complex:
        """Apply one iteration of the formula."""
        pass

    def calculate(self, number: complex, motion: float) -> IterationResult:
        """Iterate ``step`` until the value escapes or the budget runs out."""
        constants = self.prepare(motion)
        z = complex(number)
        iterations = 0
        while iterations < self.max_iterations:
            z = self.step(z, constants)
            if magnitude(z) >= ESCAPE_RADIUS:
                break
            iterations += 1
        return IterationResult(complex(number), z, iterations, self.max_iterations)


class JuliaAlgorithm(EscapeTimeAlgorithm):
    """Julia set: ``z -> z^2 + c``."""

    name = "julia"

    def step(self, z, constants):
        c, = constants
        return complex_pow(z, 2) + c

    def get_description(self) -> str:
        return "Julia set: z_{n+1} = z_n^2 + c, where c = 0.7885 * e^(i*2*pi*motion)"


class JuliaExp4Algorithm(EscapeTimeAlgorithm):
    """Julia variant with a motion-dependent exponent applied to ``|Re z| + i|Im z|``."""

    name = "julia_exp4"

    @staticmethod
    def exponent(motion: float) -> float:
        """Exponent ``((cos theta + 1) / 2) * 5 + 2``, ranging over [2, 7]."""
        return ((math.cos(motion_angle(motion)) + 1.0) / 2.0) * 5.0 + 2.0

    def prepare(self, motion):
        return julia_constant(motion), self.exponent(motion)

    def step(self, z, constants):
        c, e = constants
        return complex_pow(complex_abs(z), e) + c

    def get_description(self) -> str:
        return ("Julia exp4: z_{n+1} = (|Re(z_n)| + i|Im(z_n)|)^e + c, "
                "where e = ((cos(2*pi*motion) + 1) / 2) * 5 + 2")


class JuliaExp5Algorithm(EscapeTimeAlgorithm):
    """Quintic Julia set: ``z -> z^5 + c``."""

    name = "julia_exp5"

    def step(self, z, constants):
        c, = constants
        return complex_pow(z, 5) + c

    def get_description(self) -> str:
        return "Julia exp5: z_{n+1} = z_n^5 + c"


class NewtonAlgorithm(FractalAlgorithm):
    """
    Newton's method on ``f(x) = x^e - 1``.

    The exponent ``e = ((sin theta + 1) / 2) * 3 + 2.5`` sweeps [2.5, 5.5] as
    the motion parameter goes round. Iteration stops once two consecutive
    values are within ``NEWTON_TOLERANCE``; the final number is the last value
    accepted before that step. A vanishing derivative is not guarded against,
    so the resulting ``nan``/``inf`` flows through to the result.
    """

    name = "newton"

    @staticmethod
    def exponent(motion: float) -> float:
        return ((math.sin(motion_angle(motion)) + 1.0) / 2.0) * 3.0 + 2.5

    @staticmethod
    def function(z: complex, exponent: float) -> complex:
        return complex_pow(z, exponent) - 1.0

    @staticmethod
    def derivative(z: complex, exponent: float) -> complex:
        return complex_pow(z, exponent - 1.0) * exponent

    def newton_step(self, z: complex, exponent: float) -> complex:
        """One Newton update ``z - f(z) / f'(z)``."""
        return z - ieee_divide(self.function(z, exponent), self.derivative(z, exponent))

    def calculate(self, number: complex, motion: float) -> IterationResult:
        e = self.exponent(motion)
        z = complex(number)
        iterations = 0
        while iterations < self.max_iterations:
            new_z = self.newton_step(z, e)
            # nan distances never compare <= tolerance, so degenerate orbits run out the budget
            if magnitude(new_z - z) <= NEWTON_TOLERANCE:
                break
            z = new_z
            iterations += 1
        return IterationResult(complex(number), z, iterations, self.max_iterations)

    def get_description(self) -> str:
        return ("Newton: z_{n+1} = z_n - f(z_n) / f'(z_n), f(x) = x^e - 1, "
                "where e = ((sin(2*pi*motion) + 1) / 2) * 3 + 2.5")


class FractalRegistry:
    """Registry for managing available fractal algorithms."""

    _algorithms: Dict[str, Type[FractalAlgorithm]] = {
        'julia': JuliaAlgorithm,
        'julia_exp4': JuliaExp4Algorithm,
        'julia_exp5': JuliaExp5Algorithm,
        'newton': NewtonAlgorithm,
    }

    @classmethod
    def register(cls, name: str, algorithm_class: Type[FractalAlgorithm]) -> None:
        """
        Register a new fractal algorithm.

        Args:
            name: Unique identifier for the algorithm
            algorithm_class: Class implementing the algorithm
        """
        if not isinstance(algorithm_class, type) or not issubclass(algorithm_class, FractalAlgorithm):
            raise ValueError("Algorithm class must inherit from FractalAlgorithm")
        cls._algorithms[name.lower()] = algorithm_class
        logger.info(f"Registered fractal algorithm: {name}")

    @classmethod
    def unregister(cls, name: str) -> None:
        """Remove a previously registered algorithm."""
        if cls._algorithms.pop(name.lower(), None) is not None:
            logger.info(f"Unregistered fractal algorithm: {name}")

    @classmethod
    def get(cls, name: str) -> Type[FractalAlgorithm]:
        """
        Get an algorithm class by name.

        Args:
            name: Algorithm identifier

        Returns:
            Algorithm class
        """
        algorithm_class = cls._algorithms.get(name.lower())
        if algorithm_class is None:
            available = ', '.join(cls._algorithms.keys())
            raise ValueError(f"Unknown fractal algorithm '{name}'. Available: {available}")
        return algorithm_class

    @classmethod
    def create(cls, name: str, max_iterations: int = 100) -> FractalAlgorithm:
        """Create a configured algorithm instance by name."""
        return cls.get(name)(max_iterations)

    @classmethod
    def list_algorithms(cls) -> Dict[str, str]:
        """Get a dictionary of available algorithms and their descriptions."""
        return {name: algorithm_class().get_description()
                for name, algorithm_class in cls._algorithms.items()}
