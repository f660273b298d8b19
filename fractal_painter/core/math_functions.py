"""
Core mathematical functions for fractal iteration.

This module provides the complex-number extensions used by the iteration
algorithms, together with the immutable result container they produce.
All arithmetic follows IEEE-754 semantics: degenerate inputs yield
``inf``/``nan`` values instead of raising, so numeric edge cases propagate
to the caller unchanged.
"""

import numpy as np
from typing import Union
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

Number = Union[int, float, complex]


def clamp(value: float, minimum: float, maximum: float) -> float:
    """
    Clamp a value into ``[minimum, maximum]``.

    NaN is neither below nor above any bound, so it passes through untouched.
    """
    if value < minimum:
        return minimum
    if value > maximum:
        return maximum
    return value


def magnitude(z: Number) -> float:
    """Modulus of a complex number, ``inf`` on overflow."""
    with np.errstate(over='ignore', invalid='ignore'):
        return float(np.abs(z))


def phase(z: Number) -> float:
    """Argument of a complex number in ``(-pi, pi]``."""
    return float(np.angle(z))


def complex_pow(z: Number, power: float) -> complex:
    """
    Raise a complex number to a real power using its polar form.

    The magnitude is computed as ``exp(ln|z| * power)`` and the phase as
    ``phase(z) * power``. A zero base with a negative power gives ``inf``/``nan``
    components; this is not guarded.

    Args:
        z: Complex base
        power: Real exponent

    Returns:
        The complex power
    """
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        exp = np.exp(np.log(np.abs(z)) * power)
        angle = np.angle(z) * power
        return complex(float(np.cos(angle) * exp), float(np.sin(angle) * exp))


def complex_abs(z: Number) -> complex:
    """Component-wise absolute value ``(|Re z|, |Im z|)``, not the modulus."""
    z = complex(z)
    return complex(abs(z.real), abs(z.imag))


def ieee_divide(numerator: Number, denominator: Number) -> complex:
    """
    Divide two complex numbers without raising on a zero denominator.

    Python's ``complex`` division raises ``ZeroDivisionError``; numpy's
    follows IEEE-754 and produces ``inf``/``nan`` components instead.
    """
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        return complex(np.complex128(numerator) / np.complex128(denominator))


def ieee_divide_real(numerator: float, denominator: float) -> float:
    """Real counterpart of :func:`ieee_divide`."""
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        return float(np.float64(numerator) / np.float64(denominator))


def is_finite(z: Number) -> bool:
    """True when both components of ``z`` are finite."""
    z = complex(z)
    return bool(np.isfinite(z.real) and np.isfinite(z.imag))


@dataclass(frozen=True)
class IterationResult:
    """
    Outcome of a single fractal algorithm invocation.

    Attributes:
        original_number: Starting point ``z0``
        final_number: Value of ``z`` when the loop stopped
        iterations: Loop index at early termination, or ``max_iterations``
            when the loop ran to completion
        max_iterations: Iteration budget the algorithm was configured with
    """

    original_number: complex
    final_number: complex
    iterations: int
    max_iterations: int

    @property
    def completed(self) -> bool:
        """True when the iteration budget was exhausted without stopping early."""
        return self.iterations >= self.max_iterations

    def get_normalized_iterations(self) -> float:
        """Iteration count as a fraction of the budget, clamped to [0, 1]."""
        return clamp(self.iterations / float(self.max_iterations), 0.0, 1.0)
