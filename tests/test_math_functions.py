import math

import pytest

from fractal_painter.core.math_functions import (
    IterationResult, clamp, complex_abs, complex_pow, ieee_divide, ieee_divide_real, is_finite,
    magnitude, phase,
)


def test_clamp_bounds():
    assert clamp(-0.5, 0.0, 1.0) == 0.0
    assert clamp(1.5, 0.0, 1.0) == 1.0
    assert clamp(0.25, 0.0, 1.0) == 0.25


def test_clamp_passes_nan_through():
    assert math.isnan(clamp(float('nan'), 0.0, 1.0))


def test_magnitude_and_phase():
    assert magnitude(3 + 4j) == pytest.approx(5.0)
    assert phase(1j) == pytest.approx(math.pi / 2)
    assert phase(-1 + 0j) == pytest.approx(math.pi)


def test_complex_pow_matches_builtin_power():
    z = 0.3 - 1.2j
    for power in (2, 3, 5, 2.5):
        expected = z ** power
        result = complex_pow(z, power)
        assert result.real == pytest.approx(expected.real, abs=1e-12)
        assert result.imag == pytest.approx(expected.imag, abs=1e-12)


def test_complex_pow_of_zero():
    assert complex_pow(0j, 2) == 0j
    assert not is_finite(complex_pow(0j, -1.0))


def test_complex_abs_is_componentwise():
    assert complex_abs(-1 - 2j) == 1 + 2j
    assert complex_abs(3 - 0j) == 3 + 0j


def test_ieee_divide_by_zero_does_not_raise():
    assert not is_finite(ieee_divide(1 + 0j, 0j))
    assert ieee_divide(4 + 2j, 2) == 2 + 1j
    assert ieee_divide_real(1.0, 0.0) == math.inf
    assert math.isnan(ieee_divide_real(0.0, 0.0))


def test_iteration_result():
    result = IterationResult(0j, 1 + 1j, 25, 100)
    assert not result.completed
    assert result.get_normalized_iterations() == pytest.approx(0.25)

    exhausted = IterationResult(0j, 0j, 100, 100)
    assert exhausted.completed
    assert exhausted.get_normalized_iterations() == 1.0
