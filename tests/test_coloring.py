import math
import pickle

import pytest

from fractal_painter.core.math_functions import IterationResult
from fractal_painter.rendering.color import BLACK, WHITE, Color
from fractal_painter.rendering.coloring import (
    COMBINATIONS, ColoringTechnique, EscapeTimeColoring, PhaseMagnitudeColoring, TechniqueRegistry,
    WeightedCombination, average_colors, first_color, get_combination,
)


def test_phase_magnitude_reference_value():
    # phase 0, magnitude 0 and a used-up budget with color 0
    result = IterationResult(0j, 0j, 100, 100)
    color = PhaseMagnitudeColoring().colorize(result, 0.0)
    assert color.r == 1.0
    assert color.g == pytest.approx(0.834375)
    assert color.b == pytest.approx(0.834375)
    assert color.a == 1.0


def test_phase_magnitude_stays_in_range():
    technique = PhaseMagnitudeColoring()
    for final in (0.3 + 0.1j, -5 + 2j, 1e6j):
        for color in (0.0, 0.35, 0.9):
            result = IterationResult(0j, final, 7, 50)
            for channel in technique.colorize(result, color).to_argb():
                assert 0.0 <= channel <= 1.0


def test_phase_magnitude_propagates_nan():
    result = IterationResult(0j, complex(float('nan'), float('inf')), 10, 10)
    color = PhaseMagnitudeColoring().colorize(result, 0.5)
    assert math.isnan(color.r)
    assert math.isnan(color.g)
    assert math.isnan(color.b)
    assert color.a == 1.0
    # NaN channels encode as zero bytes
    assert color.to_bgra_bytes() == (0, 0, 0, 255)


def test_escape_time_grey_level():
    color = EscapeTimeColoring().colorize(IterationResult(0j, 3 + 0j, 25, 100), 0.8)
    assert color == Color(0.25, 0.25, 0.25)


def test_first_color():
    assert first_color([WHITE, BLACK]) is WHITE
    with pytest.raises(ValueError):
        first_color([])


def test_average_colors():
    assert average_colors([WHITE, BLACK]) == Color(0.5, 0.5, 0.5)
    with pytest.raises(ValueError):
        average_colors([])


def test_weighted_combination():
    combine = WeightedCombination([2, 0])
    assert combine([WHITE, BLACK]) == WHITE
    assert pickle.loads(pickle.dumps(combine)).weights == (2.0, 0.0)
    with pytest.raises(ValueError):
        WeightedCombination([])
    with pytest.raises(ValueError):
        combine([WHITE])


def test_get_combination():
    assert get_combination('first') is first_color
    assert get_combination('average') is average_colors
    assert set(COMBINATIONS) == {'first', 'average'}
    with pytest.raises(ValueError, match="first"):
        get_combination('median')


def test_technique_registry():
    techniques = TechniqueRegistry.create_all(['escape_time', 'phase_magnitude'])
    assert [type(t) for t in techniques] == [EscapeTimeColoring, PhaseMagnitudeColoring]

    listing = TechniqueRegistry.list_techniques()
    assert set(listing) >= {'phase_magnitude', 'escape_time'}
    assert listing['escape_time'].startswith("Grey level")

    with pytest.raises(ValueError, match="phase_magnitude"):
        TechniqueRegistry.get('rainbow')


class _Red(ColoringTechnique):
    """Always red."""

    def colorize(self, result, color):
        return Color(1.0, 0.0, 0.0)


def test_technique_registry_custom():
    TechniqueRegistry.register('red', _Red)
    try:
        assert isinstance(TechniqueRegistry.create('red'), _Red)
        assert TechniqueRegistry.list_techniques()['red'] == "Always red."
    finally:
        TechniqueRegistry.unregister('red')

    with pytest.raises(ValueError):
        TechniqueRegistry.register('bad', object)
