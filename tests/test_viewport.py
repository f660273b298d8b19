import pytest

from fractal_painter.api import (
    DEFAULT_BOTTOM_RIGHT, DEFAULT_TOP_LEFT, FractalPainter, Viewport, reset_viewport,
    resize_viewport, step_parameter, zoom_viewport,
)


@pytest.fixture
def viewport():
    return reset_viewport(Viewport(100, 50))


def test_reset_viewport(viewport):
    assert viewport.top_left == DEFAULT_TOP_LEFT
    assert viewport.bottom_right == DEFAULT_BOTTOM_RIGHT
    assert viewport.increment == pytest.approx(complex(0.04, 0.08))
    assert viewport.zoom_level == 1.0
    assert viewport.buffer_size == 100 * 50 * 4


def test_to_fractal_space_corners(viewport):
    assert viewport.to_fractal_space(0, 0) == -2 - 2j
    assert viewport.to_fractal_space(100, 50) == 2 + 2j
    assert viewport.to_fractal_space(50, 25) == 0j


def test_coordinate_round_trip(viewport):
    for z in (0.3 - 1.1j, -1.9 + 1.9j, 1.5 + 0.25j):
        x, y = viewport.to_bitmap_space(z)
        assert viewport.to_fractal_space(x, y) == pytest.approx(z)


def test_zoom_full_frame_is_identity(viewport):
    zoomed = zoom_viewport(viewport, (0, 0), (100, 50))
    assert zoomed.zoom_level == pytest.approx(1.0)
    assert zoomed.top_left == pytest.approx(viewport.top_left)
    assert zoomed.bottom_right == pytest.approx(viewport.bottom_right)


def test_zoom_into_center(viewport):
    zoomed = zoom_viewport(viewport, (25, 12.5), (75, 37.5))
    assert zoomed.top_left == pytest.approx(-1 - 1j)
    assert zoomed.bottom_right == pytest.approx(1 + 1j)
    assert zoomed.zoom_level == pytest.approx(2.0)
    assert zoomed.increment == pytest.approx(complex(0.02, 0.04))
    # the original viewport is untouched
    assert viewport.zoom_level == 1.0


def test_zoom_twice_compounds(viewport):
    zoomed = zoom_viewport(zoom_viewport(viewport, (25, 12.5), (75, 37.5)), (25, 12.5), (75, 37.5))
    assert zoomed.zoom_level == pytest.approx(4.0)
    assert zoomed.top_left == pytest.approx(-0.5 - 0.5j)


def test_zoom_without_real_extent_raises(viewport):
    with pytest.raises(ValueError):
        zoom_viewport(viewport, (10, 0), (10, 50))


def test_zoom_without_imaginary_extent_raises(viewport):
    with pytest.raises(ValueError):
        zoom_viewport(viewport, (20, 25), (80, 25))

    painter = FractalPainter(10, 10)
    with pytest.raises(ValueError):
        painter.zoom((2, 5), (8, 5))
    # the rejected zoom leaves the viewport usable
    assert painter.to_bitmap_space(0j) == pytest.approx((5.0, 5.0))


@pytest.mark.parametrize("width, height", [(0, 10), (10, 0)])
def test_empty_frame_mapping_raises(width, height):
    painter = FractalPainter(width, height)
    with pytest.raises(ValueError):
        painter.zoom((0, 0), (0, 10))
    with pytest.raises(ValueError):
        painter.to_fractal_space((0, 0))


def test_resize_keeps_rectangle(viewport):
    resized = resize_viewport(zoom_viewport(viewport, (25, 12.5), (75, 37.5)), 40, 30)
    assert (resized.width, resized.height) == (40, 30)
    assert resized.top_left == pytest.approx(-1 - 1j)
    assert resized.to_fractal_space(40, 30) == pytest.approx(1 + 1j)
    with pytest.raises(ValueError):
        resize_viewport(viewport, -1, 10)


def test_step_parameter_wraps():
    assert step_parameter(0.0) == pytest.approx(0.05)
    assert step_parameter(0.97) == 0.0
    assert step_parameter(0.5, step=0.25) == pytest.approx(0.75)


def test_painter_viewport_state():
    painter = FractalPainter(80, 60, workers=2)
    assert (painter.width, painter.height) == (80, 60)
    assert painter.zoom_level == 1.0
    assert painter.increment == pytest.approx(complex(0.05, 4.0 / 60))

    painter.zoom((20, 15), (60, 45))
    assert painter.zoom_level == pytest.approx(2.0)
    assert painter.to_fractal_space((0, 0)) == pytest.approx(painter.top_left)
    assert painter.to_bitmap_space(painter.bottom_right) == pytest.approx((80, 60))

    painter.reset()
    assert painter.top_left == DEFAULT_TOP_LEFT
    assert painter.zoom_level == 1.0

    painter.resize(10, 10)
    assert painter.width == 10


def test_painter_rejects_bad_arguments():
    with pytest.raises(ValueError):
        FractalPainter(-1, 10)
    with pytest.raises(ValueError):
        FractalPainter(10, 10, backend='gpu')
