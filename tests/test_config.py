import json

import pytest

from fractal_painter.api import PainterConfig, draw_from_config
from fractal_painter.core.fractal_types import NewtonAlgorithm
from fractal_painter.io.config import ConfigManager, EnvironmentConfig
from fractal_painter.rendering.coloring import EscapeTimeColoring, WeightedCombination, average_colors


def _manager(environ=None):
    return ConfigManager(EnvironmentConfig(environ or {}))


def test_defaults_are_valid():
    config = PainterConfig()
    config.validate()
    assert config.algorithm == 'julia'
    assert config.max_iterations == 100
    assert config.techniques == ['phase_magnitude']
    assert config.backend == 'thread'


@pytest.mark.parametrize("changes", [
    {'width': -1},
    {'max_iterations': 0},
    {'techniques': []},
    {'techniques': ['rainbow']},
    {'algorithm': 'mandelbrot'},
    {'combination': 'median'},
    {'combination': 'weighted'},
    {'combination': 'weighted', 'weights': [1.0, 2.0]},
    {'backend': 'gpu'},
])
def test_validate_rejects(changes):
    config = PainterConfig(**changes)
    with pytest.raises(ValueError):
        config.validate()


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError, match="palette"):
        PainterConfig.from_dict({'palette': 'fire'})


def test_collaborators():
    config = PainterConfig(algorithm='newton', max_iterations=12,
                           techniques=['escape_time', 'phase_magnitude'],
                           combination='weighted', weights=[1.0, 1.0])
    config.validate()
    algorithm = config.create_algorithm()
    assert isinstance(algorithm, NewtonAlgorithm)
    assert algorithm.max_iterations == 12
    assert isinstance(config.create_techniques()[0], EscapeTimeColoring)
    assert isinstance(config.create_combination(), WeightedCombination)

    config.combination = 'average'
    assert config.create_combination() is average_colors


def test_save_and_load(tmp_path):
    path = tmp_path / "painter.json"
    original = PainterConfig(width=32, height=24, algorithm='julia_exp4', motion=0.25, workers=3)
    ConfigManager.save(original, path)

    assert json.loads(path.read_text())['algorithm'] == 'julia_exp4'
    assert _manager().load(path) == original


def test_load_layers_file_environment_and_overrides(tmp_path):
    path = tmp_path / "painter.json"
    path.write_text(json.dumps({'width': 32, 'height': 24, 'workers': 2}))

    manager = _manager({'FRACTAL_PAINTER_WORKERS': '5',
                        'FRACTAL_PAINTER_TECHNIQUES': 'escape_time, phase_magnitude'})
    config = manager.load(path, {'height': 10, 'algorithm': None})

    assert config.width == 32
    assert config.height == 10
    assert config.workers == 5
    assert config.techniques == ['escape_time', 'phase_magnitude']
    assert config.algorithm == 'julia'


def test_environment_overrides():
    overrides = EnvironmentConfig({
        'FRACTAL_PAINTER_MOTION': '0.5',
        'FRACTAL_PAINTER_WORKERS': 'auto',
        'FRACTAL_PAINTER_WEIGHTS': '1, 0.5',
        'OTHER_WIDTH': '10',
    }).get_overrides()
    assert overrides == {'motion': 0.5, 'workers': None, 'weights': [1.0, 0.5]}


def test_invalid_environment_value():
    with pytest.raises(ValueError, match="FRACTAL_PAINTER_WIDTH"):
        EnvironmentConfig({'FRACTAL_PAINTER_WIDTH': 'wide'}).get_overrides()


def test_load_rejects_invalid_file(tmp_path):
    path = tmp_path / "painter.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        _manager().load(path)

    path.write_text(json.dumps({'backend': 'gpu'}))
    with pytest.raises(ValueError):
        _manager().load(path)


def test_draw_from_config():
    config = PainterConfig(width=6, height=4, max_iterations=10, workers=2)
    buffer, painter = draw_from_config(config, zoom=((0, 0), (3, 2)))
    assert buffer.size == 6 * 4 * 4
    assert painter.zoom_level == pytest.approx(2.0)
