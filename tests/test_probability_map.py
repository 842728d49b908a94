#!/usr/bin/env python3
"""
Tests for probability map generation, origin selection and map outputs
"""

import numpy as np
import pytest
import rasterio

from fire_risk_model.config import WeatherObservation, ModelConfig
from fire_risk_model.terrain import InvalidGridDimensions
from fire_risk_model.predict import (
    ProbabilityMapGenerator, RiskScorer, RiskCell, classify_risk,
    select_spread_origin, risk_distribution, shape_prediction,
    estimate_model_accuracy, grid_to_array, save_probability_map,
)

HOT_DRY = WeatherObservation(temperature=40, humidity=10, wind_speed=30, wind_direction=0, precipitation=0)
COLD_WET = WeatherObservation(temperature=5, humidity=95, wind_speed=0, wind_direction=0, precipitation=30)


def make_generator(seed=0):
    return ProbabilityMapGenerator(scorer=RiskScorer(rng=np.random.default_rng(seed)))


def test_grid_90_by_90_has_nine_cells():
    grid = make_generator().generate(WeatherObservation(), ModelConfig(), 90, 90)

    assert len(grid) == 9
    assert {(cell.x, cell.y) for cell in grid} == {(x, y) for x in (0, 30, 60) for y in (0, 30, 60)}


def test_grid_order_is_x_then_y():
    grid = make_generator().generate(WeatherObservation(), ModelConfig(), 90, 60)

    assert [(cell.x, cell.y) for cell in grid] == [
        (0, 0), (0, 30),
        (30, 0), (30, 30),
        (60, 0), (60, 30),
    ]


def test_partial_cells_are_included():
    grid = make_generator().generate(WeatherObservation(), ModelConfig(), 100, 31)
    assert [(cell.x, cell.y) for cell in grid] == [
        (0, 0), (0, 30), (30, 0), (30, 30), (60, 0), (60, 30), (90, 0), (90, 30),
    ]


@pytest.mark.parametrize("width, height", [(0, 90), (90, -5)])
def test_invalid_dimensions(width, height):
    with pytest.raises(InvalidGridDimensions):
        make_generator().generate(WeatherObservation(), ModelConfig(), width, height)


def test_cells_are_classified_and_clamped():
    grid = make_generator(3).generate(WeatherObservation(), ModelConfig(), 600, 400)

    for cell in grid:
        assert 0.0 <= cell.probability <= 1.0
        assert cell.risk == classify_risk(cell.probability)


def test_same_seed_same_grid():
    first = make_generator(11).generate(WeatherObservation(), ModelConfig(), 300, 300)
    second = make_generator(11).generate(WeatherObservation(), ModelConfig(), 300, 300)
    assert first == second


def test_call_rng_overrides_scorer_rng():
    generator = make_generator(5)
    first = generator.generate(WeatherObservation(), ModelConfig(), 120, 120, rng=np.random.default_rng(8))
    second = make_generator(8).generate(WeatherObservation(), ModelConfig(), 120, 120)
    assert first == second


def test_hot_dry_weather_gives_high_risk_origin():
    grid = make_generator().generate(HOT_DRY, ModelConfig(), 300, 300)
    origin = select_spread_origin(grid)

    assert origin is not None
    assert origin.risk == "high"
    assert (origin.x, origin.y) == (0, 0)


def test_cold_wet_weather_has_no_origin():
    grid = make_generator().generate(COLD_WET, ModelConfig(), 300, 300)

    assert all(cell.risk != "high" for cell in grid)
    assert select_spread_origin(grid) is None


def test_select_spread_origin_picks_first_high_cell():
    grid = [
        RiskCell(0, 0, 0.3, "low"),
        RiskCell(0, 30, 0.9, "high"),
        RiskCell(30, 0, 0.95, "high"),
    ]
    assert select_spread_origin(grid) == grid[1]
    assert select_spread_origin([]) is None


def test_risk_distribution():
    grid = [
        RiskCell(0, 0, 0.9, "high"),
        RiskCell(0, 30, 0.5, "moderate"),
        RiskCell(30, 0, 0.6, "moderate"),
        RiskCell(30, 30, 0.1, "nil"),
    ]
    distribution = risk_distribution(grid)

    assert distribution["high"] == {"count": 1, "percentage": 25.0}
    assert distribution["moderate"]["count"] == 2
    assert distribution["low"]["count"] == 0
    assert distribution["nil"]["percentage"] == 25.0
    assert risk_distribution([])["high"] == {"count": 0, "percentage": 0.0}


def test_shape_prediction_modes():
    grid = [RiskCell(0, 0, 0.8, "high"), RiskCell(0, 30, 0.3, "low")]

    binary = shape_prediction(grid, "binary")
    assert binary[0] == {"x": 0, "y": 0, "probability": 1.0, "risk": "high", "fire": True}
    assert binary[1]["fire"] is False
    assert binary[1]["probability"] == 0.0

    probabilistic = shape_prediction(grid, "probabilistic")
    assert probabilistic[1] == {"x": 0, "y": 30, "probability": 0.3, "risk": "low"}


def test_estimate_model_accuracy():
    neutral = WeatherObservation(temperature=25, humidity=50)
    unet = estimate_model_accuracy(neutral, ModelConfig(model="U-NET"), np.random.default_rng(0))
    lstm = estimate_model_accuracy(neutral, ModelConfig(model="LSTM"), np.random.default_rng(0))

    assert 90.0 <= unet < 95.0
    assert 85.3 <= lstm < 90.3
    assert unet - lstm == pytest.approx(92.5 - 87.8)

    extreme = WeatherObservation(temperature=-100, humidity=200)
    assert estimate_model_accuracy(extreme, ModelConfig(), np.random.default_rng(0)) == 75.0


def test_grid_to_array_layout():
    grid = make_generator().generate(WeatherObservation(), ModelConfig(), 90, 60)
    array = grid_to_array(grid, 90, 60)

    assert array.shape == (2, 3)
    for cell in grid:
        assert array[cell.y // 30, cell.x // 30] == pytest.approx(cell.probability)


def test_save_probability_map(tmp_path):
    grid = make_generator().generate(WeatherObservation(), ModelConfig(), 90, 60)
    path = save_probability_map(grid, 90, 60, str(tmp_path / "maps" / "probability.tif"))

    with rasterio.open(path) as src:
        data = src.read(1)
        assert src.count == 1
        assert data.shape == (2, 3)
        assert src.descriptions[0] == 'Fire_Probability'

    np.testing.assert_allclose(data, grid_to_array(grid, 90, 60))
