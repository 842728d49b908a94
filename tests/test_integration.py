#!/usr/bin/env python3
"""
Tests for the probability map -> ignition point -> spread pipeline
"""

import json

import numpy as np
import pytest
import rasterio

from fire_risk_model.config import WeatherObservation, ModelConfig
from fire_risk_model.terrain import InvalidGridDimensions
from fire_risk_model.cellular_automata.config import CAConfig, SimulationParams, SIMULATION_SCENARIOS
from fire_risk_model.cellular_automata.core import FireCell, FirePoint
from fire_risk_model.cellular_automata.integration import (
    RiskSpreadIntegration, quick_integrated_simulation, get_web_simulation_data,
)
from fire_risk_model.cellular_automata.utils import (
    field_to_array, count_fire_clusters, calculate_frame_statistics, make_json_serializable,
    create_fire_animation_data,
)

HOT_DRY = WeatherObservation(temperature=40, humidity=10, wind_speed=30, wind_direction=0, precipitation=0)
COLD_WET = WeatherObservation(temperature=5, humidity=95, wind_speed=0, wind_direction=0, precipitation=30)


def make_params(**overrides):
    values = dict(width=300, height=200, weather=HOT_DRY, simulation_hours=4, seed=42)
    values.update(overrides)
    return SimulationParams(**values)


# ---- Utilities ----

def test_field_to_array():
    field = {
        (0, 0): FireCell(0, 0, 0.9),
        (20, 10): FireCell(20, 10, 0.4),
    }
    array = field_to_array(field, 40, 30, pitch=10)

    assert array.shape == (3, 4)
    assert array[0, 0] == pytest.approx(0.9)
    assert array[1, 2] == pytest.approx(0.4)
    assert np.count_nonzero(array) == 2


def test_count_fire_clusters():
    frame = np.zeros((6, 6), dtype=np.float32)
    frame[0:2, 0:2] = 0.8
    frame[2, 2] = 0.5  # diagonal contact joins the first cluster
    frame[5, 5] = 0.9
    frame[4, 0] = 0.05  # below threshold

    assert count_fire_clusters(frame) == 2
    assert count_fire_clusters(np.zeros((3, 3))) == 0


def test_calculate_frame_statistics():
    field = {
        (0, 0): FireCell(0, 0, 0.9),
        (10, 0): FireCell(10, 0, 0.5),
        (20, 0): FireCell(20, 0, 0.05),
    }
    stats = calculate_frame_statistics(field, 3, cell_area_hectares=0.01)

    assert stats['time_step'] == 3
    assert stats['total_fire_cells'] == 3
    assert stats['burning_cells'] == 2
    assert stats['max_intensity'] == pytest.approx(0.9)
    assert stats['mean_intensity'] == pytest.approx(0.7)
    assert stats['burned_area_hectares'] == pytest.approx(0.03)

    empty = calculate_frame_statistics({}, 0, 0.01)
    assert empty['max_intensity'] == 0.0
    assert empty['mean_intensity'] == 0.0


def test_make_json_serializable():
    data = {
        'array': np.arange(3),
        'value': np.float32(0.5),
        'count': np.int64(4),
        'point': FirePoint(1, 2, 0.3),
        'origin': (10, 20),
    }
    converted = make_json_serializable(data)

    assert converted == {
        'array': [0, 1, 2],
        'value': 0.5,
        'count': 4,
        'point': {'x': 1, 'y': 2, 'intensity': 0.3},
        'origin': [10, 20],
    }
    json.dumps(converted)


# ---- Parameters ----

def test_simulation_params_defaults():
    params = SimulationParams()

    assert params.weather == WeatherObservation()
    assert params.model_config == ModelConfig()
    assert params.ignition_point is None


def test_simulation_params_from_dicts():
    params = SimulationParams(weather={'windSpeed': 40}, model_config={'model': 'LSTM'}, ignition_point=[30.0, 60.0])

    assert params.weather.wind_speed == 40.0
    assert params.model_config.model == 'LSTM'
    assert params.ignition_point == (30, 60)


def test_simulation_params_from_scenario():
    params = SimulationParams.from_scenario('extended', seed=1)

    assert params.simulation_hours == SIMULATION_SCENARIOS['extended']['simulation_hours']
    assert params.output_frequency == 2
    assert params.seed == 1

    with pytest.raises(ValueError):
        SimulationParams.from_scenario('forever')


@pytest.mark.parametrize("overrides", [
    {'simulation_hours': -1},
    {'output_frequency': 0},
    {'ignition_point': (-500, 9999)},
    {'ignition_point': (600, 100)},
    {'width': 300, 'ignition_point': (300, 0)},
])
def test_simulation_params_validation(overrides):
    with pytest.raises(ValueError):
        SimulationParams(**overrides)


def test_ca_config_validation():
    with pytest.raises(ValueError):
        CAConfig(neighbor_pitch=0)
    with pytest.raises(ValueError):
        CAConfig(decay_factor=1.0)
    assert CAConfig().cell_area_hectares == pytest.approx(0.01)


# ---- Integrated runs ----

def test_integrated_simulation_starts_at_first_high_cell():
    results = RiskSpreadIntegration().run_integrated_simulation(make_params())

    assert results['origin'] == (0, 0)
    assert results['prediction']['origin'].risk == 'high'
    assert len(results['frames']) == 5
    assert results['frames'][0] == {(0, 0): FireCell(0, 0, 1.0, 0)}
    assert results['statistics']['total_frames'] == 5
    assert [s['time_step'] for s in results['statistics']['frame_statistics']] == [0, 1, 2, 3, 4]
    assert results['final_state']
    assert all(isinstance(point, FirePoint) for point in results['final_state'])


def test_integrated_simulation_is_reproducible():
    first = RiskSpreadIntegration().run_integrated_simulation(make_params(seed=9))
    second = RiskSpreadIntegration().run_integrated_simulation(make_params(seed=9))

    assert first['final_state'] == second['final_state']
    assert first['prediction']['grid'] == second['prediction']['grid']


def test_no_high_risk_means_no_spread():
    results = RiskSpreadIntegration().run_integrated_simulation(make_params(weather=COLD_WET))

    assert results['origin'] is None
    assert results['final_state'] == []
    assert all(frame == {} for frame in results['frames'])
    assert results['statistics']['frame_statistics'][-1]['burned_area_hectares'] == 0.0


def test_explicit_ignition_point():
    results = RiskSpreadIntegration().run_integrated_simulation(
        make_params(weather=COLD_WET, ignition_point=(150, 100), simulation_hours=0)
    )

    assert results['origin'] == (150, 100)
    assert results['final_state'] == [FirePoint(150, 100, 1.0)]


def test_output_frequency_keeps_last_frame():
    results = RiskSpreadIntegration().run_integrated_simulation(
        make_params(simulation_hours=5, output_frequency=2)
    )
    hours = [s['time_step'] for s in results['statistics']['frame_statistics']]
    assert hours == [0, 2, 4, 5]
    assert results['frame_hours'] == [0, 2, 4, 5]


def test_frames_are_labelled_by_simulated_hour(tmp_path):
    output_dir = tmp_path / "sparse"
    integration = RiskSpreadIntegration()
    results = integration.run_integrated_simulation(
        make_params(simulation_hours=12, output_frequency=4, output_dir=str(output_dir))
    )

    statistics_hours = [s['time_step'] for s in results['statistics']['frame_statistics']]
    web_data = integration.create_web_api_data(results)
    animation_hours = [frame['time_step'] for frame in web_data['animation_frames']]
    assert statistics_hours == [0, 4, 8, 12]
    assert animation_hours == [0, 4, 8, 12]

    with open(output_dir / "animation_data.json") as f:
        saved = json.load(f)
    assert [frame['time_step'] for frame in saved['frames']] == [0, 4, 8, 12]

    with rasterio.open(output_dir / "fire_state_frame_001.tif") as src:
        assert src.descriptions[0] == 'Fire_State_Hour_4'
    with rasterio.open(output_dir / "fire_state_frame_003.tif") as src:
        assert src.descriptions[0] == 'Fire_State_Hour_12'


def test_animation_hours_must_match_frames():
    with pytest.raises(ValueError):
        create_fire_animation_data([{}, {}], 100, 100, hours=[0])


def test_invalid_area_rejected():
    with pytest.raises(InvalidGridDimensions):
        RiskSpreadIntegration().run_integrated_simulation(make_params(width=0))


def test_results_written_to_output_dir(tmp_path):
    output_dir = tmp_path / "run"
    RiskSpreadIntegration().run_integrated_simulation(make_params(simulation_hours=2, output_dir=str(output_dir)))

    assert (output_dir / "fire_probability.tif").exists()
    assert (output_dir / "animation_data.json").exists()
    assert (output_dir / "simulation_metadata.json").exists()
    for i in range(3):
        assert (output_dir / f"fire_state_frame_{i:03d}.tif").exists()

    with rasterio.open(output_dir / "fire_state_frame_000.tif") as src:
        assert src.count == 2
        assert src.shape == (20, 30)
        assert src.read(1)[0, 0] == pytest.approx(1.0)

    with open(output_dir / "animation_data.json") as f:
        animation = json.load(f)
    assert animation['frame_count'] == 3

    with open(output_dir / "simulation_metadata.json") as f:
        metadata = json.load(f)
    assert metadata['origin'] == [0, 0]
    assert metadata['parameters']['simulation_hours'] == 2


def test_probability_raster_matches_fire_raster():
    integration = RiskSpreadIntegration()
    prediction = integration.generate_prediction(HOT_DRY, ModelConfig(), 95, 65, np.random.default_rng(0))
    raster = integration.probability_raster(prediction['grid'], 95, 65)

    assert raster.shape == field_to_array({}, 95, 65, 10).shape
    first = prediction['grid'][0]
    assert raster[0, 0] == pytest.approx(first.probability)
    assert raster[2, 2] == pytest.approx(first.probability)


def test_multiple_scenarios_summary():
    integration = RiskSpreadIntegration()
    results = integration.run_multiple_scenarios(
        [
            {'name': 'dry', 'weather': HOT_DRY},
            {'name': 'wet', 'weather': COLD_WET, 'simulation_hours': 2},
        ],
        make_params(),
    )

    summary = results['summary']
    assert summary['total_scenarios'] == 2
    dry, wet = summary['scenario_comparison']
    assert dry['name'] == 'dry'
    assert dry['total_fire_cells'] > 0
    assert wet['total_fire_cells'] == 0
    assert wet['high_risk_cells'] == 0


def test_web_api_data_is_json_ready():
    data = get_web_simulation_data(make_params())

    json.dumps(data)
    assert data['simulation_info']['ignition_point'] == [0, 0]
    assert data['simulation_info']['fire_clusters'] >= 1
    assert len(data['animation_frames']) == 5
    assert data['metadata']['fire_cell_pitch'] == 10
    assert len(data['prediction']['cells']) == 70


def test_quick_integrated_simulation():
    results = quick_integrated_simulation(HOT_DRY, width=120, height=120, simulation_hours=2, seed=0)
    assert results['origin'] == (0, 0)
    assert len(results['frames']) == 3
