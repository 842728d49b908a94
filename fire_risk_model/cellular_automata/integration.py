# ====================
# cellular_automata/integration.py
# Integration layer between risk prediction and CA simulation
# ====================

import os
import json
from typing import List, Dict, Optional

import numpy as np

from ..config import WeatherObservation, ModelConfig, CELL_PITCH
from ..predict import (
    ProbabilityMapGenerator, RiskScorer, RiskCell,
    select_spread_origin, risk_distribution, shape_prediction,
    estimate_model_accuracy, grid_to_array, save_probability_map,
)
from ..terrain import validate_grid_dimensions
from .config import CAConfig, SimulationParams
from .core import SpreadSimulator, FireField, field_snapshot
from .utils import (
    field_to_array, count_fire_clusters, calculate_frame_statistics,
    create_fire_animation_data, save_simulation_frame, make_json_serializable,
)


class RiskSpreadIntegration:
    """
    Connects the probability map with the spread simulation.

    The probability map picks the ignition point (first high-risk cell in
    grid order) and the CA spreads the fire from there.
    """

    def __init__(self,
                 ca_config: CAConfig = None,
                 output_directory: Optional[str] = None,
                 verbose: bool = False):
        self.ca_config = ca_config or CAConfig(verbose=verbose)
        self.simulator = SpreadSimulator(self.ca_config)
        self.output_directory = output_directory
        self.verbose = verbose

        if output_directory:
            os.makedirs(output_directory, exist_ok=True)

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def generate_prediction(self,
                            weather: WeatherObservation,
                            model_config: ModelConfig,
                            width: float,
                            height: float,
                            rng: Optional[np.random.Generator] = None) -> Dict:
        """
        Generate the fire probability map and its summaries

        Returns:
            Dictionary with the grid, shaped output, tier distribution and accuracy
        """
        rng = rng if rng is not None else np.random.default_rng()
        self._log(f"🧠 Generating {model_config.model} prediction for {model_config.region}...")

        generator = ProbabilityMapGenerator(scorer=RiskScorer(rng=rng))
        grid = generator.generate(weather, model_config, width, height)

        prediction = {
            'grid': grid,
            'cells': shape_prediction(grid, model_config.prediction_type),
            'distribution': risk_distribution(grid),
            'origin': select_spread_origin(grid),
            'model_accuracy': estimate_model_accuracy(weather, model_config, rng),
        }

        self._log(f"✅ Prediction complete: {len(grid)} cells, "
                  f"{prediction['distribution']['high']['count']} high risk")
        return prediction

    def run_integrated_simulation(self, params: SimulationParams) -> Dict:
        """
        Run complete integrated simulation: probability map + CA spread

        Args:
            params: Simulation parameters

        Returns:
            Complete simulation results
        """
        validate_grid_dimensions(params.width, params.height)
        rng = np.random.default_rng(params.seed)

        self._log(f"🔥 Running integrated simulation")
        self._log(f"   Area: {params.width} x {params.height}")
        self._log(f"   Duration: {params.simulation_hours} hours")

        # Step 1: Probability map
        prediction = self.generate_prediction(
            params.weather, params.model_config, params.width, params.height, rng
        )

        # Step 2: Ignition point
        if params.ignition_point is not None:
            origin = params.ignition_point
        elif prediction['origin'] is not None:
            origin = (prediction['origin'].x, prediction['origin'].y)
        else:
            origin = None
            self._log("⚠️ No high-risk cell found, fire spread skipped")

        # Step 3: CA spread, keeping frames
        frames = [self.simulator.initial_field(origin)]
        frame_hours = [0]
        statistics = [self._frame_statistics(frames[0], 0)]
        field = frames[0]
        for hour, field in enumerate(
                self.simulator.iter_fields(origin, params.weather, params.simulation_hours,
                                           params.width, params.height, rng), start=1):
            if hour % params.output_frequency == 0 or hour == params.simulation_hours:
                frames.append(field)
                frame_hours.append(hour)
                statistics.append(self._frame_statistics(field, hour))

        results = {
            'prediction': prediction,
            'origin': origin,
            'frames': frames,
            'frame_hours': frame_hours,
            'final_state': field_snapshot(field),
            'parameters': {
                'width': params.width,
                'height': params.height,
                'simulation_hours': params.simulation_hours,
                'output_frequency': params.output_frequency,
                'weather': params.weather.to_dict(),
                'model_config': params.model_config.to_dict(),
                'ignition_point': origin,
            },
            'statistics': {
                'total_frames': len(frames),
                'frame_statistics': statistics,
            },
        }

        # Step 4: Save results
        output_dir = params.output_dir or self.output_directory
        if output_dir:
            self._save_simulation_results(results, params, output_dir)

        self._log(f"✅ Simulation complete! Generated {len(frames)} frames")
        return results

    def _frame_statistics(self, field: FireField, hour: int) -> Dict:
        stats = calculate_frame_statistics(
            field, hour, self.ca_config.cell_area_hectares, self.ca_config.extinguish_threshold
        )
        return stats

    def probability_raster(self, grid: List[RiskCell], width: float, height: float) -> np.ndarray:
        """Probability grid resampled onto the fire raster (nearest cell)"""
        pitch = self.ca_config.neighbor_pitch
        coarse = grid_to_array(grid, width, height, CELL_PITCH)
        rows = int(np.ceil(height / pitch))
        cols = int(np.ceil(width / pitch))
        row_index = np.minimum((np.arange(rows) * pitch) // CELL_PITCH, coarse.shape[0] - 1)
        col_index = np.minimum((np.arange(cols) * pitch) // CELL_PITCH, coarse.shape[1] - 1)
        return coarse[np.ix_(row_index, col_index)]

    def _save_simulation_results(self, results: Dict, params: SimulationParams, output_dir: str):
        """Save simulation results to disk"""
        self._log("💾 Saving simulation results...")
        os.makedirs(output_dir, exist_ok=True)

        grid = results['prediction']['grid']
        pitch = self.ca_config.neighbor_pitch
        cell_size = pitch * self.ca_config.meters_per_unit

        save_probability_map(
            grid, params.width, params.height,
            os.path.join(output_dir, "fire_probability.tif"),
            resolution=CELL_PITCH * self.ca_config.meters_per_unit,
        )

        if params.save_intermediate_states:
            probability = self.probability_raster(grid, params.width, params.height)
            for i, (hour, field) in enumerate(zip(results['frame_hours'], results['frames'])):
                frame = field_to_array(field, params.width, params.height, pitch)
                save_simulation_frame(
                    frame,
                    os.path.join(output_dir, f"fire_state_frame_{i:03d}.tif"),
                    cell_size,
                    hour,
                    probability_map=probability,
                )

        animation_data = create_fire_animation_data(
            results['frames'], params.width, params.height, self.ca_config.extinguish_threshold,
            hours=results['frame_hours'],
        )
        with open(os.path.join(output_dir, "animation_data.json"), 'w') as f:
            json.dump(animation_data, f, indent=2)

        metadata = {key: value for key, value in results.items() if key not in ('frames', 'prediction')}
        metadata['prediction'] = {
            'distribution': results['prediction']['distribution'],
            'model_accuracy': results['prediction']['model_accuracy'],
            'cells': results['prediction']['cells'],
        }
        with open(os.path.join(output_dir, "simulation_metadata.json"), 'w') as f:
            json.dump(make_json_serializable(metadata), f, indent=2)

        self._log(f"✅ Results saved to {output_dir}")

    def run_multiple_scenarios(self,
                               scenario_configs: List[Dict],
                               base_params: SimulationParams) -> Dict:
        """
        Run several weather / duration scenarios over the same area

        Args:
            scenario_configs: List of dicts with optional 'name', 'weather',
                'model_config', 'simulation_hours' and 'ignition_point'
            base_params: Parameters shared by every scenario

        Returns:
            Results for all scenarios plus a comparison summary
        """
        self._log(f"🎭 Running {len(scenario_configs)} scenarios")
        scenario_results = {}

        for i, config in enumerate(scenario_configs):
            name = config.get('name', f'scenario_{i+1}')
            self._log(f"   Scenario {i+1}/{len(scenario_configs)}: {name}")

            params = SimulationParams(
                width=base_params.width,
                height=base_params.height,
                weather=config.get('weather', base_params.weather),
                model_config=config.get('model_config', base_params.model_config),
                ignition_point=config.get('ignition_point', base_params.ignition_point),
                simulation_hours=config.get('simulation_hours', base_params.simulation_hours),
                output_frequency=base_params.output_frequency,
                seed=config.get('seed', base_params.seed),
                output_dir=None,
            )

            scenario_results[f"scenario_{i+1}"] = {
                'name': name,
                'config': config,
                'results': self.run_integrated_simulation(params),
            }

        return {
            'scenarios': scenario_results,
            'summary': self._create_scenario_summary(scenario_results),
        }

    def _create_scenario_summary(self, scenario_results: Dict) -> Dict:
        """Create summary comparison of scenarios"""
        summary = {
            'total_scenarios': len(scenario_results),
            'scenario_comparison': []
        }

        for scenario_id, scenario_data in scenario_results.items():
            results = scenario_data['results']
            final_stats = results['statistics']['frame_statistics'][-1]

            summary['scenario_comparison'].append({
                'scenario_id': scenario_id,
                'name': scenario_data['name'],
                'total_burned_area_hectares': final_stats['burned_area_hectares'],
                'max_fire_intensity': final_stats['max_intensity'],
                'total_fire_cells': final_stats['total_fire_cells'],
                'high_risk_cells': results['prediction']['distribution']['high']['count'],
            })

        return summary

    def create_web_api_data(self, results: Dict) -> Dict:
        """
        Create data structure optimized for web API consumption

        Args:
            results: Output of run_integrated_simulation

        Returns:
            Web-optimized data structure
        """
        params = results['parameters']
        animation = create_fire_animation_data(
            results['frames'], params['width'], params['height'], self.ca_config.extinguish_threshold,
            hours=results['frame_hours'],
        )

        final_frame = field_to_array(
            results['frames'][-1], params['width'], params['height'], self.ca_config.neighbor_pitch
        )

        web_data = {
            'simulation_info': {
                'total_frames': animation['frame_count'],
                'simulation_hours': params['simulation_hours'],
                'ignition_point': params['ignition_point'],
                'fire_clusters': count_fire_clusters(final_frame, self.ca_config.extinguish_threshold),
            },
            'prediction': {
                'cells': results['prediction']['cells'],
                'distribution': results['prediction']['distribution'],
                'model_accuracy': results['prediction']['model_accuracy'],
            },
            'animation_frames': animation['frames'],
            'final_state': [point.to_dict() for point in results['final_state']],
            'metadata': {
                'bounds': animation['bounds'],
                'probability_cell_pitch': CELL_PITCH,
                'fire_cell_pitch': self.ca_config.neighbor_pitch,
                'model_config': params['model_config'],
                'weather': params['weather'],
            },
            'statistics': results['statistics']
        }

        return make_json_serializable(web_data)


# Convenience functions for easy integration

def quick_integrated_simulation(weather: WeatherObservation = None,
                                model_config: ModelConfig = None,
                                width: float = 600.0,
                                height: float = 400.0,
                                simulation_hours: int = 6,
                                seed: Optional[int] = None,
                                output_dir: Optional[str] = None,
                                verbose: bool = False) -> Dict:
    """
    Quick function for running an integrated probability map + CA simulation

    Returns:
        Simulation results
    """
    integration = RiskSpreadIntegration(verbose=verbose)
    params = SimulationParams(
        width=width,
        height=height,
        weather=weather,
        model_config=model_config,
        simulation_hours=simulation_hours,
        seed=seed,
        output_dir=output_dir,
    )
    return integration.run_integrated_simulation(params)


def get_web_simulation_data(params: SimulationParams, ca_config: CAConfig = None) -> Dict:
    """
    Get simulation data formatted for web consumption

    Returns:
        Web-optimized simulation data
    """
    integration = RiskSpreadIntegration(ca_config=ca_config)
    results = integration.run_integrated_simulation(params)
    return integration.create_web_api_data(results)
