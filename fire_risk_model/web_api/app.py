# ====================
# web_api/app.py
# Flask API for Forest Fire Risk and Spread Simulation
# ====================

import traceback
from datetime import datetime

import numpy as np
from flask import Flask, request, jsonify
from flask_cors import CORS

from ..config import (
    WeatherObservation, ModelConfig, CELL_PITCH,
    WEIGHT_PROFILES, REGIONAL_MULTIPLIERS, DEFAULT_REGIONAL_MULTIPLIER,
)
from ..terrain import TerrainSynthesizer
from ..cellular_automata.config import CAConfig, SimulationParams, SIMULATION_SCENARIOS, wind_direction_degrees
from ..cellular_automata.integration import RiskSpreadIntegration
from ..cellular_automata.utils import make_json_serializable

# Initialize Flask app
app = Flask(__name__)
CORS(app)  # Enable CORS for the dashboard frontend

# Configuration
DEFAULT_WIDTH = 600
DEFAULT_HEIGHT = 400
MAX_AREA_DIMENSION = 10000
MAX_SCENARIOS = 10
CA_CONFIG = CAConfig()

integration = RiskSpreadIntegration(ca_config=CA_CONFIG)


def parse_number(data, key, default, cast=float):
    value = data.get(key, default)
    try:
        return cast(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"{key} must be a number, got {value!r}")


def parse_area(data):
    """Width and height of the requested area, capped at MAX_AREA_DIMENSION"""
    width = parse_number(data, 'width', DEFAULT_WIDTH)
    height = parse_number(data, 'height', DEFAULT_HEIGHT)
    if width > MAX_AREA_DIMENSION or height > MAX_AREA_DIMENSION:
        raise ValueError(f"width and height must not exceed {MAX_AREA_DIMENSION}")
    return width, height


def parse_seed(value):
    """Seed for the random generator: an integer or None"""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"seed must be an integer, got {value!r}")
    try:
        seed = int(value)
    except (ValueError, OverflowError):
        raise ValueError(f"seed must be an integer, got {value!r}")
    if seed != float(value) or seed < 0:
        raise ValueError(f"seed must be a non-negative integer, got {value!r}")
    return seed


def parse_weather(data):
    """Weather observation from a request payload; compass labels are accepted for direction"""
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"weather_data must be an object, got {type(data).__name__}")
    weather = dict(data or {})
    for key in ('wind_direction', 'windDirection'):
        if key in weather:
            weather[key] = wind_direction_degrees(weather[key])
    return WeatherObservation.from_dict(weather)


def parse_simulation_params(data, **overrides):
    """Build SimulationParams from a JSON body, raising ValueError on bad input"""
    simulation_hours = parse_number(data, 'simulation_hours', 6, cast=int)
    if simulation_hours < 0 or simulation_hours > CA_CONFIG.max_simulation_hours:
        raise ValueError(f"simulation_hours must be between 0 and {CA_CONFIG.max_simulation_hours}")

    ignition_point = data.get('ignition_point')
    if ignition_point is not None:
        try:
            ignition_point = (int(ignition_point['x']), int(ignition_point['y']))
        except (KeyError, ValueError, TypeError):
            raise ValueError('Invalid ignition_point format. Expected: {"x": int, "y": int}')

    width, height = parse_area(data)
    values = {
        'width': width,
        'height': height,
        'weather': parse_weather(data.get('weather_data')),
        'model_config': ModelConfig.from_dict(data.get('model_config')),
        'ignition_point': ignition_point,
        'simulation_hours': simulation_hours,
        'output_frequency': parse_number(data, 'output_frequency', 1, cast=int),
        'seed': parse_seed(data.get('seed')),
    }
    values.update(overrides)
    return SimulationParams(**values)


# API Routes

@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.now().isoformat(),
    })


@app.route('/api/simulation-scenarios', methods=['GET'])
def get_simulation_scenarios():
    """Get predefined simulation scenarios"""
    return jsonify({
        'scenarios': SIMULATION_SCENARIOS
    })


@app.route('/api/regions', methods=['GET'])
def get_regions():
    """Regional multipliers and available weighting profiles"""
    return jsonify({
        'regions': REGIONAL_MULTIPLIERS,
        'default_multiplier': DEFAULT_REGIONAL_MULTIPLIER,
        'models': WEIGHT_PROFILES,
    })


@app.route('/api/generate-prediction', methods=['POST'])
def generate_prediction():
    """Generate a fire probability map for the given weather and model"""
    try:
        data = request.get_json(silent=True) or {}

        weather = parse_weather(data.get('weather_data'))
        model_config = ModelConfig.from_dict(data.get('model_config'))
        width, height = parse_area(data)
        rng = np.random.default_rng(parse_seed(data.get('seed')))

        prediction = integration.generate_prediction(weather, model_config, width, height, rng)
        origin = prediction['origin']

        return jsonify({
            'success': True,
            'cells': prediction['cells'],
            'distribution': prediction['distribution'],
            'model_accuracy': prediction['model_accuracy'],
            'spread_origin': origin.to_dict() if origin else None,
            'parameters': {
                'width': width,
                'height': height,
                'cell_pitch': CELL_PITCH,
                'weather_data': weather.to_dict(),
                'model_config': model_config.to_dict(),
            }
        })

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        print(f"❌ Prediction generation failed: {str(e)}")
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


@app.route('/api/run-simulation', methods=['POST'])
def run_simulation():
    """Run fire spread simulation from the highest-risk cell (or a given ignition point)"""
    try:
        data = request.get_json(silent=True) or {}
        params = parse_simulation_params(data)

        print(f"🔥 Running simulation for {params.simulation_hours} hours")

        results = integration.run_integrated_simulation(params)
        web_data = integration.create_web_api_data(results)

        return jsonify({
            'success': True,
            'simulation_data': web_data,
        })

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        print(f"❌ Simulation failed: {str(e)}")
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


@app.route('/api/multiple-scenarios', methods=['POST'])
def run_multiple_scenarios():
    """Run multiple weather scenarios for comparison"""
    try:
        data = request.get_json(silent=True) or {}

        if 'scenarios' not in data:
            return jsonify({'error': 'Missing required field: scenarios'}), 400

        scenarios = data['scenarios']
        if not isinstance(scenarios, list) or not scenarios:
            return jsonify({'error': 'scenarios must be a non-empty list'}), 400
        if len(scenarios) > MAX_SCENARIOS:
            return jsonify({'error': f'At most {MAX_SCENARIOS} scenarios are supported'}), 400

        base_params = parse_simulation_params(data)
        scenario_configs = []
        for scenario in scenarios:
            if not isinstance(scenario, dict):
                raise ValueError('Each scenario must be an object')
            config = {'name': scenario.get('name')} if scenario.get('name') else {}
            if 'weather_data' in scenario:
                config['weather'] = parse_weather(scenario['weather_data'])
            if 'model_config' in scenario:
                config['model_config'] = ModelConfig.from_dict(scenario['model_config'])
            if 'simulation_hours' in scenario:
                config['simulation_hours'] = parse_number(scenario, 'simulation_hours', None, cast=int)
            scenario_configs.append(config)

        print(f"🎭 Running {len(scenario_configs)} scenarios")
        results = integration.run_multiple_scenarios(scenario_configs, base_params)

        return jsonify({
            'success': True,
            'summary': make_json_serializable(results['summary']),
        })

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        print(f"❌ Multiple scenarios failed: {str(e)}")
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


@app.route('/api/terrain', methods=['GET'])
def get_terrain():
    """Synthetic terrain layers on the probability grid"""
    try:
        width, height = parse_area(request.args)
        layers = TerrainSynthesizer().sample_grid(width, height, CELL_PITCH)

        return jsonify({
            'cell_pitch': CELL_PITCH,
            'layers': make_json_serializable(layers),
        })

    except ValueError as e:
        return jsonify({'error': str(e)}), 400


@app.errorhandler(404)
def not_found(error):
    return jsonify({'error': 'Endpoint not found'}), 404


@app.errorhandler(500)
def internal_error(error):
    return jsonify({'error': 'Internal server error'}), 500


# Configuration endpoint for frontend
@app.route('/api/config', methods=['GET'])
def get_api_config():
    """Get API configuration for frontend"""
    return jsonify({
        'api_version': '1.0.0',
        'max_simulation_hours': CA_CONFIG.max_simulation_hours,
        'max_scenarios': MAX_SCENARIOS,
        'max_area_dimension': MAX_AREA_DIMENSION,
        'supported_formats': ['GeoTIFF', 'JSON'],
        'default_weather': WeatherObservation().to_dict(),
        'default_model_config': ModelConfig().to_dict(),
        'default_area': {'width': DEFAULT_WIDTH, 'height': DEFAULT_HEIGHT},
        'probability_cell_pitch': CELL_PITCH,
        'fire_cell_pitch': CA_CONFIG.neighbor_pitch,
        'coordinate_system': 'Image coordinates (x right, y down)'
    })


def start_server(host: str = '0.0.0.0', port: int = 5000, debug: bool = False):
    print("🌐 Starting Forest Fire Risk API...")
    print(f"🚀 API server starting on http://localhost:{port}")
    app.run(debug=debug, host=host, port=port)


if __name__ == '__main__':
    start_server(debug=True)
