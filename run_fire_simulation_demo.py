# ====================
# run_fire_simulation_demo.py
# Fire Risk Prediction and Spread Simulation Demo
# ====================

import sys
import json
import argparse
from datetime import datetime

import numpy as np

from fire_risk_model.config import WeatherObservation, ModelConfig, WEIGHT_PROFILES, PREDICTION_TYPES
from fire_risk_model.cellular_automata.config import SimulationParams, SIMULATION_SCENARIOS, wind_direction_degrees
from fire_risk_model.cellular_automata.integration import RiskSpreadIntegration
from fire_risk_model.cellular_automata.utils import make_json_serializable


def build_inputs(args):
    weather = WeatherObservation(
        temperature=args.temperature,
        humidity=args.humidity,
        wind_speed=args.wind_speed,
        wind_direction=wind_direction_degrees(args.wind_direction),
        precipitation=args.precipitation,
    )
    model_config = ModelConfig(
        model=args.model,
        region=args.region,
        prediction_type=args.prediction_type,
    )
    return weather, model_config


def run_demo_simulation(args):
    """Run a complete demo simulation"""
    print("🔥 FOREST FIRE SPREAD SIMULATION DEMO")
    print("=" * 50)

    weather, model_config = build_inputs(args)
    params = SimulationParams.from_scenario(
        args.scenario,
        width=args.width,
        height=args.height,
        weather=weather,
        model_config=model_config,
        seed=args.seed,
        output_dir=args.output_dir,
    )

    print(f"📊 Demo Configuration:")
    print(f"   Scenario: {args.scenario} - {SIMULATION_SCENARIOS[args.scenario]['description']}")
    print(f"   Model: {model_config.model} ({model_config.region})")
    print(f"   Area: {params.width} x {params.height}")
    print(f"   Weather: {weather.temperature}°C, {weather.humidity}% RH, "
          f"{weather.wind_speed} km/h @ {weather.wind_direction}°, {weather.precipitation} mm")

    integration = RiskSpreadIntegration(verbose=True)
    results = integration.run_integrated_simulation(params)

    print(f"\n📊 Results Summary:")
    distribution = results['prediction']['distribution']
    for tier, values in distribution.items():
        print(f"   {tier:>8}: {values['count']:4d} cells ({values['percentage']:.1f}%)")
    print(f"   Model accuracy: {results['prediction']['model_accuracy']:.1f}%")

    if results['origin'] is None:
        print("⚠️ No high-risk cell, nothing to spread")
        return True

    final_stats = results['statistics']['frame_statistics'][-1]
    print(f"   Ignition point: {results['origin']}")
    print(f"   Total frames generated: {results['statistics']['total_frames']}")
    print(f"   Final burned area: {final_stats['burned_area_hectares']:.2f} hectares")
    print(f"   Total fire cells: {final_stats['total_fire_cells']}")
    print(f"   Max fire intensity: {final_stats['max_intensity']:.3f}")

    if args.output_dir:
        print(f"💾 Outputs written to {args.output_dir}")
    return True


def run_prediction(args):
    """Print the probability map as JSON"""
    weather, model_config = build_inputs(args)
    integration = RiskSpreadIntegration()

    prediction = integration.generate_prediction(
        weather, model_config, args.width, args.height, np.random.default_rng(args.seed)
    )

    output = {
        'cells': prediction['cells'],
        'distribution': prediction['distribution'],
        'model_accuracy': prediction['model_accuracy'],
        'spread_origin': prediction['origin'],
    }
    print(json.dumps(make_json_serializable(output), indent=2))
    return True


def start_web_server(args):
    """Start the Flask API server"""
    from fire_risk_model.web_api.app import start_server
    start_server(port=args.port)
    return True


def main(argv=None):
    """Main function with command line interface"""
    parser = argparse.ArgumentParser(description='Forest Fire Risk and Spread Simulation Demo')
    parser.add_argument('command', nargs='?', default='demo', choices=['demo', 'predict', 'server'],
                        help='Command to run')
    parser.add_argument('--scenario', default='short_term', choices=sorted(SIMULATION_SCENARIOS),
                        help='Named simulation scenario')
    parser.add_argument('--model', default='U-NET', choices=sorted(WEIGHT_PROFILES))
    parser.add_argument('--region', default='Uttarakhand')
    parser.add_argument('--prediction-type', default='binary', choices=PREDICTION_TYPES)
    parser.add_argument('--width', type=float, default=600.0)
    parser.add_argument('--height', type=float, default=400.0)
    parser.add_argument('--temperature', type=float, default=32.0, help='°C')
    parser.add_argument('--humidity', type=float, default=45.0, help='%%')
    parser.add_argument('--wind-speed', type=float, default=15.0, help='km/h')
    parser.add_argument('--wind-direction', default='225',
                        help='Degrees the wind blows toward, or a compass label such as SW')
    parser.add_argument('--precipitation', type=float, default=0.0, help='mm')
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--output-dir', default=None, help='Write GeoTIFF and JSON outputs here')
    parser.add_argument('--port', type=int, default=5000)

    args = parser.parse_args(argv)
    try:
        args.wind_direction = float(args.wind_direction)
    except ValueError:
        pass  # compass label, resolved by wind_direction_degrees

    if args.command != 'predict':
        print(f"🔥 Forest Fire Simulation System")
        print(f"   Command: {args.command}")
        print(f"   Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print("-" * 50)

    try:
        if args.command == 'demo':
            success = run_demo_simulation(args)
        elif args.command == 'predict':
            success = run_prediction(args)
        else:
            success = start_web_server(args)
    except ValueError as e:
        print(f"❌ {str(e)}")
        success = False

    if not success:
        print(f"\n❌ {args.command.title()} failed!")
        return 1
    if args.command == 'demo':
        print(f"\n✅ {args.command.title()} completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
