# ====================
# cellular_automata/__init__.py
# Forest Fire Cellular Automata Module
# ====================

"""
Forest Fire Spread Simulation using Cellular Automata

This module provides:
- Spread rules with wind alignment and weather damping
- Discrete-time spread simulator seeded at a single ignition point
- Integration with the fire probability map (ignition point selection)
- Utility functions for rasterizing, statistics and GeoTIFF/JSON output

Main Components:
- SpreadSimulator: Core simulation engine
- FireSpreadRules: Per-neighbor spread probability
- RiskSpreadIntegration: Probability map -> ignition point -> spread

Quick Start:
    from fire_risk_model.cellular_automata import run_fire_simulation

    points = run_fire_simulation(origin=(300, 200), hours=6, seed=42)
"""

from .core import SpreadSimulator, FireCell, FirePoint, run_fire_simulation, field_snapshot
from .integration import RiskSpreadIntegration, quick_integrated_simulation, get_web_simulation_data
from .config import CAConfig, SimulationParams, SIMULATION_SCENARIOS, WIND_DIRECTIONS, wind_direction_degrees
from .rules import FireSpreadRules, NEIGHBOR_OFFSETS, wind_alignment

from .utils import (
    field_to_array,
    count_fire_clusters,
    calculate_frame_statistics,
    create_fire_animation_data,
    save_simulation_frame,
)

__all__ = [
    # Core classes
    'SpreadSimulator',
    'FireCell',
    'FirePoint',
    'FireSpreadRules',
    'RiskSpreadIntegration',

    # Configuration
    'CAConfig',
    'SimulationParams',
    'SIMULATION_SCENARIOS',
    'WIND_DIRECTIONS',
    'wind_direction_degrees',

    # Convenience functions
    'run_fire_simulation',
    'quick_integrated_simulation',
    'get_web_simulation_data',
    'field_snapshot',
    'wind_alignment',
    'NEIGHBOR_OFFSETS',

    # Utilities
    'field_to_array',
    'count_fire_clusters',
    'calculate_frame_statistics',
    'create_fire_animation_data',
    'save_simulation_frame',
]
