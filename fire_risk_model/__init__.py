# Forest Fire Risk Package
"""
Forest Fire Risk Module

Scores per-cell ignition probability from weather and synthetic terrain
(U-NET or LSTM weighting profile), and simulates fire spread from the
highest-risk cell with a cellular automaton.
"""

__version__ = "1.0.0"
__author__ = "Forest Fire Simulation Team"

from .config import WeatherObservation, ModelConfig, CELL_PITCH, WEIGHT_PROFILES, REGIONAL_MULTIPLIERS
from .terrain import TerrainSynthesizer, TerrainSample, InvalidGridDimensions
from .predict import (
    RiskScorer,
    ProbabilityMapGenerator,
    RiskCell,
    classify_risk,
    select_spread_origin,
    risk_distribution,
    shape_prediction,
    estimate_model_accuracy,
)
from .cellular_automata import SpreadSimulator, FirePoint, CAConfig, run_fire_simulation

__all__ = [
    'WeatherObservation',
    'ModelConfig',
    'CELL_PITCH',
    'WEIGHT_PROFILES',
    'REGIONAL_MULTIPLIERS',
    'TerrainSynthesizer',
    'TerrainSample',
    'InvalidGridDimensions',
    'RiskScorer',
    'ProbabilityMapGenerator',
    'RiskCell',
    'classify_risk',
    'select_spread_origin',
    'risk_distribution',
    'shape_prediction',
    'estimate_model_accuracy',
    'SpreadSimulator',
    'FirePoint',
    'CAConfig',
    'run_fire_simulation',
]
