# ====================
# predict.py
# Fire probability map generation from weather and synthetic terrain
# ====================

import os
from dataclasses import dataclass, asdict
from typing import List, Dict, Optional

import numpy as np
import rasterio
from rasterio.transform import from_origin

from .config import (
    CELL_PITCH, RISK_THRESHOLDS, NIL_RISK, RISK_TIERS, NOISE_AMPLITUDE,
    BINARY_FIRE_THRESHOLD, BASE_MODEL_ACCURACY, MIN_MODEL_ACCURACY,
    WeatherObservation, ModelConfig,
)
from .terrain import TerrainSynthesizer, TerrainSample, validate_grid_dimensions


@dataclass(frozen=True)
class RiskCell:
    x: int
    y: int
    probability: float
    risk: str

    def to_dict(self) -> Dict:
        return asdict(self)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def classify_risk(probability: float) -> str:
    """Map an ignition probability to its risk tier"""
    for tier, threshold in RISK_THRESHOLDS:
        if probability > threshold:
            return tier
    return NIL_RISK


# Weather factors

def temperature_factor(temperature: float) -> float:
    if temperature < 15:
        return 0.1
    if temperature < 25:
        return 0.3
    if temperature < 35:
        return 0.7
    return 1.0


def humidity_factor(humidity: float) -> float:
    return 1 - humidity / 100


def wind_factor(wind_speed: float) -> float:
    return min(wind_speed / 50, 1)


def precipitation_factor(precipitation: float) -> float:
    return max(0, 1 - precipitation / 20)


# Terrain factors

def slope_factor(slope: float) -> float:
    return min(slope / 45, 1)


def elevation_factor(elevation: float) -> float:
    return 0.8 if elevation > 1500 else 1.0


class RiskScorer:
    """
    Combines a weather observation and a terrain sample into an ignition probability.

    Args:
        rng: numpy Generator used for the stochastic perturbation
        noise: Whether to add the bounded perturbation at all
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, noise: bool = True):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.noise = noise

    def weighted_factors(self,
                         weather: WeatherObservation,
                         terrain: TerrainSample) -> Dict[str, float]:
        return {
            "temperature": temperature_factor(weather.temperature),
            "humidity": humidity_factor(weather.humidity),
            "wind": wind_factor(weather.wind_speed),
            "precipitation": precipitation_factor(weather.precipitation),
            "slope": slope_factor(terrain.slope),
            "fuel": terrain.fuel_load,
        }

    def base_score(self,
                   weather: WeatherObservation,
                   terrain: TerrainSample,
                   config: ModelConfig) -> float:
        """Weighted sum with elevation and regional adjustments, before noise and clamping"""
        factors = self.weighted_factors(weather, terrain)
        weights = config.weights
        probability = sum(factors[name] * weights[name] for name in weights)
        probability *= elevation_factor(terrain.elevation)
        return probability * config.regional_multiplier

    def score(self,
              weather: WeatherObservation,
              terrain: TerrainSample,
              config: ModelConfig,
              rng: Optional[np.random.Generator] = None) -> float:
        probability = self.base_score(weather, terrain, config)

        if self.noise:
            generator = rng if rng is not None else self.rng
            probability += (generator.random() - 0.5) * NOISE_AMPLITUDE

        return clamp(probability)


class ProbabilityMapGenerator:
    """
    Tiles an area into CELL_PITCH cells and scores every cell origin.

    Cells are produced column by column: increasing x, and within each
    column increasing y. Origin selection relies on this order.
    """

    def __init__(self,
                 terrain: Optional[TerrainSynthesizer] = None,
                 scorer: Optional[RiskScorer] = None,
                 pitch: int = CELL_PITCH):
        self.terrain = terrain or TerrainSynthesizer()
        self.scorer = scorer or RiskScorer()
        self.pitch = pitch

    def grid_origins(self, width: float, height: float):
        validate_grid_dimensions(width, height)
        for x in range(0, int(np.ceil(width)), self.pitch):
            for y in range(0, int(np.ceil(height)), self.pitch):
                yield x, y

    def generate(self,
                 weather: WeatherObservation,
                 config: ModelConfig,
                 width: float,
                 height: float,
                 rng: Optional[np.random.Generator] = None) -> List[RiskCell]:
        grid = []
        for x, y in self.grid_origins(width, height):
            terrain = self.terrain.sample(x, y, width, height)
            probability = self.scorer.score(weather, terrain, config, rng=rng)
            grid.append(RiskCell(x=x, y=y, probability=probability, risk=classify_risk(probability)))
        return grid


def select_spread_origin(grid: List[RiskCell]) -> Optional[RiskCell]:
    """First high-risk cell in grid order, or None when no cell is high risk"""
    for cell in grid:
        if cell.risk == "high":
            return cell
    return None


def risk_distribution(grid: List[RiskCell]) -> Dict[str, Dict]:
    """Count and percentage of cells in every risk tier"""
    total = len(grid)
    counts = {tier: 0 for tier in RISK_TIERS}
    for cell in grid:
        counts[cell.risk] += 1

    return {
        tier: {
            "count": count,
            "percentage": (count / total * 100) if total else 0.0,
        }
        for tier, count in counts.items()
    }


def shape_prediction(grid: List[RiskCell], prediction_type: str = "probabilistic") -> List[Dict]:
    """
    Shape a probability grid for output.

    'probabilistic' keeps the raw probability; 'binary' reports 0/1 with a fire flag.
    """
    shaped = []
    for cell in grid:
        entry = cell.to_dict()
        if prediction_type == "binary":
            fire = cell.probability > BINARY_FIRE_THRESHOLD
            entry["fire"] = fire
            entry["probability"] = 1.0 if fire else 0.0
        shaped.append(entry)
    return shaped


def estimate_model_accuracy(weather: WeatherObservation,
                            config: ModelConfig,
                            rng: Optional[np.random.Generator] = None) -> float:
    """Simulated model accuracy (%) shown next to a prediction"""
    rng = rng if rng is not None else np.random.default_rng()
    base_accuracy = BASE_MODEL_ACCURACY[config.model]
    weather_variability = (abs(weather.temperature - 25) + abs(weather.humidity - 50)) / 100
    accuracy = base_accuracy - weather_variability * 10 + (rng.random() - 0.5) * 5
    return max(MIN_MODEL_ACCURACY, accuracy)


def grid_to_array(grid: List[RiskCell], width: float, height: float,
                  pitch: int = CELL_PITCH) -> np.ndarray:
    """
    Rasterize a probability grid.

    Returns:
        float32 array of shape (rows, cols) indexed [y // pitch, x // pitch]
    """
    validate_grid_dimensions(width, height)
    rows = int(np.ceil(height / pitch))
    cols = int(np.ceil(width / pitch))
    array = np.zeros((rows, cols), dtype=np.float32)
    for cell in grid:
        array[cell.y // pitch, cell.x // pitch] = cell.probability
    return array


def save_probability_map(grid: List[RiskCell],
                         width: float,
                         height: float,
                         output_path: str,
                         resolution: float = 30.0,
                         pitch: int = CELL_PITCH) -> str:
    """
    Save a probability grid as a single-band GeoTIFF

    Row 0 of the raster is y=0; the transform places it at the top edge.
    """
    array = grid_to_array(grid, width, height, pitch)

    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    profile = {
        'driver': 'GTiff',
        'height': array.shape[0],
        'width': array.shape[1],
        'count': 1,
        'dtype': rasterio.float32,
        'crs': None,
        'transform': from_origin(0.0, array.shape[0] * resolution, resolution, resolution),
        'compress': 'lzw'
    }

    with rasterio.open(output_path, 'w', **profile) as dst:
        dst.write(array, 1)
        dst.set_band_description(1, 'Fire_Probability')

    return output_path
