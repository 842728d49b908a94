# ====================
# cellular_automata/config.py
# Cellular Automata Configuration for Forest Fire Spread Simulation
# ====================

from dataclasses import dataclass
from typing import Tuple, Optional

from ..config import WeatherObservation, ModelConfig
from ..terrain import validate_origin


@dataclass
class CAConfig:
    """Configuration class for Cellular Automata simulation"""

    # Spatial parameters
    neighbor_pitch: int = 10  # distance units between neighboring fire cells
    meters_per_unit: float = 1.0  # ground distance of one grid unit

    # Temporal parameters
    max_simulation_hours: int = 24

    # Fire spread parameters
    extinguish_threshold: float = 0.1  # cells at or below this cannot spread
    base_spread_factor: float = 0.3  # spread probability per unit source intensity
    child_intensity_factor: float = 0.8  # new cell intensity relative to its source
    decay_factor: float = 0.95  # per-hour intensity multiplier
    max_spread_probability: float = 0.8
    prune_intensity: float = 1e-3  # cells below this have burned out and are dropped

    # Weather coupling
    reference_wind_speed: float = 50.0  # km/h giving a full wind boost
    humidity_divisor: float = 200.0
    precipitation_divisor: float = 10.0
    precipitation_floor: float = 0.1
    temperature_divisor: float = 50.0

    # Initial fire
    initial_intensity: float = 1.0

    # Console progress output
    verbose: bool = False

    def __post_init__(self):
        if self.neighbor_pitch <= 0:
            raise ValueError(f"neighbor_pitch must be positive, got {self.neighbor_pitch}")
        if not 0.0 < self.decay_factor < 1.0:
            raise ValueError(f"decay_factor must be in (0, 1), got {self.decay_factor}")

    @property
    def cell_area_hectares(self) -> float:
        """Ground area represented by one fire cell"""
        return (self.neighbor_pitch * self.meters_per_unit / 100) ** 2


@dataclass
class SimulationParams:
    """Parameters for a specific simulation run"""

    # Area
    width: float = 600.0
    height: float = 400.0

    # Inputs
    weather: Optional[WeatherObservation] = None
    model_config: Optional[ModelConfig] = None

    # Ignition: None selects the first high-risk cell of the probability map
    ignition_point: Optional[Tuple[int, int]] = None

    # Simulation control
    simulation_hours: int = 6
    output_frequency: int = 1  # keep a frame every N hours
    seed: Optional[int] = None

    # Output settings
    output_dir: Optional[str] = None
    save_intermediate_states: bool = True

    def __post_init__(self):
        """Set default values for optional parameters"""
        if self.weather is None:
            self.weather = WeatherObservation()
        elif isinstance(self.weather, dict):
            self.weather = WeatherObservation.from_dict(self.weather)
        if self.model_config is None:
            self.model_config = ModelConfig()
        elif isinstance(self.model_config, dict):
            self.model_config = ModelConfig.from_dict(self.model_config)
        if self.ignition_point is not None:
            self.ignition_point = (int(self.ignition_point[0]), int(self.ignition_point[1]))
            validate_origin(self.ignition_point, self.width, self.height)
        if self.simulation_hours < 0:
            raise ValueError(f"simulation_hours must be >= 0, got {self.simulation_hours}")
        if self.output_frequency < 1:
            raise ValueError(f"output_frequency must be >= 1, got {self.output_frequency}")

    @classmethod
    def from_scenario(cls, name: str, **overrides) -> "SimulationParams":
        """Create parameters from a named entry in SIMULATION_SCENARIOS"""
        if name not in SIMULATION_SCENARIOS:
            raise ValueError(f"Unknown scenario: {name}")
        scenario = SIMULATION_SCENARIOS[name]
        values = {
            'simulation_hours': scenario['simulation_hours'],
            'output_frequency': scenario['output_frequency'],
        }
        values.update(overrides)
        return cls(**values)


# Predefined simulation scenarios
SIMULATION_SCENARIOS = {
    "quick_demo": {
        "simulation_hours": 3,
        "output_frequency": 1,
        "description": "Quick 3-hour simulation for demo"
    },
    "short_term": {
        "simulation_hours": 6,
        "output_frequency": 1,
        "description": "Short-term 6-hour prediction"
    },
    "extended": {
        "simulation_hours": 12,
        "output_frequency": 2,
        "description": "Extended 12-hour simulation"
    },
    "detailed": {
        "simulation_hours": 24,
        "output_frequency": 4,
        "description": "Detailed 24-hour simulation"
    }
}

# Compass bearings the wind blows toward (0=North, 90=East)
WIND_DIRECTIONS = {
    "N": 0, "NNE": 22.5, "NE": 45, "ENE": 67.5,
    "E": 90, "ESE": 112.5, "SE": 135, "SSE": 157.5,
    "S": 180, "SSW": 202.5, "SW": 225, "WSW": 247.5,
    "W": 270, "WNW": 292.5, "NW": 315, "NNW": 337.5
}


def wind_direction_degrees(direction) -> float:
    """
    Convert a wind direction to grid degrees (0 = +x, 90 = +y).

    Numbers are taken as grid degrees already. Compass labels such as 'SW'
    assume +x points East and +y points South, as in image coordinates.
    """
    if isinstance(direction, str):
        label = direction.strip().upper()
        if label not in WIND_DIRECTIONS:
            raise ValueError(f"Unknown wind direction: {direction}")
        return (WIND_DIRECTIONS[label] - 90.0) % 360
    try:
        return float(direction) % 360
    except (TypeError, ValueError):
        raise ValueError(f"Wind direction must be a number or compass label, got {direction!r}")


# Default configuration instance
DEFAULT_CONFIG = CAConfig()
