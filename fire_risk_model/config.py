# ====================
# config.py
# Weather, model and scoring configuration for fire risk prediction
# ====================

from dataclasses import dataclass, asdict
from typing import Dict

# Spatial parameters
CELL_PITCH = 30  # distance units between probability grid cells

# Risk tier thresholds (probability strictly greater than threshold)
RISK_THRESHOLDS = [
    ("high", 0.7),
    ("moderate", 0.4),
    ("low", 0.2),
]
NIL_RISK = "nil"
RISK_TIERS = ["high", "moderate", "low", "nil"]

# Stochastic perturbation added to every scored cell: (u - 0.5) * NOISE_AMPLITUDE
NOISE_AMPLITUDE = 0.1

# Weighting profiles selected by ModelConfig.model
WEIGHT_PROFILES = {
    "U-NET": {
        "temperature": 0.25,
        "humidity": 0.20,
        "wind": 0.15,
        "precipitation": 0.15,
        "slope": 0.10,
        "fuel": 0.15,
    },
    "LSTM": {
        "temperature": 0.30,
        "humidity": 0.25,
        "wind": 0.20,
        "precipitation": 0.10,
        "slope": 0.08,
        "fuel": 0.07,
    },
}

# Regional adjustment applied after weighting (unknown regions use 1.0)
REGIONAL_MULTIPLIERS = {
    "Uttarakhand": 1.1,
    "Kerala": 0.9,
    "Assam": 1.05,
}
DEFAULT_REGIONAL_MULTIPLIER = 1.0

PREDICTION_TYPES = ("binary", "probabilistic")
BINARY_FIRE_THRESHOLD = 0.5

# Simulated accuracy reported alongside a prediction
BASE_MODEL_ACCURACY = {
    "U-NET": 92.5,
    "LSTM": 87.8,
}
MIN_MODEL_ACCURACY = 75.0


@dataclass(frozen=True)
class WeatherObservation:
    """Snapshot of the weather driving both risk scoring and spread"""

    temperature: float = 32.0  # celsius
    humidity: float = 45.0  # percentage
    wind_speed: float = 15.0  # km/h
    wind_direction: float = 225.0  # degrees, direction the wind blows toward
    precipitation: float = 0.0  # mm

    # camelCase keys sent by the dashboard
    _ALIASES = {
        "windSpeed": "wind_speed",
        "windDirection": "wind_direction",
    }

    @classmethod
    def from_dict(cls, data: Dict) -> "WeatherObservation":
        """Build an observation from a request payload, filling missing keys with defaults"""
        if data is not None and not isinstance(data, dict):
            raise ValueError(f"weather_data must be an object, got {type(data).__name__}")
        values = {}
        for key, value in (data or {}).items():
            name = cls._ALIASES.get(key, key)
            if name in cls.__dataclass_fields__:
                try:
                    values[name] = float(value)
                except (TypeError, ValueError):
                    raise ValueError(f"Weather field '{key}' must be a number, got {value!r}")
        return cls(**values)

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class ModelConfig:
    """Model choice and output settings for a prediction run"""

    model: str = "U-NET"
    resolution: float = 30.0  # meters per cell
    region: str = "Uttarakhand"
    prediction_type: str = "binary"

    def __post_init__(self):
        if not isinstance(self.model, str) or self.model not in WEIGHT_PROFILES:
            raise ValueError(f"Unknown model: {self.model}. Expected one of {list(WEIGHT_PROFILES)}")
        if not isinstance(self.prediction_type, str) or self.prediction_type not in PREDICTION_TYPES:
            raise ValueError(f"Unknown prediction type: {self.prediction_type}")

    @property
    def weights(self) -> Dict[str, float]:
        return WEIGHT_PROFILES[self.model]

    @property
    def regional_multiplier(self) -> float:
        return REGIONAL_MULTIPLIERS.get(self.region, DEFAULT_REGIONAL_MULTIPLIER)

    @classmethod
    def from_dict(cls, data: Dict) -> "ModelConfig":
        if data is not None and not isinstance(data, dict):
            raise ValueError(f"model_config must be an object, got {type(data).__name__}")
        aliases = {"predictionType": "prediction_type"}
        values = {}
        for key, value in (data or {}).items():
            name = aliases.get(key, key)
            if name not in cls.__dataclass_fields__:
                continue
            if name == "resolution":
                try:
                    value = float(value)
                except (TypeError, ValueError):
                    raise ValueError(f"resolution must be a number, got {value!r}")
            values[name] = value
        return cls(**values)

    def to_dict(self) -> Dict:
        return asdict(self)


# Default instances
DEFAULT_WEATHER = WeatherObservation()
DEFAULT_MODEL_CONFIG = ModelConfig()
