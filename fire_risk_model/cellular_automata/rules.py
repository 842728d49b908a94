# ====================
# cellular_automata/rules.py
# Fire spread rules for Cellular Automata simulation
# ====================

import math
from typing import Tuple

from ..config import WeatherObservation
from .config import CAConfig

# Moore neighborhood, fixed evaluation order
NEIGHBOR_OFFSETS = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
]


def wind_vector(wind_direction: float) -> Tuple[float, float]:
    """Unit vector the wind blows toward, in grid coordinates"""
    wind_rad = math.radians(wind_direction)
    return math.cos(wind_rad), math.sin(wind_rad)


def wind_alignment(dx: int, dy: int, wind_direction: float) -> float:
    """
    Agreement between a spread offset and the wind, mapped to [0, 1].

    1 when the offset points where the wind blows, 0 when it points against it.
    """
    norm = math.hypot(dx, dy)
    if norm == 0:
        return 0.5
    wind_dx, wind_dy = wind_vector(wind_direction)
    cosine = (dx * wind_dx + dy * wind_dy) / norm
    cosine = max(-1.0, min(1.0, cosine))
    return (cosine + 1) / 2


class FireSpreadRules:
    """
    Implements fire spread rules for cellular automata simulation
    """

    def __init__(self, config: CAConfig = None):
        self.config = config or CAConfig()

    def weather_multiplier(self, weather: WeatherObservation) -> float:
        """Humidity, rain and temperature effect shared by every direction"""
        cfg = self.config
        multiplier = 1 - weather.humidity / cfg.humidity_divisor
        multiplier *= max(cfg.precipitation_floor, 1 - weather.precipitation / cfg.precipitation_divisor)
        multiplier *= weather.temperature / cfg.temperature_divisor
        return multiplier

    def wind_multiplier(self, dx: int, dy: int, weather: WeatherObservation) -> float:
        alignment = wind_alignment(dx, dy, weather.wind_direction)
        return 1 + alignment * weather.wind_speed / self.config.reference_wind_speed

    def spread_probability(self,
                           source_intensity: float,
                           dx: int,
                           dy: int,
                           weather: WeatherObservation) -> float:
        """
        Probability that a burning cell ignites its neighbor at offset (dx, dy)

        Args:
            source_intensity: Intensity of the burning cell (0-1)
            dx, dy: Neighbor offset in pitch units
            weather: Current weather observation

        Returns:
            Probability clamped to [0, max_spread_probability]
        """
        cfg = self.config
        probability = source_intensity * cfg.base_spread_factor
        probability *= self.wind_multiplier(dx, dy, weather)
        probability *= self.weather_multiplier(weather)
        return max(0.0, min(probability, cfg.max_spread_probability))

    def can_spread(self, intensity: float) -> bool:
        return intensity > self.config.extinguish_threshold

    def child_intensity(self, source_intensity: float) -> float:
        return max(0.0, min(1.0, source_intensity * self.config.child_intensity_factor))

    def decay(self, intensity: float) -> float:
        return max(0.0, min(1.0, intensity * self.config.decay_factor))
