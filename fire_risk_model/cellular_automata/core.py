# ====================
# cellular_automata/core.py
# Core Cellular Automata Engine for Forest Fire Spread Simulation
# ====================

from dataclasses import dataclass
from typing import List, Dict, Tuple, Optional, Iterator

import numpy as np

from ..config import WeatherObservation
from ..terrain import validate_origin
from .config import CAConfig
from .rules import FireSpreadRules, NEIGHBOR_OFFSETS

Coordinate = Tuple[int, int]


@dataclass
class FireCell:
    """Burning cell tracked by the simulator"""
    x: int
    y: int
    intensity: float
    age: int = 0

    @property
    def coordinate(self) -> Coordinate:
        return self.x, self.y


@dataclass(frozen=True)
class FirePoint:
    """Snapshot of a burning cell handed back to callers"""
    x: int
    y: int
    intensity: float

    def to_dict(self) -> Dict:
        return {'x': self.x, 'y': self.y, 'intensity': self.intensity}


# Field of burning cells keyed by coordinate, in ignition order
FireField = Dict[Coordinate, FireCell]


class SpreadSimulator:
    """
    Discrete-time fire spread over an 8-connected lattice.

    Every hour is computed from a read-only snapshot of the previous hour's
    field; the next field is built in a separate buffer and then replaces it.
    """

    def __init__(self, config: CAConfig = None):
        self.config = config or CAConfig()
        self.rules = FireSpreadRules(self.config)

    def initial_field(self, origin: Optional[Coordinate]) -> FireField:
        if origin is None:
            return {}
        x, y = int(origin[0]), int(origin[1])
        return {(x, y): FireCell(x=x, y=y, intensity=self.config.initial_intensity, age=0)}

    def step(self,
             field: FireField,
             weather: WeatherObservation,
             width: float,
             height: float,
             rng: np.random.Generator) -> FireField:
        """
        Advance the fire field by one hour

        Args:
            field: Field as of the previous hour (not modified)
            weather: Current weather observation
            width, height: Area bounds; ignitions outside [0, width) x [0, height) are skipped
            rng: Random generator for ignition draws

        Returns:
            New field for this hour
        """
        pitch = self.config.neighbor_pitch
        ignitions: Dict[Coordinate, float] = {}

        for source in field.values():
            if not self.rules.can_spread(source.intensity):
                continue

            for dx, dy in NEIGHBOR_OFFSETS:
                nx = source.x + dx * pitch
                ny = source.y + dy * pitch

                if not (0 <= nx < width and 0 <= ny < height):
                    continue
                if (nx, ny) in field:
                    continue

                probability = self.rules.spread_probability(source.intensity, dx, dy, weather)
                if rng.random() < probability:
                    intensity = self.rules.child_intensity(source.intensity)
                    # Same-hour ignitions of one coordinate keep the strongest
                    if intensity > ignitions.get((nx, ny), -1.0):
                        ignitions[(nx, ny)] = intensity

        next_field: FireField = {}
        for coordinate, cell in field.items():
            next_field[coordinate] = FireCell(x=cell.x, y=cell.y, intensity=cell.intensity, age=cell.age)
        for (nx, ny), intensity in ignitions.items():
            next_field[(nx, ny)] = FireCell(x=nx, y=ny, intensity=intensity, age=0)

        for coordinate in list(next_field):
            cell = next_field[coordinate]
            cell.age += 1
            cell.intensity = self.rules.decay(cell.intensity)
            if cell.intensity < self.config.prune_intensity:
                del next_field[coordinate]

        return next_field

    def iter_fields(self,
                    origin: Optional[Coordinate],
                    weather: WeatherObservation,
                    hours: int,
                    width: float,
                    height: float,
                    rng: Optional[np.random.Generator] = None) -> Iterator[FireField]:
        """Yield the field after each simulated hour; stop iterating to interrupt"""
        validate_origin(origin, width, height)
        rng = rng if rng is not None else np.random.default_rng()
        field = self.initial_field(origin)

        for hour in range(1, hours + 1):
            field = self.step(field, weather, width, height, rng)
            if self.config.verbose:
                burning = sum(1 for cell in field.values() if self.rules.can_spread(cell.intensity))
                print(f"   Step {hour}/{hours}: Fire cells: {len(field)} (spreading: {burning})")
            yield field

    def run(self,
            origin: Optional[Coordinate],
            weather: WeatherObservation,
            hours: int,
            width: float,
            height: float,
            rng: Optional[np.random.Generator] = None) -> FireField:
        field = self.initial_field(origin)
        for field in self.iter_fields(origin, weather, hours, width, height, rng):
            pass
        return field

    def simulate(self,
                 origin: Optional[Coordinate],
                 weather: WeatherObservation,
                 hours: int,
                 width: float,
                 height: float,
                 rng: Optional[np.random.Generator] = None) -> List[FirePoint]:
        """
        Run the spread for a number of hours from a single origin

        Returns:
            Burning cells (coordinate and intensity) after the final hour
        """
        if hours < 0:
            raise ValueError(f"hours must be >= 0, got {hours}")
        validate_origin(origin, width, height)
        return field_snapshot(self.run(origin, weather, hours, width, height, rng))


def field_snapshot(field: FireField) -> List[FirePoint]:
    return [FirePoint(x=cell.x, y=cell.y, intensity=cell.intensity) for cell in field.values()]


# Convenience function for easy access
def run_fire_simulation(origin: Optional[Coordinate],
                        weather: WeatherObservation = None,
                        hours: int = 6,
                        width: float = 600.0,
                        height: float = 400.0,
                        seed: Optional[int] = None,
                        config: CAConfig = None) -> List[FirePoint]:
    """
    Convenience function to run fire spread simulation

    Args:
        origin: (x, y) ignition coordinate, or None for no fire
        weather: Weather observation (dashboard defaults when omitted)
        hours: Duration of simulation
        width, height: Area bounds
        seed: Seed for the ignition draws

    Returns:
        Final burning cells
    """
    simulator = SpreadSimulator(config)
    return simulator.simulate(
        origin,
        weather or WeatherObservation(),
        hours,
        width,
        height,
        rng=np.random.default_rng(seed),
    )
