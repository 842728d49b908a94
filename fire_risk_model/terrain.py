# ====================
# terrain.py
# Deterministic synthetic terrain for fire risk scoring
# ====================

import math
from dataclasses import dataclass

import numpy as np


class InvalidGridDimensions(ValueError):
    """Raised when a grid width or height is not strictly positive"""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        super().__init__(f"Grid dimensions must be positive, got width={width}, height={height}")


def validate_grid_dimensions(width: float, height: float):
    if width <= 0 or height <= 0:
        raise InvalidGridDimensions(width, height)


def validate_origin(origin, width: float, height: float):
    """Raise ValueError unless origin lies inside [0, width) x [0, height)"""
    if origin is None:
        return
    x, y = origin
    if not (0 <= x < width and 0 <= y < height):
        raise ValueError(f"Origin ({x}, {y}) is outside the {width} x {height} area")


@dataclass(frozen=True)
class TerrainSample:
    slope: float  # degrees, 0-45
    aspect: float  # degrees, 0-360
    elevation: float  # meters
    fuel_load: float  # 0-1


class TerrainSynthesizer:
    """
    Synthesizes elevation, slope, aspect and fuel load from grid position alone.

    The same (x, y, width, height) always produces the same sample, so no
    external DEM or land cover raster is needed.
    """

    base_elevation = 1000.0
    max_slope = 45.0
    base_fuel_load = 0.5

    def sample(self, x: float, y: float, width: float, height: float) -> TerrainSample:
        validate_grid_dimensions(width, height)

        nx = x / width
        ny = y / height

        elevation = (self.base_elevation
                     + math.sin(nx * math.pi * 2) * 500
                     + math.cos(ny * math.pi * 3) * 300)
        slope = abs(math.sin(nx * 10) * math.cos(ny * 8)) * self.max_slope
        aspect = (nx * 360) % 360

        fuel_load = self.base_fuel_load
        if elevation > 1200:
            fuel_load += 0.3  # more vegetation higher up
        if slope < 15:
            fuel_load += 0.2  # gentle slopes accumulate fuel

        return TerrainSample(
            slope=slope,
            aspect=aspect,
            elevation=elevation,
            fuel_load=min(fuel_load, 1.0),
        )

    def sample_grid(self, width: float, height: float, pitch: float):
        """
        Vectorized terrain for every grid origin of the area.

        Returns:
            Dictionary of (rows, cols) arrays indexed [y_index, x_index]
        """
        validate_grid_dimensions(width, height)

        xs = np.arange(0, width, pitch, dtype=np.float64)
        ys = np.arange(0, height, pitch, dtype=np.float64)
        nx = (xs / width)[np.newaxis, :]
        ny = (ys / height)[:, np.newaxis]

        elevation = (self.base_elevation
                     + np.sin(nx * np.pi * 2) * 500
                     + np.cos(ny * np.pi * 3) * 300)
        slope = np.abs(np.sin(nx * 10) * np.cos(ny * 8)) * self.max_slope
        aspect = np.broadcast_to((nx * 360) % 360, slope.shape).copy()

        fuel_load = np.full(slope.shape, self.base_fuel_load)
        fuel_load += np.where(elevation > 1200, 0.3, 0.0)
        fuel_load += np.where(slope < 15, 0.2, 0.0)

        return {
            "elevation": elevation,
            "slope": slope,
            "aspect": aspect,
            "fuel_load": np.minimum(fuel_load, 1.0),
        }
