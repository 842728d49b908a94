# ====================
# cellular_automata/utils.py
# Utility functions for Cellular Automata fire spread simulation
# ====================

import os
from typing import List, Dict, Optional

import numpy as np
import rasterio
from rasterio.transform import from_origin
from scipy import ndimage

from .core import FireField


def field_to_array(field: FireField, width: float, height: float, pitch: int = 10) -> np.ndarray:
    """
    Rasterize a fire field

    Args:
        field: Fire cells keyed by coordinate
        width, height: Area bounds
        pitch: Distance units per raster cell

    Returns:
        float32 intensity array of shape (rows, cols) indexed [y // pitch, x // pitch]
    """
    rows = int(np.ceil(height / pitch))
    cols = int(np.ceil(width / pitch))
    array = np.zeros((rows, cols), dtype=np.float32)

    for cell in field.values():
        row, col = int(cell.y // pitch), int(cell.x // pitch)
        if 0 <= row < rows and 0 <= col < cols:
            array[row, col] = max(array[row, col], cell.intensity)

    return array


def count_fire_clusters(frame: np.ndarray, threshold: float = 0.1) -> int:
    """Number of separate 8-connected burning regions in a rasterized frame"""
    structure = np.ones((3, 3), dtype=int)
    _, n_clusters = ndimage.label(frame > threshold, structure=structure)
    return int(n_clusters)


def calculate_frame_statistics(field: FireField,
                               hour: int,
                               cell_area_hectares: float,
                               threshold: float = 0.1,
                               hours: Optional[List[int]] = None) -> Dict:
    """Summary numbers for one simulated hour"""
    intensities = np.array([cell.intensity for cell in field.values()], dtype=np.float64)
    burning = intensities[intensities > threshold]

    return {
        'time_step': hour,
        'total_fire_cells': int(intensities.size),
        'burning_cells': int(burning.size),
        'max_intensity': float(intensities.max()) if intensities.size else 0.0,
        'mean_intensity': float(burning.mean()) if burning.size else 0.0,
        'burned_area_hectares': float(intensities.size * cell_area_hectares),
    }


def create_fire_animation_data(frames: List[FireField],
                               width: float,
                               height: float,
                               threshold: float = 0.1,
                               hours: Optional[List[int]] = None) -> Dict:
    """
    Prepare data for web animation

    Args:
        frames: Fire field per kept hour
        width, height: Area bounds
        threshold: Intensity above which a cell counts as burning
        hours: Simulated hour of each frame (defaults to the frame index)

    Returns:
        Dictionary with animation data
    """
    animation_data = {
        'frames': [],
        'bounds': {'width': width, 'height': height},
        'frame_count': len(frames)
    }

    if hours is None:
        hours = list(range(len(frames)))
    if len(hours) != len(frames):
        raise ValueError(f"Got {len(hours)} hours for {len(frames)} frames")

    for hour, field in zip(hours, frames):
        cells = list(field.values())
        frame_data = {
            'time_step': hour,
            'fire_locations': {
                'x': [cell.x for cell in cells],
                'y': [cell.y for cell in cells],
                'intensity': [float(cell.intensity) for cell in cells],
            },
            'total_cells': len(cells),
            'burning_cells': sum(1 for cell in cells if cell.intensity > threshold),
            'max_intensity': max((float(cell.intensity) for cell in cells), default=0.0),
        }
        animation_data['frames'].append(frame_data)

    return animation_data


def save_simulation_frame(frame: np.ndarray,
                          output_path: str,
                          cell_size_meters: float,
                          time_step: int = 0,
                          probability_map: Optional[np.ndarray] = None) -> str:
    """
    Save a rasterized simulation frame as GeoTIFF

    Args:
        frame: Fire intensity array
        output_path: Output file path
        cell_size_meters: Ground size of one raster cell
        time_step: Current time step
        probability_map: Optional probability layer on the same raster, stored as band 2

    Returns:
        Path of the written file
    """
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    bands = [frame]
    if probability_map is not None:
        if probability_map.shape != frame.shape:
            raise ValueError(f"Probability map shape {probability_map.shape} does not match frame {frame.shape}")
        bands.append(probability_map)
    output_data = np.stack(bands, axis=0).astype(np.float32)

    profile = {
        'driver': 'GTiff',
        'height': frame.shape[0],
        'width': frame.shape[1],
        'count': len(bands),
        'dtype': rasterio.float32,
        'crs': None,
        'transform': from_origin(0.0, frame.shape[0] * cell_size_meters, cell_size_meters, cell_size_meters),
        'compress': 'lzw'
    }

    with rasterio.open(output_path, 'w', **profile) as dst:
        dst.write(output_data)
        dst.set_band_description(1, f'Fire_State_Hour_{time_step}')
        if probability_map is not None:
            dst.set_band_description(2, 'Fire_Probability')

    return output_path


def make_json_serializable(obj):
    """Convert numpy types and dataclass records to native Python types"""
    if isinstance(obj, dict):
        return {str(key): make_json_serializable(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [make_json_serializable(item) for item in obj]
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif hasattr(obj, 'to_dict'):
        return make_json_serializable(obj.to_dict())
    else:
        return obj
