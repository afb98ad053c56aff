"""
Common modules shared by all representations.

Resolution Model:
- Topology (segment counts) is fixed when a representation is built
- Refresh resamples positions from the current source state
"""

from .config import Config, GeometryConfig, MeshConstraints, RefreshPolicy
from .sources import FiberSource, RegionSource, Phantom, InvalidSource
from .io import load_phantom, parse_phantom, save_phantom, save_scene, PhantomFormatError
from .palette import PaletteColors, COLORS
from .mesh_ops import sphere_mesh, create_tube_mesh, merge_meshes, compute_mesh_stats

__all__ = [
    'Config', 'GeometryConfig', 'MeshConstraints', 'RefreshPolicy',
    'FiberSource', 'RegionSource', 'Phantom', 'InvalidSource',
    'load_phantom', 'parse_phantom', 'save_phantom', 'save_scene', 'PhantomFormatError',
    'PaletteColors', 'COLORS',
    'sphere_mesh', 'create_tube_mesh', 'merge_meshes', 'compute_mesh_stats',
]
