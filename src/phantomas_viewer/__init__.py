"""
Phantomas Viewer - 3D geometry for fiber/tissue phantoms.

Three representations:
- Fiber Skeleton: sampled path polyline with control-point markers
- Fiber Tube: swept-tube surface along the fiber
- Isotropic Region: sphere surface for a spherical region

Usage:
    phantomas-viewer phantom_save.json --representation both -o outputs/phantom.glb
"""

__version__ = "1.0.0"
