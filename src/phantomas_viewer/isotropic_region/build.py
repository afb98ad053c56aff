"""
Isotropic Region: UV sphere at the region's center.
"""

import logging
from typing import Optional

import trimesh

from ..common.config import GeometryConfig
from ..common.mesh_ops import SurfaceMaterial, apply_material, replace_geometry, sphere_mesh
from ..common.palette import PaletteColors
from ..common.sources import InvalidSource, as_point, check_radius

logger = logging.getLogger(__name__)


class IsotropicRegion:
    """
    Sphere surface for one isotropic region.

    The mesh vertices are stored in world coordinates (already translated
    to the center), so the mesh can be added to a scene without a transform.
    """

    def __init__(
        self,
        source,
        colors: Optional[PaletteColors] = None,
        geometry: Optional[GeometryConfig] = None
    ):
        self.source = source
        self.geometry = geometry or GeometryConfig()
        self.width_segments = self.geometry.region_width_segments
        self.height_segments = self.geometry.region_height_segments
        self.color = (colors or PaletteColors()).next()
        self.material = SurfaceMaterial(color=self.color, transparent=True, flat_shading=True)

        self.mesh = self._build()
        apply_material(self.mesh, self.material)

        logger.debug(f"Region: radius {self.radius} at {self.center.tolist()}")

    def _build(self) -> trimesh.Trimesh:
        self.center = as_point(self.source.center, "region center")
        self.radius = check_radius(self.source.radius, "region radius")
        if self.radius is None:
            raise InvalidSource("region radius is required")
        return sphere_mesh(self.radius, self.width_segments, self.height_segments, center=self.center)

    def refresh(self) -> None:
        """Rebuild the sphere with the current radius and center."""
        replace_geometry(self.mesh, self._build())
        apply_material(self.mesh, self.material)
