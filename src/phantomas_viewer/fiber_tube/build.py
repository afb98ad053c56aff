"""
Fiber Tube: swept-tube surface following a fiber path.

The curve is sampled at t = i / axial_segments (not reparameterised by
arc length), so ring i is centred on fiber.interpolate(i / axial_segments).
The radius is re-read from the fiber on every refresh; a fiber without a
radius gets the configured default both at build and at refresh.
"""

import logging
from typing import Optional

import numpy as np
import trimesh

from ..common.config import GeometryConfig
from ..common.mesh_ops import SurfaceMaterial, apply_material, replace_geometry, create_tube_mesh
from ..common.palette import PaletteColors
from ..common.sources import check_radius, evaluate

logger = logging.getLogger(__name__)

TANGENT_DELTA = 1e-4


class FiberCurve:
    """Parametric curve view of a fiber, t in [0, 1]."""

    def __init__(self, fiber):
        self.fiber = fiber

    def get_point(self, t: float) -> np.ndarray:
        position, _ = evaluate(self.fiber, t)
        return position

    def get_tangent(self, t: float) -> np.ndarray:
        """Unit tangent; finite difference when the fiber gives none."""
        _, tangent = evaluate(self.fiber, t)
        if tangent is None or np.linalg.norm(tangent) == 0:
            t1 = max(t - TANGENT_DELTA, 0.0)
            t2 = min(t + TANGENT_DELTA, 1.0)
            tangent = self.get_point(t2) - self.get_point(t1)
        norm = np.linalg.norm(tangent)
        return tangent / norm if norm > 0 else tangent

    def sample(self, segments: int):
        """
        Points and unit tangents at t = i / segments, i = 0..segments.

        Returns:
            Tuple of ((segments+1) x 3 points, (segments+1) x 3 tangents)
        """
        ts = np.linspace(0.0, 1.0, segments + 1)
        points = np.array([self.get_point(t) for t in ts])
        tangents = np.array([self.get_tangent(t) for t in ts])
        return points, tangents


class FiberTube:
    """
    Tube surface for one fiber.

    Attributes:
        fiber: The source the representation is built from (read only)
        curve: FiberCurve the surface is swept along
        axial_segments: Segments along the fiber (default 256)
        radial_segments: Segments around the fiber (default 64)
        radius: Radius used for the current surface
        mesh: trimesh surface, replaced in place on refresh
    """

    def __init__(
        self,
        fiber,
        colors: Optional[PaletteColors] = None,
        geometry: Optional[GeometryConfig] = None
    ):
        self.fiber = fiber
        self.geometry = geometry or GeometryConfig()
        self.curve = FiberCurve(fiber)
        self.axial_segments = self.geometry.tube_axial_segments
        self.radial_segments = self.geometry.tube_radial_segments
        self.color = (colors or PaletteColors()).next()
        self.material = SurfaceMaterial(
            color=self.color,
            transparent=True,
            double_sided=True,
            flat_shading=True
        )

        self.radius = self._current_radius()
        self.mesh = self._build()
        apply_material(self.mesh, self.material)

        logger.debug(f"Tube: radius {self.radius}, {len(self.mesh.faces)} faces")

    def _current_radius(self) -> float:
        radius = check_radius(self.fiber.radius, "fiber radius")
        return self.geometry.default_tube_radius if radius is None else radius

    def _build(self) -> trimesh.Trimesh:
        points, tangents = self.curve.sample(self.axial_segments)
        return create_tube_mesh(points, tangents, self.radius, self.radial_segments)

    @property
    def centerline(self) -> np.ndarray:
        """Ring centres, one per axial sample."""
        rings = self.mesh.vertices.reshape(self.axial_segments + 1, self.radial_segments + 1, 3)
        return rings[:, :-1].mean(axis=1)

    def refresh(self) -> None:
        """Regenerate the surface from the current fiber path and radius."""
        self.radius = self._current_radius()
        replace_geometry(self.mesh, self._build())
        apply_material(self.mesh, self.material)
