"""
Fiber Skeleton: path polyline and control-point markers.

Representation:
- line: open polyline through floor(length * 1.5) + 1 samples of the fiber
- spheres: one sphere per control point, merged into a single mesh

The segment count is taken at construction. With the default "fixed"
refresh policy it is kept on refresh even if the fiber length changed;
the "resample" policy recomputes it every refresh.
"""

import math
import logging
from typing import Optional

import numpy as np
import trimesh

from ..common.config import GeometryConfig, RefreshPolicy
from ..common.mesh_ops import (
    SurfaceMaterial, apply_material, replace_geometry,
    create_polyline, merge_meshes, sphere_mesh
)
from ..common.palette import PaletteColors, MARKER_COLOR, hex_to_rgba
from ..common.sources import as_points, check_length, check_radius, evaluate

logger = logging.getLogger(__name__)


def skeleton_segments(length: float, geometry: GeometryConfig) -> int:
    """
    Number of polyline segments for a fiber of the given length.

    Raises InvalidSource for non-positive lengths; short positive lengths
    get a single segment.
    """
    segments = math.floor(check_length(length) * geometry.skeleton_segment_factor)
    if geometry.max_line_segments is not None:
        segments = min(segments, geometry.max_line_segments)
    return max(1, segments)


def sample_path(fiber, segments: int) -> np.ndarray:
    """
    Sample fiber positions at t = i / segments for i = 0..segments.

    Returns:
        Flat float32 buffer of 3 * (segments + 1) coordinates
    """
    positions = np.empty(3 * (segments + 1), dtype=np.float32)
    for i in range(segments + 1):
        position, _ = evaluate(fiber, i / segments)
        positions[3 * i:3 * i + 3] = position
    return positions


def build_markers(
    control_points: np.ndarray,
    radius: float,
    width_segments: int,
    height_segments: int
) -> trimesh.Trimesh:
    """Merge one sphere per control point into a single mesh."""
    spheres = [
        sphere_mesh(radius, width_segments, height_segments, center=point)
        for point in control_points
    ]
    return merge_meshes(spheres)


class FiberSkeleton:
    """
    Polyline + control-point markers for one fiber.

    Attributes:
        fiber: The source the representation is built from (read only)
        segments: Number of polyline segments
        positions: Flat float32 buffer of the sampled path
        line: trimesh Path3D through the sampled path
        spheres: Merged marker mesh (empty when there are no control points)
        color: Palette colour of the line
    """

    def __init__(
        self,
        fiber,
        colors: Optional[PaletteColors] = None,
        geometry: Optional[GeometryConfig] = None
    ):
        self.fiber = fiber
        self.geometry = geometry or GeometryConfig()
        self.color = (colors or PaletteColors()).next()
        self.marker_material = SurfaceMaterial(color=MARKER_COLOR)

        self.segments = skeleton_segments(fiber.length, self.geometry)
        self.positions = sample_path(fiber, self.segments)
        self.line = create_polyline(self.positions)
        self.line.metadata["color"] = f"#{self.color:06X}"
        self.line.metadata["rgba"] = hex_to_rgba(self.color)

        self.spheres = self._build_markers()
        apply_material(self.spheres, self.marker_material)

        logger.debug(f"Skeleton: {self.segments} segments, "
                     f"{len(self.spheres.faces)} marker faces")

    @property
    def points(self) -> np.ndarray:
        """Sampled path as an (segments + 1) x 3 array."""
        return self.positions.reshape(-1, 3)

    def _marker_radius(self) -> float:
        radius = check_radius(self.fiber.radius, "fiber radius")
        return self.geometry.default_tube_radius if radius is None else radius

    def _build_markers(self) -> trimesh.Trimesh:
        return build_markers(
            as_points(self.fiber.control_points),
            self._marker_radius(),
            self.geometry.marker_width_segments,
            self.geometry.marker_height_segments
        )

    def refresh(self) -> None:
        """Regenerate polyline and markers from the current fiber state."""
        if self.geometry.skeleton_refresh_policy is RefreshPolicy.RESAMPLE:
            self.segments = skeleton_segments(self.fiber.length, self.geometry)

        replace_geometry(self.spheres, self._build_markers())
        apply_material(self.spheres, self.marker_material)

        self.positions = sample_path(self.fiber, self.segments)
        points = self.points.astype(np.float64)
        if len(self.line.vertices) == len(points):
            self.line.vertices = points
        else:
            # Resampled to a new segment count: the polyline object is replaced
            metadata = self.line.metadata
            self.line = create_polyline(points)
            self.line.metadata.update(metadata)
