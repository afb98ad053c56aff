"""
Phantom scene assembly.

Builds the representations for every fiber and isotropic region of a
phantom, registers their trimesh objects in one trimesh.Scene and keeps
the scene in step with the representations on refresh.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import trimesh

from .common.config import Config, GeometryConfig
from .common.io import save_scene
from .common.mesh_ops import compute_mesh_stats
from .common.palette import PaletteColors
from .common.sources import Phantom
from .fiber_skeleton import FiberSkeleton
from .fiber_tube import FiberTube
from .isotropic_region import IsotropicRegion

logger = logging.getLogger(__name__)

REPRESENTATIONS = ("tube", "skeleton", "both")


class PhantomScene:
    """
    Scene of a whole phantom.

    Args:
        phantom: Fibers and regions to show
        config: Resolution, constraints, colour seed, camera settings
        representation: "tube", "skeleton" or "both" for fibers
    """

    def __init__(
        self,
        phantom: Phantom,
        config: Optional[Config] = None,
        representation: str = "tube"
    ):
        if representation not in REPRESENTATIONS:
            raise ValueError(f"Unknown representation {representation!r}, expected one of {REPRESENTATIONS}")

        self.phantom = phantom
        self.config = config or Config()
        self.representation = representation
        self.colors = PaletteColors(seed=self.config.color_seed)
        self.scene = trimesh.Scene()

        self.tubes: List[FiberTube] = []
        self.skeletons: List[FiberSkeleton] = []
        self.regions: List[IsotropicRegion] = []

        self._build()

    def fiber_geometry(self) -> GeometryConfig:
        """Geometry settings for fibers, constrained if enabled."""
        geometry = self.config.geometry
        if not self.config.use_constraints:
            return geometry

        c = self.config.constraints
        n = self.phantom.n_fibers
        max_line = geometry.max_line_segments or c.max_mesh_line_segments
        return replace(
            geometry,
            tube_axial_segments=c.per_mesh("axial", geometry.tube_axial_segments, n),
            tube_radial_segments=c.per_mesh("radial", geometry.tube_radial_segments, n, minimum=3),
            max_line_segments=c.per_mesh("line", max_line, n),
            marker_width_segments=c.per_mesh(
                "skeleton_sphere", geometry.marker_width_segments, n, minimum=3),
            marker_height_segments=c.per_mesh(
                "skeleton_sphere", geometry.marker_height_segments, n, minimum=2)
        )

    def region_geometry(self) -> GeometryConfig:
        """Geometry settings for isotropic regions, constrained if enabled."""
        geometry = self.config.geometry
        if not self.config.use_constraints:
            return geometry

        c = self.config.constraints
        n = self.phantom.n_regions
        return replace(
            geometry,
            region_width_segments=c.per_mesh(
                "isotropic_region", geometry.region_width_segments, n, minimum=3),
            region_height_segments=c.per_mesh(
                "isotropic_region", geometry.region_height_segments, n, minimum=2)
        )

    def _build(self) -> None:
        fiber_geometry = self.fiber_geometry()
        region_geometry = self.region_geometry()

        for fiber in self.phantom.fibers:
            if self.representation in ("tube", "both"):
                self.tubes.append(FiberTube(fiber, self.colors, fiber_geometry))
            if self.representation in ("skeleton", "both"):
                self.skeletons.append(FiberSkeleton(fiber, self.colors, fiber_geometry))

        for region in self.phantom.regions:
            self.regions.append(IsotropicRegion(region, self.colors, region_geometry))

        self._sync()
        self._place_camera()

        logger.info(f"Built scene: {len(self.tubes)} tubes, {len(self.skeletons)} skeletons, "
                    f"{len(self.regions)} regions")

    def _named_geometry(self) -> Dict[str, Any]:
        named = {}
        for i, tube in enumerate(self.tubes):
            named[f"fiber_{i}_tube"] = tube.mesh
        for i, skeleton in enumerate(self.skeletons):
            named[f"fiber_{i}_line"] = skeleton.line
            named[f"fiber_{i}_markers"] = skeleton.spheres
        for i, region in enumerate(self.regions):
            named[f"region_{i}"] = region.mesh
        return named

    def _sync(self) -> None:
        """Register current geometry objects; empty meshes are left out."""
        for name, geometry in self._named_geometry().items():
            current = self.scene.geometry.get(name)
            empty = len(geometry.vertices) == 0
            if current is geometry and not empty:
                continue
            if current is not None:
                self.scene.delete_geometry(name)
            if not empty:
                self.scene.add_geometry(geometry, node_name=name, geom_name=name)

    def _place_camera(self) -> None:
        if self.scene.is_empty:
            return
        fov = self.config.camera_fov
        self.scene.set_camera(
            distance=self.camera_distance(),
            center=np.zeros(3),
            fov=(fov, fov)
        )

    def camera_distance(self) -> float:
        return self.phantom.radius() * self.config.camera_distance_factor

    def refresh(self) -> None:
        """Refresh every representation after the phantom changed."""
        for representation in self.tubes + self.skeletons + self.regions:
            representation.refresh()
        self._sync()
        logger.debug("Scene refreshed")

    def summary(self) -> Dict[str, Any]:
        """Per-representation statistics, rounded to the configured precision."""
        r = self.config.round_to_precision
        geometries = {}
        for name, geometry in self._named_geometry().items():
            if isinstance(geometry, trimesh.Trimesh):
                stats = compute_mesh_stats(geometry)
                geometries[name] = {
                    "n_vertices": stats["n_vertices"],
                    "n_faces": stats["n_faces"],
                    "max_extent": r(stats["max_extent"]),
                    "surface_area": r(stats["surface_area"])
                }
            else:
                geometries[name] = {"n_vertices": len(geometry.vertices)}
        return {
            "n_fibers": self.phantom.n_fibers,
            "n_regions": self.phantom.n_regions,
            "representation": self.representation,
            "phantom_radius": r(self.phantom.radius()),
            "camera_distance": r(self.camera_distance()),
            "geometries": geometries
        }

    def export(self, path: Path, with_metadata: bool = True) -> Path:
        """Export the scene to GLB (plus a JSON sidecar when asked)."""
        metadata = None
        if with_metadata:
            metadata = {"config": self.config.to_dict(), "summary": self.summary()}
        return save_scene(self.scene, path, metadata)

    def show(self) -> None:
        """Open the interactive trimesh viewer (requires pyglet)."""
        self.scene.show(smooth=False)
