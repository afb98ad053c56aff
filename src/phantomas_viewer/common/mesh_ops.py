"""
Mesh operation utilities.

Fixed-topology generators (UV sphere, swept tube), merging, materials
and statistics. Generated meshes are built with process=False so vertex
and face counts depend only on the segment counts.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Tuple
import logging

import trimesh
from trimesh.path import Path3D
from trimesh.path.entities import Line
from trimesh.visual.material import PBRMaterial
from trimesh.visual.texture import TextureVisuals

from .palette import hex_to_rgba

logger = logging.getLogger(__name__)


@dataclass
class SurfaceMaterial:
    """
    Surface appearance of a representation.

    flat_shading is a viewer hint (kept in mesh metadata); the rest maps
    onto a glTF PBR material.
    """
    color: int
    opacity: float = 1.0
    transparent: bool = False
    double_sided: bool = False
    flat_shading: bool = False

    @property
    def rgba(self) -> Tuple[int, int, int, int]:
        return hex_to_rgba(self.color, self.opacity)

    def to_pbr(self) -> PBRMaterial:
        return PBRMaterial(
            baseColorFactor=self.rgba,
            doubleSided=self.double_sided,
            alphaMode="BLEND" if self.transparent else "OPAQUE",
            metallicFactor=0.1,
            roughnessFactor=0.8
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color": f"#{self.color:06X}",
            "opacity": self.opacity,
            "transparent": self.transparent,
            "double_sided": self.double_sided,
            "flat_shading": self.flat_shading
        }


def apply_material(mesh: trimesh.Trimesh, material: SurfaceMaterial) -> trimesh.Trimesh:
    """Attach a material to a mesh (again after its buffers were replaced)."""
    mesh.visual = TextureVisuals(material=material.to_pbr())
    mesh.metadata["material"] = material.to_dict()
    return mesh


def replace_geometry(target: trimesh.Trimesh, source: trimesh.Trimesh) -> trimesh.Trimesh:
    """Swap the vertex and face buffers of target for those of source."""
    target.vertices = source.vertices
    target.faces = source.faces
    return target


def sphere_mesh(
    radius: float,
    width_segments: int = 32,
    height_segments: int = 16,
    center: Optional[np.ndarray] = None
) -> trimesh.Trimesh:
    """
    Create a UV sphere.

    Vertices lie on a (height+1) x (width+1) latitude/longitude grid with
    the seam column duplicated; the pole rows contribute one triangle per
    cell, other rows two.

    Args:
        radius: Sphere radius
        width_segments: Segments around the equator (>= 3)
        height_segments: Segments pole to pole (>= 2)
        center: Optional translation

    Returns:
        Sphere mesh with (w+1)(h+1) vertices and 2w(h-1) faces
    """
    if width_segments < 3 or height_segments < 2:
        raise ValueError(f"Sphere needs >= 3x2 segments, got {width_segments}x{height_segments}")

    u = np.linspace(0.0, 1.0, width_segments + 1)
    v = np.linspace(0.0, 1.0, height_segments + 1)
    uu, vv = np.meshgrid(u, v)

    phi = uu * 2 * np.pi
    theta = vv * np.pi
    vertices = np.column_stack([
        (-radius * np.cos(phi) * np.sin(theta)).ravel(),
        (radius * np.cos(theta)).ravel(),
        (radius * np.sin(phi) * np.sin(theta)).ravel()
    ])

    row = width_segments + 1
    iy, ix = np.meshgrid(np.arange(height_segments), np.arange(width_segments), indexing="ij")
    a = iy * row + ix + 1
    b = iy * row + ix
    c = (iy + 1) * row + ix
    d = (iy + 1) * row + ix + 1

    # No triangle touches the north pole row twice, none the south pole row
    upper = np.stack([a, b, d], axis=-1)[1:].reshape(-1, 3)
    lower = np.stack([b, c, d], axis=-1)[:-1].reshape(-1, 3)
    faces = np.vstack([upper, lower])

    if center is not None:
        vertices = vertices + np.asarray(center, dtype=np.float64)

    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def _rotate(vectors: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    """Rodrigues rotation of vectors about a unit axis."""
    cos, sin = np.cos(angle), np.sin(angle)
    return (vectors * cos
            + np.cross(axis, vectors) * sin
            + np.outer(vectors @ axis, axis) * (1 - cos))


def compute_frames(tangents: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Parallel-transport frames along a sampled curve.

    The first normal is perpendicular to the tangent and chosen against the
    tangent's smallest component; each later frame rotates the previous one
    by the angle between consecutive tangents.

    Args:
        tangents: Nx3 array of tangent vectors (normalised here)

    Returns:
        Tuple of (tangents, normals, binormals), each Nx3 and unit length
    """
    tangents = tangents / (np.linalg.norm(tangents, axis=1, keepdims=True) + 1e-12)
    n = len(tangents)
    normals = np.zeros((n, 3))
    binormals = np.zeros((n, 3))

    # Last axis wins ties, matching a <= scan over x, y, z
    magnitude = np.abs(tangents[0])
    axis = np.zeros(3)
    axis[2 - int(np.argmin(magnitude[::-1]))] = 1.0

    vec = np.cross(tangents[0], axis)
    vec /= np.linalg.norm(vec) + 1e-12
    normals[0] = np.cross(tangents[0], vec)
    binormals[0] = np.cross(tangents[0], normals[0])

    for i in range(1, n):
        normals[i] = normals[i - 1]
        binormals[i] = binormals[i - 1]

        vec = np.cross(tangents[i - 1], tangents[i])
        norm = np.linalg.norm(vec)
        if norm > np.finfo(float).eps:
            vec /= norm
            theta = np.arccos(np.clip(tangents[i - 1] @ tangents[i], -1.0, 1.0))
            normals[i] = _rotate(normals[i][None, :], vec, theta)[0]

        binormals[i] = np.cross(tangents[i], normals[i])

    return tangents, normals, binormals


def create_tube_mesh(
    centerline: np.ndarray,
    tangents: np.ndarray,
    radius: float,
    segments: int = 8
) -> trimesh.Trimesh:
    """
    Create a tube mesh along a centerline.

    Every centerline point gets a ring of segments+1 vertices (seam
    duplicated); consecutive rings are joined by two triangles per quad.
    Ends are left open.

    Args:
        centerline: Nx3 array of points
        tangents: Nx3 array of curve tangents at those points
        radius: Tube radius
        segments: Number of segments around tube

    Returns:
        Tube mesh with N(segments+1) vertices and 2(N-1)segments faces
    """
    centerline = np.asarray(centerline, dtype=np.float64)
    if len(centerline) < 2:
        return trimesh.Trimesh()

    _, normals, binormals = compute_frames(np.asarray(tangents, dtype=np.float64))

    angles = np.linspace(0.0, 2 * np.pi, segments + 1)
    sin = np.sin(angles)[None, :, None]
    cos = -np.cos(angles)[None, :, None]

    ring_dirs = cos * normals[:, None, :] + sin * binormals[:, None, :]
    ring_dirs /= np.linalg.norm(ring_dirs, axis=2, keepdims=True) + 1e-12
    vertices = (centerline[:, None, :] + radius * ring_dirs).reshape(-1, 3)

    row = segments + 1
    j, i = np.meshgrid(np.arange(1, len(centerline)), np.arange(1, row), indexing="ij")
    a = row * (j - 1) + (i - 1)
    b = row * j + (i - 1)
    c = row * j + i
    d = row * (j - 1) + i
    faces = np.stack([
        np.stack([a, b, d], axis=-1),
        np.stack([b, c, d], axis=-1)
    ], axis=2).reshape(-1, 3)

    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def create_polyline(points: np.ndarray) -> Path3D:
    """Create an open polyline through Nx3 points."""
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    return Path3D(
        entities=[Line(points=np.arange(len(points)))],
        vertices=points,
        process=False
    )


def merge_meshes(meshes: List[trimesh.Trimesh]) -> trimesh.Trimesh:
    """
    Merge multiple meshes into one.

    Args:
        meshes: List of trimesh meshes

    Returns:
        Combined mesh (empty if no meshes are given)
    """
    if not meshes:
        return trimesh.Trimesh()

    if len(meshes) == 1:
        return meshes[0].copy()

    combined = trimesh.util.concatenate(meshes)
    logger.debug(f"Merged {len(meshes)} meshes: {len(combined.vertices)} verts, {len(combined.faces)} faces")

    return combined


def compute_mesh_stats(mesh: trimesh.Trimesh) -> Dict[str, Any]:
    """
    Compute mesh statistics.

    Args:
        mesh: Trimesh mesh object

    Returns:
        Dictionary of mesh statistics (bounds are None for an empty mesh)
    """
    if len(mesh.vertices) == 0:
        return {
            "n_vertices": 0,
            "n_faces": 0,
            "bounds": None,
            "extents": None,
            "max_extent": 0.0,
            "surface_area": 0.0
        }

    bounds = mesh.bounds
    extents = mesh.extents

    return {
        "n_vertices": len(mesh.vertices),
        "n_faces": len(mesh.faces),
        "bounds": {
            "min": bounds[0].tolist(),
            "max": bounds[1].tolist()
        },
        "extents": extents.tolist(),
        "max_extent": float(max(extents)),
        "surface_area": float(mesh.area)
    }
