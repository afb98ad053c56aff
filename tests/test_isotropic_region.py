"""
Tests for the isotropic region representation.
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from phantomas_viewer.common.config import GeometryConfig
from phantomas_viewer.common.palette import PaletteColors, COLORS
from phantomas_viewer.common.sources import RegionSource, InvalidSource
from phantomas_viewer.isotropic_region import IsotropicRegion


class LooseRegion:
    """Region-like object without validation."""

    def __init__(self, center, radius):
        self.center = center
        self.radius = radius


@pytest.fixture
def colors():
    return PaletteColors(seed=2)


@pytest.fixture
def small_geometry():
    return GeometryConfig(region_width_segments=16, region_height_segments=12)


class TestIsotropicRegion:

    def test_unit_sphere_at_origin(self, colors):
        region = IsotropicRegion(RegionSource([0, 0, 0], 1.0), colors)

        assert region.width_segments == 128
        assert region.height_segments == 128
        assert len(region.mesh.vertices) == 129 * 129
        assert len(region.mesh.faces) == 2 * 128 * 127
        np.testing.assert_allclose(region.mesh.bounds[0], [-1, -1, -1], atol=1e-9)
        np.testing.assert_allclose(region.mesh.bounds[1], [1, 1, 1], atol=1e-9)

    def test_positioned_at_center(self, colors, small_geometry):
        region = IsotropicRegion(RegionSource([3, -2, 5], 2.0), colors, small_geometry)
        distances = np.linalg.norm(region.mesh.vertices - [3, -2, 5], axis=1)
        np.testing.assert_allclose(distances, 2.0, atol=1e-9)

    def test_colour_and_material(self, colors, small_geometry):
        region = IsotropicRegion(RegionSource([0, 0, 0], 1.0), colors, small_geometry)
        assert region.color in COLORS
        assert region.mesh.metadata["material"]["transparent"] is True

    def test_bad_center(self, colors, small_geometry):
        with pytest.raises(InvalidSource):
            IsotropicRegion(LooseRegion([0, 0], 1.0), colors, small_geometry)

    def test_missing_radius(self, colors, small_geometry):
        with pytest.raises(InvalidSource):
            IsotropicRegion(LooseRegion([0, 0, 0], None), colors, small_geometry)


class TestRefresh:

    def test_idempotent(self, colors, small_geometry):
        region = IsotropicRegion(RegionSource([1, 1, 1], 1.5), colors, small_geometry)
        region.refresh()
        vertices = region.mesh.vertices.copy()
        region.refresh()
        np.testing.assert_array_equal(region.mesh.vertices, vertices)

    def test_radius_and_center_change(self, colors, small_geometry):
        source = RegionSource([0, 0, 0], 1.0)
        region = IsotropicRegion(source, colors, small_geometry)
        mesh = region.mesh
        n_faces = len(mesh.faces)

        source.radius = 2.0
        source.center = [10, 0, 0]
        region.refresh()

        assert region.mesh is mesh
        assert len(region.mesh.faces) == n_faces
        np.testing.assert_allclose(region.mesh.extents, [4, 4, 4], atol=1e-9)
        np.testing.assert_allclose(region.mesh.bounds.mean(axis=0), [10, 0, 0], atol=1e-9)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
