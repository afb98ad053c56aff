"""
Tests for phantom sources: fibers, regions, phantoms.

Tests cover:
- Hermite interpolation of fibers
- Arc length
- Validation of control points, radii and centers
- Phantom bounding radius
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from phantomas_viewer.common.sources import (
    FiberSource,
    RegionSource,
    Phantom,
    InvalidSource,
    as_points,
    evaluate,
)


# ============== Fixtures ==============

@pytest.fixture
def straight_fiber():
    """Two control points along X, length 2."""
    return FiberSource([[0, 0, 0], [2, 0, 0]], radius=0.5)


@pytest.fixture
def bent_points():
    return np.array([[0.0, 0.0, 0.0], [5.0, 5.0, 0.0], [10.0, 0.0, 3.0], [12.0, -4.0, 3.0]])


# ============== FiberSource Tests ==============

class TestFiberInterpolation:
    """Test fiber path evaluation."""

    def test_straight_fiber_is_linear(self, straight_fiber):
        for t in [0.0, 0.25, 0.5, 1.0]:
            position, tangent = straight_fiber.interpolate(t)
            np.testing.assert_allclose(position, [2 * t, 0, 0], atol=1e-12)
            np.testing.assert_allclose(tangent, [2, 0, 0], atol=1e-12)

    def test_straight_fiber_length(self, straight_fiber):
        assert straight_fiber.length == pytest.approx(2.0)

    def test_passes_through_control_points(self, bent_points):
        fiber = FiberSource(bent_points)

        chords = np.linalg.norm(np.diff(bent_points, axis=0), axis=1)
        times = np.concatenate([[0.0], np.cumsum(chords)]) / chords.sum()

        for t, point in zip(times, bent_points):
            position, _ = fiber.interpolate(t)
            np.testing.assert_allclose(position, point, atol=1e-9)

    def test_vectorised_interpolation(self, bent_points):
        fiber = FiberSource(bent_points)
        positions, tangents = fiber.interpolate(np.linspace(0, 1, 11))
        assert positions.shape == (11, 3)
        assert tangents.shape == (11, 3)

    def test_parameter_is_clipped(self, straight_fiber):
        below, _ = straight_fiber.interpolate(-0.5)
        above, _ = straight_fiber.interpolate(1.5)
        np.testing.assert_allclose(below, [0, 0, 0])
        np.testing.assert_allclose(above, [2, 0, 0])

    def test_length_at_least_chord_length(self, bent_points):
        fiber = FiberSource(bent_points)
        chord = np.linalg.norm(np.diff(bent_points, axis=0), axis=1).sum()
        assert fiber.length >= chord - 1e-9

    def test_tangent_modes_differ(self, bent_points):
        incoming = FiberSource(bent_points, tangents="incoming")
        outgoing = FiberSource(bent_points, tangents="outgoing")
        a, _ = incoming.interpolate(0.5)
        b, _ = outgoing.interpolate(0.5)
        assert not np.allclose(a, b)

    def test_changing_tangent_mode_rebuilds_path(self, bent_points):
        fiber = FiberSource(bent_points, tangents="outgoing")
        fiber.tangents = "incoming"

        expected = FiberSource(bent_points, tangents="incoming")
        a, _ = fiber.interpolate(0.5)
        b, _ = expected.interpolate(0.5)
        np.testing.assert_allclose(a, b)
        assert fiber.length == pytest.approx(expected.length)

    def test_unknown_tangent_mode_after_construction(self, bent_points):
        fiber = FiberSource(bent_points)
        with pytest.raises(InvalidSource):
            fiber.tangents = "sideways"
        assert fiber.tangents == "symmetric"

    def test_length_follows_control_points(self, straight_fiber):
        straight_fiber.control_points = [[0, 0, 0], [4, 0, 0]]
        assert straight_fiber.length == pytest.approx(4.0)

    def test_flat_control_points(self):
        fiber = FiberSource([0, 0, 0, 1, 0, 0, 2, 1, 0])
        assert fiber.control_points.shape == (3, 3)


class TestFiberValidation:
    """Invalid fibers are rejected at construction."""

    def test_single_control_point(self):
        with pytest.raises(InvalidSource):
            FiberSource([[0, 0, 0]])

    def test_two_dimensional_points(self):
        with pytest.raises(InvalidSource):
            FiberSource([[0, 0], [1, 1]])

    def test_flat_points_not_multiple_of_three(self):
        with pytest.raises(InvalidSource):
            FiberSource([0, 0, 0, 1, 0])

    def test_negative_radius(self):
        with pytest.raises(InvalidSource):
            FiberSource([[0, 0, 0], [1, 0, 0]], radius=-1.0)

    def test_unknown_tangent_mode(self):
        with pytest.raises(InvalidSource):
            FiberSource([[0, 0, 0], [1, 0, 0]], tangents="sideways")

    def test_repeated_control_point(self):
        with pytest.raises(InvalidSource):
            FiberSource([[0, 0, 0], [0, 0, 0], [1, 0, 0]])

    def test_radius_may_be_missing(self):
        fiber = FiberSource([[0, 0, 0], [1, 0, 0]], radius=None)
        assert fiber.radius is None

    def test_invalid_source_is_value_error(self):
        assert issubclass(InvalidSource, ValueError)


# ============== Helpers ==============

class TestHelpers:

    def test_as_points_empty(self):
        assert as_points([]).shape == (0, 3)

    def test_evaluate_plain_list(self):
        class ListFiber:
            def interpolate(self, t):
                return [[t, 2 * t, 3 * t]]

        position, tangent = evaluate(ListFiber(), 0.5)
        np.testing.assert_allclose(position, [0.5, 1.0, 1.5])
        assert tangent is None


# ============== RegionSource / Phantom Tests ==============

class TestRegionSource:

    def test_center_and_radius(self):
        region = RegionSource([1, 2, 3], 4.0)
        np.testing.assert_allclose(region.center, [1, 2, 3])
        assert region.radius == 4.0

    def test_bad_center(self):
        with pytest.raises(InvalidSource):
            RegionSource([1, 2], 1.0)

    def test_negative_radius(self):
        with pytest.raises(InvalidSource):
            RegionSource([0, 0, 0], -2.0)


class TestPhantom:

    def test_empty_radius(self):
        assert Phantom().radius() == 0.0

    def test_radius_covers_fibers_and_regions(self):
        phantom = Phantom(
            fibers=[FiberSource([[0, 0, 0], [3, 4, 0]])],
            regions=[RegionSource([0, 0, 10], 2.0)]
        )
        assert phantom.radius() == pytest.approx(12.0)

    def test_to_dict_layout(self):
        phantom = Phantom(
            fibers=[FiberSource([[0, 0, 0], [1, 0, 0]], radius=2.0)],
            regions=[RegionSource([0, 0, 0], 1.0)]
        )
        d = phantom.to_dict()
        assert d["fiber_geometries"]["0"]["control_points"] == [0, 0, 0, 1, 0, 0]
        assert d["fiber_geometries"]["0"]["radius"] == 2.0
        assert d["isotropic_regions"]["0"]["center"] == [0, 0, 0]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
