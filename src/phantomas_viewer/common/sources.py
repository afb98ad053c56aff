"""
Phantom source data: fibers and isotropic regions.

Fiber Model:
- Control points are parameterised by normalised cumulative chord length,
  so t=0 is the first control point and t=1 the last
- The path between control points is a cubic Hermite spline
- Tangents at control points follow the fiber's tangent mode
- `length` is the arc length of the interpolated path

Builders only ever read these objects. Mutating a source is the owner's
job, followed by a refresh of the representations built from it.
"""

import logging
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.interpolate import CubicHermiteSpline

logger = logging.getLogger(__name__)

TANGENT_MODES = ("symmetric", "incoming", "outgoing")

# Samples per control-point interval used for arc length
LENGTH_SAMPLES_PER_SEGMENT = 256


class InvalidSource(ValueError):
    """A fiber or region cannot be turned into geometry."""


def as_point(value, what: str = "point") -> np.ndarray:
    """Validate a 3D coordinate and return it as a float array."""
    try:
        point = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidSource(f"{what} is not numeric: {value!r}") from e
    if point.shape != (3,):
        raise InvalidSource(f"{what} must have exactly 3 coordinates, got shape {point.shape}")
    return point


def as_points(values, what: str = "control points") -> np.ndarray:
    """
    Validate a sequence of 3D coordinates.

    Accepts an (n, 3) nested sequence or a flat sequence of 3n numbers.
    """
    try:
        points = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidSource(f"{what} are not numeric") from e
    if points.size == 0:
        return np.empty((0, 3))
    if points.ndim == 1:
        if points.size % 3 != 0:
            raise InvalidSource(f"flat {what} length {points.size} is not a multiple of 3")
        points = points.reshape(-1, 3)
    if points.ndim != 2 or points.shape[1] != 3:
        raise InvalidSource(f"{what} must be 3D, got shape {points.shape}")
    return points


def check_radius(radius, what: str = "radius") -> Optional[float]:
    if radius is None:
        return None
    radius = float(radius)
    if not np.isfinite(radius) or radius < 0:
        raise InvalidSource(f"{what} must be a non-negative number, got {radius}")
    return radius


def evaluate(fiber, t: float) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Evaluate any fiber-like object at t.

    `fiber.interpolate(t)` must return a sequence whose first item is the
    position; a second item, when present, is the tangent.
    """
    result = fiber.interpolate(t)
    position = as_point(result[0], "interpolated position")
    tangent = as_point(result[1], "interpolated tangent") if len(result) > 1 else None
    return position, tangent


def check_length(length) -> float:
    length = float(length)
    if not np.isfinite(length) or length <= 0:
        raise InvalidSource(f"fiber length must be positive, got {length}")
    return length


def _hermite_tangents(points: np.ndarray, times: np.ndarray, mode: str) -> np.ndarray:
    """Tangents (dP/dt) at the control points for a tangent mode."""
    dt = np.diff(times)[:, None]
    slopes = np.diff(points, axis=0) / dt

    incoming = np.vstack([slopes[:1], slopes])
    outgoing = np.vstack([slopes, slopes[-1:]])

    if mode == "incoming":
        return incoming
    if mode == "outgoing":
        return outgoing

    # symmetric: central difference in the interior, one-sided at the ends
    tangents = outgoing.copy()
    if len(points) > 2:
        span = (times[2:] - times[:-2])[:, None]
        tangents[1:-1] = (points[2:] - points[:-2]) / span
    return tangents


class FiberSource:
    """
    A fiber tract described by control points and a Hermite interpolation.

    Attributes:
        control_points: (n, 3) array, n >= 2
        tangents: one of "symmetric", "incoming", "outgoing"
        radius: tube radius (None when the phantom file does not give one)
        length: arc length of the interpolated path
    """

    def __init__(
        self,
        control_points,
        radius: Optional[float] = 1.0,
        tangents: str = "symmetric"
    ):
        if tangents not in TANGENT_MODES:
            raise InvalidSource(f"Unknown tangent mode {tangents!r}, expected one of {TANGENT_MODES}")
        self._tangents = tangents
        self.radius = radius
        self.control_points = control_points

    @property
    def tangents(self) -> str:
        return self._tangents

    @tangents.setter
    def tangents(self, mode: str) -> None:
        if mode not in TANGENT_MODES:
            raise InvalidSource(f"Unknown tangent mode {mode!r}, expected one of {TANGENT_MODES}")
        self._tangents = mode
        # rebuild the spline with the new tangents
        self.control_points = self._control_points

    @property
    def radius(self) -> Optional[float]:
        return self._radius

    @radius.setter
    def radius(self, value: Optional[float]) -> None:
        self._radius = check_radius(value, "fiber radius")

    @property
    def control_points(self) -> np.ndarray:
        return self._control_points

    @control_points.setter
    def control_points(self, values) -> None:
        points = as_points(values)
        if len(points) < 2:
            raise InvalidSource(f"A fiber needs at least 2 control points, got {len(points)}")

        chords = np.linalg.norm(np.diff(points, axis=0), axis=1)
        if np.any(chords == 0):
            raise InvalidSource("Consecutive control points must be distinct")

        times = np.concatenate([[0.0], np.cumsum(chords)])
        times /= times[-1]

        self._control_points = points
        self._spline = CubicHermiteSpline(
            times, points, _hermite_tangents(points, times, self.tangents), axis=0
        )
        self._derivative = self._spline.derivative()
        self.length = self._arc_length()
        logger.debug(f"Fiber with {len(points)} control points, length {self.length:.3f}")

    def _arc_length(self) -> float:
        n = LENGTH_SAMPLES_PER_SEGMENT * (len(self._control_points) - 1) + 1
        samples = self._spline(np.linspace(0.0, 1.0, n))
        return float(np.linalg.norm(np.diff(samples, axis=0), axis=1).sum())

    def interpolate(self, t: Union[float, np.ndarray]) -> Tuple[np.ndarray, np.ndarray]:
        """
        Evaluate the fiber path.

        Args:
            t: Normalised position(s) in [0, 1]; values outside are clipped

        Returns:
            Tuple of (position, tangent), each (3,) for scalar t or (n, 3)
        """
        t = np.clip(t, 0.0, 1.0)
        return self._spline(t), self._derivative(t)

    def to_dict(self) -> dict:
        data = {
            "control_points": self._control_points.ravel().tolist(),
            "tangents": self.tangents,
        }
        if self.radius is not None:
            data["radius"] = self.radius
        return data


class RegionSource:
    """An isotropic spherical region."""

    def __init__(self, center, radius: float = 1.0):
        self.center = center
        self.radius = radius

    @property
    def center(self) -> np.ndarray:
        return self._center

    @center.setter
    def center(self, value) -> None:
        self._center = as_point(value, "region center")

    @property
    def radius(self) -> float:
        return self._radius

    @radius.setter
    def radius(self, value: float) -> None:
        if value is None:
            raise InvalidSource("region radius is required")
        self._radius = check_radius(value, "region radius")

    def to_dict(self) -> dict:
        return {"center": self._center.tolist(), "radius": self._radius}


class Phantom:
    """A collection of fibers and isotropic regions."""

    def __init__(
        self,
        fibers: Optional[Sequence[FiberSource]] = None,
        regions: Optional[Sequence[RegionSource]] = None
    ):
        self.fibers: List[FiberSource] = list(fibers or [])
        self.regions: List[RegionSource] = list(regions or [])

    @property
    def n_fibers(self) -> int:
        return len(self.fibers)

    @property
    def n_regions(self) -> int:
        return len(self.regions)

    def radius(self) -> float:
        """Radius of the origin-centred sphere containing the whole phantom."""
        extents = [0.0]
        for fiber in self.fibers:
            if len(fiber.control_points):
                extents.append(float(np.linalg.norm(fiber.control_points, axis=1).max()))
        for region in self.regions:
            extents.append(float(np.linalg.norm(region.center)) + region.radius)
        return max(extents)

    def to_dict(self) -> dict:
        return {
            "fiber_geometries": {str(i): f.to_dict() for i, f in enumerate(self.fibers)},
            "isotropic_regions": {str(i): r.to_dict() for i, r in enumerate(self.regions)},
        }
