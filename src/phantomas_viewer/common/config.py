"""
Configuration and constants for phantom geometry.

Resolution Model:
- Every representation has a fixed topology chosen at construction
- Refresh resamples positions only (skeleton "resample" policy excepted)
- Mesh constraints optionally cap segment counts across a whole phantom
"""

from enum import Enum
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any
import json
from pathlib import Path


class RefreshPolicy(Enum):
    """
    How a skeleton treats its segment count on refresh.

    FIXED (default): segment count stays as computed at construction,
        even if the fiber length changes afterwards.
    RESAMPLE: segment count is recomputed from the current fiber length
        on every refresh (polyline buffer may resize).
    """
    FIXED = "fixed"
    RESAMPLE = "resample"


@dataclass
class GeometryConfig:
    """Discretization constants for the three builders."""

    # Skeleton: segments = floor(length * skeleton_segment_factor)
    skeleton_segment_factor: float = 1.5
    max_line_segments: Optional[int] = None
    marker_width_segments: int = 32
    marker_height_segments: int = 32
    skeleton_refresh_policy: RefreshPolicy = RefreshPolicy.FIXED

    # Tube
    tube_axial_segments: int = 256
    tube_radial_segments: int = 64
    default_tube_radius: float = 0.5

    # Isotropic region
    region_width_segments: int = 128
    region_height_segments: int = 128

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["skeleton_refresh_policy"] = self.skeleton_refresh_policy.value
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeometryConfig":
        data = dict(data)
        if "skeleton_refresh_policy" in data:
            data["skeleton_refresh_policy"] = RefreshPolicy(data["skeleton_refresh_policy"])
        return cls(**data)


@dataclass
class MeshConstraints:
    """
    Segment budgets for a whole phantom.

    max_total_* is shared by every representation of that kind,
    max_mesh_* caps a single representation.
    """
    max_total_axial_segments: int = 1440
    max_mesh_axial_segments: int = 128

    max_total_radial_segments: int = 480
    max_mesh_radial_segments: int = 32

    max_total_line_segments: int = 960
    max_mesh_line_segments: int = 128

    max_total_skeleton_sphere_segments: int = 240
    max_mesh_skeleton_sphere_segments: int = 32

    max_total_isotropic_region_segments: int = 1024
    max_mesh_isotropic_region_segments: int = 32

    def per_mesh(self, kind: str, default: int, n_items: int, minimum: int = 1) -> int:
        """
        Segment count for one of n_items representations of a kind.

        Args:
            kind: One of axial, radial, line, skeleton_sphere, isotropic_region
            default: Unconstrained segment count
            n_items: Number of representations sharing the total budget
            minimum: Lower bound on the returned count

        Returns:
            min(default, max_mesh, max_total // n_items), at least minimum
        """
        max_total = getattr(self, f"max_total_{kind}_segments")
        max_mesh = getattr(self, f"max_mesh_{kind}_segments")
        share = max(1, max_total // max(1, n_items))
        return max(minimum, min(default, max_mesh, share))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Config:
    """
    Global configuration for phantom viewing.

    Colour assignment is seeded by color_seed (None = nondeterministic).
    Reported values are rounded to `precision` decimal digits.
    """

    geometry: GeometryConfig = field(default_factory=GeometryConfig)
    constraints: MeshConstraints = field(default_factory=MeshConstraints)
    use_constraints: bool = False

    color_seed: Optional[int] = None
    precision: int = 1

    # Camera: distance = phantom radius * camera_distance_factor
    camera_fov: float = 50.0
    camera_distance_factor: float = 3.0

    output_dir: Path = field(default_factory=lambda: Path("outputs"))

    def round_to_precision(self, value: float) -> float:
        """Round a value to the configured number of decimal digits."""
        return round(float(value), self.precision)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "geometry": self.geometry.to_dict(),
            "constraints": self.constraints.to_dict(),
            "use_constraints": self.use_constraints,
            "color_seed": self.color_seed,
            "precision": self.precision,
            "camera_fov": self.camera_fov,
            "camera_distance_factor": self.camera_distance_factor,
            "output_dir": str(self.output_dir)
        }

    @classmethod
    def from_json(cls, path: Path) -> "Config":
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        data["geometry"] = GeometryConfig.from_dict(data.get("geometry", {}))
        data["constraints"] = MeshConstraints(**data.get("constraints", {}))
        data["output_dir"] = Path(data.get("output_dir", "outputs"))
        return cls(**data)

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


# Global default config
DEFAULT_CONFIG = Config()
