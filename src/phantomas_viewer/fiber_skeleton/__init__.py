"""
Fiber Skeleton - path polyline with control-point markers.
"""

from .build import FiberSkeleton, skeleton_segments, sample_path, build_markers

__all__ = ["FiberSkeleton", "skeleton_segments", "sample_path", "build_markers"]
