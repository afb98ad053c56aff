"""
Fiber Tube - swept-tube surface along a fiber.
"""

from .build import FiberTube, FiberCurve

__all__ = ["FiberTube", "FiberCurve"]
