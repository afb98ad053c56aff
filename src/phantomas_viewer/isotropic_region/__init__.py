"""
Isotropic Region - sphere surface for a spherical region.
"""

from .build import IsotropicRegion

__all__ = ["IsotropicRegion"]
