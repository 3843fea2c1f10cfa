"""
Curves package - nodal zero-rate curves.

Provides:
- Curve / CurveNode: continuously-compounded zero-rate curve
- LinearInterpolator / CubicSplineInterpolator: interpolation with node weights
- create_flat_curve: flat curve helper
"""

from .curve import Curve, CurveNode, create_flat_curve
from .interpolation import (
    Interpolator,
    LinearInterpolator,
    CubicSplineInterpolator,
    create_interpolator,
)

__all__ = [
    "Curve",
    "CurveNode",
    "create_flat_curve",
    "Interpolator",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "create_interpolator",
]
