"""
Sensitivity package - curve sensitivity containers.

Provides:
- ZeroRateSensitivity / PointSensitivities: reverse-mode point sensitivities
- CurveParameterSensitivity / CurveParameterSensitivities: per-node sensitivities
"""

from .points import ZeroRateSensitivity, PointSensitivities
from .parameters import CurveParameterSensitivity, CurveParameterSensitivities

__all__ = [
    "ZeroRateSensitivity",
    "PointSensitivities",
    "CurveParameterSensitivity",
    "CurveParameterSensitivities",
]
