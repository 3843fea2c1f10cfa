"""
Risk package - bond risk measures and curve sensitivities.

Provides:
- Bump-and-reprice framework over the discounting provider
- Finite difference curve parameter sensitivities
- Bond risk report (yield, durations, convexity, z-spread, PV01)
"""

from .bumping import BumpEngine, FiniteDifferenceSensitivityCalculator
from .sensitivities import BondRiskCalculator, BondRiskMeasures

__all__ = [
    "BumpEngine",
    "FiniteDifferenceSensitivityCalculator",
    "BondRiskCalculator",
    "BondRiskMeasures",
]
