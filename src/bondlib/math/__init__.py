"""
Math package - numerical building blocks.

Provides:
- ValueDerivatives: value + analytic derivative pairs
- Root finders (Brent bracketing, Newton-Raphson) and root bracketing
"""

from .ad import ValueDerivatives
from .rootfinding import bracket_root, BrentRootFinder, NewtonRaphsonRootFinder

__all__ = [
    "ValueDerivatives",
    "bracket_root",
    "BrentRootFinder",
    "NewtonRaphsonRootFinder",
]
