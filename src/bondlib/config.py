"""
Pricer settings.

Selects the root finder used for yield and z-spread inversion and the
initial bracketing windows of the root searches.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from .math.rootfinding import BrentRootFinder, NewtonRaphsonRootFinder

RootFinder = Union[BrentRootFinder, NewtonRaphsonRootFinder]


@dataclass(frozen=True)
class PricerSettings:
    """
    Numerical settings for FixedCouponBondPricer.

    Attributes:
        root_finder: "brent" (bracketing) or "newton" (analytic derivative)
        absolute_tolerance: Absolute tolerance on the root
        relative_tolerance: Relative tolerance on the root (Brent only)
        max_iterations: Iteration cap of the root finder
        max_bracket_attempts: Window expansions tried before bracketing fails
        yield_bracket: Initial yield window for bracketing
        z_spread_bracket: Initial z-spread window for bracketing
    """
    root_finder: str = "brent"
    absolute_tolerance: float = 1e-14
    relative_tolerance: float = 1e-15
    max_iterations: int = 100
    max_bracket_attempts: int = 50
    yield_bracket: Tuple[float, float] = (0.0, 0.20)
    z_spread_bracket: Tuple[float, float] = (-0.01, 0.01)

    def __post_init__(self):
        if self.root_finder.lower() not in ("brent", "newton"):
            raise ValueError(f"Unknown root finder: {self.root_finder}")
        if self.max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        if self.max_bracket_attempts <= 0:
            raise ValueError("max_bracket_attempts must be positive")
        for name in ("yield_bracket", "z_spread_bracket"):
            lo, hi = getattr(self, name)
            if lo >= hi:
                raise ValueError(f"{name} must satisfy lower < upper, got {(lo, hi)}")

    @classmethod
    def default(cls) -> "PricerSettings":
        """Brent root finding on the residual."""
        return cls()

    @classmethod
    def newton(cls) -> "PricerSettings":
        """Newton-Raphson root finding with the analytic yield derivative."""
        return cls(root_finder="newton")

    def create_root_finder(self) -> RootFinder:
        """Build the configured root finder."""
        if self.root_finder.lower() == "newton":
            return NewtonRaphsonRootFinder(
                absolute_tolerance=self.absolute_tolerance,
                max_iterations=self.max_iterations,
                max_bracket_attempts=self.max_bracket_attempts,
            )
        return BrentRootFinder(
            absolute_tolerance=self.absolute_tolerance,
            relative_tolerance=self.relative_tolerance,
            max_iterations=self.max_iterations,
            max_bracket_attempts=self.max_bracket_attempts,
        )


__all__ = ["PricerSettings", "RootFinder"]
