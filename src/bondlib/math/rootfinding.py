"""
Single-variable root finders.

Provides:
- bracket_root: expand an initial window until the function changes sign
- BrentRootFinder: derivative-free bracketing solver (scipy brentq)
- NewtonRaphsonRootFinder: Newton iteration on a value+derivative function (scipy newton)

Every failure is raised as RootFindingError.
"""

from typing import Callable, Tuple

import logging

from scipy.optimize import brentq, newton

from ..exceptions import RootFindingError
from .ad import ValueDerivatives

logger = logging.getLogger(__name__)

Func = Callable[[float], float]
FuncDeriv = Callable[[float], ValueDerivatives]

# Machine-precision floor accepted by brentq for rtol
_MIN_RTOL = 4 * 2.220446049250313e-16


def bracket_root(
    func: Func,
    lower: float,
    upper: float,
    expansion: float = 1.6,
    max_iter: int = 50,
) -> Tuple[float, float]:
    """
    Expand [lower, upper] until func changes sign across it.

    The side with the smaller absolute function value is pushed outward
    at each step.

    Args:
        func: Function to bracket
        lower: Initial lower bound
        upper: Initial upper bound
        expansion: Growth factor applied to the window on each step
        max_iter: Maximum number of expansions

    Returns:
        Tuple (a, b) with func(a) * func(b) <= 0

    Raises:
        RootFindingError: If no sign change is found
    """
    if lower == upper:
        raise RootFindingError("Bracket bounds must differ")
    a, b = (lower, upper) if lower < upper else (upper, lower)
    f_a = func(a)
    f_b = func(b)

    for iteration in range(max_iter):
        if f_a * f_b <= 0:
            logger.debug("Bracket [%s, %s] found after %s expansions", a, b, iteration)
            return a, b
        if abs(f_a) < abs(f_b):
            a += expansion * (a - b)
            f_a = func(a)
        else:
            b += expansion * (b - a)
            f_b = func(b)

    if f_a * f_b <= 0:
        return a, b
    logger.error("Failed to bracket root from [%s, %s]", lower, upper)
    raise RootFindingError(f"Failed to bracket a root starting from [{lower}, {upper}]")


class BrentRootFinder:
    """
    Brent's method on a bracketed interval.

    Attributes:
        absolute_tolerance: Absolute tolerance on the root
        relative_tolerance: Relative tolerance on the root
        max_iterations: Iteration cap
        max_bracket_attempts: Expansion cap of bracket()
    """

    supports_derivative = False

    def __init__(
        self,
        absolute_tolerance: float = 1e-14,
        relative_tolerance: float = _MIN_RTOL,
        max_iterations: int = 100,
        max_bracket_attempts: int = 50,
    ):
        self.absolute_tolerance = absolute_tolerance
        self.relative_tolerance = max(relative_tolerance, _MIN_RTOL)
        self.max_iterations = max_iterations
        self.max_bracket_attempts = max_bracket_attempts

    def bracket(self, func: Func, lower: float, upper: float) -> Tuple[float, float]:
        """Bracket a root of func starting from [lower, upper]."""
        return bracket_root(func, lower, upper, max_iter=self.max_bracket_attempts)

    def solve(self, func: Func, lower: float, upper: float) -> float:
        """
        Find a root of func in [lower, upper].

        Raises:
            RootFindingError: If the interval does not bracket a root or
                the iteration cap is reached
        """
        try:
            root, result = brentq(
                func,
                lower,
                upper,
                xtol=self.absolute_tolerance,
                rtol=self.relative_tolerance,
                maxiter=self.max_iterations,
                full_output=True,
                disp=False,
            )
        except ValueError as exc:
            logger.error("Brent solve failed on [%s, %s]: %s", lower, upper, exc)
            raise RootFindingError(str(exc)) from exc

        logger.debug("Brent root %s after %s iterations", root, result.iterations)
        if not result.converged:
            logger.error("Brent did not converge: %s", result.flag)
            raise RootFindingError(f"Brent root finder did not converge: {result.flag}")
        return float(root)

    def __repr__(self) -> str:
        return f"BrentRootFinder(xtol={self.absolute_tolerance}, maxiter={self.max_iterations})"


class NewtonRaphsonRootFinder(BrentRootFinder):
    """
    Newton-Raphson iteration using an analytic derivative.

    ``solve`` (inherited) is still available for derivative-free callers.
    """

    supports_derivative = True

    def solve_with_derivative(self, func: FuncDeriv, initial_guess: float) -> float:
        """
        Find a root starting from initial_guess.

        Args:
            func: Returns the value and derivative (index 0) at a point
            initial_guess: Starting point

        Raises:
            RootFindingError: If the iteration does not converge
        """
        cache = {}

        def evaluate(x: float) -> ValueDerivatives:
            if x not in cache:
                cache.clear()
                cache[x] = func(x)
            return cache[x]

        root, result = newton(
            lambda x: evaluate(x).value,
            initial_guess,
            fprime=lambda x: evaluate(x).derivative(0),
            tol=self.absolute_tolerance,
            rtol=0.0,
            maxiter=self.max_iterations,
            full_output=True,
            disp=False,
        )

        logger.debug("Newton root %s after %s iterations", root, result.iterations)
        if not result.converged:
            logger.error("Newton did not converge from %s: %s", initial_guess, result.flag)
            raise RootFindingError(f"Newton-Raphson root finder did not converge: {result.flag}")
        return float(root)

    def __repr__(self) -> str:
        return f"NewtonRaphsonRootFinder(tol={self.absolute_tolerance}, maxiter={self.max_iterations})"


__all__ = [
    "bracket_root",
    "BrentRootFinder",
    "NewtonRaphsonRootFinder",
]
