"""
Interpolation methods for zero-rate curves.

Provides:
- LinearInterpolator: Linear interpolation with flat extrapolation
- CubicSplineInterpolator: Natural cubic spline with flat extrapolation

Both interpolators are linear in the node values, so the sensitivity of an
interpolated value to each node is given by ``node_weights``.
"""

from abc import ABC, abstractmethod
from typing import Optional
import numpy as np


class Interpolator(ABC):
    """Abstract base class for curve interpolation."""

    @abstractmethod
    def fit(self, times: np.ndarray, values: np.ndarray) -> None:
        """
        Fit the interpolator to data points.

        Args:
            times: Array of year fractions
            values: Array of zero rates
        """
        pass

    @abstractmethod
    def interpolate(self, t: float) -> float:
        """Interpolate at a single point."""
        pass

    def __call__(self, t: float) -> float:
        return self.interpolate(t)

    @abstractmethod
    def derivative(self, t: float) -> float:
        """First derivative at point t."""
        pass

    def node_weights(self, t: float) -> np.ndarray:
        """
        d interpolate(t) / d values[i] for every node i.

        The default fits the interpolator to each unit vector in turn.
        """
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")
        n = len(self.times)
        weights = np.zeros(n)
        unit_interp = type(self)()
        for i in range(n):
            unit = np.zeros(n)
            unit[i] = 1.0
            unit_interp.fit(self.times, unit)
            weights[i] = unit_interp.interpolate(t)
        return weights


def _sorted_nodes(times, values):
    if len(times) != len(values):
        raise ValueError("Times and values must have same length")
    if len(times) < 2:
        raise ValueError("Need at least 2 points for interpolation")
    idx = np.argsort(times)
    return (np.array(times, dtype=np.float64)[idx],
            np.array(values, dtype=np.float64)[idx])


class LinearInterpolator(Interpolator):
    """
    Linear interpolation.

    Extrapolates flat beyond boundaries.
    """

    def __init__(self):
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None

    def fit(self, times: np.ndarray, values: np.ndarray) -> None:
        self.times, self.values = _sorted_nodes(times, values)

    def _bracket(self, t: float):
        idx = np.searchsorted(self.times, t, side='right') - 1
        idx = max(0, min(idx, len(self.times) - 2))
        t0, t1 = self.times[idx], self.times[idx + 1]
        w = (t - t0) / (t1 - t0) if t1 != t0 else 0.0
        return idx, w

    def interpolate(self, t: float) -> float:
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")

        if t <= self.times[0]:
            return float(self.values[0])
        if t >= self.times[-1]:
            return float(self.values[-1])

        idx, w = self._bracket(t)
        v0, v1 = self.values[idx], self.values[idx + 1]
        return float(v0 + w * (v1 - v0))

    def derivative(self, t: float) -> float:
        """Piecewise constant slope, zero in the flat extrapolation."""
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")

        if t <= self.times[0] or t >= self.times[-1]:
            return 0.0

        idx, _ = self._bracket(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        v0, v1 = self.values[idx], self.values[idx + 1]
        return float((v1 - v0) / (t1 - t0)) if t1 != t0 else 0.0

    def node_weights(self, t: float) -> np.ndarray:
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")
        weights = np.zeros(len(self.times))
        if t <= self.times[0]:
            weights[0] = 1.0
        elif t >= self.times[-1]:
            weights[-1] = 1.0
        else:
            idx, w = self._bracket(t)
            weights[idx] = 1.0 - w
            weights[idx + 1] = w
        return weights


class CubicSplineInterpolator(Interpolator):
    """
    Natural cubic spline (second derivative zero at the boundaries).

    Extrapolates flat beyond boundaries.
    """

    def __init__(self):
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None
        self.coefficients: Optional[np.ndarray] = None  # Shape: (n-1, 4) for [a, b, c, d]

    def fit(self, times: np.ndarray, values: np.ndarray) -> None:
        """
        Fit natural cubic spline.

        Solves the tridiagonal system for second derivatives, then computes
        polynomial coefficients for each interval.
        """
        self.times, self.values = _sorted_nodes(times, values)
        n = len(self.times)

        if n == 2:
            # Degenerate to linear
            h = self.times[1] - self.times[0]
            slope = (self.values[1] - self.values[0]) / h if h > 0 else 0.0
            self.coefficients = np.array([[self.values[0], slope, 0.0, 0.0]])
            return

        h = np.diff(self.times)

        # Natural spline: M[0] = M[n-1] = 0
        A = np.zeros((n, n))
        b = np.zeros(n)
        A[0, 0] = 1.0
        A[n-1, n-1] = 1.0

        for i in range(1, n-1):
            A[i, i-1] = h[i-1]
            A[i, i] = 2 * (h[i-1] + h[i])
            A[i, i+1] = h[i]
            b[i] = 6 * ((self.values[i+1] - self.values[i]) / h[i] -
                        (self.values[i] - self.values[i-1]) / h[i-1])

        M = np.linalg.solve(A, b)

        # S_i(x) = a_i + b_i*(x-x_i) + c_i*(x-x_i)^2 + d_i*(x-x_i)^3
        self.coefficients = np.zeros((n-1, 4))
        for i in range(n-1):
            self.coefficients[i, 0] = self.values[i]
            self.coefficients[i, 1] = (self.values[i+1] - self.values[i]) / h[i] - h[i] * (M[i+1] + 2*M[i]) / 6
            self.coefficients[i, 2] = M[i] / 2
            self.coefficients[i, 3] = (M[i+1] - M[i]) / (6 * h[i])

    def _segment(self, t: float):
        idx = np.searchsorted(self.times, t, side='right') - 1
        idx = max(0, min(idx, len(self.coefficients) - 1))
        return t - self.times[idx], self.coefficients[idx]

    def interpolate(self, t: float) -> float:
        if self.times is None or self.coefficients is None:
            raise RuntimeError("Interpolator not fitted")

        if t <= self.times[0]:
            return float(self.values[0])
        if t >= self.times[-1]:
            return float(self.values[-1])

        dx, (a, b, c, d) = self._segment(t)
        return float(a + b*dx + c*dx**2 + d*dx**3)

    def derivative(self, t: float) -> float:
        if self.times is None or self.coefficients is None:
            raise RuntimeError("Interpolator not fitted")

        if t <= self.times[0] or t >= self.times[-1]:
            return 0.0

        dx, (_, b, c, d) = self._segment(t)
        return float(b + 2*c*dx + 3*d*dx**2)


def create_interpolator(method: str) -> Interpolator:
    """
    Factory function to create an interpolator by name.

    Args:
        method: One of "linear", "cubic_spline"

    Returns:
        Interpolator instance
    """
    method = method.lower().replace("-", "_").replace(" ", "_")

    if method in ("linear", "lin"):
        return LinearInterpolator()
    elif method in ("cubic_spline", "cubic", "spline"):
        return CubicSplineInterpolator()
    raise ValueError(f"Unknown interpolation method: {method}")


__all__ = [
    "Interpolator",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "create_interpolator",
]
