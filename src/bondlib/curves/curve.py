"""
Zero-rate curve representation.

The Curve class provides:
- Discount factor P(0,t)
- Continuously-compounded zero rate z(t)
- Sensitivity of z(t) to each node zero rate

Nodes hold continuously-compounded zero rates keyed by year fraction from
the anchor date. Node zero rates are the curve parameters.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Union
import numpy as np

from ..conventions import DayCount, year_fraction
from .interpolation import Interpolator, create_interpolator


@dataclass(frozen=True)
class CurveNode:
    """A single point on the curve."""
    time: float  # Year fraction from anchor
    zero_rate: float  # Continuously compounded


class Curve:
    """
    Nodal zero-rate curve with interpolation.

    Attributes:
        anchor_date: Valuation date (time 0)
        name: Curve identity used by sensitivities
        currency: Currency code
        day_count: Day count for date to time conversion
        interpolation_method: Name of interpolation method

    Conventions:
        - Zero rates are continuously compounded
        - Times are year fractions from the anchor date
        - Zero rates are extrapolated flat beyond the first and last nodes
    """

    def __init__(
        self,
        anchor_date: date,
        name: str = "CURVE",
        currency: str = "USD",
        day_count: DayCount = DayCount.ACT_365,
        interpolation_method: str = "linear"
    ):
        self.anchor_date = anchor_date
        self.name = name
        self.currency = currency
        self.day_count = day_count
        self.interpolation_method = interpolation_method

        self._nodes: List[CurveNode] = []
        self._interpolator: Optional[Interpolator] = None
        self._is_fitted = False

    @classmethod
    def from_zero_rates(
        cls,
        anchor_date: date,
        times: Sequence[float],
        zero_rates: Sequence[float],
        name: str = "CURVE",
        currency: str = "USD",
        day_count: DayCount = DayCount.ACT_365,
        interpolation_method: str = "linear",
    ) -> "Curve":
        """Build a curve directly from node times and zero rates."""
        if len(times) != len(zero_rates):
            raise ValueError("Times and zero rates must have same length")
        curve = cls(anchor_date, name, currency, day_count, interpolation_method)
        for t, zr in zip(times, zero_rates):
            curve.add_zero_rate_node(float(t), float(zr))
        curve.build()
        return curve

    def _insert(self, node: CurveNode) -> None:
        for i, n in enumerate(self._nodes):
            if abs(n.time - node.time) < 1e-10:
                self._nodes[i] = node
                self._is_fitted = False
                return
            if n.time > node.time:
                self._nodes.insert(i, node)
                self._is_fitted = False
                return
        self._nodes.append(node)
        self._is_fitted = False

    def add_zero_rate_node(self, time: float, zero_rate: float) -> None:
        """Add a continuously-compounded zero rate node."""
        if time <= 0:
            raise ValueError("Time must be positive")
        self._insert(CurveNode(time=time, zero_rate=zero_rate))

    def build(self) -> None:
        """
        Build the interpolator from current nodes.

        Called lazily on first query if not called explicitly.
        """
        if len(self._nodes) < 2:
            raise ValueError("Need at least 2 nodes to build curve")

        self._interpolator = create_interpolator(self.interpolation_method)
        self._interpolator.fit(self.get_node_times(), self.get_node_rates())
        self._is_fitted = True

    def _ensure_fitted(self) -> None:
        if not self._is_fitted or self._interpolator is None:
            self.build()

    def time(self, d: date) -> float:
        """Signed year fraction from the anchor date to d."""
        if d < self.anchor_date:
            return -year_fraction(d, self.anchor_date, self.day_count)
        return year_fraction(self.anchor_date, d, self.day_count)

    def zero_rate(self, t: Union[float, date]) -> float:
        """Continuously-compounded zero rate z(t)."""
        if isinstance(t, date):
            t = self.time(t)
        self._ensure_fitted()
        return self._interpolator.interpolate(t)

    def discount_factor(self, t: Union[float, date]) -> float:
        """Discount factor P(0,t) = exp(-z(t) t)."""
        if isinstance(t, date):
            t = self.time(t)
        return float(np.exp(-self.zero_rate(t) * t))

    def zero_rate_node_weights(self, t: float) -> np.ndarray:
        """d z(t) / d (node zero rate i) for every node."""
        self._ensure_fitted()
        return self._interpolator.node_weights(t)

    def get_node_times(self) -> np.ndarray:
        return np.array([n.time for n in self._nodes])

    def get_node_rates(self) -> np.ndarray:
        return np.array([n.zero_rate for n in self._nodes])

    @property
    def num_nodes(self) -> int:
        return len(self._nodes)

    def _with_rates(self, rates: np.ndarray) -> "Curve":
        new_curve = Curve(
            anchor_date=self.anchor_date,
            name=self.name,
            currency=self.currency,
            day_count=self.day_count,
            interpolation_method=self.interpolation_method
        )
        new_curve._nodes = [CurveNode(time=n.time, zero_rate=float(r)) for n, r in zip(self._nodes, rates)]
        new_curve.build()
        return new_curve

    def shifted(self, node_index: int, shift: float) -> "Curve":
        """
        Create a new curve with one node zero rate shifted.

        Args:
            node_index: Index of node to shift (0-based)
            shift: Absolute shift of the zero rate (decimal)
        """
        if node_index < 0 or node_index >= len(self._nodes):
            raise IndexError(f"Invalid node index: {node_index}")
        rates = self.get_node_rates()
        rates[node_index] += shift
        return self._with_rates(rates)

    def bump_parallel(self, bp: float) -> "Curve":
        """
        Create a new curve with every zero rate bumped.

        Args:
            bp: Bump size in basis points
        """
        return self._with_rates(self.get_node_rates() + bp / 10000.0)

    def __repr__(self) -> str:
        return (f"Curve(name={self.name}, anchor={self.anchor_date}, currency={self.currency}, "
                f"nodes={len(self._nodes)}, method={self.interpolation_method})")


def create_flat_curve(
    anchor_date: date,
    rate: float,
    name: str = "CURVE",
    max_tenor_years: float = 30.0,
    currency: str = "USD",
    day_count: DayCount = DayCount.ACT_365,
) -> Curve:
    """
    Create a flat zero-rate curve.

    Args:
        anchor_date: Valuation date
        rate: Flat continuously compounded rate
        name: Curve name
        max_tenor_years: Maximum tenor in years
        currency: Currency code
        day_count: Day count for date to time conversion

    Returns:
        Flat curve
    """
    times = [0.25, 0.5, 1, 2, 5, 10, 20, max_tenor_years]
    return Curve.from_zero_rates(
        anchor_date,
        sorted(set(times)),
        [rate] * len(set(times)),
        name=name,
        currency=currency,
        day_count=day_count,
    )


__all__ = [
    "Curve",
    "CurveNode",
    "create_flat_curve",
]
