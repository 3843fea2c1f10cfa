"""
Point sensitivities to curve zero rates.

A point sensitivity is the derivative of a value with respect to the
continuously-compounded zero rate of a named curve at one time. Sensitivities
are accumulated across cash flows, scaled, and finally projected onto the
curve parameters by the market data provider.
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, Tuple


@dataclass(frozen=True)
class ZeroRateSensitivity:
    """
    Sensitivity to the zero rate of a curve at a given time.

    Attributes:
        curve_name: Identity of the curve
        currency: Currency of the curve
        year_fraction: Time of the zero rate, from the curve valuation date
        sensitivity: d(value) / d(zero rate)
    """
    curve_name: str
    currency: str
    year_fraction: float
    sensitivity: float

    @property
    def key(self) -> Tuple[str, str, float]:
        return (self.curve_name, self.currency, self.year_fraction)

    def multiplied_by(self, factor: float) -> "ZeroRateSensitivity":
        return replace(self, sensitivity=self.sensitivity * factor)


class PointSensitivities:
    """
    Immutable collection of zero-rate point sensitivities.

    Combination is associative and scaling is uniform over all entries,
    so sensitivities of a sum of cash flows can be built piecewise.
    """

    def __init__(self, sensitivities: Iterable[ZeroRateSensitivity] = ()):
        self._sensitivities: Tuple[ZeroRateSensitivity, ...] = tuple(sensitivities)

    @classmethod
    def none(cls) -> "PointSensitivities":
        """Empty sensitivity (neutral element of combined_with)."""
        return cls()

    @classmethod
    def of(cls, *sensitivities: ZeroRateSensitivity) -> "PointSensitivities":
        return cls(sensitivities)

    @property
    def sensitivities(self) -> Tuple[ZeroRateSensitivity, ...]:
        return self._sensitivities

    def combined_with(self, other: "PointSensitivities") -> "PointSensitivities":
        """Concatenate with another set of sensitivities."""
        return PointSensitivities(self._sensitivities + other.sensitivities)

    def multiplied_by(self, factor: float) -> "PointSensitivities":
        """Scale every sensitivity by factor."""
        return PointSensitivities(s.multiplied_by(factor) for s in self._sensitivities)

    def normalized(self) -> "PointSensitivities":
        """Merge entries with the same curve, currency and time."""
        merged: Dict[Tuple[str, str, float], float] = {}
        order: List[Tuple[str, str, float]] = []
        for s in self._sensitivities:
            if s.key not in merged:
                merged[s.key] = 0.0
                order.append(s.key)
            merged[s.key] += s.sensitivity
        return PointSensitivities(
            ZeroRateSensitivity(name, ccy, t, merged[(name, ccy, t)]) for name, ccy, t in order
        )

    def total(self) -> float:
        """Sum of all sensitivities (parallel zero-rate shift)."""
        return sum(s.sensitivity for s in self._sensitivities)

    def curve_names(self) -> List[str]:
        names: List[str] = []
        for s in self._sensitivities:
            if s.curve_name not in names:
                names.append(s.curve_name)
        return names

    def __iter__(self) -> Iterator[ZeroRateSensitivity]:
        return iter(self._sensitivities)

    def __len__(self) -> int:
        return len(self._sensitivities)

    def __repr__(self) -> str:
        return f"PointSensitivities(size={len(self._sensitivities)}, curves={self.curve_names()})"


__all__ = [
    "ZeroRateSensitivity",
    "PointSensitivities",
]
